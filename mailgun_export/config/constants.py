"""Pure constants for the export pipeline. No side effects at import time."""

from pathlib import Path

# === API endpoints ===
US_BASE_URL = "https://api.mailgun.net/v3"
EU_BASE_URL = "https://api.eu.mailgun.net/v3"
US_BASE_URL_V4 = "https://api.mailgun.net/v4"
EU_BASE_URL_V4 = "https://api.eu.mailgun.net/v4"

# === Rate limits ===
DEFAULT_RATE_LIMIT = 300  # requests per minute
DEFAULT_MAX_CONCURRENCY = 10
RATE_WINDOW_SECONDS = 60.0

# === Retry ===
MAX_RETRIES = 3  # 3 retries = 4 attempts
DEFAULT_BASE_DELAY = 1.0  # seconds, doubled per attempt

# === Timeouts (seconds) ===
DEFAULT_REQUEST_TIMEOUT = 30.0

# === Page sizes ===
EVENTS_PAGE_LIMIT = 300  # API maximum for /events
LIST_MEMBERS_PAGE_LIMIT = 100

# === Logging ===
PAGE_PROGRESS_INTERVAL = 10  # log every N pages
ERROR_BODY_EXCERPT = 500  # characters of response body kept on HTTP errors

# === Export ===
DEFAULT_OUTPUT_DIR = Path("./exports")
EXPORT_FILE_PREFIX = "mailgun"
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
CSV_FLATTEN_DEPTH = 3

# === Event types ===
EVENT_TYPES = [
    "accepted",
    "rejected",
    "delivered",
    "failed",
    "opened",
    "clicked",
    "unsubscribed",
    "complained",
    "stored",
    "temporary_failed",
]

STATS_EVENTS = [
    "accepted",
    "delivered",
    "failed",
    "opened",
    "clicked",
    "unsubscribed",
    "complained",
]
ENGAGEMENT_EVENTS = ["opened", "clicked", "unsubscribed", "complained"]
DELIVERY_EVENTS = ["accepted", "delivered", "failed", "temporary_failed"]

STATS_RESOLUTION = "day"
STATS_DURATION = "30d"
