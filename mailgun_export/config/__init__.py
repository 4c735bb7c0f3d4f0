"""Configuration module for the export pipeline."""

from .constants import (
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_RATE_LIMIT,
    DEFAULT_REQUEST_TIMEOUT,
    EVENT_TYPES,
    MAX_RETRIES,
)
from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "DEFAULT_BASE_DELAY",
    "DEFAULT_MAX_CONCURRENCY",
    "DEFAULT_RATE_LIMIT",
    "DEFAULT_REQUEST_TIMEOUT",
    "EVENT_TYPES",
    "MAX_RETRIES",
]
