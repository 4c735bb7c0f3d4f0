"""URL and date helpers for Mailgun requests."""

from __future__ import annotations

from datetime import date, datetime, timezone
from email.utils import format_datetime
from typing import Any, Mapping
from urllib.parse import quote, urlencode


def build_url(base: str, params: Mapping[str, Any] | None = None) -> str:
    """Append query parameters to a URL.

    None values are dropped, lists become repeated keys and booleans are
    sent as lowercase strings.

    Example:
        >>> build_url("https://api.mailgun.net/v3/d/events", {"event": ["a", "b"], "limit": 300})
        'https://api.mailgun.net/v3/d/events?event=a&event=b&limit=300'
    """
    if not params:
        return base

    query: list[tuple[str, Any]] = []
    for key, value in params.items():
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        for v in values:
            if isinstance(v, bool):
                v = "true" if v else "false"
            query.append((key, v))

    if not query:
        return base
    separator = "&" if "?" in base else "?"
    return f"{base}{separator}{urlencode(query)}"


def format_rfc2822(value: date | datetime | str | None) -> str | None:
    """Format a date for Mailgun's begin/end/start/end parameters.

    Accepts a date, datetime or ISO 8601 string. Naive values are taken
    as UTC.

    Example:
        >>> format_rfc2822("2024-01-15")
        'Mon, 15 Jan 2024 00:00:00 GMT'
    """
    if value is None:
        return None

    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    elif not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


def path_segment(value: str) -> str:
    """Quote a name (domain, list address, template) used inside a path."""
    return quote(value, safe="@")
