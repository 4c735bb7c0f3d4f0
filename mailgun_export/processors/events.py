"""Event record mapping."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Any


def _get(data: Any, *path: str) -> Any:
    """Walk nested dicts, returning None on any missing step."""
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def process_event(event: dict[str, Any]) -> dict[str, Any]:
    """Map a raw /events item to an export record."""
    storage = event.get("storage")
    geolocation = event.get("geolocation")
    status = event.get("delivery-status")
    if not isinstance(status, dict):
        status = {}
    return {
        "id": event.get("id"),
        "timestamp": event.get("timestamp"),
        "event": event.get("event"),
        "message": {
            "message_id": _get(event, "message", "headers", "message-id"),
            "subject": _get(event, "message", "headers", "subject"),
            "from": _get(event, "message", "headers", "from"),
            "to": _get(event, "message", "headers", "to"),
            "size": _get(event, "message", "size"),
        },
        "recipient": event.get("recipient"),
        "recipient_domain": event.get("recipient-domain"),
        "delivery_status": {
            "description": status.get("description") or status.get("message") or event.get("description"),
            "code": status.get("code", event.get("code")),
            "reason": event.get("reason"),
            "severity": event.get("severity"),
        },
        "tracking": {
            "user_agent": event.get("user-agent"),
            "client_type": event.get("client-type"),
            "client_name": event.get("client-name"),
            "client_os": event.get("client-os"),
            "device_type": event.get("device-type"),
            "country": event.get("country"),
            "region": event.get("region"),
            "city": event.get("city"),
            "url": event.get("url"),
        },
        "campaigns": event.get("campaigns") or [],
        "tags": event.get("tags") or [],
        "user_variables": event.get("user-variables") or {},
        "smtp": {
            "envelope": event.get("envelope"),
            "routes": event.get("routes"),
        },
        "flags": {
            "is_authenticated": _get(event, "flags", "is-authenticated"),
            "is_system_test": _get(event, "flags", "is-system-test"),
            "is_test_mode": _get(event, "flags", "is-test-mode"),
        },
        "storage": (
            {"url": storage.get("url"), "key": storage.get("key")}
            if isinstance(storage, dict)
            else None
        ),
        "geolocation": (
            {
                "country": geolocation.get("country"),
                "region": geolocation.get("region"),
                "city": geolocation.get("city"),
            }
            if isinstance(geolocation, dict)
            else None
        ),
        "raw": event,
    }


def summarize_events(events: list[dict[str, Any]]) -> dict[str, Any]:
    """Counts by event type, delivery code and recipient domain, plus time range."""
    by_type: Counter[str] = Counter()
    by_status: Counter[str] = Counter()
    by_domain: Counter[str] = Counter()
    timestamps: list[float] = []

    for event in events:
        if event.get("event"):
            by_type[event["event"]] += 1
        code = _get(event, "delivery_status", "code")
        if code:
            by_status[str(code)] += 1
        if event.get("recipient_domain"):
            by_domain[event["recipient_domain"]] += 1
        if isinstance(event.get("timestamp"), (int, float)):
            timestamps.append(float(event["timestamp"]))

    def _iso(ts: float) -> str:
        return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()

    return {
        "total": len(events),
        "by_type": dict(by_type),
        "by_status": dict(by_status),
        "by_recipient_domain": dict(by_domain),
        "time_range": {
            "earliest": _iso(min(timestamps)) if timestamps else None,
            "latest": _iso(max(timestamps)) if timestamps else None,
        },
    }
