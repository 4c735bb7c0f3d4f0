"""Suppression list mapping and bounce classification.

Bounce codes are SMTP reply codes: 5xx are permanent failures, 4xx are
temporary. Codes may arrive as ints or strings, sometimes with extended
status text ("550 5.1.1"), so matching is done on the string form.
"""

from __future__ import annotations

from collections import Counter
from typing import Any

HIGH_SEVERITY_CODES = ("550", "551", "552", "553", "554")
MEDIUM_SEVERITY_CODES = ("450", "451", "452")

BOUNCE_DESCRIPTIONS = {
    "550": "Mailbox unavailable or does not exist",
    "551": "User not local; please try another path",
    "552": "Requested mail action aborted: exceeded storage allocation",
    "553": "Requested action not taken: mailbox name not allowed",
    "554": "Transaction failed",
    "450": "Requested mail action not taken: mailbox unavailable",
    "451": "Requested action aborted: local error in processing",
    "452": "Requested action not taken: insufficient system storage",
}


def classify_bounce_type(code: Any) -> str:
    """Return 'permanent', 'temporary' or 'unknown'."""
    if not code:
        return "unknown"
    text = str(code).strip()
    if text.startswith("5"):
        return "permanent"
    if text.startswith("4"):
        return "temporary"
    return "unknown"


def bounce_severity(code: Any) -> str:
    """Return 'high', 'medium', 'low' or 'unknown'."""
    if not code:
        return "unknown"
    text = str(code)
    if any(c in text for c in HIGH_SEVERITY_CODES):
        return "high"
    if any(c in text for c in MEDIUM_SEVERITY_CODES):
        return "medium"
    return "low"


def bounce_description(code: Any) -> str:
    if not code:
        return "Unknown bounce reason"
    text = str(code)
    for bounce_code, description in BOUNCE_DESCRIPTIONS.items():
        if bounce_code in text:
            return description
    return f"SMTP Error Code: {code}"


def process_bounce(bounce: dict[str, Any]) -> dict[str, Any]:
    code = bounce.get("code")
    return {
        "address": bounce.get("address"),
        "code": code,
        "error": bounce.get("error"),
        "created_at": bounce.get("created_at"),
        "bounce_type": classify_bounce_type(code),
        "severity": bounce_severity(code),
        "description": bounce_description(code),
        "raw": bounce,
    }


def process_complaint(complaint: dict[str, Any]) -> dict[str, Any]:
    return {
        "address": complaint.get("address"),
        "created_at": complaint.get("created_at"),
        "complaint_type": complaint.get("type") or "unknown",
        "source": "feedback_loop",
        "severity": "high",
        "raw": complaint,
    }


def process_unsubscribe(unsubscribe: dict[str, Any]) -> dict[str, Any]:
    return {
        "address": unsubscribe.get("address"),
        "created_at": unsubscribe.get("created_at"),
        "tags": unsubscribe.get("tags") or [],
        "method": unsubscribe.get("method") or "unknown",
        "source": unsubscribe.get("source") or "manual",
        "raw": unsubscribe,
    }


def process_whitelist(entry: dict[str, Any]) -> dict[str, Any]:
    return {
        "address": entry.get("address") or entry.get("value"),
        "type": entry.get("type") or "address",
        "created_at": entry.get("created_at"),
        "reason": entry.get("reason") or "manual",
        "raw": entry,
    }


def _group_by(items: list[dict[str, Any]], key: str) -> dict[str, int]:
    return dict(Counter(str(item.get(key) or "unknown") for item in items))


def summarize_suppressions(suppressions: dict[str, list[dict[str, Any]]]) -> dict[str, Any]:
    bounces = suppressions.get("bounces") or []
    complaints = suppressions.get("complaints") or []
    unsubscribes = suppressions.get("unsubscribes") or []
    whitelists = suppressions.get("whitelists") or []
    return {
        "bounces": {
            "total": len(bounces),
            "permanent": sum(1 for b in bounces if b.get("bounce_type") == "permanent"),
            "temporary": sum(1 for b in bounces if b.get("bounce_type") == "temporary"),
            "by_severity": _group_by(bounces, "severity"),
        },
        "complaints": {
            "total": len(complaints),
            "by_type": _group_by(complaints, "complaint_type"),
        },
        "unsubscribes": {
            "total": len(unsubscribes),
            "by_method": _group_by(unsubscribes, "method"),
        },
        "whitelists": {
            "total": len(whitelists),
            "by_type": _group_by(whitelists, "type"),
        },
    }
