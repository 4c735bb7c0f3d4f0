"""Domain record mapping."""

from __future__ import annotations

from collections import Counter
from typing import Any

MASKED = "***MASKED***"


def process_domain(domain: dict[str, Any]) -> dict[str, Any]:
    """Map a raw domain object. The SMTP password is never exported."""
    return {
        "name": domain.get("name"),
        "type": domain.get("type"),
        "state": domain.get("state"),
        "created_at": domain.get("created_at"),
        "smtp_login": domain.get("smtp_login"),
        "smtp_password": MASKED if domain.get("smtp_password") else None,
        "verification": {
            "is_verified": domain.get("state") == "active",
            "spf_valid": domain.get("spf_valid"),
            "dkim_valid": domain.get("dkim_valid"),
            "skip_verification": domain.get("skip_verification"),
        },
        "spam_action": domain.get("spam_action"),
        "tracking": {
            "clicks": bool(domain.get("tracking_clicks")),
            "opens": bool(domain.get("tracking_opens")),
            "unsubscribes": bool(domain.get("tracking_unsubscribes")),
        },
        "connection": {
            "require_tls": bool(domain.get("require_tls")),
            "skip_verification": bool(domain.get("skip_verification")),
        },
        "web_scheme": domain.get("web_scheme"),
        "web_prefix": domain.get("web_prefix"),
        "inbound_dns_subdomain": domain.get("inbound_dns_subdomain"),
        "raw": mask_password(domain),
    }


def mask_password(domain: dict[str, Any]) -> dict[str, Any]:
    if "smtp_password" not in domain:
        return domain
    return {**domain, "smtp_password": MASKED}


def process_smtp_credential(credential: dict[str, Any]) -> dict[str, Any]:
    return {
        "login": credential.get("login"),
        "created_at": credential.get("created_at"),
        "mailbox": credential.get("mailbox"),
        "state": credential.get("state"),
        "password": MASKED,
    }


def process_ip_allowlist(entry: dict[str, Any]) -> dict[str, Any]:
    return {
        "address": entry.get("address"),
        "created_at": entry.get("created_at"),
        "comment": entry.get("comment") or "",
    }


def summarize_domains(domains: list[dict[str, Any]]) -> dict[str, Any]:
    """Counts by state/type and verification, tracking and TLS flags."""
    by_state: Counter[str] = Counter()
    by_type: Counter[str] = Counter()
    verification = {"verified": 0, "spf_valid": 0, "dkim_valid": 0}
    tracking = {"clicks_enabled": 0, "opens_enabled": 0, "unsubscribes_enabled": 0}
    security = {"require_tls": 0, "skip_verification": 0}

    for domain in domains:
        by_state[str(domain.get("state"))] += 1
        by_type[str(domain.get("type"))] += 1

        ver = domain.get("verification") or {}
        verification["verified"] += bool(ver.get("is_verified"))
        verification["spf_valid"] += bool(ver.get("spf_valid"))
        verification["dkim_valid"] += bool(ver.get("dkim_valid"))

        trk = domain.get("tracking") or {}
        tracking["clicks_enabled"] += bool(trk.get("clicks"))
        tracking["opens_enabled"] += bool(trk.get("opens"))
        tracking["unsubscribes_enabled"] += bool(trk.get("unsubscribes"))

        conn = domain.get("connection") or {}
        security["require_tls"] += bool(conn.get("require_tls"))
        security["skip_verification"] += bool(conn.get("skip_verification"))

    return {
        "total": len(domains),
        "by_state": dict(by_state),
        "by_type": dict(by_type),
        "verification": verification,
        "tracking": tracking,
        "security": security,
    }
