"""Mailing list and member mapping."""

from __future__ import annotations

from collections import Counter
from typing import Any


def process_list(mailing_list: dict[str, Any]) -> dict[str, Any]:
    return {
        "address": mailing_list.get("address"),
        "name": mailing_list.get("name"),
        "description": mailing_list.get("description"),
        "access_level": mailing_list.get("access_level"),
        "created_at": mailing_list.get("created_at"),
        "members_count": mailing_list.get("members_count"),
        "reply_preference": mailing_list.get("reply_preference"),
        "raw": mailing_list,
    }


def process_list_member(member: dict[str, Any]) -> dict[str, Any]:
    subscribed = member.get("subscribed")
    return {
        "address": member.get("address"),
        "name": member.get("name"),
        "subscribed": subscribed,
        "subscribed_at": member.get("subscribed_at"),
        "vars": member.get("vars") or {},
        "subscription": {
            "status": "subscribed" if subscribed else "unsubscribed",
            "opted_in": bool(member.get("opted_in")),
            "opted_in_at": member.get("opted_in_at"),
        },
        "raw": member,
    }


def summarize_lists(lists: list[dict[str, Any]]) -> dict[str, Any]:
    """Member totals, distribution and custom variable names across lists."""
    total_members = 0
    subscribed = 0
    member_counts: list[int] = []
    by_access: Counter[str] = Counter()
    custom_vars: set[str] = set()

    for mailing_list in lists:
        by_access[str(mailing_list.get("access_level"))] += 1
        members = mailing_list.get("members")
        if members is None:
            continue
        member_counts.append(len(members))
        total_members += len(members)
        for member in members:
            if member.get("subscribed"):
                subscribed += 1
            custom_vars.update((member.get("vars") or {}).keys())

    return {
        "total_lists": len(lists),
        "total_members": total_members,
        "total_subscribed": subscribed,
        "total_unsubscribed": total_members - subscribed,
        "by_access_level": dict(by_access),
        "member_distribution": {
            "min": min(member_counts) if member_counts else 0,
            "max": max(member_counts) if member_counts else 0,
            "average": round(total_members / len(lists)) if lists else 0,
        },
        "custom_variables": sorted(custom_vars),
    }
