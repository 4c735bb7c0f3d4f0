"""Statistics mapping: per-period counts, rates, aggregates, trends, insights.

Rates are percentages rounded to two decimals; a zero denominator yields 0.
"""

from __future__ import annotations

from typing import Any

COUNT_FIELDS = (
    "accepted",
    "delivered",
    "failed",
    "opened",
    "clicked",
    "unsubscribed",
    "complained",
    "stored",
)
TREND_FIELDS = ("accepted", "delivered", "failed", "opened", "clicked")
MIN_TREND_PERIODS = 4

# (rate name, numerator, denominator)
RATE_DEFINITIONS = (
    ("delivery_rate", "delivered", "accepted"),
    ("open_rate", "opened", "delivered"),
    ("click_rate", "clicked", "delivered"),
    ("bounce_rate", "failed", "accepted"),
    ("complaint_rate", "complained", "delivered"),
    ("unsubscribe_rate", "unsubscribed", "delivered"),
)


def calculate_rate(numerator: float | None, denominator: float | None) -> float:
    if not denominator:
        return 0.0
    return round((numerator or 0) / denominator * 100, 2)


def _total(entry: Any) -> int:
    if isinstance(entry, dict):
        return int(entry.get("total") or 0)
    return 0


def _rates(counts: dict[str, Any]) -> dict[str, float]:
    return {name: calculate_rate(counts.get(num), counts.get(den)) for name, num, den in RATE_DEFINITIONS}


def process_stat_period(stat: dict[str, Any]) -> dict[str, Any]:
    counts = {f: _total(stat.get(f)) for f in COUNT_FIELDS}
    return {"time": stat.get("time"), **counts, **_rates(counts)}


def calculate_trends(periods: list[dict[str, Any]]) -> dict[str, Any]:
    """Compare the first and second half averages of each trend metric."""
    if len(periods) < MIN_TREND_PERIODS:
        return {}

    mid = len(periods) // 2
    first, second = periods[:mid], periods[mid:]
    trends: dict[str, Any] = {}
    for metric in TREND_FIELDS:
        first_avg = sum(p.get(metric) or 0 for p in first) / len(first)
        second_avg = sum(p.get(metric) or 0 for p in second) / len(second)
        change = second_avg - first_avg
        change_percent = change / first_avg * 100 if first_avg > 0 else 0.0
        trends[metric] = {
            "change": round(change),
            "change_percent": round(change_percent, 2),
            "trend": "up" if change > 0 else "down" if change < 0 else "stable",
        }
    return trends


def calculate_aggregates(periods: list[dict[str, Any]]) -> dict[str, Any]:
    if not periods:
        return {"totals": {}, "overall_rates": {}, "averages": {}, "trends": {}}

    totals = {f: sum(p.get(f) or 0 for p in periods) for f in COUNT_FIELDS}
    return {
        "totals": totals,
        "overall_rates": _rates(totals),
        "averages": {f: round(v / len(periods)) for f, v in totals.items()},
        "trends": calculate_trends(periods),
    }


def process_stats(data: dict[str, Any]) -> dict[str, Any]:
    """Map a /stats/total response."""
    raw_periods = data.get("stats")
    periods = [process_stat_period(s) for s in raw_periods] if isinstance(raw_periods, list) else []
    return {
        "time_range": {
            "start": data.get("start"),
            "end": data.get("end"),
            "resolution": data.get("resolution"),
        },
        "stats": periods,
        "aggregates": calculate_aggregates(periods),
    }


def generate_insights(stats: dict[str, Any]) -> list[dict[str, str]]:
    """Threshold-based observations on processed stats."""
    aggregates = stats.get("aggregates") or {}
    rates = aggregates.get("overall_rates")
    if not rates:
        return []

    insights: list[dict[str, str]] = []

    delivery = rates["delivery_rate"]
    if delivery < 95:
        insights.append({
            "type": "warning",
            "category": "delivery",
            "message": f"Low delivery rate: {delivery}%. Consider reviewing your sending practices.",
        })
    elif delivery > 98:
        insights.append({
            "type": "success",
            "category": "delivery",
            "message": f"Excellent delivery rate: {delivery}%",
        })

    opens = rates["open_rate"]
    if opens < 15:
        insights.append({
            "type": "warning",
            "category": "engagement",
            "message": f"Low open rate: {opens}%. Consider improving subject lines and sender reputation.",
        })
    elif opens > 25:
        insights.append({
            "type": "success",
            "category": "engagement",
            "message": f"Good open rate: {opens}%",
        })

    if rates["complaint_rate"] > 0.1:
        insights.append({
            "type": "alert",
            "category": "reputation",
            "message": f"High complaint rate: {rates['complaint_rate']}%. Review your list quality and content.",
        })

    if rates["bounce_rate"] > 2:
        insights.append({
            "type": "warning",
            "category": "list_quality",
            "message": f"High bounce rate: {rates['bounce_rate']}%. Consider list cleaning.",
        })

    for metric, trend in (aggregates.get("trends") or {}).items():
        if abs(trend["change_percent"]) > 20:
            direction = "increased" if trend["trend"] == "up" else "decreased"
            insights.append({
                "type": "info" if trend["trend"] == "up" else "warning",
                "category": "trends",
                "message": f"{metric} has {direction} by {abs(trend['change_percent'])}% recently.",
            })

    return insights


def summarize_stats(stats: dict[str, Any]) -> dict[str, Any]:
    """Pick the general totals and rates out of comprehensive or plain stats."""
    general = stats.get("general", stats) or {}
    aggregates = general.get("aggregates") or {}
    return {
        "periods": len(general.get("stats") or []),
        "totals": aggregates.get("totals") or {},
        "overall_rates": aggregates.get("overall_rates") or {},
        "insights": len(stats.get("insights") or []),
    }
