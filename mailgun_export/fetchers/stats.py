"""Statistics fetcher (/<domain>/stats/total, /<domain>/tags)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..config.constants import (
    DELIVERY_EVENTS,
    ENGAGEMENT_EVENTS,
    STATS_DURATION,
    STATS_EVENTS,
    STATS_RESOLUTION,
)
from ..core.types import ResourceType
from ..observability.logger import get_logger
from ..processors.stats import generate_insights, process_stats, summarize_stats
from .base import BaseFetcher, log_failures, settle

logger = get_logger(__name__)


class StatsFetcher(BaseFetcher):
    """Aggregate sending statistics. Stats are a single request, not paginated."""

    resource = ResourceType.STATS

    async def fetch_stats(
        self,
        domain: str | None = None,
        events: list[str] | None = None,
        tag: str | None = None,
        resolution: str = STATS_RESOLUTION,
        duration: str = STATS_DURATION,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "event": events or STATS_EVENTS,
            "resolution": resolution,
            "duration": duration,
        }
        if self.ctx.begin:
            params["start"] = self.ctx.begin
        if self.ctx.end:
            params["end"] = self.ctx.end
        if tag:
            params["tag"] = tag

        body = await self.requester.fetch(self.ctx.domain_url(domain, "stats", "total"), params)
        return process_stats(body)

    async def fetch_stats_by_tag(self, tag: str, domain: str | None = None) -> dict[str, Any]:
        return await self.fetch_stats(domain, tag=tag)

    async def fetch_tags(self, domain: str | None = None) -> list[str]:
        raw = await self.paginator.fetch_all(self.ctx.domain_url(domain, "tags"))
        return [item["tag"] for item in raw if isinstance(item, dict) and item.get("tag")]

    async def fetch_all_tag_stats(self, domain: str | None = None) -> dict[str, Any]:
        """General stats plus stats per tag; a failed tag maps to None."""
        general = await self.fetch_stats(domain)
        tags_outcome = (await settle(self.fetch_tags(domain)))[0]
        log_failures("Tag listing", [tags_outcome], ["tags"])
        tags = tags_outcome.value_or([])

        outcomes = await settle(*(self.fetch_stats_by_tag(t, domain) for t in tags))
        log_failures("Tag stats", outcomes, tags)
        return {
            "general": general,
            "by_tag": {t: o.value_or(None) for t, o in zip(tags, outcomes)},
        }

    async def _per_event(self, events: list[str], domain: str | None) -> dict[str, Any]:
        outcomes = await settle(*(self.fetch_stats(domain, events=[e]) for e in events))
        log_failures("Event stats", outcomes, events)
        return {e: o.value_or(None) for e, o in zip(events, outcomes)}

    async def fetch_engagement_stats(self, domain: str | None = None) -> dict[str, Any]:
        return await self._per_event(ENGAGEMENT_EVENTS, domain)

    async def fetch_delivery_stats(self, domain: str | None = None) -> dict[str, Any]:
        return await self._per_event(DELIVERY_EVENTS, domain)

    async def fetch_comprehensive_stats(self, domain: str | None = None) -> dict[str, Any]:
        outcomes = await settle(
            self.fetch_stats(domain),
            self.fetch_engagement_stats(domain),
            self.fetch_delivery_stats(domain),
            self.fetch_all_tag_stats(domain),
        )
        log_failures("Comprehensive stats", outcomes, ["general", "engagement", "delivery", "tags"])
        general, engagement, delivery, tags = (o.value_or(None) for o in outcomes)
        return {
            "general": general,
            "engagement": engagement,
            "delivery": delivery,
            "tags": tags,
            "insights": generate_insights(general) if general else [],
            "generated_at": datetime.now(timezone.utc).isoformat(),
        }

    async def fetch_for_export(self, comprehensive: bool = False, **options: Any) -> dict[str, Any]:
        domain = options.get("domain")
        if comprehensive:
            return await self.fetch_comprehensive_stats(domain)
        return await self.fetch_stats(domain)

    def summarize(self, data: Any) -> dict[str, Any]:
        return summarize_stats(data)

    @staticmethod
    def record_count(data: Any) -> int:
        general = data.get("general", data) if isinstance(data, dict) else None
        return len((general or {}).get("stats") or [])
