"""Events fetcher (/<domain>/events)."""

from __future__ import annotations

from typing import Any

from ..config.constants import EVENT_TYPES, EVENTS_PAGE_LIMIT
from ..core.types import ResourceType
from ..observability.logger import get_logger
from ..processors.events import process_event, summarize_events
from .base import BaseFetcher, log_failures, settle

logger = get_logger(__name__)


class EventsFetcher(BaseFetcher):
    """Fetches the event log, optionally filtered by event type."""

    resource = ResourceType.EVENTS

    async def fetch_events(
        self,
        event_type: str | None = None,
        domain: str | None = None,
    ) -> list[dict[str, Any]]:
        params = {
            "limit": EVENTS_PAGE_LIMIT,
            "begin": self.ctx.begin,
            "end": self.ctx.end,
            "event": event_type,
        }
        url = self.ctx.domain_url(domain, "events")
        logger.info("Fetching events", extra={"event_type": event_type or "all"})

        raw = await self.paginator.fetch_all(url, {k: v for k, v in params.items() if v is not None})
        events = [process_event(e) for e in raw]
        logger.info(f"Fetched {len(events)} events", extra={"event_type": event_type or "all"})
        return events

    async def fetch_events_by_type(self, event_type: str, domain: str | None = None) -> list[dict[str, Any]]:
        return await self.fetch_events(event_type=event_type, domain=domain)

    async def fetch_all_event_types(self, domain: str | None = None) -> dict[str, list[dict[str, Any]]]:
        """Events grouped by type; a failed type yields an empty list."""
        outcomes = await settle(*(self.fetch_events_by_type(t, domain) for t in EVENT_TYPES))
        log_failures("Event types", outcomes, EVENT_TYPES)
        return {t: o.value_or([]) for t, o in zip(EVENT_TYPES, outcomes)}

    async def fetch_for_export(self, event_type: str | None = None, **options: Any) -> list[dict[str, Any]]:
        return await self.fetch_events(event_type=event_type, domain=options.get("domain"))

    def summarize(self, data: Any) -> dict[str, Any]:
        return summarize_events(data)
