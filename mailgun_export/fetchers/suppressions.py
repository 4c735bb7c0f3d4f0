"""Suppression lists fetcher (bounces, complaints, unsubscribes, whitelists)."""

from __future__ import annotations

from typing import Any, Callable

from ..core.types import ResourceType
from ..observability.logger import get_logger
from ..processors.suppressions import (
    process_bounce,
    process_complaint,
    process_unsubscribe,
    process_whitelist,
    summarize_suppressions,
)
from .base import BaseFetcher, log_failures, settle

logger = get_logger(__name__)

SUPPRESSION_KINDS = ["bounces", "complaints", "unsubscribes", "whitelists"]


class SuppressionsFetcher(BaseFetcher):
    resource = ResourceType.SUPPRESSIONS

    async def _fetch_kind(
        self,
        kind: str,
        mapper: Callable[[dict[str, Any]], dict[str, Any]],
        domain: str | None,
    ) -> list[dict[str, Any]]:
        raw = await self.paginator.fetch_all(self.ctx.domain_url(domain, kind))
        records = [mapper(r) for r in raw]
        logger.info(f"Fetched {len(records)} {kind}", extra={"kind": kind})
        return records

    async def fetch_bounces(self, domain: str | None = None) -> list[dict[str, Any]]:
        return await self._fetch_kind("bounces", process_bounce, domain)

    async def fetch_complaints(self, domain: str | None = None) -> list[dict[str, Any]]:
        return await self._fetch_kind("complaints", process_complaint, domain)

    async def fetch_unsubscribes(self, domain: str | None = None) -> list[dict[str, Any]]:
        return await self._fetch_kind("unsubscribes", process_unsubscribe, domain)

    async def fetch_whitelists(self, domain: str | None = None) -> list[dict[str, Any]]:
        return await self._fetch_kind("whitelists", process_whitelist, domain)

    async def fetch_all_suppressions(self, domain: str | None = None) -> dict[str, list[dict[str, Any]]]:
        """All four lists; a list that fails to load is reported as empty."""
        outcomes = await settle(
            self.fetch_bounces(domain),
            self.fetch_complaints(domain),
            self.fetch_unsubscribes(domain),
            self.fetch_whitelists(domain),
        )
        log_failures("Suppressions", outcomes, SUPPRESSION_KINDS)
        return {kind: o.value_or([]) for kind, o in zip(SUPPRESSION_KINDS, outcomes)}

    async def fetch_for_export(self, **options: Any) -> dict[str, list[dict[str, Any]]]:
        return await self.fetch_all_suppressions(options.get("domain"))

    def summarize(self, data: Any) -> dict[str, Any]:
        return summarize_suppressions(data)
