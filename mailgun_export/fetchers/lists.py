"""Mailing lists fetcher."""

from __future__ import annotations

from typing import Any

from ..client.urls import path_segment
from ..config.constants import LIST_MEMBERS_PAGE_LIMIT
from ..core.types import ResourceType
from ..observability.logger import get_logger
from ..processors.lists import process_list, process_list_member, summarize_lists
from .base import BaseFetcher, log_failures, settle

logger = get_logger(__name__)


class ListsFetcher(BaseFetcher):
    resource = ResourceType.LISTS

    def _list_path(self, address: str, *parts: str) -> str:
        return "/".join([self.ctx.base_url, "lists", path_segment(address), *parts])

    async def fetch_lists(self) -> list[dict[str, Any]]:
        raw = await self.paginator.fetch_all(f"{self.ctx.base_url}/lists")
        lists = [process_list(item) for item in raw]
        logger.info(f"Fetched {len(lists)} mailing lists")
        return lists

    async def fetch_list_members(
        self,
        address: str,
        include_unsubscribed: bool = False,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"limit": LIST_MEMBERS_PAGE_LIMIT}
        if not include_unsubscribed:
            params["subscribed"] = "yes"
        raw = await self.paginator.fetch_all(self._list_path(address, "members"), params)
        return [process_list_member(m) for m in raw]

    async def fetch_list_stats(self, address: str) -> dict[str, Any]:
        body = await self.requester.fetch(self._list_path(address, "stats"))
        return body.get("stats") or body

    async def fetch_all_lists_with_members(self, include_unsubscribed: bool = False) -> list[dict[str, Any]]:
        """Every list with its members and stats.

        Failed member fetches yield an empty member list and a failed stats
        fetch yields None.
        """
        lists = await self.fetch_lists()
        enriched = []
        for mailing_list in lists:
            address = mailing_list["address"]
            outcomes = await settle(
                self.fetch_list_members(address, include_unsubscribed),
                self.fetch_list_stats(address),
            )
            log_failures(f"List {address}", outcomes, ["members", "stats"])
            members = outcomes[0].value_or([])
            enriched.append({
                **mailing_list,
                "members": members,
                "stats": outcomes[1].value_or(None),
                "member_count": len(members),
            })
        return enriched

    async def fetch_lists_by_domain(self, domain: str) -> list[dict[str, Any]]:
        lists = await self.fetch_lists()
        suffix = f"@{domain}"
        return [item for item in lists if (item.get("address") or "").endswith(suffix)]

    async def fetch_for_export(self, **options: Any) -> list[dict[str, Any]]:
        return await self.fetch_all_lists_with_members(options.get("include_unsubscribed", False))

    def summarize(self, data: Any) -> dict[str, Any]:
        return summarize_lists(data)
