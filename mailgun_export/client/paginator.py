"""Cursor pagination over Mailgun list endpoints.

Mailgun answers list endpoints in one of three shapes:
- ENVELOPE: {"items": [...], "paging": {"next": "..."}}
- LIST: a bare JSON array
- SINGLETON: any other object, taken as a one-record batch

The next page URL is read from paging.next, then links.next.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping

from ..config.constants import PAGE_PROGRESS_INTERVAL
from ..core.errors import PaginationProtocolError
from ..observability.logger import get_logger
from .requester import RetryingRequester

logger = get_logger(__name__)


class PageShape(str, Enum):
    """How a response body carries its batch of records."""

    ENVELOPE = "envelope"
    LIST = "list"
    SINGLETON = "singleton"


@dataclass
class Page:
    """One parsed response."""

    shape: PageShape
    items: list[Any] = field(default_factory=list)
    next_url: str | None = None


def _next_link(body: Mapping[str, Any]) -> str | None:
    for key in ("paging", "links"):
        block = body.get(key)
        if isinstance(block, Mapping):
            link = block.get("next")
            if isinstance(link, str) and link:
                return link
    return None


def parse_page(body: Any) -> Page:
    """Classify a response body and extract its items and next cursor.

    Raises:
        PaginationProtocolError: body is null, a scalar, or has a
            non-list "items" field
    """
    if isinstance(body, list):
        return Page(shape=PageShape.LIST, items=body)

    if not isinstance(body, dict):
        raise PaginationProtocolError(
            f"Expected a JSON object or array, got {type(body).__name__}",
            body_type=type(body).__name__,
        )

    if "items" in body:
        items = body["items"]
        if not isinstance(items, list):
            raise PaginationProtocolError(
                f"'items' must be a list, got {type(items).__name__}",
                body_type=type(items).__name__,
            )
        return Page(shape=PageShape.ENVELOPE, items=items, next_url=_next_link(body))

    return Page(shape=PageShape.SINGLETON, items=[body], next_url=_next_link(body))


class Paginator:
    """Follows next-page cursors and accumulates records in order.

    Args:
        requester: Shared RetryingRequester
        progress_interval: Log progress every N pages
        stop_on_empty_page: Stop on an empty page even if a next link is
            present (Mailgun keeps returning one past the end). This departs
            from cursor-only termination; pass False to follow cursors until
            none is returned. SINGLETON pages count as empty only when an
            `unwrap` passed to fetch_all() yields no records for them.
    """

    def __init__(
        self,
        requester: RetryingRequester,
        *,
        progress_interval: int = PAGE_PROGRESS_INTERVAL,
        stop_on_empty_page: bool = True,
    ):
        self.requester = requester
        self.progress_interval = progress_interval
        self.stop_on_empty_page = stop_on_empty_page

    async def fetch_all(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        unwrap: Callable[[Any], list[Any]] | None = None,
    ) -> list[Any]:
        """Fetch every page starting at `url`.

        `params` apply to the first request only; cursors are absolute URLs.
        `unwrap` maps each raw item to the records it carries, for endpoints
        that nest their batch inside a single object.
        Any page failure propagates and discards the records collected so far.
        """
        records: list[Any] = []
        page_count = 0
        current_url: str | None = url
        current_params = params

        while current_url is not None:
            body = await self.requester.fetch(current_url, current_params)
            page = parse_page(body)
            page_count += 1
            items = [r for item in page.items for r in unwrap(item)] if unwrap else page.items
            records.extend(items)

            if page_count % self.progress_interval == 0:
                logger.info(
                    f"Fetched {page_count} pages, {len(records)} items so far",
                    extra={"pages": page_count, "items": len(records)},
                )

            countable = unwrap is not None or page.shape != PageShape.SINGLETON
            if self.stop_on_empty_page and countable and not items:
                break

            if page.next_url is not None and page.next_url == current_url:
                logger.warning(
                    "Next page cursor repeats the current URL, stopping",
                    extra={"url": current_url},
                )
                break

            current_url = page.next_url
            current_params = None

        logger.info(
            f"Pagination complete: {page_count} pages, {len(records)} items",
            extra={"pages": page_count, "items": len(records)},
        )
        return records
