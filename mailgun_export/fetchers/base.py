"""Base fetcher and fan-out helpers shared by every resource fetcher.

Fetchers build resource URLs, delegate to the Paginator (lists) or the
RetryingRequester (single objects), and map results through the
processors. Enrichment of a top-level entity fans out its sub-fetches
with settle(), so one failed sub-fetch never cancels its siblings.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, TypeVar

from ..client.paginator import Paginator
from ..client.requester import RetryingRequester
from ..client.urls import format_rfc2822, path_segment
from ..core.errors import ConfigurationError
from ..core.types import ResourceType
from ..observability.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class FetchContext:
    """Everything a fetcher needs to talk to the API.

    Attributes:
        requester: Shared rate-gated requester
        paginator: Paginator built on the same requester
        base_url: v3 API root
        base_url_v4: v4 API root (templates)
        domain: Default sending domain
        date_from: Lower bound for events/stats (ISO date or datetime)
        date_to: Upper bound for events/stats
    """

    requester: RetryingRequester
    paginator: Paginator
    base_url: str
    base_url_v4: str
    domain: str | None = None
    date_from: str | None = None
    date_to: str | None = None

    def resolve_domain(self, domain: str | None = None) -> str:
        target = domain or self.domain
        if not target:
            raise ConfigurationError("A domain is required (set MAILGUN_DOMAIN or pass --domain)")
        return target

    def domain_url(self, domain: str | None, *parts: str, v4: bool = False) -> str:
        """`<base>/<domain>/<parts...>` with the domain path-quoted."""
        base = self.base_url_v4 if v4 else self.base_url
        segments = [path_segment(self.resolve_domain(domain)), *parts]
        return "/".join([base, *segments])

    @property
    def begin(self) -> str | None:
        return format_rfc2822(self.date_from)

    @property
    def end(self) -> str | None:
        return format_rfc2822(self.date_to)


@dataclass
class Outcome(Generic[T]):
    """Result of one settled awaitable: a value or the exception it raised."""

    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default: Any) -> Any:
        return self.value if self.ok else default


async def settle(*aws: Awaitable[Any]) -> list[Outcome[Any]]:
    """Run awaitables concurrently and collect every outcome.

    A failure is captured as Outcome.error; siblings keep running.
    Cancellation of the caller still propagates.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    outcomes: list[Outcome[Any]] = []
    for result in results:
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            outcomes.append(Outcome(error=result))
        else:
            outcomes.append(Outcome(value=result))
    return outcomes


def log_failures(label: str, outcomes: list[Outcome[Any]], names: list[str]) -> None:
    for name, outcome in zip(names, outcomes):
        if not outcome.ok:
            logger.warning(
                f"{label}: {name} failed: {outcome.error}",
                extra={"sub_resource": name, "error_type": type(outcome.error).__name__},
            )


class BaseFetcher(ABC):
    """Abstract base class for resource fetchers."""

    resource: ResourceType

    def __init__(self, ctx: FetchContext):
        self.ctx = ctx

    @property
    def paginator(self) -> Paginator:
        return self.ctx.paginator

    @property
    def requester(self) -> RetryingRequester:
        return self.ctx.requester

    @abstractmethod
    async def fetch_for_export(self, **options: Any) -> Any:
        """Fetch the full data set exported for this resource type."""
        ...

    @abstractmethod
    def summarize(self, data: Any) -> dict[str, Any]:
        """Counts for the export summary report."""
        ...

    @staticmethod
    def record_count(data: Any) -> int:
        if isinstance(data, list):
            return len(data)
        if isinstance(data, dict):
            lists = [v for v in data.values() if isinstance(v, list)]
            return sum(len(v) for v in lists) if lists else 1
        return 0
