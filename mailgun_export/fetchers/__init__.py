"""Resource fetchers, one per exportable resource type."""

from ..core.types import ResourceType
from .base import BaseFetcher, FetchContext, Outcome, settle
from .domains import DomainsFetcher
from .events import EventsFetcher
from .lists import ListsFetcher
from .stats import StatsFetcher
from .suppressions import SuppressionsFetcher
from .templates import TemplatesFetcher

FETCHERS: dict[ResourceType, type[BaseFetcher]] = {
    ResourceType.EVENTS: EventsFetcher,
    ResourceType.SUPPRESSIONS: SuppressionsFetcher,
    ResourceType.DOMAINS: DomainsFetcher,
    ResourceType.LISTS: ListsFetcher,
    ResourceType.TEMPLATES: TemplatesFetcher,
    ResourceType.STATS: StatsFetcher,
}

__all__ = [
    "BaseFetcher",
    "FetchContext",
    "Outcome",
    "settle",
    "FETCHERS",
    "DomainsFetcher",
    "EventsFetcher",
    "ListsFetcher",
    "StatsFetcher",
    "SuppressionsFetcher",
    "TemplatesFetcher",
]
