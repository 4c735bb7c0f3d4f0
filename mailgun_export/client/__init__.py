"""HTTP client layer: rate-gated requester, paginator, URL helpers."""

from .paginator import Page, PageShape, Paginator, parse_page
from .requester import RequestStats, RetryingRequester
from .urls import build_url, format_rfc2822, path_segment

__all__ = [
    "Page",
    "PageShape",
    "Paginator",
    "parse_page",
    "RequestStats",
    "RetryingRequester",
    "build_url",
    "format_rfc2822",
    "path_segment",
]
