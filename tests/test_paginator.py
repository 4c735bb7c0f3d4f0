"""Tests for mailgun_export/client/paginator.py."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from mailgun_export.client.paginator import Page, PageShape, Paginator, parse_page
from mailgun_export.client.requester import RetryingRequester
from mailgun_export.core.errors import ClientError, PaginationProtocolError

from .fixtures.mailgun_responses import BASE_URL, DOMAIN

URL = f"{BASE_URL}/{DOMAIN}/bounces"


def _page_url(n: int) -> str:
    return f"{URL}?page=p{n}"


def _envelope_pages(records: list, page_size: int) -> list[dict]:
    """Split records into envelope pages linked by paging.next."""
    chunks = [records[i : i + page_size] for i in range(0, len(records), page_size)] or [[]]
    pages = []
    for n, chunk in enumerate(chunks):
        body = {"items": chunk, "paging": {}}
        if n + 1 < len(chunks):
            body["paging"]["next"] = _page_url(n + 1)
        pages.append(body)
    return pages


def _requester(*bodies) -> MagicMock:
    requester = MagicMock(spec=RetryingRequester)
    requester.fetch = AsyncMock(side_effect=list(bodies))
    return requester


# =============================================================================
# parse_page Tests (Pure Functions - No Mocking Required)
# =============================================================================


class TestParsePage:
    """Tests for parse_page() shape detection."""

    def test_envelope_with_paging_next(self):
        """items + paging.next is an ENVELOPE with a cursor."""
        page = parse_page({"items": [1, 2], "paging": {"next": "https://x/next"}})
        assert page == Page(shape=PageShape.ENVELOPE, items=[1, 2], next_url="https://x/next")

    def test_envelope_with_links_next(self):
        """links.next is used when paging is absent."""
        page = parse_page({"items": [1], "links": {"next": "https://x/n2"}})
        assert page.next_url == "https://x/n2"

    def test_paging_preferred_over_links(self):
        """paging.next wins over links.next."""
        page = parse_page({"items": [], "paging": {"next": "a"}, "links": {"next": "b"}})
        assert page.next_url == "a"

    def test_empty_next_is_none(self):
        """Empty next link ends pagination."""
        page = parse_page({"items": [1], "paging": {"next": ""}})
        assert page.next_url is None

    def test_bare_list(self):
        """A JSON array is a LIST page with no cursor."""
        page = parse_page([{"a": 1}, {"a": 2}])
        assert page.shape == PageShape.LIST
        assert page.items == [{"a": 1}, {"a": 2}]
        assert page.next_url is None

    def test_singleton_object(self):
        """An object without items is one record."""
        body = {"domain": {"name": DOMAIN}}
        page = parse_page(body)
        assert page.shape == PageShape.SINGLETON
        assert page.items == [body]

    @pytest.mark.parametrize("body", [None, "text", 42, 1.5, True])
    def test_scalar_body_rejected(self, body):
        """Null and scalar bodies raise PaginationProtocolError."""
        with pytest.raises(PaginationProtocolError):
            parse_page(body)

    @pytest.mark.parametrize("items", [None, "abc", {"a": 1}, 3])
    def test_non_list_items_rejected(self, items):
        """A non-list items field raises PaginationProtocolError."""
        with pytest.raises(PaginationProtocolError) as exc_info:
            parse_page({"items": items})
        assert exc_info.value.body_type == type(items).__name__


# =============================================================================
# Paginator.fetch_all Tests
# =============================================================================


class TestFetchAll:
    """Tests for cursor following."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("total,page_size", [(0, 10), (1, 10), (10, 10), (25, 10), (7, 1), (100, 33)])
    async def test_collects_every_record_in_order(self, total, page_size):
        """All records are returned once, in page order."""
        records = [{"id": i} for i in range(total)]
        pages = _envelope_pages(records, page_size)
        requester = _requester(*pages)

        result = await Paginator(requester).fetch_all(URL)

        assert result == records
        assert requester.fetch.call_count == len(pages)

    @pytest.mark.asyncio
    async def test_follows_absolute_cursor_urls(self):
        """Each next link is requested verbatim."""
        requester = _requester(*_envelope_pages([1, 2, 3], 1))

        await Paginator(requester).fetch_all(URL)

        urls = [c.args[0] for c in requester.fetch.call_args_list]
        assert urls == [URL, _page_url(1), _page_url(2)]

    @pytest.mark.asyncio
    async def test_params_only_on_first_page(self):
        """Query params are not re-sent with cursor URLs."""
        requester = _requester(*_envelope_pages([1, 2], 1))

        await Paginator(requester).fetch_all(URL, {"limit": 1})

        calls = requester.fetch.call_args_list
        assert calls[0].args == (URL, {"limit": 1})
        assert calls[1].args == (_page_url(1), None)

    @pytest.mark.asyncio
    async def test_empty_page_stops_despite_next(self):
        """Mailgun keeps sending next links past the end."""
        requester = _requester(
            {"items": [1], "paging": {"next": _page_url(1)}},
            {"items": [], "paging": {"next": _page_url(2)}},
        )

        result = await Paginator(requester).fetch_all(URL)

        assert result == [1]
        assert requester.fetch.call_count == 2

    @pytest.mark.asyncio
    async def test_empty_page_followed_when_disabled(self):
        """stop_on_empty_page=False follows the link."""
        requester = _requester(
            {"items": [], "paging": {"next": _page_url(1)}},
            {"items": [2]},
        )

        result = await Paginator(requester, stop_on_empty_page=False).fetch_all(URL)

        assert result == [2]

    @pytest.mark.asyncio
    async def test_repeated_cursor_stops(self):
        """A next link equal to the current URL ends pagination."""
        requester = _requester(
            {"items": [1], "paging": {"next": _page_url(1)}},
            {"items": [2], "paging": {"next": _page_url(1)}},
        )

        result = await Paginator(requester).fetch_all(URL)

        assert result == [1, 2]
        assert requester.fetch.call_count == 2

    @pytest.mark.asyncio
    async def test_bare_list_single_request(self):
        """A bare array is the whole result."""
        requester = _requester([{"a": 1}, {"a": 2}])

        result = await Paginator(requester).fetch_all(URL)

        assert result == [{"a": 1}, {"a": 2}]
        assert requester.fetch.call_count == 1

    @pytest.mark.asyncio
    async def test_singleton_single_record(self):
        """An object without items yields one record."""
        body = {"name": "only"}
        requester = _requester(body)

        assert await Paginator(requester).fetch_all(URL) == [body]

    @pytest.mark.asyncio
    async def test_unwrap_flattens_nested_batches(self):
        """unwrap pulls the records out of each object page."""
        requester = _requester(
            {"batch": {"rows": [1, 2]}, "paging": {"next": _page_url(1)}},
            {"batch": {"rows": [3]}},
        )

        result = await Paginator(requester).fetch_all(URL, unwrap=lambda item: item["batch"]["rows"])

        assert result == [1, 2, 3]
        assert requester.fetch.call_count == 2

    @pytest.mark.asyncio
    async def test_unwrapped_empty_object_page_stops(self):
        """An object page that unwraps to nothing ends pagination despite a fresh next link."""
        requester = _requester(
            {"batch": {"rows": [1]}, "paging": {"next": _page_url(1)}},
            {"batch": {"rows": []}, "paging": {"next": _page_url(2)}},
            {"batch": {"rows": [99]}},
        )

        result = await Paginator(requester).fetch_all(URL, unwrap=lambda item: item["batch"]["rows"])

        assert result == [1]
        assert requester.fetch.call_count == 2

    @pytest.mark.asyncio
    async def test_failure_discards_partial_results(self):
        """A failing page propagates; nothing is returned."""
        error = ClientError("HTTP 404 client error", status=404)
        requester = _requester({"items": [1], "paging": {"next": _page_url(1)}}, error)

        with pytest.raises(ClientError):
            await Paginator(requester).fetch_all(URL)

    @pytest.mark.asyncio
    async def test_protocol_error_on_later_page(self):
        """A malformed later page fails the whole walk."""
        requester = _requester({"items": [1], "paging": {"next": _page_url(1)}}, "oops")

        with pytest.raises(PaginationProtocolError):
            await Paginator(requester).fetch_all(URL)

    @pytest.mark.asyncio
    async def test_progress_logged(self, caplog):
        """Progress is logged every progress_interval pages."""
        requester = _requester(*_envelope_pages(list(range(4)), 1))

        with caplog.at_level("INFO", logger="mailgun_export"):
            await Paginator(requester, progress_interval=2).fetch_all(URL)

        messages = [r.getMessage() for r in caplog.records]
        assert "Fetched 2 pages, 2 items so far" in messages
        assert "Fetched 4 pages, 4 items so far" in messages
        assert "Pagination complete: 4 pages, 4 items" in messages
