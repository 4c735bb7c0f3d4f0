"""Tests for mailgun_export/client/requester.py.

- Retry policy: Mock aiohttp session, record backoff sleeps
- Error mapping: status codes and transport failures
"""

import asyncio
from unittest.mock import AsyncMock

import aiohttp
import pytest

from mailgun_export.client.requester import RetryingRequester
from mailgun_export.core.errors import (
    ClientError,
    ExportError,
    PaginationProtocolError,
    RateLimitedError,
    ServerError,
    TransientTransportError,
)
from mailgun_export.rate_limit.backoff import ExponentialBackoff
from mailgun_export.rate_limit.gate import RateGate

from .conftest import FakeClock, make_response, make_session
from .fixtures.mailgun_responses import BASE_URL, DOMAIN, EVENTS_PAGE

URL = f"{BASE_URL}/{DOMAIN}/events"


def _requester(clock: FakeClock, *responses, **kwargs) -> RetryingRequester:
    gate = RateGate(requests_per_minute=1000, clock=clock, sleep=clock.sleep)
    return RetryingRequester(
        gate,
        "key-test",
        session=make_session(*responses),
        sleep=clock.sleep,
        **kwargs,
    )


# =============================================================================
# Success Path Tests
# =============================================================================


class TestFetchSuccess:
    """Tests for successful fetches."""

    @pytest.mark.asyncio
    async def test_returns_parsed_json(self, clock):
        """200 response returns the decoded body."""
        requester = _requester(clock, make_response(200, EVENTS_PAGE))

        body = await requester.fetch(URL, {"limit": 300})

        assert body == EVENTS_PAGE
        assert requester.stats.requests == 1
        assert requester.stats.retries == 0

    @pytest.mark.asyncio
    async def test_params_forwarded(self, clock):
        """Query parameters are passed to session.get."""
        requester = _requester(clock, make_response(200, {"items": []}))

        await requester.fetch(URL, {"event": "delivered"})

        requester._session.get.assert_called_once()
        assert requester._session.get.call_args.kwargs["params"] == {"event": "delivered"}

    @pytest.mark.asyncio
    async def test_timeout_applied_to_provided_session(self, clock):
        """A caller-provided session still gets the per-attempt timeout."""
        requester = _requester(
            clock,
            make_response(429),
            make_response(200, {"items": []}),
            timeout=5,
        )

        await requester.fetch(URL)

        assert requester._session.get.call_count == 2
        for call in requester._session.get.call_args_list:
            timeout = call.kwargs["timeout"]
            assert isinstance(timeout, aiohttp.ClientTimeout)
            assert timeout.total == 5

    @pytest.mark.asyncio
    async def test_every_attempt_goes_through_gate(self, clock):
        """Each attempt, including retries, is admitted by the gate."""
        requester = _requester(
            clock,
            make_response(429),
            make_response(200, {"items": []}),
        )

        await requester.fetch(URL)

        assert requester.gate.total_admitted == 2


# =============================================================================
# Retry Policy Tests
# =============================================================================


class TestRetryPolicy:
    """Bounded exponential backoff on retryable failures."""

    @pytest.mark.asyncio
    async def test_always_failing_gives_four_attempts(self, clock):
        """3 retries: 4 attempts, delays 1s, 2s, 4s, then raise."""
        requester = _requester(clock, *[make_response(429) for _ in range(4)])

        with pytest.raises(RateLimitedError):
            await requester.fetch(URL)

        assert requester._session.get.call_count == 4
        assert clock.sleeps == [1.0, 2.0, 4.0]
        assert requester.stats.requests == 4
        assert requester.stats.retries == 3
        assert requester.stats.rate_limited == 4
        assert requester.stats.failures == 1

    @pytest.mark.asyncio
    async def test_rate_limited_then_success(self, clock):
        """429 followed by 200 succeeds after one backoff."""
        requester = _requester(
            clock,
            make_response(429, headers={"Retry-After": "5"}),
            make_response(200, {"items": [1]}),
        )

        body = await requester.fetch(URL)

        assert body == {"items": [1]}
        assert clock.sleeps == [1.0]
        assert requester.stats.rate_limited == 1
        assert requester.stats.failures == 0

    @pytest.mark.asyncio
    async def test_timeout_retried(self, clock):
        """Timeouts are transient and retried."""
        requester = _requester(
            clock,
            asyncio.TimeoutError(),
            make_response(200, {"items": []}),
        )

        assert await requester.fetch(URL) == {"items": []}
        assert requester.stats.retries == 1

    @pytest.mark.asyncio
    async def test_connection_error_retried(self, clock):
        """Dropped connections are transient and retried."""
        requester = _requester(
            clock,
            aiohttp.ClientConnectionError("reset"),
            aiohttp.ClientConnectionError("reset"),
            make_response(200, [1, 2]),
        )

        assert await requester.fetch(URL) == [1, 2]
        assert clock.sleeps == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_timeout_exhausted_raises_transient(self, clock):
        """Exhausted timeouts surface as TransientTransportError."""
        requester = _requester(clock, *[asyncio.TimeoutError() for _ in range(4)], timeout=7.5)

        with pytest.raises(TransientTransportError) as exc_info:
            await requester.fetch(URL)

        assert exc_info.value.timeout_seconds == 7.5
        assert exc_info.value.url == URL

    @pytest.mark.asyncio
    async def test_custom_backoff_policy(self, clock):
        """A supplied policy overrides max_retries/base_delay."""
        requester = _requester(
            clock,
            *[make_response(429) for _ in range(2)],
            backoff=ExponentialBackoff(base=0.5, max_retries=1),
        )

        with pytest.raises(RateLimitedError):
            await requester.fetch(URL)

        assert clock.sleeps == [0.5]
        assert requester._session.get.call_count == 2


# =============================================================================
# Terminal Error Tests
# =============================================================================


class TestTerminalErrors:
    """Errors raised on the first attempt without retry."""

    @pytest.mark.asyncio
    async def test_unauthorized_not_retried(self, clock):
        """401 raises ClientError after exactly one attempt."""
        requester = _requester(clock, make_response(401, text="Forbidden"))

        with pytest.raises(ClientError) as exc_info:
            await requester.fetch(URL)

        assert exc_info.value.status == 401
        assert exc_info.value.body == "Forbidden"
        assert requester._session.get.call_count == 1
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_not_found_not_retried(self, clock):
        """404 is a ClientError."""
        requester = _requester(clock, make_response(404, text="Domain not found"))

        with pytest.raises(ClientError):
            await requester.fetch(URL)

        assert requester.stats.failures == 1

    @pytest.mark.asyncio
    async def test_server_error_terminal_by_default(self, clock):
        """5xx is not retried unless enabled."""
        requester = _requester(clock, make_response(503, text="unavailable"))

        with pytest.raises(ServerError) as exc_info:
            await requester.fetch(URL)

        assert exc_info.value.status == 503
        assert requester._session.get.call_count == 1

    @pytest.mark.asyncio
    async def test_server_error_retried_when_enabled(self, clock):
        """retry_server_errors=True retries 5xx."""
        requester = _requester(
            clock,
            make_response(502),
            make_response(200, {"items": []}),
            retry_server_errors=True,
        )

        assert await requester.fetch(URL) == {"items": []}
        assert requester.stats.retries == 1

    @pytest.mark.asyncio
    async def test_non_json_body_is_protocol_error(self, clock):
        """Undecodable 200 body raises PaginationProtocolError."""
        requester = _requester(clock, make_response(200, json_error=ValueError("not json")))

        with pytest.raises(PaginationProtocolError):
            await requester.fetch(URL)

        assert requester._session.get.call_count == 1

    @pytest.mark.asyncio
    async def test_other_client_error_not_retried(self, clock):
        """Unclassified aiohttp errors are terminal ExportErrors."""
        requester = _requester(clock, aiohttp.InvalidURL("bad url"))

        with pytest.raises(ExportError) as exc_info:
            await requester.fetch(URL)

        assert not exc_info.value.is_retryable
        assert requester._session.get.call_count == 1

    @pytest.mark.asyncio
    async def test_error_body_truncated(self, clock):
        """Error bodies are cut to a short excerpt."""
        requester = _requester(clock, make_response(400, text="x" * 2000))

        with pytest.raises(ClientError) as exc_info:
            await requester.fetch(URL)

        assert len(exc_info.value.body) == 500


# =============================================================================
# Session Lifecycle Tests
# =============================================================================


class TestSessionLifecycle:
    """Tests for session ownership."""

    @pytest.mark.asyncio
    async def test_caller_session_not_closed(self, clock):
        """A session passed in by the caller stays open."""
        requester = _requester(clock)
        session = requester._session

        await requester.close()

        session.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_owned_session_closed(self):
        """A session the requester created is closed on exit."""
        gate = RateGate()
        async with RetryingRequester(gate, "key-test") as requester:
            session = await requester._get_session()
            assert isinstance(session, aiohttp.ClientSession)
        assert session.closed
        assert requester._session is None

    @pytest.mark.asyncio
    async def test_closed_session_replaced(self, clock):
        """A closed session is recreated on the next request."""
        requester = _requester(clock)
        requester._session.closed = True
        requester._session.close = AsyncMock()

        session = await requester._get_session()

        assert isinstance(session, aiohttp.ClientSession)
        await requester.close()
