"""Pytest configuration and shared fixtures."""

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from mailgun_export.client.paginator import Paginator
from mailgun_export.client.requester import RetryingRequester
from mailgun_export.config.settings import Settings
from mailgun_export.fetchers.base import FetchContext

from .fixtures.mailgun_responses import BASE_URL, BASE_URL_V4, DOMAIN


class FakeClock:
    """Virtual monotonic clock; sleep() advances time instantly."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += max(seconds, 0.0)
        await asyncio.sleep(0)


def make_response(
    status: int = 200,
    json_data: Any = None,
    text: str = "",
    headers: dict[str, str] | None = None,
    json_error: Exception | None = None,
) -> AsyncMock:
    """Build a mock aiohttp response usable as `async with session.get(...)`."""
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.headers = headers or {}
    if json_error is not None:
        mock_response.json = AsyncMock(side_effect=json_error)
    else:
        mock_response.json = AsyncMock(return_value=json_data)
    mock_response.text = AsyncMock(return_value=text)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)
    return mock_response


def make_session(*responses: Any) -> MagicMock:
    """Mock session whose get() returns (or raises) each item in turn."""
    mock_session = MagicMock()
    mock_session.closed = False
    mock_session.get = MagicMock(side_effect=list(responses))
    mock_session.close = AsyncMock()
    return mock_session


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_requester() -> MagicMock:
    """Requester stand-in; set `fake_requester.fetch.side_effect` per test."""
    requester = MagicMock(spec=RetryingRequester)
    requester.fetch = AsyncMock()
    return requester


@pytest.fixture
def url_router(fake_requester: MagicMock):
    """Route fake_requester.fetch by URL.

    Values may be a body or an exception instance (raised).
    Unknown URLs raise KeyError so tests notice unexpected requests.
    """
    routes: dict[str, Any] = {}

    async def _fetch(url: str, params: Any = None) -> Any:
        value = routes[url]
        if isinstance(value, BaseException):
            raise value
        return value

    fake_requester.fetch.side_effect = _fetch
    return routes


@pytest.fixture
def fetch_context(fake_requester: MagicMock) -> FetchContext:
    return FetchContext(
        requester=fake_requester,
        paginator=Paginator(fake_requester),
        base_url=BASE_URL,
        base_url_v4=BASE_URL_V4,
        domain=DOMAIN,
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        mailgun_api_key="key-test1234",
        mailgun_domain=DOMAIN,
        output_dir=tmp_path / "exports",
    )

