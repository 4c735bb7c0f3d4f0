"""Rate-gated HTTP requester with bounded retries.

Every attempt of a logical GET passes through the shared RateGate.
Retryable failures (HTTP 429, timeouts, dropped connections) are retried
with exponential backoff; everything else is raised on the first attempt.

Usage:
    gate = RateGate(requests_per_minute=300)
    async with RetryingRequester(gate, api_key="key-...") as requester:
        body = await requester.fetch("https://api.mailgun.net/v3/domains")
"""

from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, Mapping

import aiohttp

from ..config.constants import (
    DEFAULT_BASE_DELAY,
    DEFAULT_REQUEST_TIMEOUT,
    ERROR_BODY_EXCERPT,
    MAX_RETRIES,
)
from ..core.errors import (
    ExportError,
    PaginationProtocolError,
    RateLimitedError,
    ServerError,
    TransientTransportError,
    classify_status,
)
from ..observability.logger import get_logger
from ..rate_limit.backoff import BackoffPolicy, ExponentialBackoff
from ..rate_limit.gate import RateGate
from .urls import build_url

logger = get_logger(__name__)


@dataclass
class RequestStats:
    """Counters across all logical requests of one requester."""

    requests: int = 0  # HTTP attempts sent
    retries: int = 0
    rate_limited: int = 0  # 429 responses
    failures: int = 0  # logical requests that ended in an error

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def _parse_retry_after(headers: Any) -> float | None:
    try:
        value = headers.get("Retry-After")
        return float(value) if value is not None else None
    except (AttributeError, TypeError, ValueError):
        return None


class RetryingRequester:
    """Issues GET requests against the Mailgun API.

    Args:
        gate: Shared RateGate; every attempt is admitted through it
        api_key: Mailgun private API key (HTTP Basic auth as user "api")
        timeout: Total per-attempt timeout in seconds
        max_retries: Retries after the first attempt
        base_delay: Backoff base in seconds (doubled per attempt)
        backoff: Custom policy; overrides max_retries/base_delay
        retry_server_errors: Also retry 5xx responses
        session: Caller-owned aiohttp session (not closed by the requester)
        sleep: Injectable sleep used between attempts
    """

    def __init__(
        self,
        gate: RateGate,
        api_key: str,
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY,
        backoff: BackoffPolicy | None = None,
        retry_server_errors: bool = False,
        session: aiohttp.ClientSession | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.gate = gate
        self.api_key = api_key
        self.timeout = timeout
        self.backoff = backoff or ExponentialBackoff(base=base_delay, max_retries=max_retries)
        self.retry_server_errors = retry_server_errors
        self.stats = RequestStats()

        self._session = session
        self._owns_session = session is None
        self._sleep = sleep

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                auth=aiohttp.BasicAuth("api", self.api_key),
                headers={"Content-Type": "application/json"},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if this requester created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    async def __aenter__(self) -> "RetryingRequester":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _should_retry(self, error: ExportError) -> bool:
        if error.is_retryable:
            return True
        return self.retry_server_errors and isinstance(error, ServerError)

    async def fetch(self, url: str, params: Mapping[str, Any] | None = None) -> Any:
        """Perform one logical GET and return the parsed JSON body.

        Raises:
            ClientError: 4xx other than 429 (never retried)
            ServerError: 5xx (retried only with retry_server_errors)
            PaginationProtocolError: body is not JSON
            RateLimitedError / TransientTransportError: retries exhausted
        """
        max_attempts = self.backoff.max_attempts() + 1
        last_error: ExportError | None = None

        for attempt in range(1, max_attempts + 1):
            try:
                async with self.gate.admit():
                    return await self._attempt(url, params)
            except ExportError as e:
                last_error = e
                if isinstance(e, RateLimitedError):
                    self.stats.rate_limited += 1

                if not self._should_retry(e) or not self.backoff.should_retry(attempt):
                    break

                delay = self.backoff.next_delay(attempt)
                self.stats.retries += 1
                logger.warning(
                    f"Attempt {attempt}/{max_attempts} failed: {e}. Retrying in {delay:.2f}s",
                    extra={"url": url, "attempt": attempt, "error_type": type(e).__name__},
                )
                # Sleep outside the gate so the slot is free while waiting
                await self._sleep(delay)

        assert last_error is not None
        self.stats.failures += 1
        logger.error(
            f"Request failed: {last_error}",
            extra={"url": build_url(url, params), "error_type": type(last_error).__name__},
        )
        raise last_error

    async def _attempt(self, url: str, params: Mapping[str, Any] | None) -> Any:
        session = await self._get_session()
        self.stats.requests += 1
        try:
            async with session.get(
                url,
                params=params,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                return await self._handle_response(resp, url)
        except asyncio.TimeoutError as e:
            raise TransientTransportError(
                f"Request timed out after {self.timeout}s",
                timeout_seconds=self.timeout,
                url=url,
            ) from e
        except (aiohttp.ClientConnectionError, aiohttp.ClientPayloadError, ConnectionResetError) as e:
            raise TransientTransportError(f"Transport error: {e}", url=url) from e
        except aiohttp.ClientError as e:
            raise ExportError(f"HTTP client error: {e}", url=url) from e

    async def _handle_response(self, resp: aiohttp.ClientResponse, url: str) -> Any:
        status = resp.status
        if status >= 400:
            body = await resp.text()
            retry_after = _parse_retry_after(resp.headers) if status == 429 else None
            raise classify_status(
                status,
                url=url,
                body=body[:ERROR_BODY_EXCERPT],
                retry_after=retry_after,
            )

        try:
            return await resp.json(content_type=None)
        except ValueError as e:
            raise PaginationProtocolError(
                f"Response is not valid JSON: {url}",
                body_type="text",
                url=url,
            ) from e
