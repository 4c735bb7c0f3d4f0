"""Sliding-window rate gate.

Admits outbound requests so that:
- at most `requests_per_minute` admissions fall in any trailing 60s window
- at most `max_concurrency` requests are in flight at once

The gate never rejects a request, it only delays it.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable

from ..config.constants import DEFAULT_MAX_CONCURRENCY, DEFAULT_RATE_LIMIT, RATE_WINDOW_SECONDS
from ..core.errors import ConfigurationError
from ..observability.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Admission:
    """Ticket handed out by RateGate.admit()."""

    admitted_at: float
    waited: float


@dataclass
class RateGate:
    """Rolling-window rate limiter with a bounded concurrency pool.

    One instance is shared by every request of a pipeline run.

    Usage:
        gate = RateGate(requests_per_minute=300, max_concurrency=10)

        async with gate.admit():
            await session.get(url)
    """

    # Configuration
    requests_per_minute: int = DEFAULT_RATE_LIMIT
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    window_seconds: float = RATE_WINDOW_SECONDS

    # Injectable for tests
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep

    # Statistics
    total_admitted: int = field(default=0, init=False)
    total_wait_time: float = field(default=0.0, init=False)

    # State
    _window: deque[float] = field(default_factory=deque, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _slots: asyncio.Semaphore = field(init=False, repr=False)
    _in_flight: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.requests_per_minute <= 0:
            raise ConfigurationError(
                f"requests_per_minute must be positive, got {self.requests_per_minute}"
            )
        if self.max_concurrency <= 0:
            raise ConfigurationError(
                f"max_concurrency must be positive, got {self.max_concurrency}"
            )
        self._slots = asyncio.Semaphore(self.max_concurrency)

    def _prune(self, now: float) -> None:
        while self._window and now - self._window[0] >= self.window_seconds:
            self._window.popleft()

    async def _wait_for_quota(self) -> float:
        """Block until the window has room, then record an admission."""
        waited = 0.0
        async with self._lock:
            while True:
                now = self.clock()
                self._prune(now)
                if len(self._window) < self.requests_per_minute:
                    self._window.append(now)
                    break

                delay = self._window[0] + self.window_seconds - now
                logger.debug(
                    "Rate window full, waiting",
                    extra={"wait_seconds": round(delay, 3), "window_size": len(self._window)},
                )
                await self.sleep(delay)
                waited += delay

        self.total_admitted += 1
        self.total_wait_time += waited
        return waited

    @asynccontextmanager
    async def admit(self) -> AsyncIterator[Admission]:
        """Wait for a concurrency slot and window quota.

        The slot is held for the body of the `async with` block and is
        released on exit, including on error or cancellation.
        """
        async with self._slots:
            waited = await self._wait_for_quota()
            self._in_flight += 1
            try:
                yield Admission(admitted_at=self.clock(), waited=waited)
            finally:
                self._in_flight -= 1

    @property
    def in_flight(self) -> int:
        return self._in_flight

    def requests_in_window(self) -> int:
        """Admissions within the trailing window as of now."""
        self._prune(self.clock())
        return len(self._window)

    def status(self) -> dict[str, Any]:
        """Snapshot for status reporting."""
        used = self.requests_in_window()
        return {
            "requests_in_last_minute": used,
            "requests_remaining": max(0, self.requests_per_minute - used),
            "rate_limit_per_minute": self.requests_per_minute,
            "in_flight": self._in_flight,
            "max_concurrency": self.max_concurrency,
            "total_admitted": self.total_admitted,
            "total_wait_time": round(self.total_wait_time, 3),
        }
