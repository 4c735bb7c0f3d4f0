"""Backoff policies for request retries."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..config.constants import DEFAULT_BASE_DELAY, MAX_RETRIES


class BackoffPolicy(ABC):
    """Abstract base for backoff policies.

    A backoff policy determines how long to wait between retry attempts.
    """

    @abstractmethod
    def next_delay(self, attempt: int) -> float:
        """Calculate delay after a failed attempt.

        Args:
            attempt: The attempt that just failed (1-indexed)

        Returns:
            Delay in seconds before the next attempt
        """
        ...

    @abstractmethod
    def max_attempts(self) -> int:
        """Maximum number of retries allowed (excluding the first attempt)."""
        ...

    def should_retry(self, attempt: int) -> bool:
        """Check if another attempt may follow attempt number `attempt`."""
        return attempt <= self.max_attempts()


@dataclass
class ExponentialBackoff(BackoffPolicy):
    """Exponential backoff without jitter.

    delay = base * (multiplier ^ (attempt - 1))

    Example with defaults:
        attempt 1 failed: wait 1s
        attempt 2 failed: wait 2s
        attempt 3 failed: wait 4s
        attempt 4 failed: give up
    """

    base: float = DEFAULT_BASE_DELAY
    multiplier: float = 2.0
    max_retries: int = MAX_RETRIES

    def __post_init__(self) -> None:
        if self.base < 0 or self.max_retries < 0:
            raise ValueError("base and max_retries must be non-negative")

    def next_delay(self, attempt: int) -> float:
        return self.base * (self.multiplier ** (attempt - 1))

    def max_attempts(self) -> int:
        return self.max_retries


@dataclass
class NoBackoff(BackoffPolicy):
    """Retry immediately. Useful in tests."""

    max_retries: int = MAX_RETRIES

    def next_delay(self, attempt: int) -> float:
        return 0.0

    def max_attempts(self) -> int:
        return self.max_retries
