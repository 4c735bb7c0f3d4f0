"""Metrics collection for export runs.

Tracks per-resource record counts, durations and error types, plus the
request counters reported by the requester.

Usage:
    from mailgun_export.observability import MetricsCollector

    metrics = MetricsCollector()

    with metrics.run() as run:
        with metrics.resource("events") as m:
            # ... fetch and export ...
            m.record_count = 1200

    print(run.to_summary())
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generator


@dataclass
class ResourceMetrics:
    """Metrics for one exported resource type."""

    resource: str
    record_count: int = 0
    duration_seconds: float = 0.0
    failed: bool = False
    error_type: str | None = None


@dataclass
class ExportMetrics:
    """Metrics for a single export run."""

    started_at: datetime
    ended_at: datetime | None = None

    resources: dict[str, ResourceMetrics] = field(default_factory=dict)
    errors_by_type: dict[str, int] = field(default_factory=dict)

    # Request counters, copied from the requester at the end of the run
    requests: int = 0
    retries: int = 0
    rate_limited: int = 0
    request_failures: int = 0

    @property
    def duration_seconds(self) -> float:
        """Total duration in seconds."""
        end = self.ended_at or datetime.now()
        return (end - self.started_at).total_seconds()

    @property
    def total_records(self) -> int:
        return sum(r.record_count for r in self.resources.values())

    @property
    def failed_resources(self) -> list[str]:
        return [name for name, r in self.resources.items() if r.failed]

    def record_error(self, error_type: str) -> None:
        """Count an error by its class name."""
        self.errors_by_type[error_type] = self.errors_by_type.get(error_type, 0) + 1

    def record_requests(self, requests: int, retries: int, rate_limited: int, failures: int) -> None:
        self.requests = requests
        self.retries = retries
        self.rate_limited = rate_limited
        self.request_failures = failures

    def complete(self) -> None:
        """Mark the run as complete."""
        self.ended_at = datetime.now()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/storage."""
        return {
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "duration_seconds": round(self.duration_seconds, 2),
            "total_records": self.total_records,
            "resources": {
                name: {
                    "record_count": r.record_count,
                    "duration_seconds": round(r.duration_seconds, 2),
                    "failed": r.failed,
                    "error_type": r.error_type,
                }
                for name, r in self.resources.items()
            },
            "errors_by_type": self.errors_by_type,
            "requests": self.requests,
            "retries": self.retries,
            "rate_limited": self.rate_limited,
            "request_failures": self.request_failures,
        }

    def to_summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "Export Summary",
            "=" * 40,
            f"Duration: {self.duration_seconds:.1f}s",
            f"Total records: {self.total_records}",
            f"Requests: {self.requests} (retries: {self.retries}, 429s: {self.rate_limited})",
        ]

        if self.resources:
            lines.append("")
            lines.append("Resources:")
            for name, r in self.resources.items():
                state = "FAILED" if r.failed else f"{r.record_count} records"
                lines.append(f"  {name}: {state} ({r.duration_seconds:.1f}s)")

        if self.errors_by_type:
            lines.append("")
            lines.append("Errors by Type:")
            for error_type, count in sorted(self.errors_by_type.items(), key=lambda x: -x[1]):
                lines.append(f"  {error_type}: {count}")

        return "\n".join(lines)


class MetricsCollector:
    """Collect and manage export metrics."""

    def __init__(self) -> None:
        self._current: ExportMetrics | None = None
        self._history: list[ExportMetrics] = []

    @property
    def current(self) -> ExportMetrics | None:
        """Get current run metrics."""
        return self._current

    @property
    def history(self) -> list[ExportMetrics]:
        """Get history of completed runs."""
        return self._history.copy()

    @contextmanager
    def run(self) -> Generator[ExportMetrics, None, None]:
        """Context manager for one export run."""
        self._current = ExportMetrics(started_at=datetime.now())
        try:
            yield self._current
        finally:
            self._current.complete()
            self._history.append(self._current)

    @contextmanager
    def resource(self, name: str) -> Generator[ResourceMetrics, None, None]:
        """Time one resource export.

        An exception escaping the block marks the resource as failed and is
        re-raised.
        """
        if self._current is None:
            raise RuntimeError("No active run. Use run() context manager first.")

        entry = ResourceMetrics(resource=name)
        self._current.resources[name] = entry
        start = time.monotonic()
        try:
            yield entry
        except Exception as e:
            entry.failed = True
            entry.error_type = type(e).__name__
            self._current.record_error(entry.error_type)
            raise
        finally:
            entry.duration_seconds = time.monotonic() - start

    def get_summary(self) -> str:
        """Get summary of current or last run."""
        if self._current:
            return self._current.to_summary()
        if self._history:
            return self._history[-1].to_summary()
        return "No runs recorded."
