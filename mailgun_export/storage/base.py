"""Base protocol and data classes for export backends."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable


@dataclass
class SaveResult:
    """Result of writing one data set."""

    files: list[Path] = field(default_factory=list)
    records: int = 0
    skipped: list[str] = field(default_factory=list)  # formats not written, with reason

    @property
    def has_files(self) -> bool:
        return len(self.files) > 0


@runtime_checkable
class Exporter(Protocol):
    """Protocol for export backends.

    The protocol is runtime checkable, so you can use isinstance() to verify.
    """

    @property
    def name(self) -> str:
        """Backend name (e.g., 'file')."""
        ...

    def export(
        self,
        data: Any,
        resource: str,
        fmt: str = "json",
        timestamp: str | None = None,
    ) -> SaveResult:
        """Write `data` for `resource` in the requested format(s).

        Args:
            data: Records (list) or a structured document (dict)
            resource: Resource type name used in file names
            fmt: 'json', 'csv' or 'both'
            timestamp: Shared run timestamp; generated when omitted

        Returns:
            SaveResult listing the files written
        """
        ...

    def create_summary_report(self, results: dict[str, Any], timestamp: str | None = None) -> Path:
        """Write the run summary and return its path."""
        ...
