"""Shared types for the export pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class ResourceType(str, Enum):
    """Exportable Mailgun resource."""

    EVENTS = "events"
    SUPPRESSIONS = "suppressions"
    DOMAINS = "domains"
    LISTS = "lists"
    TEMPLATES = "templates"
    STATS = "stats"


class ExportFormat(str, Enum):
    """Output file format."""

    JSON = "json"
    CSV = "csv"
    BOTH = "both"


class ExportStatus(str, Enum):
    """Outcome of a single resource export."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class ResourceExportResult:
    """Result of exporting one resource type.

    A failed export still produces a result with zero records so sibling
    resources can be reported side by side.
    """

    resource: ResourceType
    record_count: int = 0
    files: list[Path] = field(default_factory=list)
    duration_seconds: float = 0.0
    status: ExportStatus = ExportStatus.SUCCESS
    errors: list[str] = field(default_factory=list)
    summary: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == ExportStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for the summary report."""
        return {
            "resource": self.resource.value,
            "status": self.status.value,
            "record_count": self.record_count,
            "files": [str(p) for p in self.files],
            "duration_seconds": round(self.duration_seconds, 2),
            "errors": self.errors,
            "summary": self.summary,
        }
