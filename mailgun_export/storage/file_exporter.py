"""JSON/CSV file export backend.

Files are named `<prefix>_<resource>_<YYYY-MM-DD_HH-MM-SS>.<ext>` inside
the output directory. JSON documents are wrapped in an envelope:

    {"exported_at": "...", "data_type": "events", "total_records": 2, "data": [...]}

CSV is only written for list data; nested objects are flattened with `_`
separators.
"""

import json
import os
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pandas as pd

from ..config.constants import (
    CSV_FLATTEN_DEPTH,
    DEFAULT_OUTPUT_DIR,
    EXPORT_FILE_PREFIX,
    TIMESTAMP_FORMAT,
)
from ..core.types import ExportFormat
from ..observability.logger import get_logger
from .base import SaveResult

logger = get_logger(__name__)


def flatten_record(record: dict[str, Any], max_depth: int = CSV_FLATTEN_DEPTH) -> dict[str, Any]:
    """Flatten nested dicts into `parent_child` keys.

    Lists are JSON-encoded, None becomes "" and anything nested deeper
    than `max_depth` is JSON-encoded under its prefix.
    """
    flat: dict[str, Any] = {}

    def _walk(obj: dict[str, Any], prefix: str, depth: int) -> None:
        for key, value in obj.items():
            name = f"{prefix}{key}"
            if value is None:
                flat[name] = ""
            elif isinstance(value, (list, tuple)):
                flat[name] = json.dumps(value, default=str, ensure_ascii=False)
            elif isinstance(value, dict):
                if depth + 1 >= max_depth:
                    flat[name] = json.dumps(value, default=str, ensure_ascii=False)
                else:
                    _walk(value, f"{name}_", depth + 1)
            else:
                flat[name] = value

    _walk(record, "", 0)
    return flat


@dataclass
class FileExporter:
    """Writes export files to a local directory.

    Usage:
        exporter = FileExporter(Path("./exports"))
        result = exporter.export(events, "events", "both")
    """

    output_dir: Path = DEFAULT_OUTPUT_DIR
    prefix: str = EXPORT_FILE_PREFIX

    def __post_init__(self) -> None:
        self.output_dir = Path(self.output_dir)

    @property
    def name(self) -> str:
        return "file"

    @staticmethod
    def make_timestamp(now: datetime | None = None) -> str:
        return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)

    def generate_file_name(self, resource: str, ext: str, timestamp: str | None = None) -> str:
        return f"{self.prefix}_{resource}_{timestamp or self.make_timestamp()}.{ext}"

    def _ensure_dir(self) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _atomic_write(self, path: Path, write: Any) -> None:
        """Write to a temp file then rename over `path`."""
        tmp_file = path.with_suffix(path.suffix + ".tmp")
        try:
            write(tmp_file)
            os.replace(tmp_file, path)
        except OSError:
            if tmp_file.exists():
                tmp_file.unlink()
            raise

    def export_json(self, data: Any, resource: str, timestamp: str | None = None) -> Path:
        self._ensure_dir()
        path = self.output_dir / self.generate_file_name(resource, "json", timestamp)
        total = len(data) if isinstance(data, list) else 1
        envelope = {
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "data_type": resource,
            "total_records": total,
            "data": data,
        }

        def _write(target: Path) -> None:
            with open(target, "w", encoding="utf-8") as f:
                json.dump(envelope, f, indent=2, default=str, ensure_ascii=False)

        self._atomic_write(path, _write)
        logger.info(f"Exported {total} records to {path.name}", extra={"path": str(path)})
        return path

    def export_csv(self, data: Any, resource: str, timestamp: str | None = None) -> Path | None:
        """Write list data as CSV. Returns None when there is nothing tabular to write."""
        if not isinstance(data, list) or not data:
            logger.warning(f"No tabular data to export as CSV for {resource}")
            return None

        self._ensure_dir()
        path = self.output_dir / self.generate_file_name(resource, "csv", timestamp)
        rows = [flatten_record(r) if isinstance(r, dict) else {"value": r} for r in data]

        # Union of keys in first-seen order
        columns: dict[str, None] = {}
        for row in rows:
            columns.update(dict.fromkeys(row))
        df = pd.DataFrame(rows, columns=list(columns)).fillna("")

        self._atomic_write(path, lambda target: df.to_csv(target, index=False))
        logger.info(f"Exported {len(rows)} records to {path.name}", extra={"path": str(path)})
        return path

    def export(
        self,
        data: Any,
        resource: str,
        fmt: str | ExportFormat = ExportFormat.JSON,
        timestamp: str | None = None,
    ) -> SaveResult:
        fmt = ExportFormat(fmt)
        timestamp = timestamp or self.make_timestamp()
        result = SaveResult(records=len(data) if isinstance(data, list) else 1)

        if fmt in (ExportFormat.JSON, ExportFormat.BOTH):
            result.files.append(self.export_json(data, resource, timestamp))

        if fmt in (ExportFormat.CSV, ExportFormat.BOTH):
            csv_path = self.export_csv(data, resource, timestamp)
            if csv_path is not None:
                result.files.append(csv_path)
            else:
                result.skipped.append("csv: no tabular data")

        return result

    def create_summary_report(self, results: dict[str, Any], timestamp: str | None = None) -> Path:
        """Write `mailgun_export_summary_<ts>.json` from per-resource results."""
        summary = {
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "total_data_types": len(results),
            "exports": {
                name: {
                    "status": r.get("status"),
                    "record_count": r.get("record_count", 0),
                    "files": r.get("files", []),
                    "duration_seconds": r.get("duration_seconds"),
                    "errors": r.get("errors", []),
                    "summary": r.get("summary", {}),
                }
                for name, r in results.items()
            },
        }
        path = self.export_json(summary, "export_summary", timestamp)
        logger.info(f"Summary report created: {path.name}")
        return path

    def get_export_stats(self) -> dict[str, Any]:
        """Count export files by resource and format, plus total size."""
        by_type: Counter[str] = Counter()
        by_format: Counter[str] = Counter({"json": 0, "csv": 0})
        total_size = 0
        files = sorted(self.output_dir.glob(f"{self.prefix}_*")) if self.output_dir.exists() else []

        for path in files:
            if not path.is_file() or path.suffix == ".tmp":
                continue
            total_size += path.stat().st_size
            # <prefix>_<resource>_<date>_<time>.<ext>; resource may contain underscores
            parts = path.stem[len(self.prefix) + 1 :].rsplit("_", 2)
            if len(parts) == 3:
                by_type[parts[0]] += 1
            by_format[path.suffix.lstrip(".")] += 1

        return {
            "total_files": sum(by_format.values()),
            "by_type": dict(by_type),
            "by_format": dict(by_format),
            "total_size": total_size,
            "total_size_mb": round(total_size / 1024 / 1024, 2),
        }
