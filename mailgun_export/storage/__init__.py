"""Export backends."""

from .base import Exporter, SaveResult
from .file_exporter import FileExporter, flatten_record

__all__ = [
    "Exporter",
    "SaveResult",
    "FileExporter",
    "flatten_record",
]
