"""Core types and errors for the export pipeline."""

from .errors import (
    ClientError,
    ConfigurationError,
    ExportError,
    HttpError,
    PaginationProtocolError,
    RateLimitedError,
    ServerError,
    TransientTransportError,
    classify_status,
)
from .types import ExportFormat, ExportStatus, ResourceExportResult, ResourceType

__all__ = [
    # Errors
    "ExportError",
    "ConfigurationError",
    "TransientTransportError",
    "HttpError",
    "RateLimitedError",
    "ClientError",
    "ServerError",
    "PaginationProtocolError",
    "classify_status",
    # Types
    "ResourceType",
    "ExportFormat",
    "ExportStatus",
    "ResourceExportResult",
]
