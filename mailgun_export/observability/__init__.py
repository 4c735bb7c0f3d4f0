"""Observability infrastructure for the exporter.

Provides structured logging and metrics collection.
"""

from .logger import LogContext, get_logger, log_context, setup_logging
from .metrics import ExportMetrics, MetricsCollector, ResourceMetrics

__all__ = [
    "LogContext",
    "get_logger",
    "log_context",
    "setup_logging",
    "ExportMetrics",
    "MetricsCollector",
    "ResourceMetrics",
]
