"""Structured logger for the export pipeline.

Provides context-aware logging with JSON, pretty or rich output.

Usage:
    from mailgun_export.observability import get_logger, log_context

    logger = get_logger(__name__)

    with log_context(resource="events", domain="mg.example.com"):
        logger.info("Fetching events", extra={"page": 3})
        # Output: {"timestamp": "...", "resource": "events", "domain": "...", "message": "...", "page": 3}
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "mailgun_export"

# Attributes every LogRecord carries; anything else came in via `extra`.
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)


@dataclass
class LogContext:
    """Context for structured logging.

    Attributes are automatically included in all log messages
    within this context.
    """

    resource: str | None = None
    domain: str | None = None
    operation: str | None = None
    correlation_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, excluding None values."""
        return {k: v for k, v in asdict(self).items() if v is not None}


_log_context: contextvars.ContextVar[LogContext] = contextvars.ContextVar(
    "log_context",
    default=LogContext(),
)


class _ContextManager:
    """Context manager for setting log context."""

    def __init__(self, **kwargs: Any) -> None:
        unknown = set(kwargs) - {f.name for f in fields(LogContext)}
        if unknown:
            raise TypeError(f"Unknown log context fields: {sorted(unknown)}")
        self.kwargs = kwargs
        self.token: contextvars.Token[LogContext] | None = None

    def __enter__(self) -> LogContext:
        current = _log_context.get()
        merged = current.to_dict()
        merged.update({k: v for k, v in self.kwargs.items() if v is not None})
        new_context = LogContext(**merged)
        self.token = _log_context.set(new_context)
        return new_context

    def __exit__(self, *args: Any) -> None:
        if self.token is not None:
            _log_context.reset(self.token)


def log_context(**kwargs: Any) -> _ContextManager:
    """Create a context manager for setting log context.

    Args:
        **kwargs: Context fields to set (resource, domain, operation, correlation_id)

    Example:
        with log_context(resource="templates"):
            logger.info("Fetching template versions")
    """
    return _ContextManager(**kwargs)


def current_context() -> LogContext:
    """Return the log context active in this task."""
    return _log_context.get()


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


class StructuredFormatter(logging.Formatter):
    """JSON formatter with context support."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_log_context.get().to_dict())
        entry.update(_extra_fields(record))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


class PrettyFormatter(logging.Formatter):
    """Human-readable formatter for plain terminals."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True) -> None:
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        ctx = _log_context.get()

        prefix = ""
        if ctx.resource:
            prefix += f"[{ctx.resource}] "
        if ctx.domain:
            prefix += f"[{ctx.domain}] "

        timestamp = datetime.now().strftime("%H:%M:%S")
        level = record.levelname[:4]
        if self.use_color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        extras = [f"{k}={v}" for k, v in _extra_fields(record).items()]
        extra_str = " | " + ", ".join(extras) if extras else ""

        formatted = f"{timestamp} {level} {prefix}{record.getMessage()}{extra_str}"
        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)
        return formatted


def setup_logging(
    level: int = logging.INFO,
    json_format: bool = False,
    quiet: bool = False,
    console: Console | None = None,
) -> logging.Logger:
    """Set up logging for the exporter.

    Safe to call more than once; handlers are replaced each time.

    Args:
        level: Logging level (default: INFO)
        json_format: Use JSON lines on stderr
        quiet: Suppress all output except errors
        console: Route records through a rich console (ignored with json_format)

    Returns:
        The package root logger
    """
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.handlers.clear()

    handler: logging.Handler
    if json_format:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(StructuredFormatter())
    elif console is not None:
        handler = RichHandler(console=console, show_path=False, rich_tracebacks=True, markup=False)
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(PrettyFormatter(use_color=sys.stderr.isatty()))

    handler.setLevel(logging.ERROR if quiet else level)
    root.addHandler(handler)

    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    return root


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package namespace.

    Does not configure handlers; call setup_logging() from the entry point.
    """
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
