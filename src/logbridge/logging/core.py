"""
Core logging configuration and initialization logic.

Bridge loggers carry their own processor chain instead of reading the global
structlog configuration, so a host application's structlog setup (or its
absence) never routes bridge events onto the host's stdout.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import structlog
from structlog.typing import EventDict, WrappedLogger

from .sinks import StdioSink, LogFormat

BRIDGE_LOGGER_PREFIX = "logbridge"

# =============================================================================
# Global State
# =============================================================================

_sink: StdioSink | None = StdioSink()
_min_level: int = logging.INFO

_METHOD_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "msg": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "exception": logging.ERROR,
    "critical": logging.CRITICAL,
}


# =============================================================================
# Structlog Processors
# =============================================================================


def filter_by_level(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Drop events below the configured level."""
    if _METHOD_LEVELS.get(method_name, logging.INFO) < _min_level:
        raise structlog.DropEvent
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO 8601 timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_logger_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Move the bound `_name` to `logger`."""
    event_dict["logger"] = event_dict.pop("_name", BRIDGE_LOGGER_PREFIX)
    return event_dict


def sink_renderer(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
    """Render to the configured sink. Returns empty to suppress default output."""
    if _sink is not None:
        try:
            _sink.emit(event_dict)
        except Exception:
            pass  # Never let our own diagnostics break the host
    return ""


class _NopFile:
    def write(self, s: str) -> None:
        pass

    def flush(self) -> None:
        pass


class SilentPrintLoggerFactory:
    """Logger factory that returns a logger writing to nowhere."""

    _file = _NopFile()

    def __call__(self, *args: Any) -> structlog.PrintLogger:
        return structlog.PrintLogger(file=self._file)


_PROCESSORS = [
    filter_by_level,
    structlog.processors.add_log_level,
    add_timestamp,
    add_logger_name,
    structlog.processors.format_exc_info,
    sink_renderer,
]


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger scoped under the bridge namespace."""
    if not name:
        name = BRIDGE_LOGGER_PREFIX
    elif not name.startswith(BRIDGE_LOGGER_PREFIX):
        name = f"{BRIDGE_LOGGER_PREFIX}.{name}"
    return structlog.wrap_logger(
        SilentPrintLoggerFactory()(),
        processors=_PROCESSORS,
        wrapper_class=structlog.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=False,
        _name=name,
    )


# =============================================================================
# Configuration Logic
# =============================================================================


def configure_logging(*, level: str = "INFO", fmt: str = "console", stream: Any = None) -> None:
    """
    Configure the bridge's internal logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        fmt: Output format (console, json)
        stream: Output stream (default: stderr at write time)
    """
    global _sink, _min_level

    log_format: LogFormat = "json" if fmt.lower() == "json" else "console"
    _sink = StdioSink(fmt=log_format, stream=stream)
    _min_level = getattr(logging, level.upper(), logging.INFO)
