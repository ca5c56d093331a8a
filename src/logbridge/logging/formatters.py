"""
Console rendering for internal log events.
"""

from __future__ import annotations

from datetime import datetime, timezone

from structlog.typing import EventDict


class ConsoleFormatter:
    """Fixed-width, single-line console rendering."""

    _RESET = "\x1b[0m"
    _DIM = "\x1b[2m"
    _LEVEL_COLORS = {
        "DEBUG": "\x1b[36m",
        "INFO": "\x1b[32m",
        "WARNING": "\x1b[33m",
        "ERROR": "\x1b[31m",
        "CRITICAL": "\x1b[1;31m",
    }

    EXCLUDED_KEYS = {"level", "event", "logger", "timestamp"}
    TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
    LEVEL_WIDTH = 8
    SEPARATOR = " | "

    @classmethod
    def _format_timestamp(cls, raw_timestamp: str | None) -> str:
        if raw_timestamp:
            try:
                dt = datetime.fromisoformat(raw_timestamp.replace("Z", "+00:00"))
                if dt.tzinfo is None:
                    dt = dt.replace(tzinfo=timezone.utc)
                return dt.astimezone().strftime(cls.TIMESTAMP_FORMAT)
            except (ValueError, TypeError):
                pass
        return datetime.now().strftime(cls.TIMESTAMP_FORMAT)

    @classmethod
    def format(cls, event_dict: EventDict, *, use_color: bool = True) -> str:
        """Format an event dict into an aligned string."""
        level_upper = str(event_dict.get("level", "info")).upper()
        message = str(event_dict.get("event", ""))

        extras = [f"{k}={v}" for k, v in event_dict.items() if k not in cls.EXCLUDED_KEYS]
        if extras:
            extra_text = " ".join(extras)
            message = f"{message} {cls._DIM}{extra_text}{cls._RESET}" if use_color else f"{message} {extra_text}"

        level_text = f"{level_upper:>{cls.LEVEL_WIDTH}}"
        color = cls._LEVEL_COLORS.get(level_upper)
        if use_color and color:
            level_text = f"{color}{level_text}{cls._RESET}"

        return cls.SEPARATOR.join(
            [
                cls._format_timestamp(event_dict.get("timestamp")),
                level_text,
                str(event_dict.get("logger", "logbridge")),
                message,
            ]
        )
