"""
Record and signal types flowing through the capture pipeline.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True)
class LogRecord:
    """A single forwarded record. Consumed once by the sink."""

    level: LogLevel
    message: str

    def to_payload(self) -> dict[str, str]:
        return {"level": self.level.value, "message": self.message}


def _now_ms() -> float:
    return time.time() * 1000


# =============================================================================
# Host Signals
# =============================================================================


@dataclass
class SignalEvent:
    """Event-like metadata attached to synthesized error payloads."""

    type: str
    timestamp: float = field(default_factory=_now_ms)


@dataclass
class ErrorSignal:
    """An uncaught error delivered by the host."""

    message: str | None = None
    filename: str | None = None
    lineno: int | None = None
    colno: int | None = None
    error: BaseException | None = None
    type: str = "error"
    timestamp: float = field(default_factory=_now_ms)

    @property
    def location(self) -> str | None:
        if not self.filename:
            return None
        parts = [str(p) for p in (self.filename, self.lineno, self.colno) if p is not None]
        return ":".join(parts)


@dataclass
class RejectionSignal:
    """An unhandled asynchronous failure delivered by the host."""

    reason: Any = None
    type: str = "unhandledrejection"
    timestamp: float = field(default_factory=_now_ms)
