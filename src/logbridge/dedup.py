"""
Burst suppression for forwarded records.
"""

from __future__ import annotations

import re
import time
from typing import Callable, Iterable

from .config.bridge import DEFAULT_IGNORE_PATTERNS
from .context import BridgeContext
from .types import LogLevel

DEDUPE_WINDOW_MS = 1500

Clock = Callable[[], float]


def monotonic_ms() -> float:
    return time.monotonic() * 1000


class DedupFilter:
    """
    Drops a ``(level, message)`` pair seen again within a sliding window.

    Stale entries are swept on every call instead of by a background task.
    """

    def __init__(self, context: BridgeContext, *, window_ms: float = DEDUPE_WINDOW_MS, clock: Clock = monotonic_ms):
        self._cache = context.dedup_cache
        self.window_ms = window_ms
        self._clock = clock

    def should_forward(self, level: LogLevel | str, message: str) -> bool:
        now = self._clock()
        for key, ts in list(self._cache.items()):
            if now - ts > self.window_ms:
                del self._cache[key]

        key = f"{LogLevel(level).value}:{message}"
        previous = self._cache.get(key)
        if previous is not None and now - previous <= self.window_ms:
            return False

        self._cache[key] = now
        return True


class NoiseFilter:
    """Denylist of messages that never indicate a real failure."""

    def __init__(self, patterns: Iterable[str] = DEFAULT_IGNORE_PATTERNS):
        self._patterns = [re.compile(p, re.IGNORECASE | re.DOTALL) for p in patterns]

    def is_noise(self, message: str) -> bool:
        return any(p.search(message) for p in self._patterns)
