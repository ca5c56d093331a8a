"""
Process-level state shared by the capture pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass
class BridgeContext:
    """
    Owns the mutable state of one bridge.

    Attributes:
        installed: Set once by the first successful install
        dedup_cache: ``"{level}:{message}"`` -> last accepted timestamp (ms)
        original_handlers: Entry-point name -> pre-interception callable
    """

    installed: bool = False
    dedup_cache: dict[str, float] = field(default_factory=dict)
    original_handlers: dict[str, Callable[..., Any]] = field(default_factory=dict)

    def reset(self) -> None:
        """Return to the pristine state. Test support only."""
        self.installed = False
        self.dedup_cache.clear()
        self.original_handlers.clear()
