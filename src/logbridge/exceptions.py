"""
logbridge exception hierarchy.

None of these ever reach the instrumented application from the capture path:
transports raise them, the dispatcher and interceptors swallow them.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class LogBridgeError(Exception):
    """Root of all logbridge errors."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.details = details or {}


class SinkError(LogBridgeError):
    """The sink transport rejected or failed to deliver a record."""

    def __init__(self, message: str, *, status_code: int | None = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)
        self.status_code = status_code


class HostUnavailableError(LogBridgeError):
    """The host environment does not provide a requested capability."""

    def __init__(self, capability: str) -> None:
        super().__init__(f"Host capability unavailable: {capability}", details={"capability": capability})
        self.capability = capability
