"""
Internal logging for logbridge.

The bridge reports its own lifecycle (install, skipped hooks, shutdown)
through structlog. These loggers are never captured by the bridge itself.

Library: structlog + orjson for JSON rendering.
"""

from .core import BRIDGE_LOGGER_PREFIX, configure_logging, get_logger

__all__ = ["BRIDGE_LOGGER_PREFIX", "configure_logging", "get_logger"]
