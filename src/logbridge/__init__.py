"""
logbridge: diagnostic capture bridge.

Intercepts console-style logging calls and uncaught errors, turns arbitrary
values into bounded, cycle-safe text, suppresses repeated bursts and forwards
``{level, message}`` records to an external sink without ever failing the
host application.

Usage:
    from logbridge import install_log_bridge

    bridge = install_log_bridge()
    bridge.console.warn("retrying connection")
"""

from .bridge import LogBridge, build_sink, install_log_bridge, reset_default_bridge
from .context import BridgeContext
from .host import ProcessHost
from .transports import CallableSink, HttpSink, LogSink, NullSink
from .types import LogLevel, LogRecord

__all__ = [
    "BridgeContext",
    "CallableSink",
    "HttpSink",
    "LogBridge",
    "LogLevel",
    "LogRecord",
    "LogSink",
    "NullSink",
    "ProcessHost",
    "build_sink",
    "install_log_bridge",
    "reset_default_bridge",
]
