"""
The capture pipeline: interception -> formatting -> filtering -> dispatch.
"""

from __future__ import annotations

import atexit
import logging
from typing import Any, Sequence

from .config import BridgeSettings, SinkSettings, settings as app_settings
from .context import BridgeContext
from .dedup import Clock, DedupFilter, NoiseFilter, monotonic_ms
from .dispatch import SinkDispatcher
from .formatter import MessageFormatter
from .host import HostEnvironment, ProcessHost
from .interceptors import BridgeLogHandler, CapturedConsole, InterceptionManager
from .logging import configure_logging, get_logger
from .transports import HttpSink, LogSink, NullSink
from .types import LogLevel

logger = get_logger("bridge")


def build_sink(sink_settings: SinkSettings) -> LogSink:
    """The sink described by settings; records are dropped when no URL is set."""
    if not sink_settings.url:
        return NullSink()
    return HttpSink(
        sink_settings.url,
        timeout_seconds=sink_settings.timeout_seconds,
        headers=sink_settings.headers,
    )


class LogBridge:
    """
    Composes the pipeline over one explicit :class:`BridgeContext`.

    Args:
        settings: Pipeline limits and filters (defaults from the environment)
        sink: Destination of forwarded records
        context: Shared state; a fresh one when omitted
        clock: Millisecond clock used by the dedup window
    """

    def __init__(
        self,
        settings: BridgeSettings | None = None,
        sink: LogSink | None = None,
        *,
        context: BridgeContext | None = None,
        clock: Clock = monotonic_ms,
    ):
        self.settings = settings or BridgeSettings()
        self.context = context or BridgeContext()
        self.formatter = MessageFormatter(
            max_length=self.settings.max_message_length,
            max_depth=self.settings.max_depth,
            devtool_label=self.settings.devtool_label,
        )
        self.noise = NoiseFilter(self.settings.ignore_patterns)
        self.dedup = DedupFilter(self.context, window_ms=self.settings.dedup_window_ms, clock=clock)
        self.dispatcher = SinkDispatcher(sink or NullSink())
        self.interceptor = InterceptionManager(
            self.context,
            self.capture,
            devtool_event=self.settings.devtool_event,
            after_error=self.flush,
        )
        self._stdlib_handler: BridgeLogHandler | None = None
        self._capturing = False
        self._exit_hook = False

    @property
    def console(self) -> CapturedConsole:
        return self.interceptor.console

    def install(self, host: HostEnvironment | None) -> bool:
        installed = self.interceptor.install(host)
        if installed and self.settings.capture_stdlib:
            self._stdlib_handler = BridgeLogHandler(self.capture)
            logging.getLogger().addHandler(self._stdlib_handler)
        if installed and not self._exit_hook:
            # Records sent from a daemon loop are lost once the interpreter exits.
            atexit.register(self.close)
            self._exit_hook = True
        return installed

    def capture(self, level: LogLevel | str, args: Sequence[Any]) -> None:
        """Format, filter and forward one intercepted call. Never raises."""
        if self._capturing:
            return  # the pipeline itself logged something
        self._capturing = True
        try:
            message = self.formatter.format(args)
            if not message or self.noise.is_noise(message):
                return
            if not self.dedup.should_forward(level, message):
                return
            self.dispatcher.dispatch(level, message)
        except Exception:
            pass  # Fail silently to avoid breaking the application
        finally:
            self._capturing = False

    def flush(self) -> None:
        """Wait up to ``flush_timeout_seconds`` for records sent off-loop."""
        self.dispatcher.flush(timeout=self.settings.flush_timeout_seconds)

    def close(self) -> None:
        if self._exit_hook:
            atexit.unregister(self.close)
            self._exit_hook = False
        if self._stdlib_handler is not None:
            logging.getLogger().removeHandler(self._stdlib_handler)
            self._stdlib_handler = None
        self.dispatcher.close(timeout=self.settings.flush_timeout_seconds)
        logger.debug("log_bridge_closed")


# =============================================================================
# Process-wide default
# =============================================================================

_default_bridge: LogBridge | None = None


def install_log_bridge(
    host: HostEnvironment | None = None,
    sink: LogSink | None = None,
    settings: BridgeSettings | None = None,
) -> LogBridge:
    """
    Install the process-wide bridge once; later calls return the same bridge.

    Without explicit arguments the sink and limits come from ``LB_SINK_*`` and
    ``LB_BRIDGE_*`` settings, and the host is the running interpreter.
    """
    global _default_bridge

    if _default_bridge is not None:
        return _default_bridge

    configure_logging(level=app_settings.logging.level.value, fmt=app_settings.logging.format.value)
    bridge_settings = settings or app_settings.bridge
    bridge = LogBridge(bridge_settings, sink or build_sink(app_settings.sink))
    if host is None:
        host = ProcessHost(
            logging.getLogger(bridge_settings.console_logger),
            capture_threads=bridge_settings.capture_threads,
        )
    bridge.install(host)
    _default_bridge = bridge
    return bridge


def reset_default_bridge() -> None:
    """Close and forget the process-wide bridge. Test support only."""
    global _default_bridge

    if _default_bridge is not None:
        _default_bridge.close()
    _default_bridge = None
