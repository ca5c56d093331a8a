"""
Interceptors for capturing console calls, uncaught errors and stdlib logs.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Mapping
from typing import Any, Callable, Iterator, Sequence

from .context import BridgeContext
from .host import ConsoleMethod, HostEnvironment
from .logging import BRIDGE_LOGGER_PREFIX, get_logger
from .types import ErrorSignal, LogLevel, RejectionSignal, SignalEvent

logger = get_logger("interceptors")

Route = Callable[[LogLevel, Sequence[Any]], None]

CONSOLE_LEVEL_MAP: tuple[tuple[str, LogLevel], ...] = (
    ("debug", LogLevel.DEBUG),
    ("info", LogLevel.INFO),
    ("warning", LogLevel.WARN),
    ("warn", LogLevel.WARN),
    ("error", LogLevel.ERROR),
    ("exception", LogLevel.ERROR),
    ("critical", LogLevel.ERROR),
    ("log", LogLevel.INFO),
    ("print", LogLevel.INFO),
)

UNHANDLED_ERROR_MESSAGE = "Unhandled error"
UNHANDLED_REJECTION_MESSAGE = "Unhandled promise rejection"


class CapturedConsole(Mapping[str, ConsoleMethod]):
    """
    Wrapped console entry points, reachable as attributes or by name.

    Each wrapper calls the original first, returns its result unchanged,
    then hands ``(level, args)`` to the pipeline.
    """

    def __init__(self) -> None:
        self._methods: dict[str, ConsoleMethod] = {}

    def wrap(self, name: str, original: ConsoleMethod, level: LogLevel, route: Route) -> None:
        @functools.wraps(original)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            result = original(*args, **kwargs)
            route(level, args)
            return result

        self._methods[name] = wrapper

    def __getitem__(self, name: str) -> ConsoleMethod:
        return self._methods[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._methods)

    def __len__(self) -> int:
        return len(self._methods)

    def __getattr__(self, name: str) -> ConsoleMethod:
        try:
            return self.__dict__["_methods"][name]
        except KeyError:
            raise AttributeError(name) from None


# =============================================================================
# Interception Manager
# =============================================================================


def _console_entry_points(console: Any) -> list[tuple[str, ConsoleMethod, LogLevel]]:
    if not isinstance(console, Mapping):
        return []
    entry_points = []
    for name, level in CONSOLE_LEVEL_MAP:
        original = console.get(name)
        if callable(original):
            entry_points.append((name, original, level))
    return entry_points


def _offers_signal_hooks(host: Any) -> bool:
    return callable(getattr(host, "add_error_listener", None)) or callable(
        getattr(host, "add_rejection_listener", None)
    )


class InterceptionManager:
    """
    Installs console wrappers and signal listeners once per context.

    Args:
        context: Shared install state
        route: Receives ``(level, args)`` for every intercepted call
        devtool_event: Hot-reload channel event carrying errors
        after_error: Called after an uncaught error has been routed, while the
            failing thread or process is still alive
    """

    def __init__(
        self,
        context: BridgeContext,
        route: Route,
        *,
        devtool_event: str = "vite:error",
        after_error: Callable[[], None] | None = None,
    ):
        self.context = context
        self.route = route
        self.devtool_event = devtool_event
        self.after_error = after_error
        self.console = CapturedConsole()

    def install(self, host: HostEnvironment | None) -> bool:
        """Returns True only for the call that actually installed."""
        if self.context.installed or host is None:
            return False
        entry_points = _console_entry_points(getattr(host, "console", None))
        hot = getattr(host, "hot", None)
        if not callable(getattr(hot, "on", None)):
            hot = None
        if not entry_points and hot is None and not _offers_signal_hooks(host):
            return False
        self.context.installed = True

        for name, original, level in entry_points:
            self.context.original_handlers[name] = original
            self.console.wrap(name, original, level, self.route)

        self._register("error", lambda: host.add_error_listener(self.on_error))
        self._register("rejection", lambda: host.add_rejection_listener(self.on_rejection))
        if hot is not None:
            self._register("hot", lambda: hot.on(self.devtool_event, self.on_devtool_error))

        logger.info("log_bridge_installed", entry_points=sorted(self.context.original_handlers))
        return True

    def _register(self, hook: str, register: Callable[[], None]) -> None:
        try:
            register()
        except Exception as exc:
            logger.debug("hook_skipped", hook=hook, reason=str(exc))

    # =========================================================================
    # Signal listeners
    # =========================================================================

    def on_error(self, signal: ErrorSignal) -> None:
        location = signal.location
        payload = [
            signal.message or UNHANDLED_ERROR_MESSAGE,
            f"at {location}" if location else None,
            signal.error,
            SignalEvent(type=signal.type, timestamp=signal.timestamp),
        ]
        self.route(LogLevel.ERROR, [part for part in payload if part])
        if self.after_error is not None:
            self.after_error()

    def on_rejection(self, signal: RejectionSignal) -> None:
        self.route(LogLevel.ERROR, [UNHANDLED_REJECTION_MESSAGE, signal.reason])

    def on_devtool_error(self, payload: Any) -> None:
        if isinstance(payload, Mapping):
            err = payload.get("err")
        else:
            err = getattr(payload, "err", None)
        self.route(LogLevel.ERROR, [f"[{self.devtool_event}:event]", payload if err is None else err])


# =============================================================================
# Stdlib logging capture
# =============================================================================


# Loggers whose records would feed back into the sink transport.
EXCLUDED_LOGGERS = (BRIDGE_LOGGER_PREFIX, "httpx", "httpcore", "asyncio")


def level_for_record(levelno: int) -> LogLevel:
    if levelno >= logging.ERROR:
        return LogLevel.ERROR
    if levelno >= logging.WARNING:
        return LogLevel.WARN
    if levelno >= logging.INFO:
        return LogLevel.INFO
    return LogLevel.DEBUG


class BridgeLogHandler(logging.Handler):
    """
    Redirect standard library logging records into the capture pipeline.
    """

    def __init__(self, route: Route, *, excluded: Sequence[str] = EXCLUDED_LOGGERS, level: int = logging.NOTSET):
        super().__init__(level)
        self.route = route
        self.excluded = tuple(excluded)

    def _is_excluded(self, name: str) -> bool:
        return any(name == prefix or name.startswith(prefix + ".") for prefix in self.excluded)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if self._is_excluded(record.name):
                return

            args: list[Any] = [record.getMessage()]
            if record.exc_info and record.exc_info[1] is not None:
                args.append(record.exc_info[1])

            self.route(level_for_record(record.levelno), args)
        except Exception:
            self.handleError(record)
