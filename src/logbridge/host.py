"""
Host capability sets.

The interception layer never patches globals itself. A host describes what
it can offer: console entry points to wrap, a way to listen for uncaught
errors and unhandled async failures, and optionally a hot-reload channel.
:class:`ProcessHost` provides these for an ordinary Python process.
"""

from __future__ import annotations

import asyncio
import builtins
import logging
import sys
import threading
import traceback
from types import TracebackType
from typing import Any, Callable, Mapping, Protocol

from .exceptions import HostUnavailableError
from .types import ErrorSignal, RejectionSignal

ConsoleMethod = Callable[..., Any]
ErrorListener = Callable[[ErrorSignal], None]
RejectionListener = Callable[[RejectionSignal], None]


class HotChannel(Protocol):
    def on(self, event: str, callback: Callable[[Any], None]) -> None: ...


class HostEnvironment(Protocol):
    console: Mapping[str, ConsoleMethod]
    hot: HotChannel | None

    def add_error_listener(self, listener: ErrorListener) -> None: ...

    def add_rejection_listener(self, listener: RejectionListener) -> None: ...


# =============================================================================
# Console
# =============================================================================


class LoggerConsole:
    """
    Variadic console methods backed by a stdlib logger.

    Arguments are joined with a space, so ``console.info("a", 1)`` logs
    ``"a 1"`` exactly like the message forwarded to the sink starts.

    Args:
        logger: Destination stdlib logger
        stacklevel: Frames between the logger call and the caller reported in
            records. The default attributes records to a direct caller; one
            more is needed when the bridge wraps these methods.
    """

    def __init__(self, logger: logging.Logger, *, stacklevel: int = 3):
        self._logger = logger
        self._stacklevel = stacklevel

    def _emit(self, level: int, args: tuple[Any, ...], **kwargs: Any) -> None:
        self._logger.log(level, " ".join(str(a) for a in args), stacklevel=self._stacklevel, **kwargs)

    def debug(self, *args: Any) -> None:
        self._emit(logging.DEBUG, args)

    def info(self, *args: Any) -> None:
        self._emit(logging.INFO, args)

    def log(self, *args: Any) -> None:
        self._emit(logging.INFO, args)

    def warning(self, *args: Any) -> None:
        self._emit(logging.WARNING, args)

    def error(self, *args: Any) -> None:
        self._emit(logging.ERROR, args)

    def exception(self, *args: Any) -> None:
        self._emit(logging.ERROR, args, exc_info=True)

    def critical(self, *args: Any) -> None:
        self._emit(logging.CRITICAL, args)

    def as_mapping(self) -> dict[str, ConsoleMethod]:
        return {
            "debug": self.debug,
            "info": self.info,
            "log": self.log,
            "warning": self.warning,
            "warn": self.warning,
            "error": self.error,
            "exception": self.exception,
            "critical": self.critical,
        }


# =============================================================================
# Process Host
# =============================================================================


def error_signal_from_exception(
    exc: BaseException | None,
    tb: TracebackType | None = None,
    *,
    message: str | None = None,
) -> ErrorSignal:
    """Build an ErrorSignal, locating the innermost traceback frame."""
    filename = lineno = colno = None
    frames = traceback.extract_tb(tb) if tb is not None else []
    if frames:
        last = frames[-1]
        filename, lineno = last.filename, last.lineno
        colno = getattr(last, "colno", None)

    if message is None and exc is not None:
        detail = str(exc)
        message = f"{type(exc).__name__}: {detail}" if detail else type(exc).__name__

    return ErrorSignal(message=message, filename=filename, lineno=lineno, colno=colno, error=exc)


class ProcessHost:
    """
    Capabilities of the running interpreter.

    Args:
        logger: Logger behind the console methods
        loop: Event loop watched for unhandled task failures. Defaults to the
            running loop at registration time, if any.
        hot: Optional hot-reload channel exposing ``on(event, callback)``
        capture_threads: Also listen to ``threading.excepthook``
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        hot: HotChannel | None = None,
        capture_threads: bool = True,
    ):
        # Console methods are meant to be called through the bridge wrappers.
        self._console = LoggerConsole(logger or logging.getLogger("logbridge.console"), stacklevel=4)
        self.console: dict[str, ConsoleMethod] = {"print": builtins.print, **self._console.as_mapping()}
        self.hot = hot
        self._loop = loop
        self._capture_threads = capture_threads

    def add_error_listener(self, listener: ErrorListener) -> None:
        previous_hook = sys.excepthook

        def excepthook(exc_type: type[BaseException], exc: BaseException, tb: TracebackType | None) -> None:
            previous_hook(exc_type, exc, tb)
            listener(error_signal_from_exception(exc, tb))

        sys.excepthook = excepthook

        if self._capture_threads:
            previous_thread_hook = threading.excepthook

            def thread_excepthook(args: threading.ExceptHookArgs) -> None:
                previous_thread_hook(args)
                if args.exc_value is not None:
                    listener(error_signal_from_exception(args.exc_value, args.exc_traceback))

            threading.excepthook = thread_excepthook

    def add_rejection_listener(self, listener: RejectionListener) -> None:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                raise HostUnavailableError("event_loop") from None

        previous_handler = loop.get_exception_handler()

        def exception_handler(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
            if previous_handler is not None:
                previous_handler(loop, context)
            else:
                loop.default_exception_handler(context)
            listener(RejectionSignal(reason=context.get("exception") or context.get("message")))

        loop.set_exception_handler(exception_handler)
