"""
Fire-and-forget delivery of records to the sink.
"""

from __future__ import annotations

import asyncio
import threading
from concurrent.futures import Future
from typing import Any

from .logging import get_logger
from .transports import LogSink
from .types import LogLevel, LogRecord

logger = get_logger("dispatch")


def _discard_outcome(future: "asyncio.Future[Any] | Future[Any]") -> None:
    """Retrieve and drop the result so failures are silent on purpose."""
    if future.cancelled():
        return
    future.exception()


class _BackgroundLoop:
    """An event loop on a daemon thread, for callers without a running loop."""

    def __init__(self) -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name="logbridge-dispatch", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def submit(self, coro: Any) -> Future[Any]:
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def stop(self, timeout: float = 1.0) -> None:
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout)
        if not self._thread.is_alive():
            self._loop.close()


class SinkDispatcher:
    """
    Schedules ``sink.send`` without blocking or ever raising into the caller.

    Records are submitted in call order. Their completion order at the
    transport is not guaranteed and their outcome is always discarded.
    """

    def __init__(self, sink: LogSink):
        self.sink = sink
        self._tasks: set[asyncio.Task[Any]] = set()
        self._background: _BackgroundLoop | None = None
        self._pending: set[Future[Any]] = set()

    def dispatch(self, level: LogLevel | str, message: str) -> None:
        try:
            record = LogRecord(level=LogLevel(level), message=message)
            coro = self.sink.send(record)
        except Exception:
            return

        try:
            self._schedule(coro)
        except Exception:
            coro.close()

    def _schedule(self, coro: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None and not loop.is_closed():
            task = loop.create_task(coro)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            task.add_done_callback(_discard_outcome)
            return

        if self._background is None:
            self._background = _BackgroundLoop()
        future = self._background.submit(coro)
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)
        future.add_done_callback(_discard_outcome)

    async def drain(self) -> None:
        """Wait for every in-flight record on the current loop."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def flush(self, timeout: float | None = None) -> None:
        """Block until records submitted from outside a running loop are done."""
        for future in list(self._pending):
            try:
                future.result(timeout)
            except Exception:
                pass

    def close(self, timeout: float = 1.0) -> None:
        self.flush(timeout=timeout)
        if self._background is not None:
            self._background.stop()
            self._background = None
            logger.debug("dispatch_loop_stopped")
