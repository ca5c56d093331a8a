"""
Sink Dispatcher 单元测试

验证发送即遗忘语义：调用方永不阻塞、永不收到异常。
"""

from __future__ import annotations

import pytest

from logbridge.dispatch import SinkDispatcher
from logbridge.types import LogLevel, LogRecord


class TestDispatchOnRunningLoop:
    @pytest.mark.asyncio
    async def test_record_reaches_sink(self, sink) -> None:
        dispatcher = SinkDispatcher(sink)
        dispatcher.dispatch(LogLevel.INFO, "hello")
        await dispatcher.drain()
        assert sink.records == [LogRecord(level=LogLevel.INFO, message="hello")]

    @pytest.mark.asyncio
    async def test_dispatch_does_not_wait_for_sink(self, sink) -> None:
        dispatcher = SinkDispatcher(sink)
        dispatcher.dispatch("warn", "later")
        assert sink.records == []
        await dispatcher.drain()
        assert sink.messages == ["later"]

    @pytest.mark.asyncio
    async def test_submission_order_is_call_order(self, sink) -> None:
        dispatcher = SinkDispatcher(sink)
        for i in range(5):
            dispatcher.dispatch("debug", f"m{i}")
        await dispatcher.drain()
        assert sink.messages == ["m0", "m1", "m2", "m3", "m4"]

    @pytest.mark.asyncio
    async def test_transport_failure_is_swallowed(self, failing_sink) -> None:
        dispatcher = SinkDispatcher(failing_sink)
        dispatcher.dispatch("error", "boom")
        await dispatcher.drain()
        assert failing_sink.attempts == 1

    @pytest.mark.asyncio
    async def test_synchronous_sink_failure_is_swallowed(self) -> None:
        class BrokenSink:
            def send(self, record):
                raise TypeError("not a coroutine function")

        dispatcher = SinkDispatcher(BrokenSink())
        dispatcher.dispatch("info", "ignored")
        await dispatcher.drain()

    @pytest.mark.asyncio
    async def test_invalid_level_is_dropped(self, sink) -> None:
        dispatcher = SinkDispatcher(sink)
        dispatcher.dispatch("fatal", "unknown level")
        await dispatcher.drain()
        assert sink.records == []


class TestDispatchWithoutLoop:
    def test_background_loop_delivers(self, sink) -> None:
        dispatcher = SinkDispatcher(sink)
        try:
            dispatcher.dispatch("info", "from sync code")
            dispatcher.dispatch("info", "second")
            dispatcher.flush(timeout=2.0)
            assert sink.messages == ["from sync code", "second"]
        finally:
            dispatcher.close()

    def test_background_failure_is_swallowed(self, failing_sink) -> None:
        dispatcher = SinkDispatcher(failing_sink)
        try:
            dispatcher.dispatch("error", "boom")
            dispatcher.flush(timeout=2.0)
            assert failing_sink.attempts == 1
        finally:
            dispatcher.close()

    def test_close_without_dispatch(self, sink) -> None:
        SinkDispatcher(sink).close()
