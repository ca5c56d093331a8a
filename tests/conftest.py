import typing as t

import pytest

from logbridge import LogBridge
from logbridge.config import BridgeSettings
from logbridge.types import ErrorSignal, LogRecord, RejectionSignal


class RecordingSink:
    """Sink that keeps every record it receives."""

    def __init__(self) -> None:
        self.records: list[LogRecord] = []

    async def send(self, record: LogRecord) -> None:
        self.records.append(record)

    @property
    def messages(self) -> list[str]:
        return [r.message for r in self.records]


class FailingSink:
    """Sink whose transport always fails."""

    def __init__(self) -> None:
        self.attempts = 0

    async def send(self, record: LogRecord) -> None:
        self.attempts += 1
        raise ConnectionError("log backend unavailable")


class ManualClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start: float = 10_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class FakeHotChannel:
    def __init__(self) -> None:
        self.handlers: dict[str, list[t.Callable[[t.Any], None]]] = {}

    def on(self, event: str, callback: t.Callable[[t.Any], None]) -> None:
        self.handlers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: t.Any) -> None:
        for callback in self.handlers.get(event, []):
            callback(payload)


class FakeHost:
    """In-memory host: console calls are written to `output`."""

    def __init__(self, *, hot: FakeHotChannel | None = None) -> None:
        self.output: list[tuple[str, tuple[t.Any, ...]]] = []
        self.error_listeners: list[t.Callable[[ErrorSignal], None]] = []
        self.rejection_listeners: list[t.Callable[[RejectionSignal], None]] = []
        self.hot = hot
        self.console = {name: self._writer(name) for name in ("debug", "info", "warn", "error", "log")}

    def _writer(self, name: str) -> t.Callable[..., str]:
        def write(*args: t.Any) -> str:
            self.output.append((name, args))
            return name

        return write

    def add_error_listener(self, listener: t.Callable[[ErrorSignal], None]) -> None:
        self.error_listeners.append(listener)

    def add_rejection_listener(self, listener: t.Callable[[RejectionSignal], None]) -> None:
        self.rejection_listeners.append(listener)

    def raise_error(self, signal: ErrorSignal) -> None:
        for listener in self.error_listeners:
            listener(signal)

    def reject(self, signal: RejectionSignal) -> None:
        for listener in self.rejection_listeners:
            listener(signal)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def bridge(sink: RecordingSink, clock: ManualClock) -> t.Iterator[LogBridge]:
    """A bridge with default limits, a recording sink and a manual clock."""
    instance = LogBridge(BridgeSettings(), sink, clock=clock)
    yield instance
    instance.close()


@pytest.fixture
def failing_sink() -> FailingSink:
    return FailingSink()


@pytest.fixture
def hot_channel() -> FakeHotChannel:
    return FakeHotChannel()


@pytest.fixture
def hot_host(hot_channel: FakeHotChannel) -> FakeHost:
    return FakeHost(hot=hot_channel)
