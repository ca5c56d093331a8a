"""
Sink transport tests.
"""

from __future__ import annotations

import json

import httpx
import pytest

from logbridge.exceptions import SinkError
from logbridge.transports import CallableSink, HttpSink, NullSink
from logbridge.types import LogLevel, LogRecord

RECORD = LogRecord(level=LogLevel.WARN, message="retrying connection")


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_http_sink_posts_payload():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(204)

    async with _client(handler) as client:
        await HttpSink("http://logs.local/frontend", client=client).send(RECORD)

    assert len(requests) == 1
    assert requests[0].method == "POST"
    assert json.loads(requests[0].content) == {"level": "warn", "message": "retrying connection"}


@pytest.mark.asyncio
async def test_http_sink_raises_sink_error_on_rejection():
    async with _client(lambda request: httpx.Response(503)) as client:
        with pytest.raises(SinkError) as exc_info:
            await HttpSink("http://logs.local/frontend", client=client).send(RECORD)
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_http_sink_raises_sink_error_when_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(SinkError):
            await HttpSink("http://logs.local/frontend", client=client).send(RECORD)


@pytest.mark.asyncio
async def test_http_sink_owned_client_is_closed():
    sink = HttpSink("http://logs.local/frontend", timeout_seconds=1.0, headers={"X-Source": "ui"})
    await sink.aclose()
    assert sink._client.is_closed


@pytest.mark.asyncio
async def test_callable_sink_invokes_command():
    calls: list[tuple[str, dict]] = []

    async def invoke(command: str, payload: dict) -> None:
        calls.append((command, payload))

    await CallableSink(invoke).send(RECORD)
    assert calls == [("frontend_log", {"level": "warn", "message": "retrying connection"})]


@pytest.mark.asyncio
async def test_null_sink_accepts_everything():
    assert await NullSink().send(RECORD) is None
