"""
Sink transports: how a forwarded record reaches the persistence service.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Protocol

import httpx

from .exceptions import SinkError
from .types import LogRecord

DEFAULT_INVOKE_COMMAND = "frontend_log"


class LogSink(Protocol):
    async def send(self, record: LogRecord) -> None: ...


class HttpSink:
    """POSTs ``{level, message}`` JSON bodies to a log endpoint."""

    def __init__(
        self,
        url: str,
        *,
        timeout_seconds: float = 5.0,
        headers: Mapping[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds, headers=dict(headers or {}))

    async def send(self, record: LogRecord) -> None:
        try:
            response = await self._client.post(self.url, json=record.to_payload())
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SinkError(
                f"Log sink rejected record: {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise SinkError(f"Log sink unreachable: {exc}") from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class CallableSink:
    """Adapts an invoke-style ``async fn(command, payload)`` bridge."""

    def __init__(self, invoke: Callable[[str, dict[str, Any]], Awaitable[Any]], *, command: str = DEFAULT_INVOKE_COMMAND):
        self._invoke = invoke
        self.command = command

    async def send(self, record: LogRecord) -> None:
        await self._invoke(self.command, record.to_payload())


class NullSink:
    """Accepts and drops every record."""

    async def send(self, record: LogRecord) -> None:
        return None
