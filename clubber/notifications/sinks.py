"""Queue-backed sink bridging hub writes to a streaming HTTP response."""

import asyncio
from typing import AsyncIterator, Awaitable, Callable, Optional

from clubber.notifications.events import KEEPALIVE_FRAME


class SinkClosedError(Exception):
    """Write attempted after the client stream went away."""


class SinkFullError(Exception):
    """Client is not draining its stream fast enough."""


class QueueSink:
    """
    Bounded buffer between `NotificationHub.broadcast` and one response body.

    `write` never blocks: a full buffer raises SinkFullError so one slow client
    cannot stall a broadcast sweep.
    """

    def __init__(self, maxsize: int = 100):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def write(self, chunk: str) -> None:
        if self._closed:
            raise SinkClosedError("stream closed")
        try:
            self._queue.put_nowait(chunk)
        except asyncio.QueueFull:
            raise SinkFullError(f"buffer full ({self._queue.maxsize})") from None

    async def flush(self) -> None:
        # Each queued chunk is sent as its own body part by the response
        if self._closed:
            raise SinkClosedError("stream closed")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            # Sentinel to unblock the reader
            self._queue.put_nowait(None)
        except asyncio.QueueFull:
            pass  # reader exits on its next loop check

    async def stream(
        self,
        keepalive_seconds: float,
        is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
    ) -> AsyncIterator[str]:
        """Yield queued frames until closed; emit a keep-alive comment on idle."""
        while not self._closed:
            try:
                chunk = await asyncio.wait_for(self._queue.get(), timeout=keepalive_seconds)
            except asyncio.TimeoutError:
                if is_disconnected is not None and await is_disconnected():
                    break
                yield KEEPALIVE_FRAME
                continue
            if chunk is None:
                break
            yield chunk
