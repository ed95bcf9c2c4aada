"""
NotificationHub: registry of open SSE connections and broadcast fan-out.

Design:
- One hub per process, built by the application lifespan and injected into
  routes (no module-level instance)
- Registry is a dict guarded by a lock; broadcast iterates a snapshot, so
  connections may come and go mid-sweep
- A failed sink write closes and drops that connection after the sweep; the
  error is logged and counted but never reaches the broadcaster
- Shutdown closes every sink and cancels connections still parked in
  wait_until_closed
"""

import asyncio
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Protocol

from clubber.models import utcnow
from clubber.notifications.events import format_sse, serialize_event
from clubber.notifications.sinks import SinkClosedError, SinkFullError
from clubber.telemetry import record_broadcast, set_sse_connections

logger = logging.getLogger(__name__)


class Sink(Protocol):
    """Write side of one client stream."""

    async def write(self, chunk: str) -> None: ...

    async def flush(self) -> None: ...


@dataclass(frozen=True)
class Connection:
    id: str
    sink: Sink
    opened_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class BroadcastResult:
    delivered: int
    dropped: int


def _close_sink(sink: Sink) -> None:
    close = getattr(sink, "close", None)
    if callable(close):
        close()


def _drop_reason(exc: BaseException) -> str:
    if isinstance(exc, SinkFullError):
        return "slow_consumer"
    if isinstance(exc, SinkClosedError):
        return "sink_closed"
    return "write_error"


class NotificationHub:
    """
    Connection registry with fan-out broadcast.

    Lifecycle per connection: register -> (broadcast writes)* -> deregister.
    Nothing is written to a connection after it is deregistered.
    """

    def __init__(self):
        self._connections: Dict[str, Connection] = {}
        self._waiters: Dict[str, asyncio.Task] = {}
        self._lock = threading.Lock()

    def register(self, sink: Sink) -> str:
        """Store `sink` under a fresh id; it receives every later broadcast."""
        connection_id = uuid.uuid4().hex
        with self._lock:
            self._connections[connection_id] = Connection(id=connection_id, sink=sink)
            count = len(self._connections)
        set_sse_connections(count)
        logger.debug(f"NotificationHub: registered {connection_id} (open={count})")
        return connection_id

    def deregister(self, connection_id: str) -> None:
        """Remove a connection. Unknown ids are ignored."""
        with self._lock:
            removed = self._connections.pop(connection_id, None)
            count = len(self._connections)
        if removed is None:
            return
        set_sse_connections(count)
        logger.debug(f"NotificationHub: deregistered {connection_id} (open={count})")

    async def wait_until_closed(self, connection_id: str, closed: asyncio.Event) -> None:
        """
        Park until `closed` is set (client went away), then deregister.

        Holds no lock while waiting. Task cancellation also deregisters.
        """
        task = asyncio.current_task()
        if task is not None:
            with self._lock:
                self._waiters[connection_id] = task
        try:
            await closed.wait()
        finally:
            with self._lock:
                self._waiters.pop(connection_id, None)
            self.deregister(connection_id)

    async def broadcast(self, event: Any) -> BroadcastResult:
        """Serialize `event` once and write it to every registered connection."""
        frame = format_sse(serialize_event(event))

        with self._lock:
            snapshot: List[Connection] = list(self._connections.values())

        delivered = 0
        failed: List[Connection] = []
        reasons: List[str] = []
        for connection in snapshot:
            try:
                await connection.sink.write(frame)
                await connection.sink.flush()
                delivered += 1
            except Exception as e:
                failed.append(connection)
                reasons.append(_drop_reason(e))
                logger.warning(
                    f"NotificationHub: write to {connection.id} failed ({type(e).__name__}: {e}), dropping"
                )

        for connection in failed:
            self.deregister(connection.id)
            _close_sink(connection.sink)

        record_broadcast(delivered, reasons)
        logger.debug(f"NotificationHub: broadcast delivered={delivered} dropped={len(failed)}")
        return BroadcastResult(delivered=delivered, dropped=len(failed))

    def close(self) -> None:
        """Shutdown: close every sink, cancel parked waiters, empty the registry."""
        with self._lock:
            connections = list(self._connections.values())
            self._connections.clear()
            waiters = list(self._waiters.values())
            self._waiters.clear()
        for connection in connections:
            _close_sink(connection.sink)
        for waiter in waiters:
            waiter.cancel()
        set_sse_connections(0)
        logger.info(f"NotificationHub: closed {len(connections)} connection(s)")

    def __contains__(self, connection_id: object) -> bool:
        with self._lock:
            return connection_id in self._connections

    @property
    def connection_count(self) -> int:
        with self._lock:
            return len(self._connections)

    @property
    def connection_ids(self) -> List[str]:
        with self._lock:
            return list(self._connections)
