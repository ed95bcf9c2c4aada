"""
Live match notifications over Server-Sent Events.

Usage:
    from clubber.notifications import NotificationHub, QueueSink

    hub = NotificationHub()
    sink = QueueSink()
    connection_id = hub.register(sink)
    await hub.broadcast(MatchEvent(type=MATCH_STATUS_CHANGED, match_id=..., status="Live"))
"""

from clubber.notifications.events import (
    KEEPALIVE_FRAME,
    MATCH_CREATED,
    MATCH_DELETED,
    MATCH_STATUS_CHANGED,
    MatchEvent,
    format_sse,
    serialize_event,
)
from clubber.notifications.hub import BroadcastResult, Connection, NotificationHub, Sink
from clubber.notifications.sinks import QueueSink, SinkClosedError, SinkFullError

__all__ = [
    "BroadcastResult",
    "Connection",
    "KEEPALIVE_FRAME",
    "MATCH_CREATED",
    "MATCH_DELETED",
    "MATCH_STATUS_CHANGED",
    "MatchEvent",
    "NotificationHub",
    "QueueSink",
    "Sink",
    "SinkClosedError",
    "SinkFullError",
    "format_sse",
    "serialize_event",
]
