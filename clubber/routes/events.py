"""Live match event stream (Server-Sent Events)."""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import StreamingResponse

from clubber.config import get_settings
from clubber.dependencies import get_notification_hub
from clubber.notifications import NotificationHub, QueueSink
from clubber.schemas import BroadcastResponse
from clubber.security import verify_api_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/events", tags=["events"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

# Tells EventSource clients how long to wait before reconnecting (ms)
RETRY_FRAME = "retry: 3000\n\n"


@router.get("/matches")
async def stream_match_events(
    request: Request,
    hub: NotificationHub = Depends(get_notification_hub),
):
    """
    Long-lived text/event-stream of match events.

    The connection is registered when the body starts streaming and stays in
    the hub until the client disconnects or the server shuts the hub down.
    A client that leaves before the body starts is never registered.
    """
    settings = get_settings()

    async def event_stream():
        sink = QueueSink(maxsize=settings.SSE_QUEUE_SIZE)
        connection_id = hub.register(sink)
        closed = asyncio.Event()
        waiter = asyncio.create_task(hub.wait_until_closed(connection_id, closed))
        try:
            yield RETRY_FRAME
            async for chunk in sink.stream(settings.SSE_KEEPALIVE_SECONDS, request.is_disconnected):
                yield chunk
        finally:
            sink.close()
            closed.set()
            logger.debug(f"SSE stream {connection_id} ended (waiter_done={waiter.done()})")

    return StreamingResponse(event_stream(), media_type="text/event-stream", headers=SSE_HEADERS)


@router.post("/matches", response_model=BroadcastResponse, dependencies=[Depends(verify_api_key)])
async def broadcast_match_event(
    event: Any = Body(..., description="Any JSON value; forwarded as-is"),
    hub: NotificationHub = Depends(get_notification_hub),
):
    """Push an arbitrary JSON payload to every open stream (admin)."""
    result = await hub.broadcast(event)
    return BroadcastResponse(
        delivered=result.delivered,
        dropped=result.dropped,
        open_connections=hub.connection_count,
    )
