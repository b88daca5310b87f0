"""Live booking updates over Server-Sent Events."""

import asyncio
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from src.api.dependencies import get_event_publisher
from src.config import settings
from src.services.notifications import EventPublisher, format_sse

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def stream_events(
    request: Request,
    publisher: EventPublisher,
    heartbeat_seconds: Optional[float] = None,
) -> AsyncIterator[str]:
    """Yield SSE frames for one subscriber until the client goes away.

    A heartbeat is sent whenever no event arrives within the interval. The
    stream ends when the publisher drops the subscriber.
    """
    heartbeat_seconds = heartbeat_seconds or settings.stream.heartbeat_seconds
    queue = publisher.subscribe()
    try:
        yield format_sse(
            "connected",
            {
                "message": "Connected to the live booking stream",
                "timestamp": _timestamp(),
                "clientCount": publisher.subscriber_count,
            },
        )
        while publisher.is_subscribed(queue) and not await request.is_disconnected():
            try:
                event, payload = await asyncio.wait_for(queue.get(), timeout=heartbeat_seconds)
            except asyncio.TimeoutError:
                yield format_sse("heartbeat", {"timestamp": _timestamp()})
                continue
            yield format_sse(event, payload)
    finally:
        publisher.unsubscribe(queue)


@router.get("", summary="Subscribe to live booking updates")
async def open_stream(
    request: Request,
    publisher: EventPublisher = Depends(get_event_publisher),
) -> StreamingResponse:
    return StreamingResponse(
        stream_events(request, publisher),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/status", summary="Number of connected stream subscribers")
async def stream_status(
    publisher: EventPublisher = Depends(get_event_publisher),
) -> dict[str, Any]:
    return {
        "success": True,
        "connectedClients": publisher.subscriber_count,
        "timestamp": _timestamp(),
    }
