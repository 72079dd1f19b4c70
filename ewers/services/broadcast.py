"""
Broadcaster — Server-Sent Events pub/sub for real-time fan-out.

Usage:
- Subscribe: GET /api/events/stream?token=xxx
- Publish: broadcaster.emit("new-alert", payload)

Delivery is best-effort: a full subscriber queue drops the event for that
subscriber only.
"""

import asyncio
import json
from typing import Any, AsyncGenerator

import structlog

logger = structlog.get_logger(__name__)

QUEUE_MAXSIZE = 256
KEEPALIVE_SECONDS = 30


class Broadcaster:
    """
    In-process SSE pub/sub.

    Every connected listener owns a queue; emit puts the event into all of
    them. Subscribe yields SSE-formatted strings.
    """

    def __init__(self, keepalive_seconds: float = KEEPALIVE_SECONDS):
        self._subscribers: set[asyncio.Queue] = set()
        self._keepalive_seconds = keepalive_seconds

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def subscribe(self) -> AsyncGenerator[str, None]:
        """Yield SSE frames until the client disconnects."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=QUEUE_MAXSIZE)
        self._subscribers.add(queue)
        logger.info("sse_subscriber_added", total=len(self._subscribers))

        try:
            while True:
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=self._keepalive_seconds)
                    yield format_sse(event["type"], event["data"])
                except asyncio.TimeoutError:
                    # SSE comment, ignored by EventSource.onmessage
                    yield ": keepalive\n\n"
        finally:
            self._subscribers.discard(queue)
            logger.info("sse_subscriber_removed", remaining=len(self._subscribers))

    def emit(self, event_name: str, payload: Any) -> int:
        """Send an event to every subscriber. Returns how many queues took it."""
        delivered = 0
        for queue in list(self._subscribers):
            try:
                queue.put_nowait({"type": event_name, "data": payload})
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("sse_queue_full", event_type=event_name)

        logger.debug("sse_broadcast", event_type=event_name, recipients=delivered)
        return delivered


def format_sse(event_name: str, payload: Any) -> str:
    data = json.dumps(payload, ensure_ascii=False, default=str)
    return f"event: {event_name}\ndata: {data}\n\n"


# Shared across the API process
broadcaster = Broadcaster()
