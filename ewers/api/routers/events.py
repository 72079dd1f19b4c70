"""
SSE Events Stream.

GET /api/events/stream?token=xxx

Client usage:
    const es = new EventSource('/api/events/stream?token=xxx');
    es.addEventListener('new-alert', (e) => { const alert = JSON.parse(e.data); ... });

EventSource cannot send headers, hence the query-param token.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from ewers.api.deps import CurrentUser, get_broadcaster, get_current_user
from ewers.services.broadcast import Broadcaster

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("/stream")
async def event_stream(
    _user: CurrentUser = Depends(get_current_user),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    """
    Real-time stream of creation events.

    Events:
    - new-incident: incident created
    - new-alert: alert created or generated from an analysis
    """
    return StreamingResponse(
        broadcaster.subscribe(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
            "Connection": "keep-alive",
        },
    )
