"""
Post-creation fan-out: SSE broadcast and push.

Fire-and-forget. Failures are logged here and never reach the request that
created the incident or alert.
"""

from typing import Any, Optional

import structlog

from ewers.services.broadcast import Broadcaster
from ewers.services.push import PushSink

logger = structlog.get_logger(__name__)

NEW_INCIDENT_EVENT = "new-incident"
NEW_ALERT_EVENT = "new-alert"


def broadcast(broadcaster: Broadcaster, event_name: str, payload: Any) -> None:
    try:
        broadcaster.emit(event_name, payload)
    except Exception as e:
        logger.error("broadcast_failed", event_type=event_name, error=str(e))


async def push_to_all(push_sink: PushSink, title: str, body: str, link: Optional[str] = None) -> None:
    try:
        await push_sink.send_push_to_all(title, body, link)
    except Exception as e:
        logger.error("push_failed", title=title, error=str(e))
