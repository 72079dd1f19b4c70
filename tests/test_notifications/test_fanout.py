"""
Tests for SSE broadcasting, push delivery and fire-and-forget fan-out.
"""

import asyncio
import json

import httpx
import pytest

from ewers.notifications.fanout import NEW_ALERT_EVENT, broadcast, push_to_all
from ewers.services.broadcast import Broadcaster, format_sse
from ewers.services.push import NullPushSink, WebhookPushSink


def test_format_sse():
    frame = format_sse("new-incident", {"id": 1, "title": "Flood"})
    assert frame == 'event: new-incident\ndata: {"id": 1, "title": "Flood"}\n\n'


@pytest.mark.asyncio
async def test_subscriber_receives_emitted_event():
    broadcaster = Broadcaster(keepalive_seconds=5)
    stream = broadcaster.subscribe()
    first = asyncio.ensure_future(stream.__anext__())
    await asyncio.sleep(0)

    assert broadcaster.subscriber_count == 1
    assert broadcaster.emit(NEW_ALERT_EVENT, {"id": 9}) == 1

    frame = await asyncio.wait_for(first, timeout=1)
    assert frame.startswith("event: new-alert\n")
    assert json.loads(frame.split("data: ", 1)[1]) == {"id": 9}

    await stream.aclose()
    assert broadcaster.subscriber_count == 0


@pytest.mark.asyncio
async def test_keepalive_when_idle():
    broadcaster = Broadcaster(keepalive_seconds=0.01)
    stream = broadcaster.subscribe()

    assert await asyncio.wait_for(stream.__anext__(), timeout=1) == ": keepalive\n\n"
    await stream.aclose()


def test_emit_without_subscribers():
    assert Broadcaster().emit("new-incident", {}) == 0


class ExplodingBroadcaster:
    def emit(self, event_name, payload):
        raise RuntimeError("boom")


class ExplodingPushSink:
    async def send_push_to_all(self, title, body, link=None):
        raise RuntimeError("gateway exploded")


def test_broadcast_failure_is_swallowed():
    broadcast(ExplodingBroadcaster(), "new-incident", {"id": 1})


@pytest.mark.asyncio
async def test_push_failure_is_swallowed():
    await push_to_all(ExplodingPushSink(), "t", "b", "/alerts")


@pytest.mark.asyncio
async def test_null_push_sink():
    assert await NullPushSink().send_push_to_all("t", "b") is False


@pytest.mark.asyncio
async def test_webhook_push_sink_posts_payload():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(202)

    sink = WebhookPushSink("http://push.test/send", timeout=5, transport=httpx.MockTransport(handler))

    assert await sink.send_push_to_all("Alert: Flood", "Rivers rising", "/alerts") is True
    assert seen["body"] == {"title": "Alert: Flood", "body": "Rivers rising", "link": "/alerts", "audience": "all"}


@pytest.mark.asyncio
async def test_webhook_push_sink_reports_failure():
    sink = WebhookPushSink(
        "http://push.test/send", timeout=5, transport=httpx.MockTransport(lambda r: httpx.Response(503))
    )
    assert await sink.send_push_to_all("t", "b") is False
