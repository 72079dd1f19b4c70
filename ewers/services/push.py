"""
Push notification sink.

`send_push_to_all(title, body, link)` is fire-and-forget: delivery
failures are logged and never raised to the caller. Without a configured
gateway the sink only logs.
"""

from typing import Optional, Protocol

import httpx
import structlog

from ewers.config import settings

logger = structlog.get_logger(__name__)


class PushSink(Protocol):
    async def send_push_to_all(self, title: str, body: str, link: Optional[str] = None) -> bool:
        ...


class NullPushSink:
    """Used when no push gateway is configured."""

    async def send_push_to_all(self, title: str, body: str, link: Optional[str] = None) -> bool:
        logger.info("push_skipped", reason="no gateway configured", title=title)
        return False


class WebhookPushSink:
    """POSTs each push to an HTTP gateway that fans out to devices."""

    def __init__(
        self,
        url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout or settings.push_timeout_seconds
        self._transport = transport

    async def send_push_to_all(self, title: str, body: str, link: Optional[str] = None) -> bool:
        payload = {"title": title, "body": body, "link": link, "audience": "all"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("push_delivery_failed", url=self.url, error=str(e))
            return False

        logger.info("push_sent", title=title)
        return True


def build_push_sink() -> PushSink:
    if settings.push_gateway_url:
        return WebhookPushSink(settings.push_gateway_url)
    return NullPushSink()
