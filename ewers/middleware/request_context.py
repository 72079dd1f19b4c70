"""
Request Context Middleware.

Every request gets a request_id bound into the structlog context, so log
lines from services and the error envelope can be correlated. An upstream
X-Request-ID is reused when it looks sane; otherwise a UUID4 is issued.
Response carries X-Request-ID and X-Response-Time.
"""

import time
import uuid

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

MAX_REQUEST_ID_LENGTH = 64

# Liveness probes would drown out real traffic
QUIET_PATHS = frozenset({"/health"})


def resolve_request_id(header_value: str | None) -> str:
    if header_value and len(header_value) <= MAX_REQUEST_ID_LENGTH and header_value.isprintable():
        return header_value
    return str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Sits inside the error handler and outside authentication."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = resolve_request_id(request.headers.get("X-Request-ID"))
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{elapsed_ms}ms"

        if request.url.path not in QUIET_PATHS:
            logger.info(
                "request_completed",
                status=response.status_code,
                elapsed_ms=elapsed_ms,
                user_id=getattr(request.state, "user_id", None),
            )
        return response
