"""
Global Error Handler Middleware.

Catches all unhandled exceptions and returns structured JSON responses.
Stack traces and database errors stay in the server log; every error gets a
unique error_id for correlation.
"""

import traceback
import uuid

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ewers.config import settings
from ewers.exceptions import ErrorCode

logger = structlog.get_logger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Outermost middleware.

    Domain errors are rendered by the registered exception handlers; this
    only sees what slipped past them.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)

        except Exception as exc:
            error_id = str(uuid.uuid4())

            logger.error(
                "unhandled_exception",
                error_id=error_id,
                path=request.url.path,
                method=request.method,
                error=str(exc),
                traceback=traceback.format_exc(),
            )

            body: dict = {
                "error": {
                    "code": ErrorCode.INTERNAL_ERROR.value,
                    "message": "An internal error occurred. Please try again later.",
                    "field": None,
                    "details": {"error_id": error_id},
                },
                "request_id": getattr(request.state, "request_id", None),
            }
            if settings.debug:
                body["error"]["details"]["debug_hint"] = type(exc).__name__

            return JSONResponse(status_code=500, content=body)
