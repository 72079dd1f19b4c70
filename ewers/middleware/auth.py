"""
Authentication Middleware.

Every non-public request must carry a valid JWT. Rejection happens here,
before any route or core logic runs.

- Extracts JWT from Authorization header or ?token= query param (SSE)
- Attaches user_id, user_role, security_level to request.state
"""

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ewers.auth.jwt import TokenError, decode_token
from ewers.exceptions import AuthenticationError

logger = structlog.get_logger(__name__)

# Paths that bypass authentication
PUBLIC_PATHS = frozenset({
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
})


def _unauthorized(request: Request, message: str) -> Response:
    error = AuthenticationError(message)
    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(status_code=401, content=error.to_response(request_id).model_dump())


class AuthMiddleware(BaseHTTPMiddleware):
    """JWT bearer authentication for all non-public paths."""

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path

        # CORS preflight is answered by CORSMiddleware
        if request.method == "OPTIONS":
            return await call_next(request)

        if path in PUBLIC_PATHS or path.rstrip("/") in PUBLIC_PATHS:
            return await call_next(request)

        token = self._extract_token(request)
        if not token:
            return _unauthorized(request, "Missing authentication token")

        try:
            payload = decode_token(token)
        except TokenError as e:
            logger.warning("auth_failed", error=str(e), path=path)
            return _unauthorized(request, "Invalid or expired token")

        request.state.user_id = payload["user_id"]
        request.state.user_role = payload["role"]
        request.state.security_level = payload["security_level"]
        structlog.contextvars.bind_contextvars(user_id=payload["user_id"])

        return await call_next(request)

    def _extract_token(self, request: Request) -> str | None:
        """Extract JWT from Authorization header or query param."""
        auth = request.headers.get("Authorization", "")
        if auth.startswith("Bearer "):
            return auth[7:]

        # EventSource cannot set headers
        token = request.query_params.get("token")
        if token:
            return token

        return None
