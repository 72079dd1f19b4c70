"""
FastAPI dependencies for authentication and database access.

AuthMiddleware has already verified the bearer token by the time these
run; they read the caller's identity from request.state.
"""

from dataclasses import dataclass
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from ewers.db.engine import get_session_factory
from ewers.exceptions import AuthenticationError


@dataclass(frozen=True)
class CurrentUser:
    """Identity of the authenticated caller."""

    id: int
    role: str
    security_level: int
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async DB session; commit on success, roll back on error."""
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_current_user(request: Request) -> CurrentUser:
    """Extract the caller from request state (set by AuthMiddleware)."""
    user_id = getattr(request.state, "user_id", None)
    if user_id is None:
        raise AuthenticationError("Missing user context")
    return CurrentUser(
        id=int(user_id),
        role=getattr(request.state, "user_role", "user"),
        security_level=int(getattr(request.state, "security_level", 1)),
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
