"""
JWT Token Management.

HS256 access tokens issued by the surrounding platform. This service only
verifies them; `create_access_token` exists for trusted issuers and tests.
"""

from datetime import datetime, timedelta

from jose import JWTError, jwt

from ewers.config import settings


class TokenError(Exception):
    """Raised when token creation or validation fails."""

    pass


def create_access_token(
    user_id: int,
    role: str = "user",
    security_level: int = 1,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_access_token_expire_minutes)

    now = datetime.utcnow()
    payload = {
        "user_id": int(user_id),
        "role": role,
        "security_level": int(security_level),
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """
    Decode and validate a JWT access token.

    Returns the payload dict with user_id, role, security_level.
    Raises TokenError on any failure.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        raise TokenError(f"Invalid token: {e}") from e

    if "user_id" not in payload:
        raise TokenError("Token missing required claims")
    try:
        payload["user_id"] = int(payload["user_id"])
        payload["security_level"] = int(payload.get("security_level", 1))
    except (TypeError, ValueError) as e:
        raise TokenError("Token claims are malformed") from e
    payload.setdefault("role", "user")
    return payload
