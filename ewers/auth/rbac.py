"""
Role-Based Access Control.

The core distinguishes only administrators from everyone else. A user is an
administrator when their role is "admin" or their numeric security level
meets `settings.admin_security_level`.
"""

import structlog
from fastapi import Depends

from ewers.auth.dependencies import CurrentUser, get_current_user
from ewers.config import settings
from ewers.exceptions import PermissionDeniedError

logger = structlog.get_logger(__name__)

ADMIN_ROLE = "admin"


def is_admin(role: str | None, security_level: int | None) -> bool:
    """Check if a role / security level pair carries admin rights."""
    if role == ADMIN_ROLE:
        return True
    return (security_level or 0) >= settings.admin_security_level


async def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """
    Dependency that admits administrators only.

    Raises PermissionDeniedError (403) otherwise.
    """
    if not is_admin(user.role, user.security_level):
        logger.warning(
            "admin_access_denied",
            user_id=user.id,
            role=user.role,
            security_level=user.security_level,
        )
        raise PermissionDeniedError(
            details={"your_role": user.role, "your_security_level": user.security_level},
        )
    return user
