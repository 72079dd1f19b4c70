"""
User directory.

Read-only lookup used for notification recipient resolution.
"""

from typing import Iterable, Optional, Sequence

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ewers.config import settings
from ewers.db.models import User


class UserDirectory:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_users(
        self,
        ids: Optional[Iterable[int]] = None,
        roles: Optional[Iterable[str]] = None,
        active_only: bool = True,
    ) -> Sequence[User]:
        """Users matching any of the given ids, or any of the given roles; ordered by id."""
        stmt = select(User).order_by(User.id)
        if active_only:
            stmt = stmt.where(User.active.is_(True))
        if ids is not None:
            stmt = stmt.where(User.id.in_(list(ids)))
        if roles is not None:
            stmt = stmt.where(User.role.in_(list(roles)))
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_admins(self) -> Sequence[User]:
        """Active users with role admin or a security level at the admin threshold."""
        result = await self.session.execute(
            select(User)
            .where(
                and_(
                    User.active.is_(True),
                    or_(
                        User.role == "admin",
                        User.security_level >= settings.admin_security_level,
                    ),
                )
            )
            .order_by(User.id)
        )
        return result.scalars().all()
