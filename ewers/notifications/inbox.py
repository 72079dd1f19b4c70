"""
Notification inbox — a user's own notifications.
"""

from typing import Sequence

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ewers.db.models import Notification
from ewers.exceptions import NotFoundError

logger = structlog.get_logger(__name__)


class NotificationInbox:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_for_user(
        self, user_id: int, unread_only: bool = False, limit: int = 100
    ) -> Sequence[Notification]:
        stmt = (
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def mark_read(self, notification_id: int, user_id: int) -> Notification:
        """Another user's notification is reported as not found."""
        result = await self.session.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise NotFoundError("notification", notification_id)

        notification.is_read = True
        await self.session.flush()
        return notification

    async def mark_all_read(self, user_id: int) -> int:
        result = await self.session.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        logger.info("notifications_marked_read", user_id=user_id, count=result.rowcount)
        return result.rowcount or 0
