"""
Notification inbox endpoints.

GET /api/notifications              — the caller's notifications, newest first
PUT /api/notifications/read-all     — mark all of the caller's notifications read
PUT /api/notifications/{id}/read    — mark one read
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ewers.api.deps import CurrentUser, get_current_user, get_db
from ewers.notifications.inbox import NotificationInbox
from ewers.notifications.schemas import NotificationOut

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationOut])
async def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: int = Query(100, ge=1, le=500),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notifications = await NotificationInbox(db).list_for_user(user.id, unread_only=unread_only, limit=limit)
    return [NotificationOut.model_validate(n) for n in notifications]


@router.put("/read-all")
async def mark_all_read(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    updated = await NotificationInbox(db).mark_all_read(user.id)
    return {"updated": updated}


@router.put("/{notification_id}/read", response_model=NotificationOut)
async def mark_read(
    notification_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notification = await NotificationInbox(db).mark_read(notification_id, user.id)
    return NotificationOut.model_validate(notification)
