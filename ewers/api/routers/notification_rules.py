"""
Notification Rule API Endpoints (admin only).

GET /api/notification-rules — list rules in stored order
PUT /api/notification-rules — replace the whole rule set (array body)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ewers.api.deps import CurrentUser, get_audit_service, get_db, require_admin
from ewers.notifications.repository import RuleRepository
from ewers.notifications.schemas import NotificationRule
from ewers.services.audit import AuditEntry, AuditService

router = APIRouter(prefix="/api/notification-rules", tags=["notification-rules"])


@router.get("", response_model=list[NotificationRule], response_model_exclude_none=True)
async def list_notification_rules(
    _admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await RuleRepository(db).list_rules()


@router.put("", response_model=list[NotificationRule], response_model_exclude_none=True)
async def replace_notification_rules(
    rules: list[NotificationRule],
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    audit: AuditService = Depends(get_audit_service),
):
    stored = await RuleRepository(db).replace_rules(rules, updated_by=admin.id)
    await audit.write(
        AuditEntry(
            user_id=admin.id,
            action="notification_rules_updated",
            resource="notification_rules",
            details={"count": len(stored), "ruleIds": [r.id for r in stored]},
            ip_address=admin.ip_address,
            user_agent=admin.user_agent,
        )
    )
    return stored
