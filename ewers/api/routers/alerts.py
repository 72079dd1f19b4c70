"""
Alert creation.

POST /api/alerts — store a manual alert, evaluate alert rules, then
broadcast `new-alert` and push to all devices.
"""

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ewers.api.deps import (
    CurrentUser,
    get_audit_service,
    get_broadcaster,
    get_current_user,
    get_db,
    get_push_sink,
    get_rule_engine,
)
from ewers.db.models import Alert
from ewers.notifications.engine import NotificationRuleEngine
from ewers.notifications.fanout import NEW_ALERT_EVENT, broadcast, push_to_all
from ewers.schemas.alert import AlertCreate, AlertOut
from ewers.services.audit import AuditEntry, AuditService
from ewers.services.broadcast import Broadcaster
from ewers.services.push import PushSink

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


async def announce_alert(
    alert: Alert,
    rules: NotificationRuleEngine,
    broadcaster: Broadcaster,
    push_sink: PushSink,
    background_tasks: BackgroundTasks,
) -> AlertOut:
    """Evaluate alert rules, then broadcast and schedule the push."""
    evaluation = await rules.evaluate_for_alert(alert)
    logger.info("alert_announced", alert_id=alert.id, notifications=evaluation.count)

    out = AlertOut.model_validate(alert)
    broadcast(broadcaster, NEW_ALERT_EVENT, out.model_dump(mode="json", by_alias=True))
    background_tasks.add_task(push_to_all, push_sink, f"Alert: {alert.title}", alert.description, "/alerts")
    return out


@router.post("", response_model=AlertOut, status_code=201)
async def create_alert(
    body: AlertCreate,
    background_tasks: BackgroundTasks,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    audit: AuditService = Depends(get_audit_service),
    rules: NotificationRuleEngine = Depends(get_rule_engine),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    push_sink: PushSink = Depends(get_push_sink),
):
    alert = Alert(
        title=body.title,
        description=body.description,
        severity=body.severity.value,
        status=body.status,
        source=body.source,
        category=body.category,
        region=body.region,
        location=body.location,
        incident_id=body.incident_id,
        escalation_level=body.escalation_level,
        channels=body.channels,
    )
    db.add(alert)
    await db.flush()
    await db.refresh(alert)

    await audit.write(
        AuditEntry(
            user_id=user.id,
            action="alert_created",
            resource="alert",
            resource_id=str(alert.id),
            details={"alertTitle": alert.title, "source": alert.source},
            ip_address=user.ip_address,
            user_agent=user.user_agent,
        )
    )
    return await announce_alert(alert, rules, broadcaster, push_sink, background_tasks)
