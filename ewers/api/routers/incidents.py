"""
Incident creation.

POST /api/incidents — store a report, evaluate incident rules, then
broadcast `new-incident` and push to all devices.
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
from ewers.db.models import Incident
from ewers.notifications.engine import NotificationRuleEngine
from ewers.notifications.fanout import NEW_INCIDENT_EVENT, broadcast, push_to_all
from ewers.schemas.incident import IncidentCreate, IncidentOut
from ewers.services.audit import AuditEntry, AuditService
from ewers.services.broadcast import Broadcaster
from ewers.services.push import PushSink

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/incidents", tags=["incidents"])


@router.post("", response_model=IncidentOut, status_code=201)
async def create_incident(
    body: IncidentCreate,
    background_tasks: BackgroundTasks,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    audit: AuditService = Depends(get_audit_service),
    rules: NotificationRuleEngine = Depends(get_rule_engine),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    push_sink: PushSink = Depends(get_push_sink),
):
    incident = Incident(
        title=body.title,
        description=body.description,
        location=body.location,
        region=body.region,
        state=body.state,
        lga=body.lga,
        severity=body.severity.value,
        category=body.category,
        status=body.status,
        verification_status=body.verification_status,
        impacted_population=body.impacted_population,
        reporting_method=body.reporting_method,
        reported_by=user.id,
        source_id=body.source_id,
    )
    db.add(incident)
    await db.flush()
    await db.refresh(incident)

    await audit.write(
        AuditEntry(
            user_id=user.id,
            action="incident_created",
            resource="incident",
            resource_id=str(incident.id),
            details={"incidentTitle": incident.title, "status": incident.status},
            ip_address=user.ip_address,
            user_agent=user.user_agent,
        )
    )
    evaluation = await rules.evaluate_for_incident(incident)
    logger.info("incident_created", incident_id=incident.id, notifications=evaluation.count)

    out = IncidentOut.model_validate(incident)
    broadcast(broadcaster, NEW_INCIDENT_EVENT, out.model_dump(mode="json", by_alias=True))
    background_tasks.add_task(
        push_to_all, push_sink, f"Incident: {incident.title}", incident.description, "/incidents"
    )
    return out
