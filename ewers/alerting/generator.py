"""
Alert Generator.

Converts one RiskAnalysis into one Alert. Low-severity analyses produce an
explicit "not needed" outcome rather than an error, and no row.
"""

from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ewers.alerting.escalation import alert_title, escalation_level, needs_alert
from ewers.db import queries
from ewers.db.models import Alert
from ewers.exceptions import NotFoundError

logger = structlog.get_logger(__name__)

DEFAULT_CHANNELS = ("email", "app")
ALERT_SOURCE = "automated"
NOT_NEEDED_MESSAGE = "Alert generation not needed for low severity analysis"


@dataclass(frozen=True)
class AlertOutcome:
    created: bool
    alert: Optional[Alert] = None
    message: str = ""


class AlertGenerator:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def generate(self, risk_analysis_id: int) -> AlertOutcome:
        """Raises NotFoundError for an unknown analysis id."""
        analysis = await queries.get_risk_analysis(self.session, risk_analysis_id)
        if analysis is None:
            raise NotFoundError("risk analysis", risk_analysis_id)

        if not needs_alert(analysis.severity):
            logger.info(
                "alert_not_needed",
                analysis_id=analysis.id,
                severity=analysis.severity,
            )
            return AlertOutcome(created=False, message=NOT_NEEDED_MESSAGE)

        level = escalation_level(analysis.severity, analysis.likelihood)
        incident = await queries.get_most_severe_incident(
            self.session, analysis.region, analysis.location
        )

        alert = Alert(
            title=alert_title(level, analysis.title),
            description=f"{analysis.description} {analysis.recommendations[:100]}...",
            severity=analysis.severity,
            status="active",
            source=ALERT_SOURCE,
            category=incident.category if incident else None,
            region=analysis.region,
            location=analysis.location,
            incident_id=incident.id if incident else None,
            risk_analysis_id=analysis.id,
            escalation_level=level,
            channels=list(DEFAULT_CHANNELS),
        )
        self.session.add(alert)
        await self.session.flush()

        logger.info(
            "alert_generated",
            alert_id=alert.id,
            analysis_id=analysis.id,
            escalation_level=level,
            incident_id=alert.incident_id,
        )
        return AlertOutcome(created=True, alert=alert, message="Alert generated")
