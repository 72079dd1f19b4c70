"""
Rule events — the generic record conditions and templates are evaluated against.
"""

from dataclasses import dataclass, field
from typing import Optional

from ewers.db.models import Alert, Incident
from ewers.schemas.common import RuleEventKind


@dataclass(frozen=True)
class RuleEvent:
    kind: RuleEventKind
    title: str
    description: str
    severity: Optional[str] = None
    region: Optional[str] = None
    category: Optional[str] = None
    source: Optional[str] = None
    # Only alerts carry an escalation level
    escalation_level: Optional[int] = None
    incident_id: Optional[int] = None
    alert_id: Optional[int] = None
    variables: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_incident(cls, incident: Incident) -> "RuleEvent":
        return cls(
            kind=RuleEventKind.INCIDENT_CREATED,
            title=incident.title,
            description=incident.description,
            severity=incident.severity,
            region=incident.region,
            category=incident.category,
            source=str(incident.source_id) if incident.source_id is not None else None,
            incident_id=incident.id,
            variables={
                "incidentTitle": incident.title,
                "incidentDescription": incident.description,
                "incidentLocation": incident.location,
                "incidentRegion": incident.region or "",
                "incidentSeverity": incident.severity or "",
                "incidentCategory": incident.category or "",
            },
        )

    @classmethod
    def from_alert(cls, alert: Alert) -> "RuleEvent":
        return cls(
            kind=RuleEventKind.ALERT_CREATED,
            title=alert.title,
            description=alert.description,
            severity=alert.severity,
            region=alert.region,
            category=alert.category,
            source=alert.source,
            escalation_level=alert.escalation_level,
            alert_id=alert.id,
            variables={
                "alertTitle": alert.title,
                "alertDescription": alert.description,
                "alertLocation": alert.location,
                "alertRegion": alert.region or "",
                "alertSeverity": alert.severity or "",
                "alertCategory": alert.category or "",
                "alertSource": alert.source or "",
                "alertEscalationLevel": str(alert.escalation_level) if alert.escalation_level is not None else "",
            },
        )

    @property
    def fallback_title(self) -> str:
        prefix = "Incident" if self.kind == RuleEventKind.INCIDENT_CREATED else "Alert"
        return f"{prefix}: {self.title}"
