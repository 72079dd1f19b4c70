"""
Risk Analyzer.

Turns a scorer's draft into a persisted RiskAnalysis, and produces the
read-only assessment of a single incident.
"""

from typing import Optional, Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ewers.analysis.schemas import (
    IncidentAssessment,
    IncidentBrief,
    IndicatorBrief,
    RiskScorer,
    ScoringRequest,
)
from ewers.config import settings
from ewers.db import queries
from ewers.db.models import Incident, RiskAnalysis, RiskIndicator
from ewers.exceptions import NotFoundError
from ewers.schemas.common import Severity, Trend

logger = structlog.get_logger(__name__)

INCIDENT_PHRASES = {
    "violence": "This violent incident",
    "natural_disaster": "This natural disaster",
    "protest": "This protest activity",
    "security": "This security incident",
    "fire": "This fire incident",
}


class RiskAnalyzer:
    def __init__(
        self,
        session: AsyncSession,
        scorer: RiskScorer,
        system_user_id: Optional[int] = None,
    ):
        self.session = session
        self.scorer = scorer
        self.system_user_id = (
            settings.analysis_system_user_id if system_user_id is None else system_user_id
        )

    async def generate(
        self, region: str, location: Optional[str] = None, created_by: Optional[int] = None
    ) -> RiskAnalysis:
        """
        Score a region (optionally narrowed to a location) and persist the result.

        Raises InsufficientDataError when neither incidents nor indicators exist.
        """
        request = ScoringRequest(region=region, location=location or None)
        draft = await self.scorer.score(request)

        analysis = RiskAnalysis(
            title=draft.title,
            description=draft.description,
            analysis=draft.analysis,
            severity=draft.severity.value,
            likelihood=draft.likelihood.value,
            impact=draft.impact.value,
            recommendations=draft.recommendations,
            timeframe=draft.timeframe.value,
            patterns=draft.patterns,
            region=region,
            location=request.location_or_region,
            scorer=draft.scorer,
            created_by=created_by if created_by is not None else self.system_user_id,
        )
        self.session.add(analysis)
        await self.session.flush()

        logger.info(
            "risk_analysis_created",
            analysis_id=analysis.id,
            region=region,
            location=analysis.location,
            severity=analysis.severity,
            likelihood=analysis.likelihood,
            scorer=analysis.scorer,
        )
        return analysis

    async def analyze_incident(self, incident_id: int) -> IncidentAssessment:
        incident = await queries.get_incident(self.session, incident_id)
        if incident is None:
            raise NotFoundError("incident", incident_id)

        related = await queries.get_related_incidents(self.session, incident)
        indicators = await queries.get_incident_indicators(self.session, incident)

        return IncidentAssessment(
            incident=IncidentBrief.model_validate(incident),
            summary=incident_summary(incident),
            related_incidents=[IncidentBrief.model_validate(i) for i in related],
            related_indicators=[IndicatorBrief.model_validate(r) for r in indicators],
            patterns=identify_patterns(incident, related),
            potential_escalation=escalation_potential(incident, indicators),
            recommended_actions=recommend_actions(incident),
        )


# ── Incident assessment text ──────────────────────────────────────────────


def incident_summary(incident: Incident) -> str:
    parts = [
        f"{incident.title} occurred in {incident.location}, {incident.state or incident.region}.",
        f"This {incident.severity} severity incident is currently {incident.status}.",
    ]
    if incident.impacted_population:
        parts.append(f"Approximately {incident.impacted_population} individuals have been affected.")
    if incident.category:
        phrase = INCIDENT_PHRASES.get(incident.category, "This incident")
        parts.append(f"{phrase} requires attention based on its characteristics and context.")
    return " ".join(parts)


def identify_patterns(incident: Incident, related: Sequence[Incident]) -> str:
    if not related:
        return "No related incidents found to establish patterns."

    parts: list[str] = []
    same_category = [i for i in related if i.category == incident.category]
    if same_category:
        parts.append(f"{len(same_category)} similar {incident.category} incidents recorded in the region.")
    same_location = [i for i in related if i.location == incident.location]
    if same_location:
        parts.append(f"Location has experienced {len(same_location)} previous incidents.")
    severe = [i for i in related if i.severity == Severity.HIGH]
    if severe:
        parts.append(f"{len(severe)} high-severity incidents have occurred in this region recently.")

    return " ".join(parts) or "No clear patterns identified from related incidents."


def escalation_potential(incident: Incident, indicators: Sequence[RiskIndicator]) -> str:
    if not indicators:
        return "Insufficient risk indicators to assess escalation potential."

    parts: list[str] = []
    high_risk = [r for r in indicators if r.value >= 75]
    if high_risk:
        parts.append(f"{len(high_risk)} high-level risk indicators present in the area.")
    increasing = [r for r in indicators if r.trend == Trend.INCREASING]
    if increasing:
        parts.append(f"{len(increasing)} risk factors show increasing trends.")

    if incident.severity == Severity.HIGH:
        parts.append("Incident characteristics suggest high potential for further developments.")
    elif incident.severity == Severity.MEDIUM:
        parts.append("Moderate potential for escalation based on incident severity.")
    else:
        parts.append("Low immediate escalation potential based on incident characteristics.")

    if len(high_risk) >= 2 or len(increasing) >= 3:
        parts.append("Overall assessment: HIGH escalation potential.")
    elif high_risk or increasing:
        parts.append("Overall assessment: MEDIUM escalation potential.")
    else:
        parts.append("Overall assessment: LOW escalation potential.")

    return " ".join(parts)


def recommend_actions(incident: Incident) -> str:
    category = incident.category
    if incident.severity == Severity.HIGH:
        parts = [
            "Immediate response required.",
            "Activate relevant response teams.",
            "Establish coordination center.",
        ]
        if category == "violence":
            parts += [
                "Deploy security teams and conflict resolution specialists.",
                "Initiate community protection measures.",
            ]
        elif category == "natural_disaster":
            parts += [
                "Initiate evacuation protocols where necessary.",
                "Deploy search and rescue teams.",
                "Establish emergency shelter and aid distribution.",
            ]
        elif category == "security":
            parts += [
                "Coordinate with security agencies.",
                "Implement protection measures for vulnerable populations.",
            ]
        parts.append("Conduct comprehensive risk analysis.")
    elif incident.severity == Severity.MEDIUM:
        parts = [
            "Increase monitoring and prepare response capabilities.",
            "Alert relevant response teams.",
        ]
        if category == "violence":
            parts += [
                "Engage community leaders for de-escalation.",
                "Prepare conflict resolution resources.",
            ]
        elif category == "protest":
            parts += [
                "Monitor for potential escalation.",
                "Establish communication channels with protest leaders.",
            ]
        elif category == "fire":
            parts += [
                "Ensure fire response resources are ready.",
                "Prepare evacuation plans if needed.",
            ]
        parts.append("Assess need for further analysis and prevention measures.")
    else:
        parts = [
            "Monitor situation developments.",
            "Document incident details for pattern analysis.",
            "Review prevention and preparedness measures.",
        ]
    return " ".join(parts)
