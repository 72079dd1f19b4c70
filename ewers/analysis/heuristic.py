"""
Heuristic risk scoring.

Deterministic classification and narrative over incidents and indicators.
Every function here is pure: identical inputs yield identical output, so
drafts can be compared verbatim in tests.

Inputs are ordered the way the store returns them: incidents most severe
first, indicators highest value first. The "dominant" incident is the
first one.
"""

from typing import Iterable, Optional, Protocol, Sequence

import structlog

from ewers.analysis.schemas import AnalysisDraft, ScoringRequest
from ewers.analysis.store import IncidentStore
from ewers.config import settings
from ewers.exceptions import InsufficientDataError
from ewers.schemas.common import Impact, Likelihood, Severity, Timeframe, Trend

logger = structlog.get_logger(__name__)

HEURISTIC_SCORER = "heuristic"

CATEGORY_TITLES = {
    "violence": "Violent Conflict",
    "natural_disaster": "Natural Disaster",
    "protest": "Civil Unrest",
    "security": "Security Situation",
    "fire": "Fire Incident",
}

HIGH_CONFIDENCE = 80


class IncidentLike(Protocol):
    severity: str
    category: str
    location: str
    impacted_population: Optional[int]


class IndicatorLike(Protocol):
    name: str
    category: str
    value: int
    trend: Optional[str]
    confidence: Optional[int]


# ── Classification ────────────────────────────────────────────────────────


def classify_severity(
    incidents: Sequence[IncidentLike], indicators: Sequence[IndicatorLike]
) -> Severity:
    if any(i.severity == Severity.HIGH for i in incidents) or any(r.value >= 80 for r in indicators):
        return Severity.HIGH
    if any(i.severity == Severity.MEDIUM for i in incidents) or any(r.value >= 70 for r in indicators):
        return Severity.MEDIUM
    return Severity.LOW


def classify_likelihood(indicators: Sequence[IndicatorLike]) -> Likelihood:
    values = [r.value for r in indicators]
    if len(values) >= 5 and sum(1 for v in values if v >= 75) >= 3:
        return Likelihood.VERY_LIKELY
    if len(values) >= 3 and sum(1 for v in values if v >= 70) >= 2:
        return Likelihood.LIKELY
    if len(values) <= 1 or all(v < 65 for v in values):
        return Likelihood.UNLIKELY
    return Likelihood.POSSIBLE


def classify_impact(incidents: Sequence[IncidentLike]) -> Impact:
    populations = [i.impacted_population for i in incidents]
    high_count = sum(1 for i in incidents if i.severity == Severity.HIGH)

    if any(p is not None and p > 1000 for p in populations) or high_count >= 2:
        return Impact.SEVERE
    if any(p is not None and p > 500 for p in populations) or any(
        i.severity == Severity.MEDIUM for i in incidents
    ):
        return Impact.SIGNIFICANT
    if all(p is None or p < 100 for p in populations) and all(
        i.severity == Severity.LOW for i in incidents
    ):
        return Impact.MINOR
    return Impact.MODERATE


def classify_timeframe(severity: Severity, likelihood: Likelihood) -> Timeframe:
    if severity == Severity.HIGH and likelihood in (Likelihood.LIKELY, Likelihood.VERY_LIKELY):
        return Timeframe.IMMEDIATE
    if severity == Severity.LOW and likelihood == Likelihood.UNLIKELY:
        return Timeframe.LONG_TERM
    return Timeframe.MEDIUM_TERM


# ── Narrative ─────────────────────────────────────────────────────────────


def _sentences(parts: Iterable[str]) -> str:
    return " ".join(p for p in parts if p)


def build_title(
    place: str, incidents: Sequence[IncidentLike], indicators: Sequence[IndicatorLike]
) -> str:
    if incidents:
        category = incidents[0].category
        label = CATEGORY_TITLES.get(category, category) if category else "Security Situation"
        return f"{label} Analysis for {place}"
    if indicators:
        return f"{indicators[0].name} Risk Assessment for {place}"
    return f"Comprehensive Risk Analysis for {place}"


def build_description(
    place: str, incidents: Sequence[IncidentLike], indicators: Sequence[IndicatorLike]
) -> str:
    if incidents and indicators:
        return (
            f"Analysis of current situation in {place} based on {len(incidents)} "
            f"active incidents and {len(indicators)} risk indicators."
        )
    if incidents:
        return f"Assessment of ongoing incidents in {place} and their potential evolution."
    if indicators:
        return f"Evaluation of early warning signals and risk factors in {place}."
    return f"Comprehensive analysis of security and risk factors in {place}."


def build_analysis_text(
    incidents: Sequence[IncidentLike],
    indicators: Sequence[IndicatorLike],
    severity: Severity,
    likelihood: Likelihood,
    impact: Impact,
) -> str:
    parts: list[str] = []

    if incidents:
        parts.append(
            f"Analysis based on {len(incidents)} active incidents indicates a "
            f"{severity.value} severity situation."
        )
        violent = [i for i in incidents if i.category == "violence" or i.severity == Severity.HIGH]
        if violent:
            places = ", ".join(i.location for i in violent)
            parts.append(f"Violent incidents in {places} represent significant concern.")
        affected = sum(i.impacted_population or 0 for i in incidents)
        if affected > 0:
            parts.append(f"Approximately {affected} individuals have been affected by current incidents.")

    if indicators:
        parts.append(
            f"Risk indicators suggest {likelihood.value} probability of escalation "
            f"with {impact.value} potential impact."
        )
        worsening = [r for r in indicators if r.trend == Trend.INCREASING]
        if worsening:
            names = " and ".join(r.name for r in worsening[:2])
            parts.append(f"{len(worsening)} indicators show worsening trends, particularly {names}.")
        confident = [r for r in indicators if (r.confidence or 0) >= HIGH_CONFIDENCE]
        if confident:
            parts.append(f"High confidence in {len(confident)} key risk factors.")

    if severity == Severity.HIGH:
        parts.append("Situation requires immediate attention and coordinated response effort.")
    elif severity == Severity.MEDIUM:
        parts.append("Situation warrants close monitoring and preparedness for response.")
    else:
        parts.append("Continuing situation monitoring recommended.")

    return _sentences(parts)


def build_recommendations(
    incidents: Sequence[IncidentLike],
    indicators: Sequence[IndicatorLike],
    severity: Severity,
) -> str:
    parts: list[str] = []

    if severity == Severity.HIGH:
        parts.append("Immediate deployment of response teams.")
        if any(i.category == "violence" for i in incidents):
            parts.append("Enhance security presence in affected areas. Deploy conflict resolution specialists.")
        if any(i.category == "natural_disaster" for i in incidents):
            parts.append("Activate emergency evacuation plans. Prepare humanitarian assistance packages.")
        parts.append("Establish coordination center for ongoing monitoring and response.")
    elif severity == Severity.MEDIUM:
        parts.append("Increase monitoring frequency. Alert relevant response teams for potential deployment.")
        if any(r.category == "political" for r in indicators):
            parts.append("Engage with community leaders and stakeholders for de-escalation.")
        if any(r.category == "environmental" for r in indicators):
            parts.append("Review preparedness measures for potential environmental impacts.")
        parts.append("Prepare public communication strategy for potential developments.")
    else:
        parts.append("Maintain routine monitoring. Review existing prevention measures.")
        parts.append("Update contingency plans based on latest risk assessment.")

    return _sentences(parts)


def score_heuristically(
    request: ScoringRequest,
    incidents: Sequence[IncidentLike],
    indicators: Sequence[IndicatorLike],
) -> AnalysisDraft:
    """
    Classify and narrate one region/location.

    Raises InsufficientDataError when there is nothing to analyze.
    """
    if not incidents and not indicators:
        raise InsufficientDataError(details={"region": request.region, "location": request.location})

    severity = classify_severity(incidents, indicators)
    likelihood = classify_likelihood(indicators)
    impact = classify_impact(incidents)
    place = request.location_or_region

    return AnalysisDraft(
        title=build_title(place, incidents, indicators),
        description=build_description(place, incidents, indicators),
        analysis=build_analysis_text(incidents, indicators, severity, likelihood, impact),
        severity=severity,
        likelihood=likelihood,
        impact=impact,
        recommendations=build_recommendations(incidents, indicators, severity),
        timeframe=classify_timeframe(severity, likelihood),
        scorer=HEURISTIC_SCORER,
    )


class HeuristicScorer:
    """Store-backed wrapper around `score_heuristically`."""

    def __init__(self, store: IncidentStore, indicator_floor: Optional[int] = None):
        self.store = store
        self.indicator_floor = (
            settings.indicator_value_floor if indicator_floor is None else indicator_floor
        )

    async def score(self, request: ScoringRequest) -> AnalysisDraft:
        incidents = await self.store.active_incidents(request.region, request.location)
        indicators = await self.store.indicators(
            request.region, request.location, min_value=self.indicator_floor
        )
        draft = score_heuristically(request, incidents, indicators)
        logger.info(
            "heuristic_scored",
            region=request.region,
            location=request.location,
            incidents=len(incidents),
            indicators=len(indicators),
            severity=draft.severity.value,
            likelihood=draft.likelihood.value,
        )
        return draft
