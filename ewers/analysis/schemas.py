"""
Risk Analysis Schemas.

Drafts produced by scorers, the scoring request, and the read-only
incident assessment.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from pydantic import BaseModel, Field

from ewers.schemas.base import ApiModel
from ewers.schemas.common import Impact, Likelihood, Severity, Timeframe


class ScoringError(Exception):
    """A scorer could not produce a draft. Internal; triggers fallback."""

    pass


@dataclass(frozen=True)
class ScoringRequest:
    region: str
    location: Optional[str] = None

    @property
    def location_or_region(self) -> str:
        return self.location or self.region


class AnalysisDraft(BaseModel):
    """Unpersisted analysis result returned by every scorer."""

    title: str
    description: str
    analysis: str
    severity: Severity
    likelihood: Likelihood
    impact: Impact
    recommendations: str
    timeframe: Timeframe
    patterns: Optional[str] = None
    scorer: str = Field(description="Which scorer produced the draft: llm | heuristic")


class RiskScorer(Protocol):
    async def score(self, request: ScoringRequest) -> AnalysisDraft:
        ...


# ── Incident assessment ───────────────────────────────────────────────────


class IncidentBrief(ApiModel):
    id: int
    title: str
    location: str
    region: str
    state: Optional[str] = None
    severity: str
    category: str
    status: str
    impacted_population: Optional[int] = None
    reported_at: datetime


class IndicatorBrief(ApiModel):
    id: int
    name: str
    category: str
    value: int
    trend: Optional[str] = None
    confidence: Optional[int] = None


class IncidentAssessment(ApiModel):
    incident: IncidentBrief
    summary: str
    related_incidents: list[IncidentBrief]
    related_indicators: list[IndicatorBrief]
    patterns: str
    potential_escalation: str
    recommended_actions: str
