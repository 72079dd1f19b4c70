"""
LLM-assisted risk scoring.

Builds a compact context of the most severe active incidents and the
highest-value indicators, asks the model for a JSON analysis, and validates
the result into an AnalysisDraft. Anything unusable raises ScoringError;
FallbackScorer turns that into a heuristic run.
"""

import asyncio
import json
from typing import Any, Optional, Protocol, Sequence

import structlog
from pydantic import ValidationError

from ewers.analysis.schemas import AnalysisDraft, ScoringError, ScoringRequest
from ewers.analysis.store import IncidentStore
from ewers.config import settings
from ewers.db.models import Incident, RiskIndicator
from ewers.schemas.common import Severity

logger = structlog.get_logger(__name__)

LLM_SCORER = "llm"

SYSTEM_PROMPT = """You are an expert crisis analyst for an Early Warning and Early Response System in Nigeria.
Analyze incidents and risk indicators to provide:
1. Severity assessment (low/medium/high)
2. Likelihood of escalation (unlikely/possible/likely/very_likely)
3. Impact assessment (minimal/minor/moderate/significant/severe)
4. Timeframe (immediate/short_term/medium_term/long_term)
5. Actionable recommendations
6. Pattern recognition across incidents
Be concise, data-driven, and focus on conflict prevention and peacebuilding.
Respond with a single JSON object and nothing else."""

NARRATIVE_DEFAULTS = {
    "description": "",
    "analysis": "",
    "severity": Severity.MEDIUM.value,
    "likelihood": "possible",
    "impact": "moderate",
    "recommendations": "",
    "timeframe": "short_term",
}

ENUM_FIELDS = ("severity", "likelihood", "impact", "timeframe")


class LLMClient(Protocol):
    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        ...


def build_context(
    request: ScoringRequest,
    incidents: Sequence[Incident],
    indicators: Sequence[RiskIndicator],
) -> dict[str, Any]:
    return {
        "region": request.region,
        "location": request.location_or_region,
        "incidents": [
            {
                "title": i.title,
                "description": i.description,
                "severity": i.severity,
                "category": i.category,
                "location": i.location,
                "impactedPopulation": i.impacted_population,
            }
            for i in incidents
        ],
        "riskIndicators": [
            {
                "name": r.name,
                "value": r.value,
                "category": r.category,
                "trend": r.trend,
            }
            for r in indicators
        ],
    }


def build_user_prompt(request: ScoringRequest, context: dict[str, Any]) -> str:
    place = f"{request.region}, {request.location}" if request.location else request.region
    return (
        f"Analyze this crisis situation in {place}:\n\n"
        f"{json.dumps(context, indent=2)}\n\n"
        "Provide: title, description, analysis, severity, likelihood, impact, "
        "recommendations, timeframe, and patterns (if any). Respond with valid JSON only."
    )


def _as_text(value: Any) -> Optional[str]:
    """Models sometimes answer lists where prose was asked for."""
    if value is None:
        return None
    if isinstance(value, list):
        return "\n".join(str(v) for v in value)
    return str(value)


def parse_draft(raw: str, request: ScoringRequest) -> AnalysisDraft:
    """Validate a model response into a draft. Raises ScoringError."""
    if not raw or not raw.strip():
        raise ScoringError("Empty response from LLM")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ScoringError(f"LLM response is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise ScoringError("LLM response is not a JSON object")

    fields: dict[str, Any] = {"title": _as_text(data.get("title")) or f"Crisis Analysis: {request.region}"}
    for key, default in NARRATIVE_DEFAULTS.items():
        value = _as_text(data.get(key)) or default
        if key in ENUM_FIELDS:
            value = value.strip().lower()
        fields[key] = value

    # The analysis vocabulary tops out at "high"
    if fields["severity"] == Severity.CRITICAL:
        fields["severity"] = Severity.HIGH.value

    try:
        return AnalysisDraft(
            **fields,
            patterns=_as_text(data.get("patterns")) or None,
            scorer=LLM_SCORER,
        )
    except ValidationError as e:
        raise ScoringError(f"LLM response failed validation: {e.error_count()} errors") from e


class LLMScorer:
    def __init__(
        self,
        store: IncidentStore,
        llm_client: LLMClient,
        context_limit: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self.store = store
        self.llm_client = llm_client
        self.context_limit = context_limit or settings.llm_context_limit
        self.timeout = timeout or settings.llm_timeout_seconds

    async def _gather(self, request: ScoringRequest) -> tuple[Sequence[Incident], Sequence[RiskIndicator]]:
        incidents = await self.store.active_incidents(
            request.region, request.location, limit=self.context_limit
        )
        if not incidents and request.location:
            incidents = await self.store.active_incidents(request.region, limit=self.context_limit)

        indicators = await self.store.indicators(
            request.region, request.location, limit=self.context_limit
        )
        if not indicators and request.location:
            indicators = await self.store.indicators(request.region, limit=self.context_limit)

        return incidents, indicators

    async def _complete(self, user_prompt: str) -> str:
        # Only the model call is bounded; context queries share the request session
        try:
            return await asyncio.wait_for(
                self.llm_client.complete(SYSTEM_PROMPT, user_prompt), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise ScoringError(f"LLM did not answer within {self.timeout}s") from e

    async def score(self, request: ScoringRequest) -> AnalysisDraft:
        incidents, indicators = await self._gather(request)
        if not incidents and not indicators:
            raise ScoringError("No incidents or indicators to send to the LLM")

        context = build_context(request, incidents, indicators)
        raw = await self._complete(build_user_prompt(request, context))
        draft = parse_draft(raw, request)

        logger.info(
            "llm_scored",
            region=request.region,
            location=request.location,
            incidents=len(incidents),
            indicators=len(indicators),
            severity=draft.severity.value,
        )
        return draft
