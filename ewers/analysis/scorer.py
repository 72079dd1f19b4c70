"""
Scorer composition.

FallbackScorer tries the primary scorer and falls back to the secondary on
any failure. The secondary's own errors (insufficient data) propagate to
the caller. Time limits belong to the primary: LLMScorer bounds only the
model call, so no database work on the shared session is ever cancelled.
"""

from typing import Optional

import structlog

from ewers.analysis.heuristic import HeuristicScorer
from ewers.analysis.llm_scorer import LLMClient, LLMScorer
from ewers.analysis.schemas import AnalysisDraft, RiskScorer, ScoringRequest
from ewers.analysis.store import IncidentStore

logger = structlog.get_logger(__name__)


class FallbackScorer:
    def __init__(self, primary: RiskScorer, secondary: RiskScorer):
        self.primary = primary
        self.secondary = secondary

    async def score(self, request: ScoringRequest) -> AnalysisDraft:
        try:
            return await self.primary.score(request)
        except Exception as e:
            logger.warning(
                "scorer_fallback",
                primary=type(self.primary).__name__,
                secondary=type(self.secondary).__name__,
                reason=type(e).__name__,
                error=str(e),
                region=request.region,
            )
        return await self.secondary.score(request)


def build_scorer(store: IncidentStore, llm_client: Optional[LLMClient] = None) -> RiskScorer:
    """LLM with heuristic fallback when a client is configured, heuristic alone otherwise."""
    heuristic = HeuristicScorer(store)
    if llm_client is None:
        return heuristic
    return FallbackScorer(LLMScorer(store, llm_client), heuristic)
