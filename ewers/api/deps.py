"""
FastAPI dependencies for API routes.

Services are constructed per request around the request's session; shared
collaborators (broadcaster, push sink, LLM client) come from here so tests
can swap them through `app.dependency_overrides`.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ewers.alerting.generator import AlertGenerator
from ewers.analysis.analyzer import RiskAnalyzer
from ewers.analysis.llm_scorer import LLMClient
from ewers.analysis.scorer import build_scorer
from ewers.analysis.store import IncidentStore
from ewers.auth.dependencies import CurrentUser, get_current_user, get_db
from ewers.auth.rbac import require_admin
from ewers.config import settings
from ewers.notifications.engine import NotificationRuleEngine
from ewers.review.service import IncidentReviewService
from ewers.services.audit import AuditService
from ewers.services.broadcast import Broadcaster, broadcaster
from ewers.services.llm_gateway import LLMGateway
from ewers.services.push import PushSink, build_push_sink

__all__ = [
    "CurrentUser",
    "get_current_user",
    "get_db",
    "require_admin",
    "get_broadcaster",
    "get_push_sink",
    "get_llm_client",
    "get_audit_service",
    "get_risk_analyzer",
    "get_alert_generator",
    "get_rule_engine",
    "get_review_service",
]


def get_broadcaster() -> Broadcaster:
    return broadcaster


@lru_cache
def get_push_sink() -> PushSink:
    return build_push_sink()


@lru_cache
def get_llm_client() -> Optional[LLMClient]:
    """Claude gateway when an API key is configured, otherwise None (heuristic only)."""
    if not settings.llm_enabled:
        return None
    return LLMGateway()


def get_audit_service(db: AsyncSession = Depends(get_db)) -> AuditService:
    return AuditService(db)


def get_risk_analyzer(
    db: AsyncSession = Depends(get_db),
    llm_client: Optional[LLMClient] = Depends(get_llm_client),
) -> RiskAnalyzer:
    return RiskAnalyzer(db, build_scorer(IncidentStore(db), llm_client))


def get_alert_generator(db: AsyncSession = Depends(get_db)) -> AlertGenerator:
    return AlertGenerator(db)


def get_rule_engine(db: AsyncSession = Depends(get_db)) -> NotificationRuleEngine:
    return NotificationRuleEngine(db)


def get_review_service(
    db: AsyncSession = Depends(get_db),
    audit: AuditService = Depends(get_audit_service),
) -> IncidentReviewService:
    return IncidentReviewService(db, audit)
