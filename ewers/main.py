"""
EWERS Core — FastAPI Application.

Run: uvicorn ewers.main:app --host 0.0.0.0 --port 5000 --reload

Pipeline:
  incidents + indicators → RiskAnalyzer → AlertGenerator → NotificationRuleEngine
  → SSE broadcast + push

Incident review gates machine-sourced incidents before they count as active.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ewers.api.routers.alerts import router as alerts_router
from ewers.api.routers.analysis import router as analysis_router
from ewers.api.routers.events import router as events_router
from ewers.api.routers.incident_review import router as incident_review_router
from ewers.api.routers.incidents import router as incidents_router
from ewers.api.routers.notification_rules import router as notification_rules_router
from ewers.api.routers.notifications import router as notifications_router
from ewers.config import settings
from ewers.db.engine import close_db, init_db
from ewers.exceptions import register_exception_handlers
from ewers.logging_config import configure_logging
from ewers.middleware.auth import AuthMiddleware
from ewers.middleware.error_handler import ErrorHandlerMiddleware
from ewers.middleware.request_context import RequestContextMiddleware

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown."""
    configure_logging()
    logger.info("ewers_starting", version=settings.app_version, environment=settings.environment)
    if not settings.llm_enabled:
        logger.warning("anthropic_api_key_not_set", msg="Risk analysis will use the heuristic scorer only")
    await init_db()
    yield
    await close_db()
    logger.info("ewers_shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description=(
            "# EWERS Core — Early Warning / Early Response\n\n"
            "Risk analysis, alert escalation, notification rules and incident verification.\n\n"
            "## Authentication\n"
            "All endpoints except /health require `Authorization: Bearer <JWT>`.\n"
        ),
        version=settings.app_version,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "health", "description": "Liveness probe"},
            {"name": "incidents", "description": "Incident creation"},
            {"name": "incident-review", "description": "Verification queue, accept / discard"},
            {"name": "analysis", "description": "Risk analysis and alert generation"},
            {"name": "alerts", "description": "Manual alert creation"},
            {"name": "notification-rules", "description": "Admin-configured notification rules"},
            {"name": "notifications", "description": "Per-user notification inbox"},
            {"name": "events", "description": "Server-Sent Events stream"},
        ],
    )

    register_exception_handlers(app)

    # ── Middleware (last added = outermost) ─────────────────────────────
    app.add_middleware(AuthMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    # CORS outermost so OPTIONS preflight is answered before auth
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routes ────────────────────────────────────────────────────────
    app.include_router(incident_review_router)
    app.include_router(incidents_router)
    app.include_router(analysis_router)
    app.include_router(alerts_router)
    app.include_router(notification_rules_router)
    app.include_router(notifications_router)
    app.include_router(events_router)

    @app.get("/health", tags=["health"])
    async def health():
        """Liveness probe. Does not check dependencies."""
        return {
            "status": "ok",
            "version": settings.app_version,
            "service": "ewers-core",
            "llm_enabled": settings.llm_enabled,
        }

    return app


app = create_app()
