"""
Risk Analysis API Endpoints.

POST /api/analysis/generate                    — score a region, persist a RiskAnalysis
POST /api/analysis/generate-alert/{analysisId} — convert an analysis into an Alert
POST /api/analysis/incident/{incidentId}       — read-only assessment of one incident
"""

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import JSONResponse

from ewers.alerting.generator import AlertGenerator
from ewers.analysis.analyzer import RiskAnalyzer
from ewers.analysis.schemas import IncidentAssessment
from ewers.api.deps import (
    CurrentUser,
    get_alert_generator,
    get_broadcaster,
    get_current_user,
    get_push_sink,
    get_risk_analyzer,
    get_rule_engine,
)
from ewers.api.routers.alerts import announce_alert
from ewers.notifications.engine import NotificationRuleEngine
from ewers.schemas.alert import AlertNotGenerated, AlertOut
from ewers.schemas.analysis import GenerateAnalysisRequest, RiskAnalysisOut
from ewers.services.broadcast import Broadcaster
from ewers.services.push import PushSink

router = APIRouter(prefix="/api/analysis", tags=["analysis"])


@router.post("/generate", response_model=RiskAnalysisOut, status_code=201)
async def generate_analysis(
    body: GenerateAnalysisRequest,
    user: CurrentUser = Depends(get_current_user),
    analyzer: RiskAnalyzer = Depends(get_risk_analyzer),
):
    """
    Generate a risk analysis for a region, optionally narrowed to a location.

    Returns 400 when there are no incidents or indicators to analyze.
    """
    analysis = await analyzer.generate(body.region, body.location, created_by=user.id)
    return RiskAnalysisOut.model_validate(analysis)


@router.post(
    "/generate-alert/{analysis_id}",
    response_model=AlertOut,
    status_code=201,
    responses={200: {"model": AlertNotGenerated, "description": "Low severity, no alert needed"}},
)
async def generate_alert(
    analysis_id: int,
    background_tasks: BackgroundTasks,
    generator: AlertGenerator = Depends(get_alert_generator),
    rules: NotificationRuleEngine = Depends(get_rule_engine),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    push_sink: PushSink = Depends(get_push_sink),
):
    outcome = await generator.generate(analysis_id)
    if not outcome.created:
        body = AlertNotGenerated(message=outcome.message)
        return JSONResponse(status_code=200, content=body.model_dump(by_alias=True))

    return await announce_alert(outcome.alert, rules, broadcaster, push_sink, background_tasks)


@router.post("/incident/{incident_id}", response_model=IncidentAssessment)
async def analyze_incident(
    incident_id: int,
    analyzer: RiskAnalyzer = Depends(get_risk_analyzer),
):
    return await analyzer.analyze_incident(incident_id)
