"""
Incident Review API Endpoints.

GET  /api/incidents/pending-review     — review queue (pending + unverified)
GET  /api/incidents/review-stats       — pending / verified / rejected counts
POST /api/incidents/batch-accept       — accept many (best-effort)
POST /api/incidents/batch-discard      — discard many (best-effort)
POST /api/incidents/{id}/accept        — publish one incident
POST /api/incidents/{id}/discard       — reject one incident
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from ewers.api.deps import CurrentUser, get_current_user, get_review_service
from ewers.review.service import IncidentReviewService
from ewers.schemas.incident import IncidentOut
from ewers.schemas.review import (
    BatchAcceptRequest,
    BatchActionResponse,
    BatchDiscardRequest,
    BatchItemOut,
    DiscardRequest,
    IncidentActionResponse,
    ReviewStatsOut,
)

router = APIRouter(prefix="/api/incidents", tags=["incident-review"])


@router.get("/pending-review", response_model=list[IncidentOut])
async def pending_review(
    state: Optional[str] = Query(None),
    lga: Optional[str] = Query(None),
    reporting_method: Optional[str] = Query(None, alias="reportingMethod"),
    service: IncidentReviewService = Depends(get_review_service),
):
    """Incidents awaiting review, newest first."""
    incidents = await service.pending_for_review(state=state, lga=lga, reporting_method=reporting_method)
    return [IncidentOut.model_validate(i) for i in incidents]


@router.get("/review-stats", response_model=ReviewStatsOut)
async def review_stats(service: IncidentReviewService = Depends(get_review_service)):
    stats = await service.review_stats()
    return ReviewStatsOut(
        pending=stats.pending,
        verified=stats.verified,
        rejected=stats.rejected,
        total=stats.total,
    )


@router.post("/batch-accept", response_model=BatchActionResponse)
async def batch_accept(
    body: BatchAcceptRequest,
    user: CurrentUser = Depends(get_current_user),
    service: IncidentReviewService = Depends(get_review_service),
):
    result = await service.batch_accept(body.incident_ids, user)
    return BatchActionResponse(
        message=f"{result.count} incidents accepted",
        incidents=[IncidentOut.model_validate(i) for i in result.incidents],
        results=[BatchItemOut(incident_id=item.incident_id, outcome=item.outcome.value) for item in result.items],
    )


@router.post("/batch-discard", response_model=BatchActionResponse)
async def batch_discard(
    body: BatchDiscardRequest,
    user: CurrentUser = Depends(get_current_user),
    service: IncidentReviewService = Depends(get_review_service),
):
    result = await service.batch_discard(body.incident_ids, user, reason=body.reason)
    return BatchActionResponse(
        message=f"{result.count} incidents discarded",
        incidents=[IncidentOut.model_validate(i) for i in result.incidents],
        results=[BatchItemOut(incident_id=item.incident_id, outcome=item.outcome.value) for item in result.items],
    )


@router.post("/{incident_id}/accept", response_model=IncidentActionResponse)
async def accept_incident(
    incident_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: IncidentReviewService = Depends(get_review_service),
):
    """Accept a pending incident: it becomes active and verified."""
    result = await service.accept(incident_id, user)
    message = "Incident accepted and published" if result.changed else "Incident already accepted"
    return IncidentActionResponse(message=message, incident=IncidentOut.model_validate(result.incident))


@router.post("/{incident_id}/discard", response_model=IncidentActionResponse)
async def discard_incident(
    incident_id: int,
    body: Optional[DiscardRequest] = Body(None),
    user: CurrentUser = Depends(get_current_user),
    service: IncidentReviewService = Depends(get_review_service),
):
    """Discard a pending incident: it becomes rejected."""
    reason = body.reason if body else None
    result = await service.discard(incident_id, user, reason=reason)
    message = "Incident discarded" if result.changed else "Incident already discarded"
    return IncidentActionResponse(message=message, incident=IncidentOut.model_validate(result.incident))
