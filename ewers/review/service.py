"""
Incident Review Service.

Single and batch accept/discard, the pending queue, and review counts.

Batches are best-effort: items are processed in order, a skipped item
never undoes the ones before it, and the caller gets a per-item outcome.
One audit entry covers the whole batch. Transitions do not evaluate
notification rules.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Optional, Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ewers.auth.dependencies import CurrentUser
from ewers.db import queries
from ewers.db.models import Incident
from ewers.exceptions import InvalidTransitionError, NotFoundError, ValidationFailedError
from ewers.review.state_machine import Decision, ReviewAction, decide, target_state
from ewers.services.audit import AuditEntry, AuditResult, AuditService

logger = structlog.get_logger(__name__)

NO_REASON = "No reason provided"


class ItemOutcome(StrEnum):
    ACCEPTED = "accepted"
    DISCARDED = "discarded"
    UNCHANGED = "unchanged"
    NOT_FOUND = "not_found"
    INVALID_TRANSITION = "invalid_transition"


APPLIED_OUTCOME = {
    ReviewAction.ACCEPT: ItemOutcome.ACCEPTED,
    ReviewAction.DISCARD: ItemOutcome.DISCARDED,
}

SINGLE_AUDIT_ACTION = {
    ReviewAction.ACCEPT: "incident_accepted",
    ReviewAction.DISCARD: "incident_discarded",
}

BATCH_AUDIT_ACTION = {
    ReviewAction.ACCEPT: "incidents_batch_accepted",
    ReviewAction.DISCARD: "incidents_batch_discarded",
}


@dataclass
class ReviewResult:
    incident: Incident
    changed: bool
    audit: Optional[AuditResult] = None


@dataclass
class BatchItem:
    incident_id: int
    outcome: ItemOutcome


@dataclass
class BatchResult:
    action: ReviewAction
    incidents: list[Incident] = field(default_factory=list)
    items: list[BatchItem] = field(default_factory=list)
    audit: Optional[AuditResult] = None

    @property
    def count(self) -> int:
        return len(self.incidents)


@dataclass(frozen=True)
class ReviewStats:
    pending: int
    verified: int
    rejected: int

    @property
    def total(self) -> int:
        return self.pending + self.verified + self.rejected


class IncidentReviewService:
    def __init__(self, session: AsyncSession, audit: Optional[AuditService] = None):
        self.session = session
        self.audit = audit or AuditService(session)

    # ── Queries ───────────────────────────────────────────────────────────

    async def pending_for_review(
        self,
        state: Optional[str] = None,
        lga: Optional[str] = None,
        reporting_method: Optional[str] = None,
    ) -> Sequence[Incident]:
        return await queries.get_pending_incidents(
            self.session, state=state, lga=lga, reporting_method=reporting_method
        )

    async def review_stats(self) -> ReviewStats:
        counts = await queries.count_review_states(self.session)
        return ReviewStats(**counts)

    # ── Single transitions ────────────────────────────────────────────────

    async def accept(self, incident_id: int, actor: CurrentUser) -> ReviewResult:
        return await self._transition_one(incident_id, ReviewAction.ACCEPT, actor)

    async def discard(
        self, incident_id: int, actor: CurrentUser, reason: Optional[str] = None
    ) -> ReviewResult:
        return await self._transition_one(incident_id, ReviewAction.DISCARD, actor, reason)

    async def _transition_one(
        self,
        incident_id: int,
        action: ReviewAction,
        actor: CurrentUser,
        reason: Optional[str] = None,
    ) -> ReviewResult:
        incident = await queries.get_incident(self.session, incident_id)
        if incident is None:
            raise NotFoundError("incident", incident_id)

        decision = decide(incident.status, incident.verification_status, action)
        if decision == Decision.UNCHANGED:
            logger.info("incident_review_unchanged", incident_id=incident_id, action=action.value)
            return ReviewResult(incident=incident, changed=False)
        if decision == Decision.INVALID:
            status, _ = target_state(action)
            raise InvalidTransitionError(incident_id, incident.status, status.value)

        await self._apply(incident, action)

        details = {"incidentTitle": incident.title}
        if action == ReviewAction.DISCARD:
            details["reason"] = reason or NO_REASON
        audit = await self.audit.write(
            AuditEntry(
                user_id=actor.id,
                action=SINGLE_AUDIT_ACTION[action],
                resource="incident",
                resource_id=str(incident.id),
                details=details,
                ip_address=actor.ip_address,
                user_agent=actor.user_agent,
            )
        )

        logger.info(
            SINGLE_AUDIT_ACTION[action],
            incident_id=incident.id,
            user_id=actor.id,
            audit_ok=audit.ok,
        )
        return ReviewResult(incident=incident, changed=True, audit=audit)

    # ── Batch transitions ─────────────────────────────────────────────────

    async def batch_accept(self, incident_ids: Sequence[int], actor: CurrentUser) -> BatchResult:
        return await self._transition_many(incident_ids, ReviewAction.ACCEPT, actor)

    async def batch_discard(
        self, incident_ids: Sequence[int], actor: CurrentUser, reason: Optional[str] = None
    ) -> BatchResult:
        return await self._transition_many(incident_ids, ReviewAction.DISCARD, actor, reason)

    async def _transition_many(
        self,
        incident_ids: Sequence[int],
        action: ReviewAction,
        actor: CurrentUser,
        reason: Optional[str] = None,
    ) -> BatchResult:
        if not isinstance(incident_ids, (list, tuple)) or not incident_ids:
            raise ValidationFailedError("Invalid incident IDs", field="incidentIds")

        result = BatchResult(action=action)
        for incident_id in incident_ids:
            incident = await queries.get_incident(self.session, incident_id)
            if incident is None:
                result.items.append(BatchItem(incident_id, ItemOutcome.NOT_FOUND))
                continue

            decision = decide(incident.status, incident.verification_status, action)
            if decision == Decision.UNCHANGED:
                result.items.append(BatchItem(incident_id, ItemOutcome.UNCHANGED))
                continue
            if decision == Decision.INVALID:
                result.items.append(BatchItem(incident_id, ItemOutcome.INVALID_TRANSITION))
                continue

            await self._apply(incident, action)
            result.incidents.append(incident)
            result.items.append(BatchItem(incident_id, APPLIED_OUTCOME[action]))

        details: dict = {"count": result.count, "incidentIds": list(incident_ids)}
        if action == ReviewAction.DISCARD:
            details["reason"] = reason or NO_REASON
        result.audit = await self.audit.write(
            AuditEntry(
                user_id=actor.id,
                action=BATCH_AUDIT_ACTION[action],
                resource="incident",
                resource_id="batch",
                details=details,
                ip_address=actor.ip_address,
                user_agent=actor.user_agent,
            )
        )

        logger.info(
            BATCH_AUDIT_ACTION[action],
            requested=len(incident_ids),
            transitioned=result.count,
            skipped=len(incident_ids) - result.count,
            user_id=actor.id,
        )
        return result

    async def _apply(self, incident: Incident, action: ReviewAction) -> None:
        status, verification = target_state(action)
        incident.status = status.value
        incident.verification_status = verification.value
        await self.session.flush()
