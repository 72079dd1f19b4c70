"""
Tests for the incident verification state machine and review service.

Covers:
- Transition table (apply / unchanged / invalid)
- Single accept and discard, idempotency, audit entries
- Best-effort batches with per-item outcomes and one audit entry
- Review queue filters and stats
- Audit failure does not fail the transition
"""

import pytest
from sqlalchemy import select

from ewers.auth.dependencies import CurrentUser
from ewers.db.models import AuditLog
from ewers.exceptions import InvalidTransitionError, NotFoundError, ValidationFailedError
from ewers.review.service import IncidentReviewService, ItemOutcome
from ewers.review.state_machine import Decision, ReviewAction, decide
from ewers.services.audit import AuditEntry, AuditResult

REVIEWER = CurrentUser(id=7, role="analyst", security_level=3, ip_address="10.0.0.1", user_agent="pytest")


class FailingAudit:
    """Audit sink that always reports failure."""

    def __init__(self):
        self.entries: list[AuditEntry] = []

    async def write(self, entry: AuditEntry) -> AuditResult:
        self.entries.append(entry)
        return AuditResult(ok=False, error="audit store unavailable")


async def _audit_rows(db) -> list[AuditLog]:
    result = await db.execute(select(AuditLog).order_by(AuditLog.id))
    return list(result.scalars().all())


# ── State machine ──────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "status,verification,action,expected",
    [
        ("pending", "unverified", ReviewAction.ACCEPT, Decision.APPLY),
        ("pending", "unverified", ReviewAction.DISCARD, Decision.APPLY),
        ("active", "verified", ReviewAction.ACCEPT, Decision.UNCHANGED),
        ("rejected", "rejected", ReviewAction.DISCARD, Decision.UNCHANGED),
        ("rejected", "rejected", ReviewAction.ACCEPT, Decision.INVALID),
        ("active", "verified", ReviewAction.DISCARD, Decision.INVALID),
        ("resolved", "verified", ReviewAction.ACCEPT, Decision.INVALID),
    ],
)
def test_decide(status, verification, action, expected):
    assert decide(status, verification, action) == expected


# ── Single transitions ─────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_accept_publishes_and_audits(db, make_pending_incident):
    incident = await make_pending_incident(title="Gunshots heard")
    service = IncidentReviewService(db)

    result = await service.accept(incident.id, REVIEWER)

    assert result.changed is True
    assert result.audit.ok is True
    assert (result.incident.status, result.incident.verification_status) == ("active", "verified")
    rows = await _audit_rows(db)
    assert len(rows) == 1
    assert rows[0].action == "incident_accepted"
    assert rows[0].resource_id == str(incident.id)
    assert rows[0].details == {"incidentTitle": "Gunshots heard"}
    assert rows[0].user_id == REVIEWER.id
    assert rows[0].ip_address == "10.0.0.1"


@pytest.mark.asyncio
async def test_accept_twice_is_a_noop_without_second_audit(db, make_pending_incident):
    incident = await make_pending_incident()
    service = IncidentReviewService(db)

    await service.accept(incident.id, REVIEWER)
    again = await service.accept(incident.id, REVIEWER)

    assert again.changed is False
    assert again.audit is None
    assert len(await _audit_rows(db)) == 1


@pytest.mark.asyncio
async def test_discard_records_reason(db, make_pending_incident):
    incident = await make_pending_incident(title="Hoax report")
    service = IncidentReviewService(db)

    result = await service.discard(incident.id, REVIEWER, reason="Duplicate")

    assert (result.incident.status, result.incident.verification_status) == ("rejected", "rejected")
    rows = await _audit_rows(db)
    assert rows[0].action == "incident_discarded"
    assert rows[0].details == {"incidentTitle": "Hoax report", "reason": "Duplicate"}


@pytest.mark.asyncio
async def test_discard_without_reason(db, make_pending_incident):
    incident = await make_pending_incident()

    await IncidentReviewService(db).discard(incident.id, REVIEWER)

    rows = await _audit_rows(db)
    assert rows[0].details["reason"] == "No reason provided"


@pytest.mark.asyncio
async def test_accept_rejected_incident_is_invalid(db, make_incident):
    incident = await make_incident(status="rejected", verification_status="rejected")

    with pytest.raises(InvalidTransitionError) as exc:
        await IncidentReviewService(db).accept(incident.id, REVIEWER)

    assert exc.value.status_code == 409
    assert exc.value.details["current_status"] == "rejected"
    assert await _audit_rows(db) == []


@pytest.mark.asyncio
async def test_unknown_incident_not_found(db):
    with pytest.raises(NotFoundError):
        await IncidentReviewService(db).accept(12345, REVIEWER)


@pytest.mark.asyncio
async def test_audit_failure_does_not_fail_accept(db, make_pending_incident):
    incident = await make_pending_incident()
    audit = FailingAudit()

    result = await IncidentReviewService(db, audit).accept(incident.id, REVIEWER)

    assert result.changed is True
    assert result.audit.ok is False
    assert result.incident.status == "active"
    assert [e.action for e in audit.entries] == ["incident_accepted"]


# ── Batch transitions ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_batch_accept_reports_each_item(db, make_pending_incident, make_incident):
    first = await make_pending_incident()
    second = await make_pending_incident()
    published = await make_incident()
    rejected = await make_incident(status="rejected", verification_status="rejected")
    ids = [first.id, 999, published.id, rejected.id, second.id]

    result = await IncidentReviewService(db).batch_accept(ids, REVIEWER)

    assert result.count == 2
    assert [i.id for i in result.incidents] == [first.id, second.id]
    assert [(item.incident_id, item.outcome) for item in result.items] == [
        (first.id, ItemOutcome.ACCEPTED),
        (999, ItemOutcome.NOT_FOUND),
        (published.id, ItemOutcome.UNCHANGED),
        (rejected.id, ItemOutcome.INVALID_TRANSITION),
        (second.id, ItemOutcome.ACCEPTED),
    ]

    rows = await _audit_rows(db)
    assert len(rows) == 1
    assert rows[0].action == "incidents_batch_accepted"
    assert rows[0].resource_id == "batch"
    assert rows[0].details == {"count": 2, "incidentIds": ids}


@pytest.mark.asyncio
async def test_batch_discard_includes_reason(db, make_pending_incident):
    incident = await make_pending_incident()

    result = await IncidentReviewService(db).batch_discard([incident.id], REVIEWER, reason="Spam")

    assert result.items[0].outcome == ItemOutcome.DISCARDED
    rows = await _audit_rows(db)
    assert rows[0].details == {"count": 1, "incidentIds": [incident.id], "reason": "Spam"}


@pytest.mark.asyncio
async def test_batch_with_no_ids_rejected(db):
    with pytest.raises(ValidationFailedError):
        await IncidentReviewService(db).batch_accept([], REVIEWER)


# ── Queue and stats ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_pending_queue_filters(db, make_pending_incident, make_incident):
    kano_sms = await make_pending_incident(state="Kano", lga="Fagge", reporting_method="sms")
    await make_pending_incident(state="Kano", lga="Nassarawa", reporting_method="voice")
    await make_pending_incident(state="Lagos", lga="Ikeja", reporting_method="sms")
    await make_incident(state="Kano", lga="Fagge")
    service = IncidentReviewService(db)

    assert len(await service.pending_for_review()) == 3
    assert len(await service.pending_for_review(state="Kano")) == 2
    matched = await service.pending_for_review(state="Kano", lga="Fagge", reporting_method="sms")
    assert [i.id for i in matched] == [kano_sms.id]


@pytest.mark.asyncio
async def test_review_stats(db, make_pending_incident, make_incident):
    await make_pending_incident()
    await make_pending_incident()
    await make_incident()
    await make_incident(status="rejected", verification_status="rejected")

    stats = await IncidentReviewService(db).review_stats()

    assert (stats.pending, stats.verified, stats.rejected) == (2, 1, 1)
    assert stats.total == 4
