"""
Tests for the best-effort audit sink.
"""

import pytest
from sqlalchemy import select

from ewers.db.models import AuditLog, Incident
from ewers.services.audit import AuditEntry, AuditService


class BrokenSession:
    """Session stand-in whose SAVEPOINT cannot be opened."""

    def begin_nested(self):
        raise RuntimeError("connection lost")


@pytest.mark.asyncio
async def test_write_persists_entry(db):
    result = await AuditService(db).write(
        AuditEntry(user_id=3, action="alert_created", resource="alert", resource_id="5", details={"k": "v"})
    )

    assert result.ok is True
    row = (await db.execute(select(AuditLog))).scalar_one()
    assert (row.user_id, row.action, row.resource, row.resource_id) == (3, "alert_created", "alert", "5")
    assert row.details == {"k": "v"}
    assert row.successful is True
    assert row.timestamp is not None


@pytest.mark.asyncio
async def test_failure_is_returned_not_raised():
    result = await AuditService(BrokenSession()).write(
        AuditEntry(user_id=1, action="incident_accepted", resource="incident")
    )

    assert result.ok is False
    assert "connection lost" in result.error


@pytest.mark.asyncio
async def test_failed_insert_keeps_surrounding_work(db):
    incident = Incident(
        title="t", description="d", location="Lagos", severity="low", category="fire"
    )
    db.add(incident)
    await db.flush()

    # action is NOT NULL: the insert fails inside its savepoint
    result = await AuditService(db).write(AuditEntry(user_id=1, action=None, resource="incident"))
    await db.commit()

    assert result.ok is False
    assert (await db.execute(select(Incident))).scalar_one().id == incident.id
    assert (await db.execute(select(AuditLog))).scalars().all() == []
