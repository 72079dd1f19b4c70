"""
Database query functions for the analyzer, alert generator and review services.

Plain async functions over an explicit session. Ordering is always fully
specified (severity rank, then id) so results are reproducible.
"""

from typing import Optional, Sequence

from sqlalchemy import and_, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ewers.db.models import Incident, RiskAnalysis, RiskIndicator
from ewers.schemas.common import (
    SEVERITY_RANK,
    IncidentStatus,
    VerificationStatus,
)


severity_rank = case(SEVERITY_RANK, value=Incident.severity, else_=0)


def _incident_scope(region: str, location: Optional[str]) -> list:
    clauses = [
        Incident.region == region,
        Incident.status == IncidentStatus.ACTIVE.value,
    ]
    if location:
        clauses.append(Incident.location == location)
    return clauses


def _indicator_scope(region: str, location: Optional[str]) -> list:
    clauses = [RiskIndicator.region == region]
    if location:
        clauses.append(RiskIndicator.location == location)
    return clauses


# ── Incidents ────────────────────────────────────────────────────────────


async def get_incident(session: AsyncSession, incident_id: int) -> Optional[Incident]:
    result = await session.execute(select(Incident).where(Incident.id == incident_id))
    return result.scalar_one_or_none()


async def get_active_incidents(
    session: AsyncSession,
    region: str,
    location: Optional[str] = None,
    limit: Optional[int] = None,
) -> Sequence[Incident]:
    """Active incidents for a region (and optional location), most severe first."""
    stmt = (
        select(Incident)
        .where(and_(*_incident_scope(region, location)))
        .order_by(severity_rank.desc(), Incident.id.desc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_most_severe_incident(
    session: AsyncSession, region: str, location: Optional[str] = None
) -> Optional[Incident]:
    """Single most severe active incident; ties resolved by highest id."""
    incidents = await get_active_incidents(session, region, location, limit=1)
    return incidents[0] if incidents else None


async def get_related_incidents(
    session: AsyncSession, incident: Incident, limit: int = 5
) -> Sequence[Incident]:
    """Other incidents in the same region and state, newest first."""
    clauses = [Incident.region == incident.region, Incident.id != incident.id]
    if incident.state:
        clauses.append(Incident.state == incident.state)
    result = await session.execute(
        select(Incident)
        .where(and_(*clauses))
        .order_by(Incident.reported_at.desc(), Incident.id.desc())
        .limit(limit)
    )
    return result.scalars().all()


async def get_pending_incidents(
    session: AsyncSession,
    state: Optional[str] = None,
    lga: Optional[str] = None,
    reporting_method: Optional[str] = None,
) -> Sequence[Incident]:
    """Incidents awaiting review (pending + unverified), newest first."""
    clauses = [
        Incident.status == IncidentStatus.PENDING.value,
        Incident.verification_status == VerificationStatus.UNVERIFIED.value,
    ]
    if state:
        clauses.append(Incident.state == state)
    if lga:
        clauses.append(Incident.lga == lga)
    if reporting_method:
        clauses.append(Incident.reporting_method == reporting_method)

    result = await session.execute(
        select(Incident)
        .where(and_(*clauses))
        .order_by(Incident.reported_at.desc(), Incident.id.desc())
    )
    return result.scalars().all()


async def count_review_states(session: AsyncSession) -> dict[str, int]:
    """Counts of pending, verified and rejected incidents in one round trip."""
    pending = func.sum(
        case(
            (
                and_(
                    Incident.status == IncidentStatus.PENDING.value,
                    Incident.verification_status == VerificationStatus.UNVERIFIED.value,
                ),
                1,
            ),
            else_=0,
        )
    )
    verified = func.sum(
        case((Incident.verification_status == VerificationStatus.VERIFIED.value, 1), else_=0)
    )
    rejected = func.sum(
        case((Incident.verification_status == VerificationStatus.REJECTED.value, 1), else_=0)
    )
    row = (await session.execute(select(pending, verified, rejected))).one()
    return {
        "pending": int(row[0] or 0),
        "verified": int(row[1] or 0),
        "rejected": int(row[2] or 0),
    }


# ── Risk indicators ──────────────────────────────────────────────────────


async def get_indicators(
    session: AsyncSession,
    region: str,
    location: Optional[str] = None,
    min_value: Optional[int] = None,
    limit: Optional[int] = None,
) -> Sequence[RiskIndicator]:
    """Indicators for a region (and optional location), highest value first."""
    clauses = _indicator_scope(region, location)
    if min_value is not None:
        clauses.append(RiskIndicator.value >= min_value)
    stmt = (
        select(RiskIndicator)
        .where(and_(*clauses))
        .order_by(RiskIndicator.value.desc(), RiskIndicator.id.desc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_incident_indicators(
    session: AsyncSession, incident: Incident, limit: int = 5
) -> Sequence[RiskIndicator]:
    """Indicators for the incident's region, narrowed to its state when it has one."""
    clauses = [RiskIndicator.region == incident.region]
    if incident.state:
        clauses.append(RiskIndicator.state == incident.state)
    result = await session.execute(
        select(RiskIndicator)
        .where(and_(*clauses))
        .order_by(RiskIndicator.value.desc(), RiskIndicator.id.desc())
        .limit(limit)
    )
    return result.scalars().all()


# ── Analyses ─────────────────────────────────────────────────────────────


async def get_risk_analysis(session: AsyncSession, analysis_id: int) -> Optional[RiskAnalysis]:
    result = await session.execute(select(RiskAnalysis).where(RiskAnalysis.id == analysis_id))
    return result.scalar_one_or_none()
