"""
Seed Script: demo users, incidents, risk indicators and one notification rule.

Usage:
    python -m ewers.scripts.seed

Creates:
    5 users (system analyst, admin, manager, analyst, field reporter)
    8 incidents across three Nigerian states (2 awaiting review)
    8 risk indicators
    1 notification rule for high/critical incidents
"""

import asyncio
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ewers.config import settings
from ewers.db.engine import Base
from ewers.db.models import Incident, NotificationRuleModel, RiskIndicator, User


# ── Data Templates ───────────────────────────────────────────────────────

USERS = [
    ("system", "Automated Analysis", "analyst", 5),
    ("admin", "Amina Bello", "admin", 7),
    ("manager", "Chinedu Okafor", "manager", 4),
    ("analyst", "Funke Adeyemi", "analyst", 3),
    ("reporter", "Ibrahim Musa", "user", 1),
]

INCIDENTS = [
    {
        "title": "Armed clash between rival groups",
        "description": "Exchange of fire reported near the central market.",
        "state": "Lagos", "lga": "Ikeja", "severity": "high", "category": "violence",
        "impacted_population": 1500,
    },
    {
        "title": "Market fire",
        "description": "Fire broke out in the textile section; several stalls destroyed.",
        "state": "Lagos", "lga": "Lagos Island", "severity": "medium", "category": "fire",
        "impacted_population": 300,
    },
    {
        "title": "Youth protest over fuel prices",
        "description": "Roads blocked around the secretariat.",
        "state": "Lagos", "lga": "Ikeja", "severity": "medium", "category": "protest",
        "impacted_population": 600,
    },
    {
        "title": "Flash flooding after heavy rainfall",
        "description": "Low-lying communities submerged, residents displaced.",
        "state": "Kano", "lga": "Fagge", "severity": "high", "category": "natural_disaster",
        "impacted_population": 2500,
    },
    {
        "title": "Farmer-herder dispute",
        "description": "Cattle grazing on farmland led to a confrontation.",
        "state": "Benue", "lga": "Guma", "severity": "high", "category": "violence",
        "impacted_population": 400,
    },
    {
        "title": "Checkpoint harassment reports",
        "description": "Multiple complaints of extortion at a roadblock.",
        "state": "Benue", "lga": "Makurdi", "severity": "low", "category": "security",
        "impacted_population": 50,
    },
    {
        "title": "Gunshots heard at night",
        "description": "Unverified SMS report of gunfire near the motor park.",
        "state": "Kano", "lga": "Nassarawa", "severity": "medium", "category": "security",
        "status": "pending", "verification_status": "unverified", "reporting_method": "sms",
    },
    {
        "title": "Bridge collapse",
        "description": "Voice report of a pedestrian bridge collapsing after rainfall.",
        "state": "Lagos", "lga": "Ikeja", "severity": "high", "category": "natural_disaster",
        "status": "pending", "verification_status": "unverified", "reporting_method": "voice",
    },
]

INDICATORS = [
    ("Communal Tension Index", "social", 88, "Lagos", "increasing", 85),
    ("Small Arms Circulation", "security", 82, "Lagos", "increasing", 70),
    ("Fuel Price Volatility", "economic", 76, "Lagos", "stable", 90),
    ("Political Rhetoric Intensity", "political", 72, "Lagos", "increasing", 60),
    ("Flood Risk", "environmental", 91, "Kano", "increasing", 88),
    ("Food Insecurity", "economic", 68, "Kano", "stable", 75),
    ("Land Dispute Frequency", "social", 79, "Benue", "increasing", 80),
    ("Displacement Rate", "social", 55, "Benue", "decreasing", 65),
]

DEFAULT_RULE = {
    "id": "high-severity-incidents",
    "name": "High and critical incidents",
    "event": "incident_created",
    "conditions": {"severityIn": ["high", "critical"]},
    "actions": {
        "notifyRoles": ["admin", "manager"],
        "notificationType": "critical",
        "titleTemplate": "{{incidentSeverity}} incident: {{incidentTitle}}",
        "messageTemplate": "{{incidentTitle}} reported in {{incidentLocation}}",
    },
}


def _location(state: str, lga: str) -> str:
    return f"{lga}, {state}"


async def seed():
    """Run the seeding process."""
    engine = create_async_engine(settings.async_database_url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        # ── Users ────────────────────────────────────────────────────
        users = []
        for username, full_name, role, level in USERS:
            user = User(
                username=username,
                full_name=full_name,
                email=f"{username}@ewers.example.ng",
                role=role,
                security_level=level,
            )
            session.add(user)
            users.append(user)
        await session.flush()
        print(f"Created {len(users)} users (system user id {users[0].id})")

        # ── Incidents ────────────────────────────────────────────────
        now = datetime.utcnow()
        for hours_ago, data in enumerate(INCIDENTS):
            incident = Incident(
                title=data["title"],
                description=data["description"],
                location=_location(data["state"], data["lga"]),
                region="Nigeria",
                state=data["state"],
                lga=data["lga"],
                severity=data["severity"],
                category=data["category"],
                status=data.get("status", "active"),
                verification_status=data.get("verification_status", "verified"),
                impacted_population=data.get("impacted_population"),
                reporting_method=data.get("reporting_method", "text"),
                reported_by=users[-1].id,
                reported_at=now - timedelta(hours=hours_ago * 6),
            )
            session.add(incident)
        await session.flush()
        print(f"Created {len(INCIDENTS)} incidents")

        # ── Risk Indicators ──────────────────────────────────────────
        for name, category, value, state, trend, confidence in INDICATORS:
            session.add(
                RiskIndicator(
                    name=name,
                    category=category,
                    value=value,
                    threshold=70,
                    location=state,
                    region="Nigeria",
                    state=state,
                    trend=trend,
                    confidence=confidence,
                )
            )
        await session.flush()
        print(f"Created {len(INDICATORS)} risk indicators")

        # ── Notification Rule ────────────────────────────────────────
        session.add(NotificationRuleModel(position=0, updated_by=users[1].id, **DEFAULT_RULE))
        await session.flush()
        print("Created 1 notification rule")

        await session.commit()
        print("\nSeed completed successfully!")
        print(f"  Set ANALYSIS_SYSTEM_USER_ID={users[0].id}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
