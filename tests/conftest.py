"""
Test fixtures for EWERS core tests.

Provides:
- In-memory SQLite engine per test (SAVEPOINT-capable, shared connection)
- Users with different roles and their JWTs
- Authenticated FastAPI test clients with dependency overrides
- Factories for incidents, indicators, analyses, rules and notifications

Data created through the factories is committed in its own session, so
tests must not hold an open transaction on `db` while calling the API.
"""

import os

# Set before any ewers import so Settings picks them up
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["PUSH_GATEWAY_URL"] = ""
os.environ["JWT_SECRET"] = "test-secret-key-for-ewers-core-tests"

from typing import AsyncGenerator, Optional  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from ewers.api.deps import get_broadcaster, get_db, get_llm_client, get_push_sink  # noqa: E402
from ewers.auth.jwt import create_access_token  # noqa: E402
from ewers.db.engine import Base, enable_sqlite_savepoints  # noqa: E402
from ewers.db.models import (  # noqa: E402, F401  register all models
    Alert,
    AuditLog,
    Incident,
    Notification,
    NotificationRuleModel,
    RiskAnalysis,
    RiskIndicator,
    User,
)
from ewers.main import app  # noqa: E402
from ewers.services.broadcast import Broadcaster  # noqa: E402

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


# ── Database ─────────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database with all tables."""
    eng = create_async_engine(
        TEST_DB_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_savepoints(eng)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for service-level tests."""
    async with session_factory() as session:
        yield session


# ── Users ────────────────────────────────────────────────────────────────


async def _create_user(
    session_factory,
    username: str,
    role: str,
    security_level: int = 1,
    active: bool = True,
) -> User:
    async with session_factory() as session:
        user = User(
            username=username,
            full_name=f"Test {username.capitalize()}",
            email=f"{username}@test.ng",
            role=role,
            security_level=security_level,
            active=active,
        )
        session.add(user)
        await session.commit()
        return user


@pytest_asyncio.fixture
async def admin_user(session_factory) -> User:
    return await _create_user(session_factory, "admin", "admin", security_level=7)


@pytest_asyncio.fixture
async def manager_user(session_factory) -> User:
    return await _create_user(session_factory, "manager", "manager", security_level=4)


@pytest_asyncio.fixture
async def analyst_user(session_factory) -> User:
    return await _create_user(session_factory, "analyst", "analyst", security_level=2)


@pytest_asyncio.fixture
async def cleared_user(session_factory) -> User:
    """Not an admin by role, but at the admin security level."""
    return await _create_user(session_factory, "cleared", "analyst", security_level=5)


@pytest_asyncio.fixture
async def inactive_manager(session_factory) -> User:
    return await _create_user(session_factory, "retired", "manager", security_level=4, active=False)


# ── JWT Token Fixtures ──────────────────────────────────────────────────


def _make_token(user: User) -> str:
    return create_access_token(user_id=user.id, role=user.role, security_level=user.security_level)


@pytest.fixture
def admin_token(admin_user) -> str:
    return _make_token(admin_user)


@pytest.fixture
def analyst_token(analyst_user) -> str:
    return _make_token(analyst_user)


# ── Collaborator fakes ──────────────────────────────────────────────────


class RecordingPushSink:
    """Push sink that remembers every push instead of sending it."""

    def __init__(self):
        self.sent: list[dict] = []

    async def send_push_to_all(self, title: str, body: str, link: Optional[str] = None) -> bool:
        self.sent.append({"title": title, "body": body, "link": link})
        return True


@pytest.fixture
def push_sink() -> RecordingPushSink:
    return RecordingPushSink()


@pytest.fixture
def test_broadcaster() -> Broadcaster:
    return Broadcaster(keepalive_seconds=0.05)


# ── API clients ─────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def api(session_factory, push_sink, test_broadcaster):
    """The app with its database and side-effect collaborators overridden."""

    async def _override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_llm_client] = lambda: None
    app.dependency_overrides[get_push_sink] = lambda: push_sink
    app.dependency_overrides[get_broadcaster] = lambda: test_broadcaster
    yield app
    app.dependency_overrides.clear()


def _client(application, token: Optional[str] = None) -> AsyncClient:
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return AsyncClient(transport=ASGITransport(app=application), base_url="http://test", headers=headers)


@pytest_asyncio.fixture
async def client(api, admin_token):
    """Client authenticated as an administrator."""
    async with _client(api, admin_token) as c:
        yield c


@pytest_asyncio.fixture
async def analyst_client(api, analyst_token):
    async with _client(api, analyst_token) as c:
        yield c


@pytest_asyncio.fixture
async def anon_client(api):
    async with _client(api) as c:
        yield c


# ── Sample Data Factories ────────────────────────────────────────────────


@pytest.fixture
def make_incident(session_factory):
    """Factory: create and commit an incident."""

    async def _make(**overrides) -> Incident:
        values = {
            "title": "Clash at Oshodi market",
            "description": "Traders and touts clashed over levies.",
            "location": "Lagos",
            "region": "Nigeria",
            "state": "Lagos",
            "severity": "medium",
            "category": "violence",
            "status": "active",
            "verification_status": "verified",
            "reporting_method": "text",
        }
        values.update(overrides)
        async with session_factory() as session:
            incident = Incident(**values)
            session.add(incident)
            await session.commit()
            return incident

    return _make


@pytest.fixture
def make_pending_incident(make_incident):
    async def _make(**overrides) -> Incident:
        values = {"status": "pending", "verification_status": "unverified", "reporting_method": "sms"}
        values.update(overrides)
        return await make_incident(**values)

    return _make


@pytest.fixture
def make_indicator(session_factory):
    async def _make(**overrides) -> RiskIndicator:
        values = {
            "name": "Communal Tension Index",
            "category": "social",
            "value": 72,
            "threshold": 70,
            "location": "Lagos",
            "region": "Nigeria",
            "state": "Lagos",
            "trend": "stable",
            "confidence": 70,
        }
        values.update(overrides)
        async with session_factory() as session:
            indicator = RiskIndicator(**values)
            session.add(indicator)
            await session.commit()
            return indicator

    return _make


@pytest.fixture
def make_analysis(session_factory):
    async def _make(**overrides) -> RiskAnalysis:
        values = {
            "title": "Violent Conflict Analysis for Lagos",
            "description": "Analysis of current situation in Lagos.",
            "analysis": "Situation requires immediate attention.",
            "severity": "high",
            "likelihood": "likely",
            "impact": "severe",
            "recommendations": "Immediate deployment of response teams.",
            "timeframe": "immediate",
            "region": "Nigeria",
            "location": "Lagos",
            "scorer": "heuristic",
            "created_by": 1,
        }
        values.update(overrides)
        async with session_factory() as session:
            analysis = RiskAnalysis(**values)
            session.add(analysis)
            await session.commit()
            return analysis

    return _make


@pytest.fixture
def make_rule(session_factory):
    """Factory: store a rule given in its wire (camelCase) shape."""

    async def _make(rule: dict, position: int = 0) -> NotificationRuleModel:
        async with session_factory() as session:
            row = NotificationRuleModel(
                id=rule["id"],
                position=position,
                name=rule.get("name", rule["id"]),
                enabled=rule.get("enabled", True),
                event=rule["event"],
                conditions=rule.get("conditions", {}),
                actions=rule.get("actions", {}),
            )
            session.add(row)
            await session.commit()
            return row

    return _make


@pytest.fixture
def make_notification(session_factory):
    async def _make(user_id: int, **overrides) -> Notification:
        values = {"title": "Incident: test", "message": "test", "type": "info", "is_read": False}
        values.update(overrides)
        async with session_factory() as session:
            notification = Notification(user_id=user_id, **values)
            session.add(notification)
            await session.commit()
            return notification

    return _make
