"""
EWERS SQLAlchemy Models.

Uses compatibility types for SQLite (dev) + PostgreSQL (prod).
Integer serial ids throughout; incident ids travel over the wire as numbers.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from ewers.db.compat import JSONType
from ewers.db.engine import Base


# ──────────────────────────────────────────────────────────────────────────────
# Users (read-only directory for recipient resolution)
# ──────────────────────────────────────────────────────────────────────────────


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255))
    # admin, analyst, manager, responder, user
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="user")
    # Security clearance level 1-7
    security_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


# ──────────────────────────────────────────────────────────────────────────────
# Incidents & Indicators (analysis inputs)
# ──────────────────────────────────────────────────────────────────────────────


class Incident(Base):
    __tablename__ = "incidents"
    __table_args__ = (
        Index("ix_incidents_region_status", "region", "status"),
        Index("ix_incidents_review", "status", "verification_status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    region: Mapped[str] = mapped_column(String(100), nullable=False, default="Nigeria")
    state: Mapped[Optional[str]] = mapped_column(String(100))
    lga: Mapped[Optional[str]] = mapped_column(String(100))
    severity: Mapped[str] = mapped_column(String(20), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    verification_status: Mapped[str] = mapped_column(String(20), nullable=False, default="unverified")
    impacted_population: Mapped[Optional[int]] = mapped_column(Integer)
    reporting_method: Mapped[Optional[str]] = mapped_column(String(50), default="text")
    reported_by: Mapped[Optional[int]] = mapped_column(Integer)
    source_id: Mapped[Optional[int]] = mapped_column(Integer)
    reported_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class RiskIndicator(Base):
    __tablename__ = "risk_indicators"
    __table_args__ = (
        Index("ix_risk_indicators_region_value", "region", "value"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    # political, economic, environmental, social, security
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    value: Mapped[int] = mapped_column(Integer, nullable=False)
    threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=70)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    region: Mapped[str] = mapped_column(String(100), nullable=False, default="Nigeria")
    state: Mapped[Optional[str]] = mapped_column(String(100))
    trend: Mapped[Optional[str]] = mapped_column(String(20))
    confidence: Mapped[Optional[int]] = mapped_column(Integer)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


# ──────────────────────────────────────────────────────────────────────────────
# Analysis → Alert (append-only)
# ──────────────────────────────────────────────────────────────────────────────


class RiskAnalysis(Base):
    __tablename__ = "risk_analyses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    analysis: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False)
    likelihood: Mapped[str] = mapped_column(String(20), nullable=False)
    impact: Mapped[str] = mapped_column(String(20), nullable=False)
    recommendations: Mapped[str] = mapped_column(Text, nullable=False)
    timeframe: Mapped[Optional[str]] = mapped_column(String(20))
    patterns: Mapped[Optional[str]] = mapped_column(Text)
    region: Mapped[str] = mapped_column(String(100), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    # "llm" or "heuristic"
    scorer: Mapped[str] = mapped_column(String(20), nullable=False, default="heuristic")
    created_by: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class Alert(Base):
    __tablename__ = "alerts"
    __table_args__ = (
        Index("ix_alerts_region", "region"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False)
    # active, resolved, false_positive
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    # automated, manual, external
    source: Mapped[str] = mapped_column(String(50), nullable=False, default="system")
    category: Mapped[Optional[str]] = mapped_column(String(100))
    region: Mapped[str] = mapped_column(String(100), nullable=False, default="Nigeria")
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    incident_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("incidents.id"))
    risk_analysis_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("risk_analyses.id"))
    escalation_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    channels: Mapped[list] = mapped_column(JSONType(), nullable=False, default=list)
    generated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


# ──────────────────────────────────────────────────────────────────────────────
# Notification rules & notifications
# ──────────────────────────────────────────────────────────────────────────────


class NotificationRuleModel(Base):
    """Admin-configured rule. `position` preserves the order rules were saved in."""

    __tablename__ = "notification_rules"
    __table_args__ = (
        Index("ix_notification_rules_event", "event", "enabled"),
    )

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # incident_created | alert_created
    event: Mapped[str] = mapped_column(String(50), nullable=False)
    conditions: Mapped[dict] = mapped_column(JSONType(), nullable=False, default=dict)
    actions: Mapped[dict] = mapped_column(JSONType(), nullable=False, default=dict)
    updated_by: Mapped[Optional[int]] = mapped_column(Integer)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    incident_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("incidents.id"))
    alert_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("alerts.id"))
    rule_id: Mapped[Optional[str]] = mapped_column(String(100))
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    # info, warning, critical, crisis
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="info")
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


# ──────────────────────────────────────────────────────────────────────────────
# Audit (write-only from the core's perspective)
# ──────────────────────────────────────────────────────────────────────────────


class AuditLog(Base):
    """
    Append-only audit log.

    NO UPDATE, NO DELETE on this table.
    """

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_timestamp", "timestamp"),
        Index("ix_audit_logs_action", "action"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    user_id: Mapped[Optional[int]] = mapped_column(Integer)
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    resource: Mapped[str] = mapped_column(String(100), nullable=False)
    resource_id: Mapped[Optional[str]] = mapped_column(String(128))
    details: Mapped[Optional[dict]] = mapped_column(JSONType())
    ip_address: Mapped[Optional[str]] = mapped_column(String(50))
    user_agent: Mapped[Optional[str]] = mapped_column(String(500))
    successful: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
