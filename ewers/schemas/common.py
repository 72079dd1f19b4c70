"""
Shared domain enums.

Stored as plain strings in the database; these enums are the vocabulary
the services and API schemas agree on.
"""

from enum import StrEnum


class Severity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IncidentStatus(StrEnum):
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"
    RESOLVED = "resolved"


class VerificationStatus(StrEnum):
    UNVERIFIED = "unverified"
    VERIFIED = "verified"
    REJECTED = "rejected"


class Likelihood(StrEnum):
    UNLIKELY = "unlikely"
    POSSIBLE = "possible"
    LIKELY = "likely"
    VERY_LIKELY = "very_likely"


class Impact(StrEnum):
    MINIMAL = "minimal"
    MINOR = "minor"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"
    SEVERE = "severe"


class Timeframe(StrEnum):
    IMMEDIATE = "immediate"
    SHORT_TERM = "short_term"
    MEDIUM_TERM = "medium_term"
    LONG_TERM = "long_term"


class Trend(StrEnum):
    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class NotificationType(StrEnum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"
    CRISIS = "crisis"


class RuleEventKind(StrEnum):
    INCIDENT_CREATED = "incident_created"
    ALERT_CREATED = "alert_created"


# Higher rank = more severe. Unknown severities rank below "low".
SEVERITY_RANK: dict[str, int] = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}
