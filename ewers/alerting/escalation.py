"""
Escalation levels for generated alerts.

Level is a pure function of (severity, likelihood):
    3  high + very_likely
    2  high, or medium + very_likely
    1  everything else
"""

from ewers.schemas.common import Likelihood, Severity

ALERTABLE_SEVERITIES = frozenset({Severity.HIGH, Severity.MEDIUM})

TITLE_PREFIXES = {
    3: "URGENT:",
    2: "Warning:",
    1: "Alert:",
}


def needs_alert(severity: str) -> bool:
    return severity in ALERTABLE_SEVERITIES


def escalation_level(severity: str, likelihood: str) -> int:
    if severity == Severity.HIGH and likelihood == Likelihood.VERY_LIKELY:
        return 3
    if severity == Severity.HIGH or (
        severity == Severity.MEDIUM and likelihood == Likelihood.VERY_LIKELY
    ):
        return 2
    return 1


def alert_title(level: int, analysis_title: str) -> str:
    return f"{TITLE_PREFIXES[level]} {analysis_title}"
