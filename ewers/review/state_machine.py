"""
Incident verification state machine.

    (pending, unverified) ──accept──▶ (active, verified)
                          ──discard─▶ (rejected, rejected)

Both targets are terminal. Repeating the transition that produced the
current terminal state is a no-op; anything else from a non-pending status
is an invalid transition.
"""

from enum import StrEnum

from ewers.schemas.common import IncidentStatus, VerificationStatus


class ReviewAction(StrEnum):
    ACCEPT = "accept"
    DISCARD = "discard"


class Decision(StrEnum):
    APPLY = "apply"
    UNCHANGED = "unchanged"
    INVALID = "invalid"


TARGET_STATES: dict[ReviewAction, tuple[IncidentStatus, VerificationStatus]] = {
    ReviewAction.ACCEPT: (IncidentStatus.ACTIVE, VerificationStatus.VERIFIED),
    ReviewAction.DISCARD: (IncidentStatus.REJECTED, VerificationStatus.REJECTED),
}


def target_state(action: ReviewAction) -> tuple[IncidentStatus, VerificationStatus]:
    return TARGET_STATES[action]


def decide(status: str, verification_status: str, action: ReviewAction) -> Decision:
    target_status, target_verification = TARGET_STATES[action]
    if status == target_status and verification_status == target_verification:
        return Decision.UNCHANGED
    if status != IncidentStatus.PENDING:
        return Decision.INVALID
    return Decision.APPLY
