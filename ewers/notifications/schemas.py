"""
Notification Rule Schemas.

Rules are stored and exchanged in their wire shape: camelCase condition and
action keys, exactly as administrators PUT them.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from ewers.schemas.base import ApiModel
from ewers.schemas.common import NotificationType, RuleEventKind


class RuleConditions(ApiModel):
    """All configured conditions must hold. Empty lists are ignored."""

    severity_in: Optional[list[str]] = None
    region_in: Optional[list[str]] = None
    category_in: Optional[list[str]] = None
    source_in: Optional[list[str]] = None
    escalation_level_gte: Optional[int] = None

    @field_validator("source_in", mode="before")
    @classmethod
    def _stringify_sources(cls, value):
        # Source ids may be configured as numbers
        if isinstance(value, list):
            return [str(v) for v in value]
        return value


class RuleActions(ApiModel):
    notify_roles: list[str] = Field(default_factory=list)
    notify_user_ids: list[int] = Field(default_factory=list)
    notification_type: Optional[NotificationType] = None
    title_template: Optional[str] = None
    message_template: Optional[str] = None


class NotificationRule(ApiModel):
    id: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=255)
    enabled: bool = True
    event: RuleEventKind
    conditions: RuleConditions = Field(default_factory=RuleConditions)
    actions: RuleActions = Field(default_factory=RuleActions)


class NotificationOut(ApiModel):
    id: int
    user_id: int
    incident_id: Optional[int] = None
    alert_id: Optional[int] = None
    rule_id: Optional[str] = None
    title: str
    message: str
    type: str
    is_read: bool
    created_at: datetime

