"""
Alert API schemas.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from ewers.schemas.base import ApiModel
from ewers.schemas.common import Severity


class AlertCreate(ApiModel):
    title: str = Field(min_length=1, max_length=500)
    description: str = Field(min_length=1)
    severity: Severity
    status: Literal["active", "resolved", "false_positive"] = "active"
    source: str = Field(default="manual", max_length=50)
    category: Optional[str] = Field(default=None, max_length=100)
    region: str = Field(default="Nigeria", max_length=100)
    location: str = Field(min_length=1, max_length=255)
    incident_id: Optional[int] = None
    escalation_level: int = Field(default=1, ge=1, le=3)
    channels: list[str] = Field(default_factory=lambda: ["app"])


class AlertOut(ApiModel):
    id: int
    title: str
    description: str
    severity: str
    status: str
    source: str
    category: Optional[str] = None
    region: str
    location: str
    incident_id: Optional[int] = None
    risk_analysis_id: Optional[int] = None
    escalation_level: int
    channels: list[str]
    generated_at: datetime


class AlertNotGenerated(ApiModel):
    message: str
    generated: bool = False
