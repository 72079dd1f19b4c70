"""
Risk analysis API schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from ewers.schemas.base import ApiModel


class GenerateAnalysisRequest(ApiModel):
    region: str = Field(min_length=1, max_length=100)
    location: Optional[str] = Field(default=None, max_length=255)

    @field_validator("region", "location")
    @classmethod
    def _strip(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class RiskAnalysisOut(ApiModel):
    id: int
    title: str
    description: str
    analysis: str
    severity: str
    likelihood: str
    impact: str
    recommendations: str
    timeframe: Optional[str] = None
    patterns: Optional[str] = None
    region: str
    location: str
    scorer: str
    created_by: int
    created_at: datetime
