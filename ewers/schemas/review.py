"""
Incident review API schemas.
"""

from typing import Optional

from pydantic import Field

from ewers.schemas.base import ApiModel
from ewers.schemas.incident import IncidentOut


class DiscardRequest(ApiModel):
    reason: Optional[str] = Field(default=None, max_length=1000)


class BatchAcceptRequest(ApiModel):
    incident_ids: list[int] = Field(min_length=1)


class BatchDiscardRequest(BatchAcceptRequest):
    reason: Optional[str] = Field(default=None, max_length=1000)


class IncidentActionResponse(ApiModel):
    message: str
    incident: IncidentOut


class BatchItemOut(ApiModel):
    incident_id: int
    outcome: str


class BatchActionResponse(ApiModel):
    message: str
    incidents: list[IncidentOut]
    results: list[BatchItemOut]


class ReviewStatsOut(ApiModel):
    pending: int
    verified: int
    rejected: int
    total: int
