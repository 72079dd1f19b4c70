"""
Incident API schemas.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, model_validator

from ewers.schemas.base import ApiModel
from ewers.schemas.common import Severity


class IncidentCreate(ApiModel):
    """
    Manual or ingested incident report.

    Trusted reporters create incidents already active and verified.
    Ingestion from external sources sends status "pending" so the report
    waits in the review queue.
    """

    title: str = Field(min_length=1, max_length=500)
    description: str = Field(min_length=1)
    location: Optional[str] = Field(default=None, max_length=255)
    region: str = Field(default="Nigeria", max_length=100)
    state: Optional[str] = Field(default=None, max_length=100)
    lga: Optional[str] = Field(default=None, max_length=100)
    severity: Severity
    category: str = Field(min_length=1, max_length=100)
    status: Literal["pending", "active"] = "active"
    impacted_population: Optional[int] = Field(default=None, ge=0)
    reporting_method: Optional[str] = Field(default="text", max_length=50)
    source_id: Optional[int] = None

    @model_validator(mode="after")
    def _derive_location(self) -> "IncidentCreate":
        if not self.location:
            parts = [p for p in (self.lga, self.state, self.region) if p]
            self.location = ", ".join(parts)
        return self

    @property
    def verification_status(self) -> str:
        return "unverified" if self.status == "pending" else "verified"


class IncidentOut(ApiModel):
    id: int
    title: str
    description: str
    location: str
    region: str
    state: Optional[str] = None
    lga: Optional[str] = None
    severity: str
    category: str
    status: str
    verification_status: str
    impacted_population: Optional[int] = None
    reporting_method: Optional[str] = None
    reported_by: Optional[int] = None
    source_id: Optional[int] = None
    reported_at: datetime
