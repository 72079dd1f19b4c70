"""
Incident store — the analyzer's read-only view of incidents and indicators.
"""

from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ewers.db import queries
from ewers.db.models import Incident, RiskIndicator


class IncidentStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def active_incidents(
        self, region: str, location: Optional[str] = None, limit: Optional[int] = None
    ) -> Sequence[Incident]:
        return await queries.get_active_incidents(self.session, region, location, limit=limit)

    async def indicators(
        self,
        region: str,
        location: Optional[str] = None,
        min_value: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Sequence[RiskIndicator]:
        return await queries.get_indicators(
            self.session, region, location, min_value=min_value, limit=limit
        )
