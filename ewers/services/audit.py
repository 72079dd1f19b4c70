"""
Audit sink.

Write-only: the core records who did what and never reads entries back.
Writes happen inside a SAVEPOINT of the caller's session, so a failed
audit insert is rolled back on its own and the triggering change survives.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ewers.db.models import AuditLog

logger = structlog.get_logger(__name__)


@dataclass
class AuditEntry:
    user_id: Optional[int]
    action: str
    resource: str
    resource_id: Optional[str] = None
    details: dict[str, Any] = field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    successful: bool = True


@dataclass(frozen=True)
class AuditResult:
    ok: bool
    error: Optional[str] = None


class AuditService:
    """Best-effort audit writer bound to one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def write(self, entry: AuditEntry) -> AuditResult:
        """Persist an entry. Failures are logged and returned, never raised."""
        try:
            async with self.session.begin_nested():
                self.session.add(
                    AuditLog(
                        timestamp=datetime.utcnow(),
                        user_id=entry.user_id,
                        action=entry.action,
                        resource=entry.resource,
                        resource_id=entry.resource_id,
                        details=entry.details,
                        ip_address=entry.ip_address,
                        user_agent=entry.user_agent,
                        successful=entry.successful,
                    )
                )
        except Exception as e:
            logger.error(
                "audit_write_failed",
                action=entry.action,
                resource=entry.resource,
                resource_id=entry.resource_id,
                error=str(e),
            )
            return AuditResult(ok=False, error=str(e))

        logger.debug("audit_written", action=entry.action, resource_id=entry.resource_id)
        return AuditResult(ok=True)
