"""
Notification rule storage.

Rules live in `notification_rules`, one row per rule, ordered by `position`.
A PUT replaces the whole set and `position` records the array order.
"""

from datetime import datetime
from typing import Optional, Sequence

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ewers.db.models import NotificationRuleModel
from ewers.exceptions import ValidationFailedError
from ewers.notifications.schemas import NotificationRule, RuleActions, RuleConditions

logger = structlog.get_logger(__name__)


def _to_schema(row: NotificationRuleModel) -> NotificationRule:
    return NotificationRule(
        id=row.id,
        name=row.name,
        enabled=row.enabled,
        event=row.event,
        conditions=RuleConditions.model_validate(row.conditions or {}),
        actions=RuleActions.model_validate(row.actions or {}),
    )


class RuleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_rules(self, event: Optional[str] = None, enabled_only: bool = False) -> list[NotificationRule]:
        stmt = select(NotificationRuleModel).order_by(NotificationRuleModel.position)
        if event is not None:
            stmt = stmt.where(NotificationRuleModel.event == event)
        if enabled_only:
            stmt = stmt.where(NotificationRuleModel.enabled.is_(True))
        result = await self.session.execute(stmt)
        return [_to_schema(row) for row in result.scalars().all()]

    async def replace_rules(
        self, rules: Sequence[NotificationRule], updated_by: Optional[int]
    ) -> list[NotificationRule]:
        """Replace every stored rule. Raises ValidationFailedError on duplicate ids."""
        seen: set[str] = set()
        for rule in rules:
            if rule.id in seen:
                raise ValidationFailedError(
                    f"Duplicate rule id '{rule.id}'",
                    field="id",
                    details={"id": rule.id},
                )
            seen.add(rule.id)

        await self.session.execute(delete(NotificationRuleModel))
        now = datetime.utcnow()
        for position, rule in enumerate(rules):
            self.session.add(
                NotificationRuleModel(
                    id=rule.id,
                    position=position,
                    name=rule.name,
                    enabled=rule.enabled,
                    event=rule.event.value,
                    conditions=rule.conditions.model_dump(by_alias=True, exclude_none=True),
                    actions=rule.actions.model_dump(by_alias=True, exclude_none=True, mode="json"),
                    updated_by=updated_by,
                    updated_at=now,
                )
            )
        await self.session.flush()

        logger.info("notification_rules_replaced", count=len(rules), updated_by=updated_by)
        return await self.list_rules()
