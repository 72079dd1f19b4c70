"""
Notification Rule Engine.

Pipeline per creation event:
1. Load enabled rules for the event kind, in stored order
2. AND-reduce each rule's conditions against the event
3. Resolve recipients (user ids first, then roles; active users only)
4. Render title/message templates
5. Write one Notification per (rule, recipient)

Rules are independent: every matching rule fires, and one rule's outcome
never influences another's. With no enabled rules for the event kind,
administrators are notified directly when configured to.
"""

from dataclasses import dataclass, field
from typing import Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from ewers.config import settings
from ewers.db.models import Alert, Incident, Notification, User
from ewers.notifications.conditions import build_conditions, matches_all
from ewers.notifications.events import RuleEvent
from ewers.notifications.repository import RuleRepository
from ewers.notifications.schemas import NotificationRule, RuleActions
from ewers.notifications.templates import render
from ewers.schemas.common import NotificationType, Severity
from ewers.services.users import UserDirectory

logger = structlog.get_logger(__name__)

URGENT_SEVERITIES = frozenset({Severity.HIGH, Severity.CRITICAL})


@dataclass
class EvaluationResult:
    notifications: list[Notification] = field(default_factory=list)
    matched_rules: list[str] = field(default_factory=list)
    used_admin_fallback: bool = False

    @property
    def count(self) -> int:
        return len(self.notifications)


def dedupe_users(users: Sequence[User]) -> list[User]:
    """Drop repeated ids, keeping each user's first position."""
    seen: set[int] = set()
    unique: list[User] = []
    for user in users:
        if user.id not in seen:
            seen.add(user.id)
            unique.append(user)
    return unique


class NotificationRuleEngine:
    def __init__(
        self,
        session: AsyncSession,
        rules: RuleRepository | None = None,
        directory: UserDirectory | None = None,
        notify_admins_without_rules: bool | None = None,
    ):
        self.session = session
        self.rules = rules or RuleRepository(session)
        self.directory = directory or UserDirectory(session)
        self.notify_admins_without_rules = (
            settings.notify_admins_without_rules
            if notify_admins_without_rules is None
            else notify_admins_without_rules
        )

    async def evaluate_for_incident(self, incident: Incident) -> EvaluationResult:
        return await self.evaluate(RuleEvent.from_incident(incident))

    async def evaluate_for_alert(self, alert: Alert) -> EvaluationResult:
        return await self.evaluate(RuleEvent.from_alert(alert))

    async def evaluate(self, event: RuleEvent) -> EvaluationResult:
        rules = await self.rules.list_rules(event=event.kind.value, enabled_only=True)
        result = EvaluationResult()

        if not rules:
            if self.notify_admins_without_rules:
                await self._notify_admins(event, result)
            logger.info(
                "notification_rules_evaluated",
                event_type=event.kind.value,
                rules=0,
                created=result.count,
                admin_fallback=result.used_admin_fallback,
            )
            return result

        for rule in rules:
            if not matches_all(build_conditions(rule.conditions), event):
                continue
            result.matched_rules.append(rule.id)

            recipients = await self.resolve_recipients(rule.actions)
            if not recipients:
                logger.info("notification_rule_no_recipients", rule_id=rule.id)
                continue

            self._fire(rule, event, recipients, result)

        await self.session.flush()
        logger.info(
            "notification_rules_evaluated",
            event_type=event.kind.value,
            rules=len(rules),
            matched=len(result.matched_rules),
            created=result.count,
        )
        return result

    async def resolve_recipients(self, actions: RuleActions) -> list[User]:
        recipients: list[User] = []
        if actions.notify_user_ids:
            by_id = {u.id: u for u in await self.directory.list_users(ids=actions.notify_user_ids)}
            recipients.extend(by_id[uid] for uid in actions.notify_user_ids if uid in by_id)
        if actions.notify_roles:
            recipients.extend(await self.directory.list_users(roles=actions.notify_roles))
        return dedupe_users(recipients)

    def _fire(
        self,
        rule: NotificationRule,
        event: RuleEvent,
        recipients: Sequence[User],
        result: EvaluationResult,
    ) -> None:
        actions = rule.actions
        title = render(actions.title_template, event.variables) or event.fallback_title
        message = render(actions.message_template, event.variables) or event.description
        ntype = (actions.notification_type or NotificationType.WARNING).value

        for user in recipients:
            notification = Notification(
                user_id=user.id,
                incident_id=event.incident_id,
                alert_id=event.alert_id,
                rule_id=rule.id,
                title=title,
                message=message,
                type=ntype,
                is_read=False,
            )
            self.session.add(notification)
            result.notifications.append(notification)

        logger.info(
            "notification_rule_fired",
            rule_id=rule.id,
            recipients=len(recipients),
            notification_type=ntype,
        )

    async def _notify_admins(self, event: RuleEvent, result: EvaluationResult) -> None:
        admins = await self.directory.list_admins()
        ntype = (
            NotificationType.CRITICAL if event.severity in URGENT_SEVERITIES else NotificationType.WARNING
        ).value
        for admin in admins:
            notification = Notification(
                user_id=admin.id,
                incident_id=event.incident_id,
                alert_id=event.alert_id,
                title=f"New {event.fallback_title}",
                message=event.description,
                type=ntype,
                is_read=False,
            )
            self.session.add(notification)
            result.notifications.append(notification)
        result.used_admin_fallback = True
        await self.session.flush()
