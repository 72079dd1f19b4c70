"""
Rule conditions as typed predicates.

Each configured condition becomes one predicate; a rule matches when all of
them hold. Membership is exact and case-sensitive. An event lacking the
field a condition inspects never matches that condition.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

from ewers.notifications.events import RuleEvent
from ewers.notifications.schemas import RuleConditions


class Condition(Protocol):
    def matches(self, event: RuleEvent) -> bool:
        ...


def _member(value: Optional[str], allowed: frozenset[str]) -> bool:
    return value is not None and value in allowed


@dataclass(frozen=True)
class SeverityIn:
    values: frozenset[str]

    def matches(self, event: RuleEvent) -> bool:
        return _member(event.severity, self.values)


@dataclass(frozen=True)
class RegionIn:
    values: frozenset[str]

    def matches(self, event: RuleEvent) -> bool:
        return _member(event.region, self.values)


@dataclass(frozen=True)
class CategoryIn:
    values: frozenset[str]

    def matches(self, event: RuleEvent) -> bool:
        return _member(event.category, self.values)


@dataclass(frozen=True)
class SourceIn:
    values: frozenset[str]

    def matches(self, event: RuleEvent) -> bool:
        return _member(event.source, self.values)


@dataclass(frozen=True)
class EscalationLevelGte:
    threshold: int

    def matches(self, event: RuleEvent) -> bool:
        return event.escalation_level is not None and event.escalation_level >= self.threshold


def build_conditions(conditions: Optional[RuleConditions]) -> list[Condition]:
    """Translate a rule's condition object into predicates."""
    if conditions is None:
        return []

    predicates: list[Condition] = []
    if conditions.severity_in:
        predicates.append(SeverityIn(frozenset(conditions.severity_in)))
    if conditions.region_in:
        predicates.append(RegionIn(frozenset(conditions.region_in)))
    if conditions.category_in:
        predicates.append(CategoryIn(frozenset(conditions.category_in)))
    if conditions.source_in:
        predicates.append(SourceIn(frozenset(conditions.source_in)))
    if conditions.escalation_level_gte is not None:
        predicates.append(EscalationLevelGte(conditions.escalation_level_gte))
    return predicates


def matches_all(predicates: Iterable[Condition], event: RuleEvent) -> bool:
    """AND-reduction; no predicates always matches."""
    return all(p.matches(event) for p in predicates)
