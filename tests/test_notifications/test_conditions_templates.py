"""
Tests for rule conditions and notification templates.
"""

from ewers.notifications.conditions import (
    EscalationLevelGte,
    SeverityIn,
    SourceIn,
    build_conditions,
    matches_all,
)
from ewers.notifications.events import RuleEvent
from ewers.notifications.schemas import RuleConditions
from ewers.notifications.templates import render
from ewers.schemas.common import RuleEventKind


def _incident_event(**overrides) -> RuleEvent:
    values = dict(
        kind=RuleEventKind.INCIDENT_CREATED,
        title="Clash",
        description="Clash at market",
        severity="high",
        region="Nigeria",
        category="violence",
        source="12",
        incident_id=1,
    )
    values.update(overrides)
    return RuleEvent(**values)


class TestBuildConditions:
    def test_empty_conditions_match_everything(self):
        assert build_conditions(RuleConditions()) == []
        assert matches_all([], _incident_event())

    def test_empty_lists_are_ignored(self):
        conditions = RuleConditions.model_validate({"severityIn": [], "regionIn": []})
        assert build_conditions(conditions) == []

    def test_source_ids_are_stringified(self):
        conditions = RuleConditions.model_validate({"sourceIn": [12, "web"]})
        predicates = build_conditions(conditions)
        assert predicates == [SourceIn(frozenset({"12", "web"}))]
        assert matches_all(predicates, _incident_event(source="12"))

    def test_all_conditions_must_hold(self):
        conditions = RuleConditions.model_validate(
            {"severityIn": ["high", "critical"], "categoryIn": ["fire"]}
        )
        assert not matches_all(build_conditions(conditions), _incident_event())
        assert matches_all(build_conditions(conditions), _incident_event(category="fire"))


class TestPredicates:
    def test_severity_membership_is_case_sensitive(self):
        assert not SeverityIn(frozenset({"High"})).matches(_incident_event(severity="high"))

    def test_missing_field_never_matches(self):
        assert not SeverityIn(frozenset({"high"})).matches(_incident_event(severity=None))

    def test_escalation_condition_never_matches_incidents(self):
        assert not EscalationLevelGte(1).matches(_incident_event())

    def test_escalation_threshold_inclusive(self):
        alert = _incident_event(kind=RuleEventKind.ALERT_CREATED, escalation_level=2)
        assert EscalationLevelGte(2).matches(alert)
        assert not EscalationLevelGte(3).matches(alert)


class TestTemplates:
    def test_placeholders_replaced(self):
        text = render("{{incidentTitle}} in {{ incidentLocation }}", {"incidentTitle": "Flood", "incidentLocation": "Kano"})
        assert text == "Flood in Kano"

    def test_unknown_placeholder_renders_empty(self):
        assert render("[{{nope}}]", {}) == "[]"

    def test_empty_template(self):
        assert render(None, {"a": "b"}) == ""
        assert render("", {"a": "b"}) == ""

    def test_text_without_placeholders_untouched(self):
        assert render("Static {title}", {"title": "x"}) == "Static {title}"
