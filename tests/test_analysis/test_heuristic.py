"""
Tests for the heuristic risk scorer.

Covers:
- Severity / likelihood / impact / timeframe classification rules
- Narrative text for title, description and recommendations
- Determinism and totality (property-based)
- Store-backed scoring, including the indicator value floor
"""

from dataclasses import dataclass
from typing import Optional

import pytest
from hypothesis import given, settings as hyp_settings
from hypothesis import strategies as st

from ewers.analysis.heuristic import (
    HEURISTIC_SCORER,
    HeuristicScorer,
    build_description,
    build_recommendations,
    build_title,
    classify_impact,
    classify_likelihood,
    classify_severity,
    classify_timeframe,
    score_heuristically,
)
from ewers.analysis.schemas import ScoringRequest
from ewers.analysis.store import IncidentStore
from ewers.exceptions import InsufficientDataError
from ewers.schemas.common import Impact, Likelihood, Severity, Timeframe


@dataclass
class FakeIncident:
    severity: str = "medium"
    category: str = "violence"
    location: str = "Lagos"
    impacted_population: Optional[int] = None


@dataclass
class FakeIndicator:
    value: int = 50
    name: str = "Tension"
    category: str = "social"
    trend: Optional[str] = None
    confidence: Optional[int] = None


def _indicators(*values: int) -> list[FakeIndicator]:
    return [FakeIndicator(value=v) for v in values]


# ── Severity ───────────────────────────────────────────────────────────


class TestSeverity:
    def test_high_incident_is_high(self):
        assert classify_severity([FakeIncident(severity="high")], []) == Severity.HIGH

    def test_indicator_at_80_is_high(self):
        assert classify_severity([], _indicators(80)) == Severity.HIGH

    def test_medium_incident_is_medium(self):
        assert classify_severity([FakeIncident(severity="medium")], _indicators(10)) == Severity.MEDIUM

    def test_indicator_at_70_is_medium(self):
        assert classify_severity([], _indicators(70, 79)) == Severity.MEDIUM

    def test_otherwise_low(self):
        assert classify_severity([FakeIncident(severity="low")], _indicators(69)) == Severity.LOW

    def test_critical_incident_does_not_count_as_high(self):
        assert classify_severity([FakeIncident(severity="critical")], []) == Severity.LOW


# ── Likelihood ─────────────────────────────────────────────────────────


class TestLikelihood:
    def test_very_likely_needs_five_indicators(self):
        assert classify_likelihood(_indicators(75, 80, 90, 10, 10)) == Likelihood.VERY_LIKELY

    def test_very_likely_checked_before_likely(self):
        # Satisfies both rules
        assert classify_likelihood(_indicators(90, 90, 90, 90, 90)) == Likelihood.VERY_LIKELY

    def test_four_high_indicators_only_likely(self):
        assert classify_likelihood(_indicators(90, 90, 90, 90)) == Likelihood.LIKELY

    def test_likely(self):
        assert classify_likelihood(_indicators(70, 71, 10)) == Likelihood.LIKELY

    def test_single_indicator_unlikely(self):
        assert classify_likelihood(_indicators(99)) == Likelihood.UNLIKELY

    def test_no_indicators_unlikely(self):
        assert classify_likelihood([]) == Likelihood.UNLIKELY

    def test_all_below_65_unlikely(self):
        assert classify_likelihood(_indicators(64, 60, 10)) == Likelihood.UNLIKELY

    def test_otherwise_possible(self):
        assert classify_likelihood(_indicators(66, 50)) == Likelihood.POSSIBLE


# ── Impact ─────────────────────────────────────────────────────────────


class TestImpact:
    def test_large_population_severe(self):
        assert classify_impact([FakeIncident(severity="low", impacted_population=1001)]) == Impact.SEVERE

    def test_two_high_incidents_severe(self):
        assert classify_impact([FakeIncident(severity="high"), FakeIncident(severity="high")]) == Impact.SEVERE

    def test_population_over_500_significant(self):
        assert classify_impact([FakeIncident(severity="low", impacted_population=501)]) == Impact.SIGNIFICANT

    def test_medium_incident_significant(self):
        assert classify_impact([FakeIncident(severity="medium")]) == Impact.SIGNIFICANT

    def test_small_low_incidents_minor(self):
        incidents = [FakeIncident(severity="low", impacted_population=99), FakeIncident(severity="low")]
        assert classify_impact(incidents) == Impact.MINOR

    def test_single_high_incident_moderate(self):
        assert classify_impact([FakeIncident(severity="high", impacted_population=200)]) == Impact.MODERATE


# ── Timeframe ──────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "severity,likelihood,expected",
    [
        (Severity.HIGH, Likelihood.LIKELY, Timeframe.IMMEDIATE),
        (Severity.HIGH, Likelihood.VERY_LIKELY, Timeframe.IMMEDIATE),
        (Severity.HIGH, Likelihood.POSSIBLE, Timeframe.MEDIUM_TERM),
        (Severity.LOW, Likelihood.UNLIKELY, Timeframe.LONG_TERM),
        (Severity.MEDIUM, Likelihood.UNLIKELY, Timeframe.MEDIUM_TERM),
    ],
)
def test_timeframe(severity, likelihood, expected):
    assert classify_timeframe(severity, likelihood) == expected


# ── Narrative ──────────────────────────────────────────────────────────


class TestNarrative:
    def test_title_from_dominant_category(self):
        incidents = [FakeIncident(category="natural_disaster"), FakeIncident(category="violence")]
        assert build_title("Kano", incidents, []) == "Natural Disaster Analysis for Kano"

    def test_title_unknown_category_used_verbatim(self):
        assert build_title("Kano", [FakeIncident(category="kidnapping")], []) == "kidnapping Analysis for Kano"

    def test_title_from_top_indicator(self):
        assert build_title("Kano", [], [FakeIndicator(name="Flood Risk")]) == "Flood Risk Risk Assessment for Kano"

    def test_description_counts(self):
        text = build_description("Lagos", [FakeIncident()] * 2, _indicators(70, 80, 90))
        assert "2 active incidents and 3 risk indicators" in text

    def test_high_recommendations_include_category_actions(self):
        text = build_recommendations([FakeIncident(category="violence")], [], Severity.HIGH)
        assert text.startswith("Immediate deployment of response teams.")
        assert "Deploy conflict resolution specialists." in text
        assert text.endswith("Establish coordination center for ongoing monitoring and response.")

    def test_medium_recommendations_include_indicator_actions(self):
        indicators = [FakeIndicator(category="political"), FakeIndicator(category="environmental")]
        text = build_recommendations([], indicators, Severity.MEDIUM)
        assert "Engage with community leaders" in text
        assert "environmental impacts" in text

    def test_low_recommendations(self):
        text = build_recommendations([], [], Severity.LOW)
        assert text.startswith("Maintain routine monitoring.")


# ── End-to-end pure scoring ────────────────────────────────────────────


def test_lagos_scenario():
    """3 active incidents (high, high, medium) and indicators 85, 78, 72, 40."""
    incidents = [
        FakeIncident(severity="high", location="Ikeja"),
        FakeIncident(severity="high", location="Surulere"),
        FakeIncident(severity="medium", category="protest", location="Yaba"),
    ]
    indicators = [
        FakeIndicator(value=85, name="Tension", trend="increasing"),
        FakeIndicator(value=78, name="Arms", trend="increasing"),
        FakeIndicator(value=72, name="Rhetoric", trend="increasing"),
        FakeIndicator(value=40, name="Displacement"),
    ]
    draft = score_heuristically(ScoringRequest(region="Lagos"), incidents, indicators)

    assert draft.severity == Severity.HIGH
    assert draft.likelihood == Likelihood.LIKELY
    assert draft.impact == Impact.SEVERE
    assert draft.timeframe == Timeframe.IMMEDIATE
    assert draft.scorer == HEURISTIC_SCORER
    assert draft.title == "Violent Conflict Analysis for Lagos"
    assert "3 indicators show worsening trends, particularly Tension and Arms." in draft.analysis


def test_no_data_raises_insufficient():
    with pytest.raises(InsufficientDataError):
        score_heuristically(ScoringRequest(region="Lagos"), [], [])


incident_strategy = st.builds(
    FakeIncident,
    severity=st.sampled_from(["low", "medium", "high", "critical"]),
    category=st.sampled_from(["violence", "fire", "protest", "natural_disaster", "other"]),
    location=st.sampled_from(["Ikeja", "Kano", "Makurdi"]),
    impacted_population=st.one_of(st.none(), st.integers(min_value=0, max_value=5000)),
)
indicator_strategy = st.builds(
    FakeIndicator,
    value=st.integers(min_value=0, max_value=100),
    name=st.sampled_from(["Tension", "Flood Risk", "Arms"]),
    category=st.sampled_from(["social", "political", "environmental", "economic"]),
    trend=st.sampled_from([None, "increasing", "stable", "decreasing"]),
    confidence=st.one_of(st.none(), st.integers(min_value=0, max_value=100)),
)


class TestProperties:
    @given(
        incidents=st.lists(incident_strategy, max_size=6),
        indicators=st.lists(indicator_strategy, max_size=8),
    )
    @hyp_settings(max_examples=100)
    def test_total_and_deterministic(self, incidents, indicators):
        """Any non-empty input yields a complete draft, and the same draft twice."""
        if not incidents and not indicators:
            return
        request = ScoringRequest(region="Nigeria", location="Lagos")
        first = score_heuristically(request, incidents, indicators)
        second = score_heuristically(request, incidents, indicators)
        assert first == second
        assert first.title and first.description and first.analysis and first.recommendations

    @given(indicators=st.lists(indicator_strategy, max_size=8))
    @hyp_settings(max_examples=100)
    def test_likelihood_never_very_likely_below_five(self, indicators):
        if len(indicators) < 5:
            assert classify_likelihood(indicators) != Likelihood.VERY_LIKELY


# ── Store-backed scorer ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_heuristic_scorer_applies_indicator_floor(db, make_incident, make_indicator):
    await make_incident(severity="low", location="Lagos")
    await make_indicator(value=85, location="Lagos")
    await make_indicator(value=30, location="Lagos")

    scorer = HeuristicScorer(IncidentStore(db), indicator_floor=60)
    draft = await scorer.score(ScoringRequest(region="Nigeria", location="Lagos"))

    assert draft.severity == Severity.HIGH
    # Only one indicator survives the floor
    assert "1 risk indicators" in draft.description


@pytest.mark.asyncio
async def test_heuristic_scorer_ignores_pending_incidents(db, make_pending_incident):
    await make_pending_incident(severity="high", location="Lagos")

    scorer = HeuristicScorer(IncidentStore(db))
    with pytest.raises(InsufficientDataError):
        await scorer.score(ScoringRequest(region="Nigeria", location="Lagos"))
