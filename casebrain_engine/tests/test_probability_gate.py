"""
Tests for the Probability Gate
==============================

The gate is pure and total: every input yields one decision.
"""

import math
import pytest
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from casebrain_engine.probability_gate import GATE_POLICIES, gate_probability, should_show_probabilities
from casebrain_engine.schemas import GateDecision, PracticeArea


class TestShouldShowProbabilities:

    def test_complete_bundle_shows(self):
        decision = should_show_probabilities(PracticeArea.CRIMINAL, 80, 0)
        assert decision.show is True
        assert decision.reason is None

    def test_low_completeness_hides_with_reason(self):
        decision = should_show_probabilities(PracticeArea.CRIMINAL, 30, 0)
        assert decision.show is False
        assert "30%" in decision.reason

    def test_too_many_critical_missing_hides(self):
        decision = should_show_probabilities(PracticeArea.CRIMINAL, 90, 2)
        assert decision.show is False
        assert "critical" in decision.reason

    def test_not_admitted_always_hides(self):
        decision = should_show_probabilities(PracticeArea.CRIMINAL, 100, 0, analysis_admitted=False)
        assert decision.show is False

    def test_practice_area_string_accepted(self):
        assert should_show_probabilities("family", 40, 2).show is True

    @pytest.mark.parametrize("completeness,critical", [
        (None, 0),
        ("eighty", 0),
        (float("nan"), 0),
        (math.inf, 0),
        (80, None),
        (80, "one"),
        (True, 0),
    ])
    def test_malformed_inputs_never_raise(self, completeness, critical):
        decision = should_show_probabilities(PracticeArea.CRIMINAL, completeness, critical)
        assert isinstance(decision, GateDecision)
        assert decision.show is False
        assert decision.reason

    def test_unknown_practice_area_uses_other_row(self):
        floor = GATE_POLICIES[PracticeArea.OTHER].completeness_floor
        assert should_show_probabilities("maritime", floor, 0).show is True
        assert should_show_probabilities("maritime", floor - 1, 0).show is False

    @pytest.mark.parametrize("area", list(PracticeArea))
    def test_reason_present_iff_hidden(self, area):
        for completeness in (0, 25, 50, 75, 100):
            for critical in (0, 1, 2, 3):
                decision = should_show_probabilities(area, completeness, critical)
                assert (decision.reason is None) == decision.show


class TestGateProbability:

    def test_hidden_is_none_not_zero(self):
        hidden = GateDecision(show=False, reason="thin")
        assert gate_probability(85, hidden) is None

    def test_shown_passes_value(self):
        assert gate_probability(85, GateDecision(show=True)) == 85

    def test_shown_clamps(self):
        assert gate_probability(140, GateDecision(show=True)) == 100

    def test_none_stays_none(self):
        assert gate_probability(None, GateDecision(show=True)) is None
