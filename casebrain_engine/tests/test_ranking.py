"""
Tests for nuclear option ranking under risk policies
"""

import pytest
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from casebrain_engine.catalogue import NUCLEAR_WARNINGS
from casebrain_engine.errors import CatalogueError
from casebrain_engine.extractor import extract_signals
from casebrain_engine.ranking import (
    AGGRESSIVE,
    CATALOGUE_CONSERVATISM,
    RiskPolicy,
    get_policy,
    rank_options,
)
from casebrain_engine.schemas import (
    AngleType,
    CaseCategory,
    GateDecision,
    PracticeArea,
    RiskLevel,
    Severity,
    StrategyAngle,
)
from casebrain_engine.strategy import get_strategy_engine


@pytest.fixture
def pace_angles(criminal_bundle):
    facts = extract_signals(criminal_bundle["documents"], PracticeArea.CRIMINAL).facts
    return get_strategy_engine().derive(CaseCategory.VIOLENCE, facts, GateDecision(show=True)).angles


def _angle(angle_type, severity=Severity.HIGH, key=None):
    return StrategyAngle(id=key or angle_type.value.lower(), angle_type=angle_type, title="t", severity=severity)


class TestRankOptions:

    def test_viable_options_for_pace_bundle(self, pace_angles):
        ranking = rank_options(CaseCategory.VIOLENCE, pace_angles)
        assert [o.id for o in ranking.viable] == [
            "abuse-of-process-stay",
            "no-case-to-answer",
            "exclusion-chain-reaction",
            "disclosure-stay",
            "article-6-challenge",
        ]
        assert ranking.warnings == NUCLEAR_WARNINGS

    def test_default_policy_is_conservative(self, pace_angles):
        ranking = rank_options(CaseCategory.VIOLENCE, pace_angles)
        assert ranking.policy == "catalogue_conservatism"
        assert ranking.recommended.id == "no-case-to-answer"
        assert ranking.recommended.risk == RiskLevel.HIGH

    def test_aggressive_policy(self, pace_angles):
        ranking = rank_options(CaseCategory.VIOLENCE, pace_angles, "aggressive")
        assert ranking.recommended.id == "article-6-challenge"
        assert ranking.recommended.risk == RiskLevel.EXTREME

    def test_recommended_is_always_viable(self, pace_angles):
        for policy in (CATALOGUE_CONSERVATISM, AGGRESSIVE):
            ranking = rank_options(CaseCategory.VIOLENCE, pace_angles, policy)
            assert ranking.recommended in ranking.viable

    def test_tie_goes_to_catalogue_order(self):
        angles = [_angle(AngleType.NO_CASE_TO_ANSWER)]
        flat = RiskPolicy(name="flat", ordering={})
        ranking = rank_options(CaseCategory.CRIMINAL_GENERAL, angles, flat)
        assert ranking.recommended.id == ranking.viable[0].id

    def test_no_angles_no_options(self):
        ranking = rank_options(CaseCategory.DRUGS, [])
        assert ranking.viable == []
        assert ranking.recommended is None

    def test_other_has_no_options(self):
        angles = [_angle(AngleType.EVIDENCE_WEAKNESS_CHALLENGE, Severity.CRITICAL)]
        ranking = rank_options(CaseCategory.OTHER, angles)
        assert ranking.viable == []
        assert ranking.recommended is None

    def test_housing_awaab_option(self):
        angles = [_angle(AngleType.AWAAB_LAW_BREACH, Severity.CRITICAL)]
        ranking = rank_options(CaseCategory.HOUSING_DISREPAIR, angles)
        assert "awaab-statutory-breach" in [o.id for o in ranking.viable]

    def test_single_breach_angle_not_enough_for_stay(self):
        angles = [_angle(AngleType.PACE_BREACH_EXCLUSION)]
        ranking = rank_options(CaseCategory.CRIMINAL_GENERAL, angles)
        assert "abuse-of-process-stay" not in [o.id for o in ranking.viable]


class TestPolicies:

    def test_lookup(self):
        assert get_policy(None) is CATALOGUE_CONSERVATISM
        assert get_policy("aggressive") is AGGRESSIVE

    def test_unknown_policy_raises(self):
        with pytest.raises(CatalogueError):
            get_policy("reckless")
        with pytest.raises(CatalogueError):
            rank_options(CaseCategory.VIOLENCE, [], "reckless")

    def test_orderings_are_reversed(self):
        for level in RiskLevel:
            assert CATALOGUE_CONSERVATISM.ordering[level] + AGGRESSIVE.ordering[level] == 4
