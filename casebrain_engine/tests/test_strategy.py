"""
Tests for Strategy Derivation
=============================
"""

import pytest
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from casebrain_engine.catalogue import MAX_WIN_PROBABILITY, allowed_angle_types
from casebrain_engine.extractor import extract_signals
from casebrain_engine.schemas import (
    AngleType,
    BreachSignal,
    CaseCategory,
    CaseFacts,
    DerivationSource,
    EvidenceStatus,
    Exploitability,
    GateDecision,
    LoopholeType,
    PracticeArea,
    Severity,
    SEVERITY_RANK,
    StrategyAngle,
)
from casebrain_engine.strategy import (
    exploitability_for,
    overall_probability,
    recommend,
    get_strategy_engine,
)


SHOW = GateDecision(show=True)
HIDE = GateDecision(show=False, reason="Evidence completeness 20% is below the 50% needed to show probabilities")


def _angle(key, severity=Severity.HIGH, probability=None, angle_type=AngleType.EVIDENCE_WEAKNESS_CHALLENGE, combined_with=()):
    return StrategyAngle(
        id=key,
        angle_type=angle_type,
        title=key,
        severity=severity,
        win_probability=probability,
        combined_with=list(combined_with),
    )


@pytest.fixture
def pace_facts(criminal_bundle):
    return extract_signals(criminal_bundle["documents"], PracticeArea.CRIMINAL).facts


class TestDerive:

    def test_pace_bundle_angles(self, pace_facts):
        derivation = get_strategy_engine().derive(CaseCategory.VIOLENCE, pace_facts, SHOW)
        ids = [a.id for a in derivation.angles]
        assert ids[:4] == ["pace-solicitor", "pace-caution", "abuse-of-process", "human-rights"]
        assert set(ids) == {
            "pace-solicitor", "pace-caution", "abuse-of-process", "human-rights",
            "identification", "disclosure-stay", "violence-identification", "evidence-weakness",
        }
        assert derivation.source == DerivationSource.DETERMINISTIC
        assert derivation.document_count == 3

    def test_ordering_by_severity_then_base(self, pace_facts):
        derivation = get_strategy_engine().derive(CaseCategory.VIOLENCE, pace_facts, SHOW)
        ranks = [SEVERITY_RANK[a.severity] for a in derivation.angles]
        assert ranks == sorted(ranks, reverse=True)

    def test_angles_stay_in_category_catalogue(self, pace_facts):
        derivation = get_strategy_engine().derive(CaseCategory.VIOLENCE, pace_facts, SHOW)
        allowed = allowed_angle_types(CaseCategory.VIOLENCE)
        assert all(a.angle_type in allowed for a in derivation.angles)

    def test_probabilities_when_shown(self, pace_facts):
        derivation = get_strategy_engine().derive(CaseCategory.VIOLENCE, pace_facts, SHOW)
        by_id = {a.id: a for a in derivation.angles}
        assert by_id["pace-solicitor"].win_probability == 90
        assert by_id["abuse-of-process"].win_probability == 95
        assert derivation.overall_win_probability == MAX_WIN_PROBABILITY

    def test_gate_hides_every_probability(self, pace_facts):
        derivation = get_strategy_engine().derive(CaseCategory.VIOLENCE, pace_facts, HIDE)
        assert derivation.angles
        assert all(a.win_probability is None for a in derivation.angles)
        assert all(l.success_probability is None for l in derivation.loopholes)
        assert derivation.overall_win_probability is None
        assert derivation.recommended_strategy.combined_probability is None
        assert derivation.gate == HIDE

    def test_loopholes_project_angles(self, pace_facts):
        derivation = get_strategy_engine().derive(CaseCategory.VIOLENCE, pace_facts, SHOW)
        assert len(derivation.loopholes) == len(derivation.angles)
        first = derivation.loopholes[0]
        assert first.angle_id == "pace-solicitor"
        assert first.loophole_type == LoopholeType.PACE_BREACH
        assert first.exploitability == Exploitability.HIGH

    def test_recommendation_uses_combined_with(self, pace_facts):
        derivation = get_strategy_engine().derive(CaseCategory.VIOLENCE, pace_facts, SHOW)
        rec = derivation.recommended_strategy
        assert rec.primary.id == "pace-solicitor"
        assert [a.id for a in rec.supporting] == ["abuse-of-process", "human-rights"]
        assert rec.combined_probability == MAX_WIN_PROBABILITY

    def test_vulnerabilities(self, pace_facts):
        derivation = get_strategy_engine().derive(CaseCategory.VIOLENCE, pace_facts, SHOW)
        vulns = derivation.prosecution_vulnerabilities
        assert "PACE Breach - Right to Solicitor Denied" in vulns.critical_weaknesses
        assert vulns.evidence_gaps == []
        assert vulns.procedural_errors

    def test_no_viable_angle_is_empty(self):
        facts = CaseFacts(
            practice_area=PracticeArea.OTHER,
            evidence_status={"witness_statements": EvidenceStatus.PRESENT},
        )
        derivation = get_strategy_engine().derive(CaseCategory.OTHER, facts, SHOW)
        assert derivation.angles == []
        assert derivation.loopholes == []
        assert derivation.recommended_strategy is None
        assert derivation.source == DerivationSource.NONE

    def test_housing_awaab(self):
        facts = CaseFacts(
            practice_area=PracticeArea.HOUSING_DISREPAIR,
            signals={
                BreachSignal.DAMP_MOULD: ["black mould"],
                BreachSignal.SOCIAL_HOUSING: ["housing association"],
                BreachSignal.REPAIR_NOTICE_IGNORED: ["repairs were ignored"],
            },
            evidence_status={"witness_statements": EvidenceStatus.PRESENT},
        )
        derivation = get_strategy_engine().derive(CaseCategory.HOUSING_DISREPAIR, facts, SHOW)
        ids = [a.id for a in derivation.angles]
        assert "awaab" in ids
        assert "s11-lta" in ids
        assert derivation.practice_area == PracticeArea.HOUSING_DISREPAIR

    def test_derivation_is_deterministic(self, pace_facts):
        engine = get_strategy_engine()
        first = engine.derive(CaseCategory.VIOLENCE, pace_facts, SHOW)
        second = engine.derive(CaseCategory.VIOLENCE, pace_facts, SHOW)
        assert first.model_dump() == second.model_dump()


class TestHelpers:

    def test_overall_bonus(self):
        angles = [_angle("a", probability=70), _angle("b", probability=72)]
        assert overall_probability(angles) == 82

    def test_overall_three_strong_angles(self):
        angles = [_angle("a", probability=70), _angle("b", probability=70), _angle("c", probability=70)]
        assert overall_probability(angles) == 85

    def test_overall_none_without_values(self):
        assert overall_probability([_angle("a")]) is None

    def test_recommend_falls_back_to_next_angles(self):
        angles = [_angle("a", probability=60), _angle("b", probability=50), _angle("c", probability=40), _angle("d")]
        rec = recommend(angles)
        assert [a.id for a in rec.supporting] == ["b", "c"]
        assert rec.combined_probability == 60 + 15

    def test_recommend_empty(self):
        assert recommend([]) is None

    @pytest.mark.parametrize("severity,probability,expected", [
        (Severity.LOW, 61, Exploitability.HIGH),
        (Severity.CRITICAL, 41, Exploitability.MEDIUM),
        (Severity.CRITICAL, 40, Exploitability.LOW),
        (Severity.CRITICAL, None, Exploitability.HIGH),
        (Severity.MEDIUM, None, Exploitability.MEDIUM),
        (Severity.LOW, None, Exploitability.LOW),
    ])
    def test_exploitability(self, severity, probability, expected):
        assert exploitability_for(severity, probability) == expected
