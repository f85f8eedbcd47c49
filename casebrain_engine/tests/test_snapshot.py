"""
Tests for the Snapshot Composer
===============================

Repository is an in-memory fake; the clock is fixed.
"""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from casebrain_engine.pipeline import build_snapshot
from casebrain_engine.schemas import (
    AnalysisMode,
    CaseCategory,
    ConfidenceLevel,
    EvidenceStatus,
    ReasonCode,
)
from casebrain_engine.snapshot import (
    SnapshotComposer,
    analysis_mode_of,
    confidence_cap,
    next_hearing,
    normalize_charges,
    stored_strategy_exists,
)


NOW = datetime(2026, 10, 17, 9, 0, 0)


class FakeRepository:
    """Dict-backed CaseRepository"""

    def __init__(self, case=None, charges=None, strategy=None, commitment=None,
                 hearings=None, documents=None, latest=None):
        self.case = case
        self.charges = charges or []
        self.strategy = strategy
        self.commitment = commitment
        self.hearings = hearings or []
        self.documents = documents or []
        self.latest = latest
        self.calls = []

    async def get_case(self, case_id):
        self.calls.append("case")
        return self.case

    async def get_charges(self, case_id):
        self.calls.append("charges")
        return self.charges

    async def get_strategy(self, case_id):
        self.calls.append("strategy")
        return self.strategy

    async def get_commitment(self, case_id):
        self.calls.append("commitment")
        return self.commitment

    async def get_hearings(self, case_id):
        self.calls.append("hearings")
        return self.hearings

    async def get_documents(self, case_id):
        self.calls.append("documents")
        return self.documents

    async def get_latest_analysis(self, case_id):
        self.calls.append("latest")
        return self.latest


def _case(bundle, **extra):
    case = {
        "id": "case-1",
        "org_id": "org-1",
        "title": "R v Price",
        "practice_area": bundle["practice_area"].value,
        "category": bundle["category"],
        "extra_data": {},
    }
    case.update(extra)
    return case


def _composer(repository):
    return SnapshotComposer(repository, clock=lambda: NOW)


class TestSnapshotComposer:

    @pytest.mark.asyncio
    async def test_unknown_case(self):
        snapshot = await _composer(FakeRepository()).build("missing")

        assert snapshot.case_id == "missing"
        assert not snapshot.admission.can_generate_analysis
        assert snapshot.admission.diagnostics.reason_codes[0] == ReasonCode.CASE_NOT_FOUND
        assert snapshot.strategy is None
        assert not snapshot.can_show_preview
        assert snapshot.strategy_summary.status_label == "Not run"
        assert snapshot.strategy_summary.confidence_cap == ConfidenceLevel.LOW

    @pytest.mark.asyncio
    async def test_stored_strategy_visible_despite_thin_text(self, thin_bundle):
        repository = FakeRepository(
            case=_case(thin_bundle),
            strategy={"routes": [{"title": "Challenge identification"}], "recommendation": None, "narrative": None},
            documents=thin_bundle["documents"],
            latest={"version_number": 3, "analysis_mode": "preview"},
        )
        snapshot = await _composer(repository).build("case-1")

        assert snapshot.strategy_data_exists
        assert snapshot.can_show_preview
        assert snapshot.can_show_full
        assert not snapshot.extraction_ok
        assert snapshot.probabilities_suppressed
        assert snapshot.strategy_summary.confidence_cap == ConfidenceLevel.LOW
        assert snapshot.strategy_summary.status_label == "Preview (gated)"
        assert snapshot.strategy_summary.route_count == 1
        assert snapshot.analysis_version == 3
        assert ReasonCode.SCANNED_SUSPECTED in snapshot.admission.diagnostics.reason_codes
        assert all(a.win_probability is None for a in snapshot.strategy.angles)
        assert snapshot.strategy.overall_win_probability is None

    @pytest.mark.asyncio
    async def test_no_analysis_hides_strategy(self, thin_bundle):
        repository = FakeRepository(
            case=_case(thin_bundle),
            strategy={"routes": [{"title": "x"}]},
            documents=thin_bundle["documents"],
        )
        snapshot = await _composer(repository).build("case-1")

        assert snapshot.strategy_data_exists
        assert snapshot.analysis_mode == AnalysisMode.NONE
        assert not snapshot.can_show_preview
        assert not snapshot.can_show_full

    @pytest.mark.asyncio
    async def test_complete_mode(self, criminal_bundle):
        repository = FakeRepository(
            case=_case(criminal_bundle),
            documents=criminal_bundle["documents"],
            latest={"version_number": 1, "analysis_mode": "complete"},
            commitment={"primary_strategy": "pace-solicitor", "secondary_strategies": []},
        )
        snapshot = await _composer(repository).build("case-1")

        assert snapshot.category == CaseCategory.VIOLENCE
        assert snapshot.extraction_ok
        assert not snapshot.probabilities_suppressed
        assert snapshot.can_show_full
        assert snapshot.strategy_summary.status_label == "Complete"
        assert snapshot.strategy_summary.confidence_cap == ConfidenceLevel.HIGH
        assert snapshot.strategy_summary.has_recommendation
        assert snapshot.strategy.angles[0].id == "pace-solicitor"
        assert snapshot.options.recommended.id == "no-case-to-answer"
        assert snapshot.commitment["primary_strategy"] == "pace-solicitor"
        assert snapshot.disclosure_outstanding == []
        assert snapshot.generated_at == NOW

    @pytest.mark.asyncio
    async def test_reads_every_collaborator(self, criminal_bundle):
        repository = FakeRepository(case=_case(criminal_bundle), documents=criminal_bundle["documents"])
        await _composer(repository).build("case-1")
        assert sorted(repository.calls) == sorted(
            ["case", "charges", "strategy", "commitment", "hearings", "documents", "latest"]
        )

    @pytest.mark.asyncio
    async def test_charge_fallback_and_next_hearing(self, criminal_bundle):
        repository = FakeRepository(
            case=_case(criminal_bundle, extra_data={"criminalMeta": {"charges": [{"offence": "Assault ABH"}]}}),
            documents=criminal_bundle["documents"],
            hearings=[
                {"hearing_type": "PTPH", "hearing_date": NOW - timedelta(days=30), "court": "Southwark"},
                {"hearing_type": "Trial", "hearing_date": NOW + timedelta(days=60), "court": "Southwark"},
                {"hearing_type": "Mention", "hearing_date": NOW + timedelta(days=7), "court": None},
            ],
        )
        snapshot = await _composer(repository).build("case-1")

        assert [c.offence for c in snapshot.charges] == ["Assault ABH"]
        assert snapshot.next_hearing.hearing_type == "Mention"

    @pytest.mark.asyncio
    async def test_case_without_documents_has_no_strategy_data(self):
        repository = FakeRepository(
            case={"id": "case-2", "org_id": "org-1", "title": "R v Hale",
                  "practice_area": "criminal", "category": "assault", "extra_data": {}},
            latest={"version_number": 1, "analysis_mode": "preview"},
        )
        snapshot = await _composer(repository).build("case-2")

        assert not snapshot.strategy_data_exists
        assert not snapshot.can_show_full
        assert snapshot.strategy.angles == []
        assert snapshot.options.viable == []
        assert snapshot.options.recommended is None
        assert snapshot.strategy_summary.status_label == "Not run"

    @pytest.mark.asyncio
    async def test_build_snapshot_entry_point(self, criminal_bundle):
        repository = FakeRepository(case=_case(criminal_bundle), documents=criminal_bundle["documents"])
        snapshot = await build_snapshot("case-1", repository, clock=lambda: NOW)
        assert snapshot.case_id == "case-1"
        assert snapshot.title == "R v Price"


class TestHelpers:

    def test_stored_strategy_exists(self):
        assert not stored_strategy_exists(None)
        assert not stored_strategy_exists({"routes": [], "recommendation": None, "narrative": ""})
        assert stored_strategy_exists({"narrative": "Run the PACE point first."})

    @pytest.mark.parametrize("extraction_ok,suppressed,expected", [
        (False, False, ConfidenceLevel.LOW),
        (False, True, ConfidenceLevel.LOW),
        (True, True, ConfidenceLevel.MEDIUM),
        (True, False, ConfidenceLevel.HIGH),
    ])
    def test_confidence_cap(self, extraction_ok, suppressed, expected):
        assert confidence_cap(extraction_ok, suppressed) == expected

    @pytest.mark.parametrize("latest,expected", [
        (None, AnalysisMode.NONE),
        ({"version_number": 2, "analysis_mode": "preview"}, AnalysisMode.PREVIEW),
        ({"version_number": 2, "analysis_mode": None}, AnalysisMode.COMPLETE),
        ({"version_number": None, "analysis_mode": None}, AnalysisMode.NONE),
        ({"version_number": 2, "analysis_mode": "draft"}, AnalysisMode.NONE),
    ])
    def test_analysis_mode_of(self, latest, expected):
        assert analysis_mode_of(latest) == expected

    def test_next_hearing_none_when_all_past(self):
        assert next_hearing([{"hearing_type": "PTPH", "hearing_date": NOW - timedelta(days=1)}], NOW) is None

    def test_stored_charges_win(self):
        rows = [{"id": "c1", "offence": "Theft", "section": "s.1 Theft Act 1968", "status": "charged"}, {"offence": " "}]
        charges = normalize_charges(rows, ["ignored"])
        assert len(charges) == 1
        assert charges[0].section == "s.1 Theft Act 1968"
