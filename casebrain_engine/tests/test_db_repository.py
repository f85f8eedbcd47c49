"""
Tests for the SQL case repository
=================================

Runs against a fresh SQLite database per test (sqlalchemy_db fixture).
"""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from casebrain_engine.db import (
    AnalysisModeColumn,
    AnalysisVersion,
    Case,
    CaseDocument,
    Charge,
    Hearing,
    Organization,
    SqlCaseRepository,
    StrategyCommitment,
    StrategyRecord,
    get_db_session,
)
from casebrain_engine.schemas import AnalysisMode, CaseCategory, ReasonCode
from casebrain_engine.snapshot import SnapshotComposer


NOW = datetime(2026, 10, 17, 9, 0, 0)


@pytest.fixture
def seeded(sqlalchemy_db, criminal_bundle):
    """Two orgs; org-a owns a criminal case with related rows"""
    with get_db_session() as db:
        db.add(Organization(id="org-a", name="Alder & Co"))
        db.add(Organization(id="org-b", name="Birch LLP"))
        db.add(Case(
            id="case-a1",
            org_id="org-a",
            title="R v Price",
            practice_area="criminal",
            category="Assault occasioning actual bodily harm",
            extra_data={},
        ))
        db.add(Case(id="case-b1", org_id="org-b", title="Other firm's case", practice_area="other"))
        db.flush()

        for i, doc in enumerate(criminal_bundle["documents"]):
            db.add(CaseDocument(
                id=doc.id,
                case_id="case-a1",
                name=doc.name,
                raw_text=doc.raw_text,
                structured_extract=doc.structured_extract,
                created_at=NOW - timedelta(days=10 - i),
            ))

        db.add(Charge(case_id="case-a1", offence="Assault occasioning actual bodily harm", section="s.47 OAPA 1861"))
        db.add(Hearing(case_id="case-a1", hearing_type="Trial", hearing_date=NOW + timedelta(days=40), court="Southwark"))
        db.add(StrategyRecord(case_id="case-a1", routes=[{"title": "Exclude interview"}], narrative="Lead on PACE."))
        db.add(StrategyCommitment(case_id="case-a1", primary_strategy="pace-solicitor", secondary_strategies=["human-rights"]))
        db.add(AnalysisVersion(case_id="case-a1", version_number=1, analysis_mode=AnalysisModeColumn.PREVIEW))
        db.add(AnalysisVersion(case_id="case-a1", version_number=2, analysis_mode=AnalysisModeColumn.COMPLETE))
    return sqlalchemy_db


class TestSqlCaseRepository:

    @pytest.mark.asyncio
    async def test_get_case(self, seeded):
        case = await SqlCaseRepository("org-a").get_case("case-a1")
        assert case["title"] == "R v Price"
        assert case["status"] == "active"
        assert case["extra_data"] == {}

    @pytest.mark.asyncio
    async def test_other_org_sees_nothing(self, seeded):
        repository = SqlCaseRepository("org-b")
        assert await repository.get_case("case-a1") is None
        assert await repository.get_documents("case-a1") == []
        assert await repository.get_charges("case-a1") == []
        assert await repository.get_strategy("case-a1") is None
        assert await repository.get_latest_analysis("case-a1") is None

    @pytest.mark.asyncio
    async def test_documents_in_upload_order(self, seeded, criminal_bundle):
        documents = await SqlCaseRepository("org-a").get_documents("case-a1")
        assert [d.id for d in documents] == [d.id for d in criminal_bundle["documents"]]
        assert documents[0].raw_text == criminal_bundle["documents"][0].raw_text

    @pytest.mark.asyncio
    async def test_latest_analysis_is_highest_version(self, seeded):
        latest = await SqlCaseRepository("org-a").get_latest_analysis("case-a1")
        assert latest["version_number"] == 2
        assert latest["analysis_mode"] == "complete"

    @pytest.mark.asyncio
    async def test_related_rows(self, seeded):
        repository = SqlCaseRepository("org-a")
        charges = await repository.get_charges("case-a1")
        hearings = await repository.get_hearings("case-a1")
        strategy = await repository.get_strategy("case-a1")
        commitment = await repository.get_commitment("case-a1")

        assert charges[0]["section"] == "s.47 OAPA 1861"
        assert hearings[0]["hearing_type"] == "Trial"
        assert strategy["routes"] == [{"title": "Exclude interview"}]
        assert commitment["secondary_strategies"] == ["human-rights"]


class TestSnapshotOverSql:

    @pytest.mark.asyncio
    async def test_snapshot(self, seeded):
        composer = SnapshotComposer(SqlCaseRepository("org-a"), clock=lambda: NOW)
        snapshot = await composer.build("case-a1")

        assert snapshot.category == CaseCategory.VIOLENCE
        assert snapshot.analysis_mode == AnalysisMode.COMPLETE
        assert snapshot.analysis_version == 2
        assert snapshot.can_show_full
        assert snapshot.strategy_summary.status_label == "Complete"
        assert snapshot.strategy_summary.route_count == 1
        assert [c.offence for c in snapshot.charges] == ["Assault occasioning actual bodily harm"]
        assert snapshot.next_hearing.court == "Southwark"

    @pytest.mark.asyncio
    async def test_out_of_scope_case_is_not_found(self, seeded):
        composer = SnapshotComposer(SqlCaseRepository("org-b"), clock=lambda: NOW)
        snapshot = await composer.build("case-a1")
        assert ReasonCode.CASE_NOT_FOUND in snapshot.admission.diagnostics.reason_codes
        assert snapshot.strategy is None
