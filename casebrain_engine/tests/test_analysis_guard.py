"""
Tests for the Analysis Guard
============================
"""

import pytest
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from casebrain_engine.analysis_guard import (
    BANNERS,
    check_analysis_admission,
    compute_diagnostics,
    evaluate_admission,
)
from casebrain_engine.config import Settings
from casebrain_engine.errors import AnalysisGateSignal, EngineError
from casebrain_engine.schemas import Document, ReasonCode


@pytest.fixture
def settings():
    return Settings(analysis_min_documents=2, analysis_min_raw_chars=1000)


class TestDiagnostics:

    def test_no_documents(self, settings):
        diagnostics = compute_diagnostics([], settings)
        assert diagnostics.doc_count == 0
        assert diagnostics.reason_codes == [ReasonCode.DOCS_NONE]
        assert diagnostics.suspected_scanned is False

    def test_scanned_single_document(self, thin_bundle, settings):
        diagnostics = compute_diagnostics(thin_bundle["documents"], settings)
        assert diagnostics.suspected_scanned is True
        assert ReasonCode.DOCS_TOO_FEW in diagnostics.reason_codes
        assert ReasonCode.SCANNED_SUSPECTED in diagnostics.reason_codes

    def test_full_bundle_ok(self, criminal_bundle, settings):
        diagnostics = compute_diagnostics(criminal_bundle["documents"], settings)
        assert diagnostics.reason_codes == [ReasonCode.OK]
        assert diagnostics.raw_chars_total >= 1000
        assert diagnostics.avg_raw_chars_per_doc == diagnostics.raw_chars_total // 3

    def test_structured_extract_counts_json_chars(self, settings):
        docs = [Document(id="1", name="a", raw_text="", structured_extract={"criminalMeta": {"charges": ["x" * 500]}})]
        diagnostics = compute_diagnostics(docs, settings)
        assert diagnostics.json_chars_total > 400
        assert diagnostics.suspected_scanned is False

    def test_case_not_found(self, settings):
        diagnostics = compute_diagnostics([], settings, case_found=False)
        assert ReasonCode.CASE_NOT_FOUND in diagnostics.reason_codes


class TestAdmission:

    def test_admitted(self, criminal_bundle, settings):
        admission = evaluate_admission(compute_diagnostics(criminal_bundle["documents"], settings), settings)
        assert admission.can_generate_analysis is True
        assert admission.banner is None

    def test_denied_returns_banner(self, thin_bundle, settings):
        admission = evaluate_admission(compute_diagnostics(thin_bundle["documents"], settings), settings)
        assert admission.can_generate_analysis is False
        assert admission.banner == BANNERS[ReasonCode.SCANNED_SUSPECTED]

    def test_two_docs_but_thin_text(self, settings):
        docs = [Document(id="1", name="a", raw_text="x" * 450), Document(id="2", name="b", raw_text="y" * 450)]
        admission = evaluate_admission(compute_diagnostics(docs, settings), settings)
        assert admission.can_generate_analysis is False
        assert ReasonCode.TEXT_THIN in admission.diagnostics.reason_codes

    def test_check_raises_gate_signal(self, thin_bundle, settings):
        diagnostics = compute_diagnostics(thin_bundle["documents"], settings)
        with pytest.raises(AnalysisGateSignal) as exc_info:
            check_analysis_admission(diagnostics, settings, case_id="case-1")
        assert exc_info.value.banner.title == "No extractable text detected"
        assert exc_info.value.diagnostics == diagnostics

    def test_gate_signal_is_not_an_engine_error(self):
        assert not issubclass(AnalysisGateSignal, EngineError)

    def test_check_returns_admission_when_ok(self, criminal_bundle, settings):
        diagnostics = compute_diagnostics(criminal_bundle["documents"], settings)
        assert check_analysis_admission(diagnostics, settings).can_generate_analysis is True
