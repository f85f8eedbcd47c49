"""
Tests for Completeness Scoring
==============================
"""

import pytest
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from casebrain_engine.completeness import (
    BUNDLE_WEIGHTS,
    compute_bundle_flags,
    score_completeness,
    tier_for_score,
)
from casebrain_engine.extractor import extract_signals
from casebrain_engine.schemas import CapabilityTier, Document, EvidenceItem, EvidenceStatus, PracticeArea


def _item(key, status):
    evidence = ["matched"] if status in (EvidenceStatus.PRESENT, EvidenceStatus.PARTIAL) else []
    return EvidenceItem(id=key, label=key, status=status, supporting_evidence=evidence)


class TestScoreCompleteness:

    def test_empty_items_score_zero(self):
        result = score_completeness([], PracticeArea.CRIMINAL)
        assert result.score == 0
        assert result.capability_tier == CapabilityTier.THIN
        assert result.total == 0

    def test_present_and_partial_both_count(self):
        items = [
            _item("charges", EvidenceStatus.PRESENT),
            _item("witness_statements", EvidenceStatus.PARTIAL),
            _item("pace", EvidenceStatus.MISSING),
            _item("exhibits", EvidenceStatus.UNKNOWN),
        ]
        result = score_completeness(items, PracticeArea.CRIMINAL)
        assert result.score == 50
        assert result.flags == ["has_charges", "partial_witness_statements"]
        assert result.critical_missing == ["pace"]
        assert result.critical_missing_count == 1

    def test_score_is_bounded(self, criminal_bundle):
        items = extract_signals(criminal_bundle["documents"], PracticeArea.CRIMINAL).items
        result = score_completeness(items, PracticeArea.CRIMINAL)
        assert 0 <= result.score <= 100
        assert result.score == 86
        assert result.capability_tier == CapabilityTier.FULL
        assert result.critical_missing_count == 0

    def test_critical_categories_depend_on_practice_area(self):
        items = [_item("medical", EvidenceStatus.MISSING), _item("pace", EvidenceStatus.MISSING)]
        pi = score_completeness(items, PracticeArea.PERSONAL_INJURY)
        criminal = score_completeness(items, PracticeArea.CRIMINAL)
        assert pi.critical_missing == ["medical"]
        assert criminal.critical_missing == ["pace"]

    def test_flags_sorted_and_unique(self):
        items = [_item("pace", EvidenceStatus.PRESENT), _item("charges", EvidenceStatus.PRESENT)]
        result = score_completeness(items)
        assert result.flags == sorted(set(result.flags))

    @pytest.mark.parametrize("score,tier", [
        (0, CapabilityTier.THIN),
        (34, CapabilityTier.THIN),
        (35, CapabilityTier.PARTIAL),
        (69, CapabilityTier.PARTIAL),
        (70, CapabilityTier.FULL),
        (100, CapabilityTier.FULL),
    ])
    def test_tier_thresholds(self, score, tier):
        assert tier_for_score(score) == tier

    def test_tier_is_monotone(self):
        order = [CapabilityTier.THIN, CapabilityTier.PARTIAL, CapabilityTier.FULL]
        tiers = [order.index(tier_for_score(s)) for s in range(101)]
        assert tiers == sorted(tiers)


class TestBundleFlags:

    def test_weights_sum_to_100(self):
        assert sum(BUNDLE_WEIGHTS.values()) == 100

    def test_no_documents_no_flags(self):
        result = compute_bundle_flags([])
        assert result.score == 0
        assert not any(result.flags.values())

    def test_name_patterns(self):
        docs = [
            Document(id="1", name="MG5 Case Summary.pdf"),
            Document(id="2", name="Custody Record.pdf"),
            Document(id="3", name="ROI transcript.pdf"),
        ]
        result = compute_bundle_flags(docs)
        assert result.flags["has_mg5_case_summary"]
        assert result.flags["has_custody_record"]
        assert result.flags["has_interview_recording_or_transcript"]
        assert result.score == 12 + 10 + 10

    def test_continuity_requires_cctv(self):
        result = compute_bundle_flags([Document(id="1", name="Continuity statement.pdf")])
        assert not result.flags["has_cctv_continuity_or_native_export"]

        result = compute_bundle_flags([
            Document(id="1", name="Continuity statement.pdf"),
            Document(id="2", name="CCTV stills.pdf"),
        ])
        assert result.flags["has_cctv_continuity_or_native_export"]

    def test_witness_statement_from_content(self):
        doc = Document(id="1", name="scan_004.pdf", raw_text="I was walking home. I told the officer what happened.")
        assert compute_bundle_flags([doc]).flags["has_witness_statements"]
