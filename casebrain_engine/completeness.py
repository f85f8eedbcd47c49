"""
Completeness Scorer
===================

Deterministic scoring for bundle completeness.

Two views are produced:
- score_completeness(): coverage over the extractor's evidence items
- compute_bundle_flags(): weighted flags from document names + content markers

Both map their score onto the same capability tiers. Items without
supporting evidence cannot be present/partial (the EvidenceItem schema
rejects them), so they never count toward a tier threshold.
"""

import re
from typing import Dict, Iterable, List

from .schemas import (
    BundleCompleteness,
    BundleFlags,
    CapabilityTier,
    Document,
    EvidenceItem,
    EvidenceStatus,
    PracticeArea,
)


# Tier thresholds (score >= threshold)
TIER_FULL_THRESHOLD = 70
TIER_PARTIAL_THRESHOLD = 35

# Categories whose absence blocks probability disclosure, per practice area
CRITICAL_CATEGORIES: Dict[PracticeArea, List[str]] = {
    PracticeArea.CRIMINAL: ["charges", "witness_statements", "pace", "disclosure"],
    PracticeArea.HOUSING_DISREPAIR: ["pre_action", "expert_evidence", "witness_statements"],
    PracticeArea.PERSONAL_INJURY: ["medical", "witness_statements", "pre_action"],
    PracticeArea.CLINICAL_NEGLIGENCE: ["medical", "expert_evidence", "pre_action"],
    PracticeArea.FAMILY: ["witness_statements", "disclosure"],
    PracticeArea.OTHER: ["witness_statements", "disclosure"],
}


def tier_for_score(score: int) -> CapabilityTier:
    if score >= TIER_FULL_THRESHOLD:
        return CapabilityTier.FULL
    if score >= TIER_PARTIAL_THRESHOLD:
        return CapabilityTier.PARTIAL
    return CapabilityTier.THIN


def score_completeness(
    items: List[EvidenceItem],
    practice_area: PracticeArea = PracticeArea.CRIMINAL
) -> BundleCompleteness:
    """
    Aggregate evidence items into a bounded score and capability tier.

    coverage = round(100 * (present + partial) / total), 0 for no items.
    """
    counts = {status: 0 for status in EvidenceStatus}
    flags = set()
    for item in items:
        counts[item.status] += 1
        if item.status == EvidenceStatus.PRESENT:
            flags.add(f"has_{item.id}")
        elif item.status == EvidenceStatus.PARTIAL:
            flags.add(f"partial_{item.id}")

    total = len(items)
    covered = counts[EvidenceStatus.PRESENT] + counts[EvidenceStatus.PARTIAL]
    score = round(100 * covered / total) if total else 0

    critical = CRITICAL_CATEGORIES.get(practice_area, CRITICAL_CATEGORIES[PracticeArea.OTHER])
    critical_missing = [
        item.id for item in items
        if item.id in critical and item.status == EvidenceStatus.MISSING
    ]

    return BundleCompleteness(
        score=score,
        flags=sorted(flags),
        capability_tier=tier_for_score(score),
        present_count=counts[EvidenceStatus.PRESENT],
        partial_count=counts[EvidenceStatus.PARTIAL],
        missing_count=counts[EvidenceStatus.MISSING],
        unknown_count=counts[EvidenceStatus.UNKNOWN],
        total=total,
        critical_missing=critical_missing,
        critical_missing_count=len(critical_missing),
    )


# =============================================================================
# Weighted bundle flags (document metadata)
# =============================================================================

BUNDLE_PATTERNS = {
    "has_charge_sheet_or_indictment": re.compile(r"\b(charge\s*sheet|indictment|charges?|count\s*\d+)\b", re.I),
    "has_mg5_case_summary": re.compile(r"\b(mg\s*5|case\s*summary)\b", re.I),
    "has_witness_statements": re.compile(r"\b(witness\s*statement|statement\s+of\s+witness|mg\s*11)\b", re.I),
    "has_cctv": re.compile(r"\b(cctv|closed\s*circuit|dvr|camera\s*footage|video\s*footage)\b", re.I),
    "has_cctv_continuity_or_native_export": re.compile(
        r"\b(continuity|native\s*export|native\s*download|export\s*log|download\s*log|chain\s*of\s*custody)\b", re.I
    ),
    "has_bwv": re.compile(r"\b(bwv|body\s*worn|bodyworn|worn\s*video)\b", re.I),
    "has_999_cad": re.compile(r"\b(999|cad|call\s*log|incident\s*log|dispatch|control\s*room)\b", re.I),
    "has_custody_record": re.compile(r"\b(custody\s*record|custody\s*log|detention\s*log|custody\s*sheet)\b", re.I),
    "has_medical_evidence": re.compile(
        r"\b(medical|injur(y|ies)|hospital|a&e|ambulance|paramedic|forensic\s*medical)\b", re.I
    ),
    "has_mg6_schedules": re.compile(
        r"\b(mg\s*6[cd]?|disclosure\s*schedule|unused\s*material)\b", re.I
    ),
}

INTERVIEW_PATTERN = re.compile(r"\b(interview|record\s*of\s*interview|roi)\b", re.I)
INTERVIEW_MEDIA_PATTERN = re.compile(r"\b(audio|recording|video|dvd|mp3|wav|transcript|typed\s*interview)\b", re.I)

WITNESS_CONTENT_MARKERS = ("witness details", "statement of truth", "statement of witness")
FIRST_PERSON_PATTERNS = [
    re.compile(r"\bi\s+(was|saw|witnessed|observed|noticed|heard|became|noted|recalled|remember|remembered)\b", re.I),
    re.compile(r"\bi\s+(am|was)\s+involved\b", re.I),
    re.compile(r"\bi\s+(told|said|stated|informed|reported)\b", re.I),
]

BUNDLE_WEIGHTS = {
    "has_charge_sheet_or_indictment": 12,
    "has_mg5_case_summary": 12,
    "has_witness_statements": 15,
    "has_cctv": 10,
    "has_cctv_continuity_or_native_export": 6,
    "has_bwv": 5,
    "has_999_cad": 5,
    "has_custody_record": 10,
    "has_interview_recording_or_transcript": 10,
    "has_medical_evidence": 5,
    "has_mg6_schedules": 10,
}


def _witness_statement_from_content(doc: Document) -> bool:
    """MG11 statements with non-canonical file names are caught by their content"""
    corpus = (doc.raw_text or "").lower()
    if not corpus:
        return False
    if any(marker in corpus for marker in WITNESS_CONTENT_MARKERS):
        return True
    return sum(1 for p in FIRST_PERSON_PATTERNS if p.search(corpus)) >= 2


def compute_bundle_flags(documents: Iterable[Document]) -> BundleFlags:
    """
    Weighted completeness from document names (weights sum to 100).

    Presence is never inferred unless a pattern matches. Continuity only
    counts when CCTV itself was found.
    """
    flags = {name: False for name in BUNDLE_WEIGHTS}

    for doc in documents:
        hay = doc.name or ""
        for name, pattern in BUNDLE_PATTERNS.items():
            if pattern.search(hay):
                flags[name] = True
        if _witness_statement_from_content(doc):
            flags["has_witness_statements"] = True
        if INTERVIEW_PATTERN.search(hay) and INTERVIEW_MEDIA_PATTERN.search(hay):
            flags["has_interview_recording_or_transcript"] = True

    flags["has_cctv_continuity_or_native_export"] = (
        flags["has_cctv_continuity_or_native_export"] and flags["has_cctv"]
    )

    score = sum(BUNDLE_WEIGHTS[name] for name, on in flags.items() if on)
    score = max(0, min(100, score))

    return BundleFlags(score=score, capability_tier=tier_for_score(score), flags=flags)
