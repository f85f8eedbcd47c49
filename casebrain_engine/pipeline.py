"""
Pipeline
========

Module-level entry points wiring the stages together:

    documents -> extractor -> completeness -> admission -> gate
              -> strategy (-> generative fallback) -> option ranking

All stages except the fallback are synchronous and pure.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .analysis_guard import check_analysis_admission, compute_diagnostics, evaluate_admission
from .catalogue import resolve_category
from .completeness import compute_bundle_flags, score_completeness
from .config import Settings
from .extractor import extract_signals
from .fallback import GenerativeFallback
from .probability_gate import should_show_probabilities
from .ranking import RiskPolicy, rank_options
from .schemas import (
    AnalysisAdmission,
    BundleCompleteness,
    BundleFlags,
    CaseCategory,
    CaseFacts,
    Document,
    EvidenceItem,
    GateDecision,
    OptionRanking,
    PracticeArea,
    StrategyDerivation,
)
from .strategy import get_strategy_engine

logger = logging.getLogger(__name__)

__all__ = [
    "CoverageResult",
    "CaseAnalysis",
    "compute_coverage",
    "evaluate_documents",
    "check_analysis_admission",
    "gate_for",
    "derive_strategy",
    "rank_options",
    "analyse",
    "build_snapshot",
]


@dataclass
class CoverageResult:
    """Evidence items + both completeness views + fact signals"""
    items: List[EvidenceItem]
    completeness: BundleCompleteness
    bundle: BundleFlags
    facts: CaseFacts
    structured_meta: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CaseAnalysis:
    """Everything computed for one case from its documents"""
    category: CaseCategory
    coverage: CoverageResult
    admission: AnalysisAdmission
    gate: GateDecision
    strategy: StrategyDerivation
    options: OptionRanking


def compute_coverage(
    documents: List[Document],
    practice_area: PracticeArea = PracticeArea.CRIMINAL,
    structured_meta: Optional[Dict[str, Any]] = None
) -> CoverageResult:
    extraction = extract_signals(documents, practice_area, structured_meta)
    return CoverageResult(
        items=extraction.items,
        completeness=score_completeness(extraction.items, practice_area),
        bundle=compute_bundle_flags(documents),
        facts=extraction.facts,
        structured_meta=extraction.structured_meta,
    )


def evaluate_documents(
    documents: List[Document],
    settings: Optional[Settings] = None,
    case_found: bool = True
) -> AnalysisAdmission:
    """Diagnostics + non-raising admission in one call"""
    return evaluate_admission(compute_diagnostics(documents, settings, case_found), settings)


def gate_for(
    practice_area: PracticeArea,
    completeness: BundleCompleteness,
    admission: AnalysisAdmission
) -> GateDecision:
    return should_show_probabilities(
        practice_area,
        completeness.score,
        completeness.critical_missing_count,
        analysis_admitted=admission.can_generate_analysis,
    )


async def derive_strategy(
    category: CaseCategory,
    facts: CaseFacts,
    documents: List[Document],
    gate: GateDecision,
    org_id: str = "",
    case_id: str = "",
    fallback: Optional[GenerativeFallback] = None
) -> StrategyDerivation:
    """
    Deterministic derivation; the generative fallback runs only when it
    produced no angle and at least one document exists.
    """
    derivation = get_strategy_engine().derive(category, facts, gate)
    if derivation.angles or not documents or fallback is None:
        return derivation

    logger.info(f"No catalogue angle for case={case_id} ({category.value}); running generative fallback")
    result = await fallback.run(org_id, case_id, category, facts, documents, gate)
    return result.derivation


async def analyse(
    documents: List[Document],
    practice_area: PracticeArea = PracticeArea.CRIMINAL,
    category: Union[CaseCategory, str, None] = None,
    structured_meta: Optional[Dict[str, Any]] = None,
    org_id: str = "",
    case_id: str = "",
    fallback: Optional[GenerativeFallback] = None,
    policy: Union[RiskPolicy, str, None] = None,
    settings: Optional[Settings] = None
) -> CaseAnalysis:
    """Run every stage on a document set"""
    resolved = resolve_category(category, practice_area)
    coverage = compute_coverage(documents, practice_area, structured_meta)
    admission = evaluate_documents(documents, settings)
    gate = gate_for(practice_area, coverage.completeness, admission)

    strategy = await derive_strategy(
        resolved, coverage.facts, documents, gate,
        org_id=org_id, case_id=case_id, fallback=fallback,
    )
    options = rank_options(resolved, strategy.angles, policy)

    return CaseAnalysis(
        category=resolved,
        coverage=coverage,
        admission=admission,
        gate=gate,
        strategy=strategy,
        options=options,
    )


async def build_snapshot(case_id: str, repository, fallback: Optional[GenerativeFallback] = None, **kwargs):
    """Compose the read-only CaseSnapshot for one case"""
    from .snapshot import SnapshotComposer

    return await SnapshotComposer(repository, fallback=fallback, **kwargs).build(case_id)
