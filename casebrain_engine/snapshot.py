"""
Snapshot Composer
=================

Read-only view-model over one case, composed from concurrent repository
reads and a full pipeline run over the case's documents.

Visibility and confidence are separate axes:
- can_show_preview / can_show_full say whether strategy content exists
  and the analysis mode allows showing it
- extraction_ok and probabilities_suppressed only cap confidence

So a case with stored strategy but thin extracted text still shows its
strategy, labelled with a LOW confidence cap.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .catalogue import resolve_category
from .config import Settings
from .fallback import GenerativeFallback
from .interfaces import CaseRepository
from .pipeline import CaseAnalysis, analyse, evaluate_documents, compute_coverage, gate_for
from .ranking import RiskPolicy
from .schemas import (
    AnalysisMode,
    CaseSnapshot,
    ChargeSummary,
    ConfidenceLevel,
    DisclosureItem,
    EvidenceItem,
    EvidenceStatus,
    HearingSummary,
    PracticeArea,
    StrategySummary,
)

logger = logging.getLogger(__name__)


VISIBLE_MODES = (AnalysisMode.PREVIEW, AnalysisMode.COMPLETE)


def stored_strategy_exists(strategy: Optional[Dict[str, Any]]) -> bool:
    """Stored strategy counts when it has routes, a recommendation or a narrative"""
    if not strategy:
        return False
    return bool(strategy.get("routes") or strategy.get("recommendation") or strategy.get("narrative"))


def analysis_mode_of(latest: Optional[Dict[str, Any]]) -> AnalysisMode:
    if not latest:
        return AnalysisMode.NONE
    # Versions written before modes were recorded are complete runs
    if latest.get("analysis_mode") is None and latest.get("version_number") is not None:
        return AnalysisMode.COMPLETE
    try:
        return AnalysisMode(latest.get("analysis_mode"))
    except ValueError:
        return AnalysisMode.NONE


def confidence_cap(extraction_ok: bool, probabilities_suppressed: bool) -> ConfidenceLevel:
    if not extraction_ok:
        return ConfidenceLevel.LOW
    if probabilities_suppressed:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.HIGH


def next_hearing(hearings: List[Dict[str, Any]], now: datetime) -> Optional[HearingSummary]:
    """Earliest hearing at or after now"""
    upcoming = [h for h in hearings if h.get("hearing_date") is not None and h["hearing_date"] >= now]
    if not upcoming:
        return None
    first = min(upcoming, key=lambda h: h["hearing_date"])
    return HearingSummary(
        hearing_type=first.get("hearing_type") or "hearing",
        hearing_date=first["hearing_date"],
        court=first.get("court"),
    )


def normalize_charges(rows: List[Dict[str, Any]], fallback_labels: List[str]) -> List[ChargeSummary]:
    """Stored charge rows; extracted charge labels when none are stored"""
    charges = []
    for row in rows:
        offence = (row.get("offence") or "").strip()
        if not offence:
            continue
        charges.append(ChargeSummary(
            id=row.get("id"),
            offence=offence,
            section=(row.get("section") or None),
            status=(row.get("status") or None),
        ))
    if charges:
        return charges
    return [ChargeSummary(offence=label) for label in fallback_labels]


def disclosure_outstanding(items: List[EvidenceItem]) -> List[DisclosureItem]:
    return [
        DisclosureItem(category=item.id, label=item.label, status=item.status)
        for item in items
        if item.status == EvidenceStatus.MISSING
    ]


class SnapshotComposer:
    """
    Builds CaseSnapshot objects.

    Args:
        repository: CaseRepository (org-scoped)
        fallback: Optional GenerativeFallback for cases with no catalogue angle
        policy: Risk policy for option ranking
        clock: Returns "now" for next-hearing selection
    """

    def __init__(
        self,
        repository: CaseRepository,
        fallback: Optional[GenerativeFallback] = None,
        policy: Optional[RiskPolicy] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        self.repository = repository
        self.fallback = fallback
        self.policy = policy
        self.settings = settings
        self.clock = clock

    async def build(self, case_id: str) -> CaseSnapshot:
        case, charges, strategy, commitment, hearings, documents, latest = await asyncio.gather(
            self.repository.get_case(case_id),
            self.repository.get_charges(case_id),
            self.repository.get_strategy(case_id),
            self.repository.get_commitment(case_id),
            self.repository.get_hearings(case_id),
            self.repository.get_documents(case_id),
            self.repository.get_latest_analysis(case_id),
        )

        if case is None:
            logger.info(f"Snapshot requested for unknown case {case_id}")
            return self._not_found(case_id)

        try:
            practice_area = PracticeArea(case.get("practice_area"))
        except ValueError:
            practice_area = PracticeArea.OTHER

        analysis: CaseAnalysis = await analyse(
            documents,
            practice_area=practice_area,
            category=case.get("category"),
            structured_meta=case.get("extra_data") or None,
            org_id=case.get("org_id") or "",
            case_id=case_id,
            fallback=self.fallback,
            policy=self.policy,
            settings=self.settings,
        )

        mode = analysis_mode_of(latest)
        has_prior_analysis = latest is not None
        derived_angles = bool(documents) and bool(analysis.strategy.angles)
        strategy_data_exists = stored_strategy_exists(strategy) or derived_angles

        can_show_preview = (has_prior_analysis or strategy_data_exists) and mode in VISIBLE_MODES
        can_show_full = strategy_data_exists and mode in VISIBLE_MODES

        extraction_ok = analysis.admission.can_generate_analysis
        probabilities_suppressed = not analysis.gate.show

        stored_routes = (strategy or {}).get("routes") or []
        has_recommendation = bool((strategy or {}).get("recommendation")) or (
            analysis.strategy.recommended_strategy is not None
        )

        if mode == AnalysisMode.COMPLETE and can_show_full:
            status_label = "Complete"
        elif strategy_data_exists:
            status_label = "Preview (gated)"
        else:
            status_label = "Not run"

        return CaseSnapshot(
            case_id=case_id,
            title=case.get("title"),
            practice_area=practice_area,
            category=analysis.category,
            analysis_mode=mode,
            analysis_version=(latest or {}).get("version_number"),
            has_prior_analysis=has_prior_analysis,
            strategy_data_exists=strategy_data_exists,
            can_show_preview=can_show_preview,
            can_show_full=can_show_full,
            extraction_ok=extraction_ok,
            probabilities_suppressed=probabilities_suppressed,
            admission=analysis.admission,
            completeness=analysis.coverage.completeness,
            bundle=analysis.coverage.bundle,
            gate=analysis.gate,
            evidence_items=analysis.coverage.items,
            strategy=analysis.strategy,
            strategy_summary=StrategySummary(
                status_label=status_label,
                route_count=len(stored_routes) or len(analysis.strategy.angles),
                has_recommendation=has_recommendation,
                confidence_cap=confidence_cap(extraction_ok, probabilities_suppressed),
            ),
            options=analysis.options,
            charges=normalize_charges(charges, analysis.coverage.facts.charges),
            next_hearing=next_hearing(hearings, self.clock()),
            disclosure_outstanding=disclosure_outstanding(analysis.coverage.items),
            commitment=commitment,
            generated_at=self.clock(),
        )

    def _not_found(self, case_id: str) -> CaseSnapshot:
        admission = evaluate_documents([], self.settings, case_found=False)
        coverage = compute_coverage([], PracticeArea.OTHER)
        return CaseSnapshot(
            case_id=case_id,
            practice_area=PracticeArea.OTHER,
            category=resolve_category(None),
            analysis_mode=AnalysisMode.NONE,
            admission=admission,
            completeness=coverage.completeness,
            bundle=coverage.bundle,
            gate=gate_for(PracticeArea.OTHER, coverage.completeness, admission),
            strategy_summary=StrategySummary(status_label="Not run", confidence_cap=ConfidenceLevel.LOW),
            generated_at=self.clock(),
        )
