"""
Strategy Engine
===============

Deterministic angle derivation over the closed catalogue.

derive():
1. Look up the category's catalogue (generic + practice area + category)
2. Keep only angles whose viability predicate holds on the CaseFacts
3. Order by severity rank, base probability, catalogue order
4. Attach probabilities only when the gate says show (None otherwise)
5. Project angles to loopholes, vulnerabilities and a recommended strategy

The generative fallback reuses assemble() so its output goes through the
same gate and projection.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .catalogue import (
    CATALOGUE_VERSION,
    MAX_WIN_PROBABILITY,
    catalogue_for,
    loophole_type_for,
    practice_area_for,
)
from .probability_gate import gate_probability
from .schemas import (
    AngleType,
    CaseCategory,
    CaseFacts,
    DerivationSource,
    EvidenceStatus,
    Exploitability,
    GateDecision,
    Loophole,
    ProsecutionVulnerabilities,
    RecommendedStrategy,
    SEVERITY_RANK,
    Severity,
    StrategyAngle,
    StrategyDerivation,
)

logger = logging.getLogger(__name__)


STRONG_ANGLE_THRESHOLD = 70
FALLBACK_WEIGHT = 0.3

PROCEDURAL_ANGLE_TYPES = {
    AngleType.PACE_BREACH_EXCLUSION,
    AngleType.DISCLOSURE_FAILURE_STAY,
    AngleType.ABUSE_OF_PROCESS,
    AngleType.HUMAN_RIGHTS_BREACH,
    AngleType.TECHNICAL_DEFENSE,
    AngleType.PROSECUTION_MISCONDUCT,
    AngleType.LATE_RESPONSE_ATTACK,
    AngleType.MISSING_PRE_ACTION_ATTACK,
    AngleType.NON_COMPLIANCE_ATTACK,
    AngleType.LATE_APPLICATION_ATTACK,
    AngleType.DEFECTIVE_APPLICATION_ATTACK,
    AngleType.DEFECTIVE_DEFENSE_ATTACK,
}


@dataclass
class CandidateAngle:
    """An angle before gating; probability is the undisclosed value"""
    angle: StrategyAngle
    probability: Optional[int]
    base_probability: int
    order: int

    def sort_key(self):
        return (-SEVERITY_RANK[self.angle.severity], -self.base_probability, self.order)


def exploitability_for(severity: Severity, probability: Optional[int]) -> Exploitability:
    """From the probability when disclosed, from severity when suppressed"""
    if probability is not None:
        if probability > 60:
            return Exploitability.HIGH
        if probability > 40:
            return Exploitability.MEDIUM
        return Exploitability.LOW

    if severity in (Severity.CRITICAL, Severity.HIGH):
        return Exploitability.HIGH
    if severity == Severity.MEDIUM:
        return Exploitability.MEDIUM
    return Exploitability.LOW


def project_loophole(angle: StrategyAngle) -> Loophole:
    """Display projection of an already-gated angle"""
    return Loophole(
        id=f"loophole-{angle.id}",
        angle_id=angle.id,
        loophole_type=loophole_type_for(angle.angle_type),
        title=angle.title,
        description=angle.legal_test,
        severity=angle.severity,
        exploitability=exploitability_for(angle.severity, angle.win_probability),
        success_probability=angle.win_probability,
        suggested_action=angle.how_to_exploit,
        legal_argument=angle.legal_basis,
    )


def overall_probability(angles: List[StrategyAngle]) -> Optional[int]:
    """
    Best angle, +10 when two or more angles reach 70, +5 more with three.

    None when no angle carries a probability.
    """
    values = [a.win_probability for a in angles if a.win_probability is not None]
    if not values:
        return None

    overall = max(values)
    strong = sum(1 for v in values if v >= STRONG_ANGLE_THRESHOLD)
    if strong >= 2:
        overall += 10
    if strong >= 3:
        overall += 5
    return min(MAX_WIN_PROBABILITY, overall)


def recommend(angles: List[StrategyAngle]) -> Optional[RecommendedStrategy]:
    """Primary = first ordered angle; supporting = the angles it combines with"""
    if not angles:
        return None

    primary = angles[0]
    rest = angles[1:]
    supporting = [a for a in rest if a.angle_type in primary.combined_with][:2]
    if not supporting:
        supporting = rest[:2]

    combined = None
    if primary.win_probability is not None:
        combined = primary.win_probability
        if supporting and supporting[0].win_probability is not None:
            combined += round(FALLBACK_WEIGHT * supporting[0].win_probability)
        combined = min(MAX_WIN_PROBABILITY, combined)

    reasoning = f"Lead with '{primary.title}' ({primary.severity.value})"
    if supporting:
        reasoning += "; run alongside " + ", ".join(f"'{a.title}'" for a in supporting)

    return RecommendedStrategy(
        primary=primary,
        supporting=supporting,
        combined_probability=combined,
        reasoning=reasoning,
    )


def vulnerabilities_for(angles: List[StrategyAngle], facts: CaseFacts) -> ProsecutionVulnerabilities:
    return ProsecutionVulnerabilities(
        critical_weaknesses=[a.title for a in angles if a.severity == Severity.CRITICAL],
        evidence_gaps=sorted(
            f"{category} missing"
            for category, status in facts.evidence_status.items()
            if status == EvidenceStatus.MISSING
        ),
        procedural_errors=[a.title for a in angles if a.angle_type in PROCEDURAL_ANGLE_TYPES],
    )


class StrategyEngine:
    """Derives strategy angles from CaseFacts against the versioned catalogue"""

    def derive(
        self,
        category: CaseCategory,
        facts: CaseFacts,
        gate: GateDecision
    ) -> StrategyDerivation:
        """
        Args:
            category: Resolved case category
            facts: Fact signals + evidence statuses from the extractor
            gate: Probability gate decision for this case

        Returns:
            StrategyDerivation (empty angles when nothing in the catalogue holds)

        Raises:
            CatalogueError: category missing from the catalogue
        """
        specs = catalogue_for(category)

        candidates: List[CandidateAngle] = []
        for order, spec in enumerate(specs):
            supporting = spec.supporting_signals(facts)
            if not supporting:
                continue
            angle = StrategyAngle(
                id=spec.key,
                angle_type=spec.angle_type,
                title=spec.title,
                severity=spec.severity,
                legal_basis=spec.legal_basis,
                how_to_exploit=spec.how_to_exploit,
                legal_test=spec.legal_test,
                evidence_basis=list(spec.evidence_basis),
                supporting_signals=supporting,
                combined_with=list(spec.combined_with),
            )
            candidates.append(CandidateAngle(
                angle=angle,
                probability=spec.probability_for(supporting),
                base_probability=spec.base_probability,
                order=order,
            ))

        derivation = self.assemble(category, facts, candidates, gate, DerivationSource.DETERMINISTIC)
        logger.info(
            f"Derived {len(derivation.angles)}/{len(specs)} angles for {category.value} "
            f"(gate show={gate.show})"
        )
        return derivation

    def assemble(
        self,
        category: CaseCategory,
        facts: CaseFacts,
        candidates: List[CandidateAngle],
        gate: GateDecision,
        source: DerivationSource
    ) -> StrategyDerivation:
        """Order, gate and project candidate angles into a derivation"""
        ordered = sorted(candidates, key=CandidateAngle.sort_key)

        angles = [
            c.angle.model_copy(update={"win_probability": gate_probability(c.probability, gate)})
            for c in ordered
        ]

        return StrategyDerivation(
            category=category,
            practice_area=practice_area_for(category),
            catalogue_version=CATALOGUE_VERSION,
            angles=angles,
            loopholes=[project_loophole(a) for a in angles],
            gate=gate,
            overall_win_probability=overall_probability(angles) if gate.show else None,
            prosecution_vulnerabilities=vulnerabilities_for(angles, facts),
            recommended_strategy=recommend(angles),
            source=source if angles else DerivationSource.NONE,
            document_count=facts.document_count,
        )


_engine: Optional[StrategyEngine] = None


def get_strategy_engine() -> StrategyEngine:
    global _engine
    if _engine is None:
        _engine = StrategyEngine()
    return _engine
