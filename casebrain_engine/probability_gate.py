"""
Probability Gate
================

Single choke point deciding whether numeric probabilities may be attached
to angles and loopholes. Pure and total: every input, including malformed
ones, yields exactly one GateDecision and nothing is raised.
"""

import math
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .schemas import GateDecision, PracticeArea

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatePolicy:
    """Decision table row for one practice area"""
    completeness_floor: int
    critical_missing_ceiling: int


GATE_POLICIES: Dict[PracticeArea, GatePolicy] = {
    PracticeArea.CRIMINAL: GatePolicy(completeness_floor=50, critical_missing_ceiling=1),
    PracticeArea.HOUSING_DISREPAIR: GatePolicy(completeness_floor=45, critical_missing_ceiling=1),
    PracticeArea.PERSONAL_INJURY: GatePolicy(completeness_floor=45, critical_missing_ceiling=1),
    PracticeArea.CLINICAL_NEGLIGENCE: GatePolicy(completeness_floor=55, critical_missing_ceiling=0),
    PracticeArea.FAMILY: GatePolicy(completeness_floor=40, critical_missing_ceiling=2),
    PracticeArea.OTHER: GatePolicy(completeness_floor=50, critical_missing_ceiling=1),
}

SHOW = GateDecision(show=True, reason=None)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and (math.isnan(value) or math.isinf(value)))


def policy_for(practice_area: Any) -> GatePolicy:
    """Unknown or malformed practice areas use the OTHER row"""
    try:
        area = PracticeArea(practice_area)
    except (ValueError, TypeError):
        area = PracticeArea.OTHER
    return GATE_POLICIES.get(area, GATE_POLICIES[PracticeArea.OTHER])


def should_show_probabilities(
    practice_area: Any,
    completeness: Any,
    critical_missing_count: Any,
    analysis_admitted: bool = True
) -> GateDecision:
    """
    Decide whether probability fields may be populated.

    Args:
        practice_area: PracticeArea (or its string value)
        completeness: Completeness score 0..100
        critical_missing_count: Number of critical categories marked missing
        analysis_admitted: Whether the analysis guard admitted the case

    Returns:
        GateDecision(show=True, reason=None) or GateDecision(show=False, reason=...)
    """
    if analysis_admitted is not True:
        return GateDecision(
            show=False,
            reason="Analysis not admitted: too few documents or too little extracted text"
        )

    if not _is_number(completeness):
        return GateDecision(show=False, reason="Completeness score unavailable")
    if not _is_number(critical_missing_count):
        return GateDecision(show=False, reason="Critical-missing count unavailable")

    policy = policy_for(practice_area)

    if completeness < policy.completeness_floor:
        return GateDecision(
            show=False,
            reason=(
                f"Evidence completeness {round(completeness)}% is below the "
                f"{policy.completeness_floor}% needed to show probabilities"
            )
        )

    if critical_missing_count > policy.critical_missing_ceiling:
        return GateDecision(
            show=False,
            reason=(
                f"{int(critical_missing_count)} critical evidence categories missing "
                f"(maximum {policy.critical_missing_ceiling})"
            )
        )

    return SHOW


def gate_probability(value: Optional[int], decision: GateDecision) -> Optional[int]:
    """Attach a probability only when the gate allows it; None otherwise (never 0)"""
    if not decision.show or value is None:
        return None
    return max(0, min(100, int(value)))
