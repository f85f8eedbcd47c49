"""
Option Ranking
==============

Filters the category's nuclear-option catalogue to the options the
derived angles make viable, and picks one recommendation under a named
RiskPolicy.

Policies:
- catalogue_conservatism (default): EXTREME < VERY_HIGH < HIGH, picks the
  highest-ranked tier, i.e. the least extreme viable option
- aggressive: the reverse ordering

Ties within a tier go to catalogue order. A non-viable option is never
recommended.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from .catalogue import NUCLEAR_WARNINGS, nuclear_options_for
from .errors import CatalogueError
from .schemas import CaseCategory, NuclearOption, OptionRanking, RiskLevel, StrategyAngle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiskPolicy:
    """Named ordering over risk tiers (higher rank is preferred)"""
    name: str
    ordering: Dict[RiskLevel, int]

    def rank(self, option: NuclearOption) -> int:
        return self.ordering.get(option.risk, 0)


CATALOGUE_CONSERVATISM = RiskPolicy(
    name="catalogue_conservatism",
    ordering={RiskLevel.EXTREME: 1, RiskLevel.VERY_HIGH: 2, RiskLevel.HIGH: 3},
)

AGGRESSIVE = RiskPolicy(
    name="aggressive",
    ordering={RiskLevel.HIGH: 1, RiskLevel.VERY_HIGH: 2, RiskLevel.EXTREME: 3},
)

RISK_POLICIES: Dict[str, RiskPolicy] = {
    CATALOGUE_CONSERVATISM.name: CATALOGUE_CONSERVATISM,
    AGGRESSIVE.name: AGGRESSIVE,
}

DEFAULT_RISK_POLICY = CATALOGUE_CONSERVATISM


def get_policy(name: Optional[str]) -> RiskPolicy:
    """
    Raises:
        CatalogueError: unknown policy name
    """
    if not name:
        return DEFAULT_RISK_POLICY
    try:
        return RISK_POLICIES[name]
    except KeyError:
        raise CatalogueError(f"unknown risk policy '{name}' (known: {sorted(RISK_POLICIES)})")


def select(viable: List[NuclearOption], policy: RiskPolicy) -> Optional[NuclearOption]:
    """Highest-ranked option; the first in catalogue order wins ties"""
    best = None
    for option in viable:
        if best is None or policy.rank(option) > policy.rank(best):
            best = option
    return best


def rank_options(
    category: CaseCategory,
    angles: List[StrategyAngle],
    policy: Union[RiskPolicy, str, None] = DEFAULT_RISK_POLICY
) -> OptionRanking:
    """
    Args:
        category: Resolved case category
        angles: Derived strategy angles
        policy: RiskPolicy or its name

    Returns:
        OptionRanking(viable, recommended, warnings, policy)
    """
    if not isinstance(policy, RiskPolicy):
        policy = get_policy(policy)

    viable = [spec.option for spec in nuclear_options_for(category) if spec.is_viable(angles)]
    recommended = select(viable, policy)

    logger.info(
        f"Options for {category.value}: {len(viable)} viable, "
        f"recommended={recommended.id if recommended else None} policy={policy.name}"
    )

    return OptionRanking(
        viable=viable,
        recommended=recommended,
        warnings=list(NUCLEAR_WARNINGS),
        policy=policy.name,
    )
