"""
Combat resolution for kingdom attacks.

BattleResolver is the canonical bounded-random path used by the turn manager;
SimplifiedResolver is its deterministic projection used by the strategic AI.
"""

from .base import (
    CombatResolver, CombatOutcome, OutcomeTier, MidpointRandom,
    CASUALTY_RATES, determine_tier, power_ratio,
)
from .battle import BattleResolver
from .simplified import SimplifiedResolver

__all__ = [
    "CombatResolver",
    "CombatOutcome",
    "OutcomeTier",
    "MidpointRandom",
    "CASUALTY_RATES",
    "determine_tier",
    "power_ratio",
    "BattleResolver",
    "SimplifiedResolver",
]
