"""
Strategy policies for kingdom agents.

A policy is fixed for a whole game: it weights the candidate actions the
strategic AI scores, sets the weakest outcome tier worth attacking at, and
decides how much of the treasury each spending action commits.
"""

import logging
from dataclasses import dataclass, field

from realm.combat import OutcomeTier

logger = logging.getLogger(__name__)

DEFAULT_STRATEGY = "balanced"


@dataclass(frozen=True)
class StrategyPolicy:
    """Configuration for a strategic agent."""
    name: str
    doctrine: str = ""
    weights: dict = field(default_factory=dict)
    min_attack_tier: OutcomeTier = OutcomeTier.GOOD_FIGHT
    defend_spend: float = 0.4
    economic_spend: float = 0.5
    magic_spend: float = 0.5
    # Chance the noisy wrapper plays the runner-up action instead
    noise: float = 0.0

    def weight(self, kind: str) -> float:
        return self.weights.get(kind, 1.0)

    @classmethod
    def named(cls, name: str) -> "StrategyPolicy":
        """Look up a built-in policy, falling back to balanced."""
        policy = POLICIES.get((name or "").lower())
        if policy is None:
            logger.warning(f"Unknown strategy {name!r}, falling back to {DEFAULT_STRATEGY}")
            return POLICIES[DEFAULT_STRATEGY]
        return policy


POLICIES = {
    "balanced": StrategyPolicy(
        name="balanced",
        doctrine="develop_then_strike_when_favourable",
    ),
    "aggressive": StrategyPolicy(
        name="aggressive",
        doctrine="land_grab_at_any_fair_fight",
        weights={"attack": 1.15, "magic": 0.9, "defend": 0.9, "build": 0.9, "economic": 0.85},
        min_attack_tier=OutcomeTier.GOOD_FIGHT,
        defend_spend=0.4,
        economic_spend=0.5,
        noise=0.2,
    ),
    "defensive": StrategyPolicy(
        name="defensive",
        doctrine="fortify_and_only_strike_with_ease",
        weights={"attack": 0.8, "defend": 1.2, "build": 0.95},
        min_attack_tier=OutcomeTier.WITH_EASE,
        defend_spend=0.6,
        economic_spend=0.5,
        noise=0.3,
    ),
    "economic": StrategyPolicy(
        name="economic",
        doctrine="compound_income_before_conflict",
        weights={"attack": 0.85, "defend": 0.9, "build": 1.1, "economic": 1.15},
        min_attack_tier=OutcomeTier.WITH_EASE,
        defend_spend=0.3,
        economic_spend=0.8,
        noise=0.2,
    ),
}


def is_known_strategy(name: str) -> bool:
    return (name or "").lower() in POLICIES
