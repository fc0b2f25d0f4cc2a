"""
Base combat resolution system with common mechanics.
"""

import random
from dataclasses import dataclass, field
from typing import Optional
from enum import Enum

from ..config import CombatConfig


class OutcomeTier(Enum):
    WITH_EASE = "with_ease"
    GOOD_FIGHT = "good_fight"
    FAILED = "failed"

    @property
    def rank(self) -> int:
        """Higher is better for the attacker."""
        return {"with_ease": 2, "good_fight": 1, "failed": 0}[self.value]


# (attacker loss, defender loss) as fractions of committed power
CASUALTY_RATES = {
    OutcomeTier.WITH_EASE: (0.05, 0.20),
    OutcomeTier.GOOD_FIGHT: (0.15, 0.15),
    OutcomeTier.FAILED: (0.25, 0.05),
}

WITH_EASE_RATIO = 2.0
GOOD_FIGHT_RATIO = 1.2


@dataclass(frozen=True)
class CombatOutcome:
    """Result of one attack. Produced and consumed within a single turn."""
    tier: OutcomeTier
    ratio: float
    attacker_loss: float
    defender_loss: float
    land_gained: int = 0
    gold_transfer: float = 0.0
    notes: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.tier is not OutcomeTier.FAILED


def power_ratio(attacker_power: float, defender_power: float) -> float:
    """Attack/defense ratio with negatives clamped and a floor of 1 on defense."""
    attacker_power = max(0.0, attacker_power)
    defender_power = max(0.0, defender_power)
    return attacker_power / max(defender_power, 1)


def determine_tier(attacker_power: float, defender_power: float) -> OutcomeTier:
    """Determine the outcome tier from the two forces."""
    ratio = power_ratio(attacker_power, defender_power)

    if ratio >= WITH_EASE_RATIO:
        return OutcomeTier.WITH_EASE
    elif ratio >= GOOD_FIGHT_RATIO:
        return OutcomeTier.GOOD_FIGHT
    else:
        return OutcomeTier.FAILED


class MidpointRandom(random.Random):
    """Null-variance random source: every draw lands mid-range."""

    def random(self) -> float:
        return 0.5


class CombatResolver:
    """Base class for combat resolution."""

    def __init__(
        self,
        config: Optional[CombatConfig] = None,
        rng: Optional[random.Random] = None,
        rng_seed: Optional[int] = None,
    ):
        self.config = config or CombatConfig()
        self.rng = rng if rng is not None else random.Random(rng_seed)

    def roll(self, base: float, variance: float = 0.2) -> float:
        """Roll with variance around base value."""
        return base * (1.0 + self.rng.uniform(-variance, variance))

    def land_band(self, tier: OutcomeTier) -> tuple[float, float]:
        """Fraction of defender land taken for a tier; failed takes nothing."""
        if tier is OutcomeTier.FAILED:
            return (0.0, 0.0)
        return self.config.land_bands[tier.value]

    def land_fraction(self, tier: OutcomeTier) -> float:
        """Fraction of land taken; the base resolver takes the low end of the band."""
        return self.land_band(tier)[0]

    def resolve(
        self,
        attacker_power: float,
        defender_power: float,
        defender_land: float,
    ) -> CombatOutcome:
        """Resolve an attack. Never raises; negative inputs count as zero."""
        attacker_power = max(0.0, attacker_power)
        defender_power = max(0.0, defender_power)
        defender_land = max(0.0, defender_land)

        ratio = power_ratio(attacker_power, defender_power)
        tier = determine_tier(attacker_power, defender_power)
        attacker_loss, defender_loss = CASUALTY_RATES[tier]

        land_gained = 0
        if tier is not OutcomeTier.FAILED:
            land_gained = max(0, int(defender_land * self.land_fraction(tier)))

        return CombatOutcome(
            tier=tier,
            ratio=ratio,
            attacker_loss=attacker_loss,
            defender_loss=defender_loss,
            land_gained=land_gained,
            gold_transfer=land_gained * self.config.gold_per_acre,
            notes=[
                f"Combat ratio: {ratio:.2f}:1",
                f"Land gained: {land_gained} acres",
            ],
        )
