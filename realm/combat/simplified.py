"""
Deterministic combat projection.

Same tiers and casualty table as the canonical resolver, but land taken is
the midpoint of each band and no variance is applied. The strategic AI uses
it to project attacks without touching a random source.
"""

from .base import CombatResolver, OutcomeTier, MidpointRandom


class SimplifiedResolver(CombatResolver):
    """Reduced-fidelity resolver with fixed, repeatable results."""

    def __init__(self, config=None):
        super().__init__(config=config, rng=MidpointRandom())

    def land_fraction(self, tier: OutcomeTier) -> float:
        low, high = self.land_band(tier)
        return (low + high) / 2
