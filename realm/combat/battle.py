"""
Canonical kingdom combat - bounded-random resolution.

Land taken is drawn from a narrow uniform band per outcome tier, and the
orchestrator perturbs both sides' power by a bounded variance before the
ratio is computed.
"""

from .base import CombatResolver, CombatOutcome, OutcomeTier


class BattleResolver(CombatResolver):
    """Resolves attacks between kingdoms using the configured land bands."""

    def land_fraction(self, tier: OutcomeTier) -> float:
        low, high = self.land_band(tier)
        if high <= low:
            return low
        return self.rng.uniform(low, high)

    def engage(
        self,
        attacker_power: float,
        defender_power: float,
        defender_land: float,
    ) -> CombatOutcome:
        """Resolve with each side's effective power rolled within +/- variance."""
        variance = self.config.variance
        effective_attack = self.roll(max(0.0, attacker_power), variance)
        effective_defense = self.roll(max(0.0, defender_power), variance)

        outcome = self.resolve(effective_attack, effective_defense, defender_land)
        outcome.notes.append(
            f"Effective power: {effective_attack:.0f} vs {effective_defense:.0f}"
        )
        return outcome
