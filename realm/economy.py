"""
Economy and growth model for the kingdom simulation.

Handles:
- Spending actions (build, defend, economic investment, wards)
- Passive per-turn growth (income, population, mana, recruitment)
- Random events (economic boom, training bonus)
"""

import random
import logging
from typing import Optional

from .config import EconomyConfig
from .kingdom import AgentState
from .races import RaceProfile

logger = logging.getLogger(__name__)


# Build rate (turns-to-structure efficiency) by quarry share of land, highest first
QUARRY_BUILD_RATES = [
    (95, 30), (90, 29), (85, 28), (80, 27), (75, 26), (70, 25), (65, 24),
    (60, 23), (55, 22), (50, 21), (45, 20), (40, 19), (35, 18), (30, 16),
    (25, 14), (20, 12), (15, 10), (10, 8), (5, 6),
]


def build_rate_from_quarries(quarry_percentage: float) -> int:
    """BRT lookup for kingdoms that only report their quarry share of land."""
    for threshold, rate in QUARRY_BUILD_RATES:
        if quarry_percentage >= threshold:
            return rate
    return 4


class EconomySystem:
    """Applies spending actions and passive growth to kingdoms."""

    def __init__(self, config: Optional[EconomyConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or EconomyConfig()
        self.rng = rng if rng is not None else random.Random()

    def build(self, state: AgentState, profile: RaceProfile) -> dict:
        """Convert a fixed share of gold into land and structures."""
        cost = int(state.gold * self.config.build_fraction)
        if cost <= 0:
            return {"action": "build", "gold_spent": 0, "land": 0, "structures": 0}

        land = int(cost / self.config.gold_per_land * profile.economy_multiplier)
        structures = int(land * self.config.structures_per_land)
        state.gold -= cost
        state.land += land
        state.structures += structures
        return {"action": "build", "gold_spent": cost, "land": land, "structures": structures}

    def defend(self, state: AgentState, amount: float) -> dict:
        """Convert gold into defense points."""
        spent = max(0.0, min(amount, state.gold))
        points = int(spent / self.config.gold_per_defense)
        state.gold -= spent
        state.defense += points
        return {"action": "defend", "gold_spent": spent, "defense": points}

    def invest(self, state: AgentState, amount: float) -> dict:
        """Convert gold into income-producing structures."""
        spent = max(0.0, min(amount, state.gold))
        structures = int(spent / self.config.gold_per_structure)
        state.gold -= spent
        state.structures += structures
        return {"action": "economic", "gold_spent": spent, "structures": structures}

    def cast_wards(self, state: AgentState, amount: float, profile: RaceProfile) -> dict:
        """Spend mana on protective wards that add defense."""
        spent = max(0.0, min(amount, state.mana))
        points = int(spent / self.config.mana_per_ward * profile.magic_multiplier)
        state.mana -= spent
        state.defense += points
        return {"action": "magic", "mana_spent": spent, "defense": points}

    def grow(self, state: AgentState, profile: RaceProfile) -> dict:
        """Apply one turn of passive growth. Returns what changed."""
        cfg = self.config
        variance = self.rng.uniform(1 - cfg.income_variance, 1 + cfg.income_variance)
        income = int(state.structures * cfg.income_per_structure * variance * profile.economy_multiplier)
        population = int(state.land * cfg.population_growth)
        mana = int(state.land * cfg.mana_growth * profile.magic_multiplier)
        recruits = int(state.population * cfg.recruit_rate * profile.military_multiplier)

        state.gold += income
        state.population += population
        state.mana += mana
        state.offense += recruits

        event = None
        if self.rng.random() < cfg.event_chance:
            if self.rng.random() < 0.5:
                event = "economic_boom"
                state.gold *= 1 + cfg.boom_bonus
            else:
                event = "training_bonus"
                state.offense *= 1 + cfg.training_bonus
                state.defense *= 1 + cfg.training_bonus
            logger.debug(f"{state.kingdom_id or state.race}: {event} on turn {state.turn}")

        state.clamp()
        return {
            "income": income,
            "population": population,
            "mana": mana,
            "recruits": recruits,
            "event": event,
        }
