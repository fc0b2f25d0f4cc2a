"""
Kingdom state for the balance simulation.

An AgentState is one competing kingdom inside a single simulated game. It is
created from the race's baseline, mutated every turn by the economy model and
combat, and discarded when the game ends.
"""

import copy
from dataclasses import dataclass
from typing import Optional

from .config import BaselineConfig
from .races import RaceProfile


def networth(land: float, gold: float, population: float) -> float:
    """Single-scalar strength measure used for targeting and reports."""
    return land * 1000 + gold + population * 100


@dataclass(frozen=True)
class Target:
    """What one kingdom can see of a realm it may attack."""
    id: str
    land: float
    defense: float
    networth: float = 0.0
    offense: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "Target":
        land = float(data.get("land", 0))
        return cls(
            id=str(data["id"]),
            land=land,
            defense=float(data.get("defense", 0)),
            networth=float(data.get("networth", networth(land, 0, 0))),
            offense=float(data.get("offense", 0)),
        )


@dataclass
class AgentState:
    """Runtime state of one kingdom."""
    race: str
    land: float = 0.0
    gold: float = 0.0
    population: float = 0.0
    structures: float = 0.0
    offense: float = 0.0
    defense: float = 0.0
    mana: float = 0.0
    turn: int = 0
    kingdom_id: Optional[str] = None
    # Combat spoils collected during this game
    land_gained: float = 0.0
    gold_gained: float = 0.0

    @property
    def networth(self) -> float:
        return networth(self.land, self.gold, self.population)

    @property
    def build_rate(self) -> int:
        """Structures as a whole percentage of land."""
        if self.land <= 0:
            return 0
        return int(self.structures / self.land * 100)

    @property
    def game_phase(self) -> str:
        if self.land < 5000:
            return "early"
        if self.land < 20000:
            return "mid"
        return "late"

    @classmethod
    def baseline(
        cls,
        profile: RaceProfile,
        baseline: Optional[BaselineConfig] = None,
        kingdom_id: Optional[str] = None,
    ) -> "AgentState":
        """Create a starting kingdom with the race's bonuses applied once."""
        baseline = baseline or BaselineConfig()
        return cls(
            race=profile.name,
            land=baseline.land,
            gold=baseline.gold * profile.bonus("gold"),
            population=baseline.population * profile.bonus("population"),
            structures=baseline.structures * profile.bonus("structures"),
            offense=baseline.offense * profile.bonus("offense"),
            defense=baseline.defense * profile.bonus("defense"),
            mana=baseline.mana,
            kingdom_id=kingdom_id,
        )

    def clamp(self):
        """Keep every resource non-negative."""
        for name in ("land", "gold", "population", "structures", "offense", "defense", "mana"):
            if getattr(self, name) < 0:
                setattr(self, name, 0.0)

    def snapshot(self) -> "AgentState":
        return copy.copy(self)

    def as_target(self, target_id: Optional[str] = None) -> Target:
        return Target(
            id=target_id or self.kingdom_id or self.race,
            land=self.land,
            defense=self.defense,
            networth=self.networth,
            offense=self.offense,
        )

    def to_dict(self) -> dict:
        return {
            "kingdom_id": self.kingdom_id,
            "race": self.race,
            "turn": self.turn,
            "land": round(self.land, 2),
            "gold": round(self.gold, 2),
            "population": round(self.population, 2),
            "structures": round(self.structures, 2),
            "offense": round(self.offense, 2),
            "defense": round(self.defense, 2),
            "mana": round(self.mana, 2),
            "networth": round(self.networth, 2),
            "land_gained": round(self.land_gained, 2),
            "gold_gained": round(self.gold_gained, 2),
        }
