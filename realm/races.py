"""
Race table for the kingdom simulation.

Every kingdom resolves to a RaceProfile. The table is loaded once from
YAML, never mutated, and passed explicitly to the components that need it,
so concurrent simulations can share one instance.
"""

import yaml
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Iterable

from .config import data_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RaceProfile:
    """Static per-race ratings, multipliers and AI priorities."""
    name: str
    war: int = 3
    sorcery: int = 3
    scum: int = 3
    defense: int = 3
    economy: int = 3
    economy_multiplier: float = 1.0
    military_multiplier: float = 1.0
    magic_multiplier: float = 1.0
    # Applied once to the starting kingdom (stat -> multiplier)
    bonuses: dict = field(default_factory=dict)
    economic_priority: float = 70
    military_priority: float = 70
    magic_priority: float = 50

    @property
    def is_defensive(self) -> bool:
        return self.defense >= 4

    def bonus(self, stat: str) -> float:
        return self.bonuses.get(stat, 1.0)

    @classmethod
    def from_dict(cls, name: str, data: dict) -> "RaceProfile":
        ratings = data.get("ratings", {})
        multipliers = data.get("multipliers", {})
        priorities = data.get("priorities", {})
        return cls(
            name=name,
            war=int(ratings.get("war", 3)),
            sorcery=int(ratings.get("sorcery", 3)),
            scum=int(ratings.get("scum", 3)),
            defense=int(ratings.get("defense", 3)),
            economy=int(ratings.get("economy", 3)),
            economy_multiplier=float(multipliers.get("economy", 1.0)),
            military_multiplier=float(multipliers.get("military", 1.0)),
            magic_multiplier=float(multipliers.get("magic", 1.0)),
            bonuses={k: float(v) for k, v in (data.get("bonuses") or {}).items()},
            economic_priority=float(priorities.get("economic", 70)),
            military_priority=float(priorities.get("military", 70)),
            magic_priority=float(priorities.get("magic", 50)),
        )

    @classmethod
    def neutral(cls, name: str = "Neutral") -> "RaceProfile":
        """A profile with no bonuses and 1.0 multipliers."""
        return cls(name=name)


class RaceTable:
    """Read-only race lookup with an observable default fallback."""

    def __init__(self, profiles: Iterable[RaceProfile], default_race: Optional[str] = None):
        self._profiles: dict[str, RaceProfile] = {p.name.lower(): p for p in profiles}
        if not self._profiles:
            neutral = RaceProfile.neutral()
            self._profiles[neutral.name.lower()] = neutral
        if default_race and default_race.lower() in self._profiles:
            self.default = self._profiles[default_race.lower()]
        else:
            self.default = next(iter(self._profiles.values()))

    @classmethod
    def load(cls, path: Optional[Path | str] = None) -> "RaceTable":
        """Load race definitions from YAML."""
        races_path = Path(path) if path else data_path() / "races.yaml"
        if not races_path.exists():
            logger.warning(f"Race table not found: {races_path}, using neutral profile")
            return cls([])

        with open(races_path) as f:
            data = yaml.safe_load(f) or {}

        profiles = [
            RaceProfile.from_dict(name, fields or {})
            for name, fields in (data.get("races") or {}).items()
        ]
        logger.info(f"Loaded {len(profiles)} races from {races_path}")
        return cls(profiles, default_race=data.get("default_race"))

    @classmethod
    def uniform(cls, names: Iterable[str]) -> "RaceTable":
        """Table where every race is the same neutral profile under a different name."""
        return cls([RaceProfile.neutral(name) for name in names])

    @property
    def names(self) -> list[str]:
        return [p.name for p in self._profiles.values()]

    def __contains__(self, name: str) -> bool:
        return bool(name) and name.lower() in self._profiles

    def __iter__(self):
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)

    def get(self, name: Optional[str]) -> RaceProfile:
        """Resolve a race name, falling back to the default profile.

        Unknown names are logged here; callers that report results should
        also check ``name in table`` and record the fallback so balance
        numbers are never silently skewed.
        """
        profile = self._profiles.get((name or "").lower())
        if profile is not None:
            return profile

        logger.warning(f"Unknown race {name!r}, falling back to {self.default.name}")
        return self.default
