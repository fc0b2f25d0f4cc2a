"""
Balance configuration for the kingdom simulation.

Tunables live in YAML (realm/data/balance.yaml) so the land-gain bands,
exchange rates and win conditions can be adjusted without touching code.
Keys missing from the file keep their built-in defaults.
"""

import os
import yaml
import logging
from pathlib import Path
from dataclasses import dataclass, field, fields, replace
from typing import Optional

logger = logging.getLogger(__name__)

DATA_PATH = Path(__file__).parent / "data"


def data_path() -> Path:
    """Data directory, overridable with REALM_DATA_PATH."""
    override = os.getenv("REALM_DATA_PATH")
    return Path(override) if override else DATA_PATH


@dataclass(frozen=True)
class BaselineConfig:
    """Starting kingdom before racial bonuses."""
    land: float = 1000
    gold: float = 50000
    population: float = 500
    offense: float = 1000
    defense: float = 1000
    structures: float = 800
    mana: float = 500


@dataclass(frozen=True)
class CombatConfig:
    gold_per_acre: int = 1000
    variance: float = 0.08
    land_bands: dict = field(default_factory=lambda: {
        "with_ease": (0.070, 0.0735),
        "good_fight": (0.0679, 0.070),
    })


@dataclass(frozen=True)
class EconomyConfig:
    build_fraction: float = 0.5
    gold_per_land: float = 500
    structures_per_land: float = 0.8
    gold_per_defense: float = 100
    gold_per_structure: float = 200
    mana_per_ward: float = 5
    income_per_structure: float = 50
    income_variance: float = 0.1
    population_growth: float = 0.1
    mana_growth: float = 0.05
    recruit_rate: float = 0.01
    event_chance: float = 0.02
    boom_bonus: float = 0.10
    training_bonus: float = 0.05


@dataclass(frozen=True)
class VictoryConfig:
    elimination_land: float = 100
    land_advantage: float = 3.0
    max_turns: int = 200


@dataclass(frozen=True)
class RecommendationConfig:
    overpowered_win_rate: float = 0.6
    underpowered_win_rate: float = 0.4
    multiplier_step: float = 0.1
    multiplier_floor: float = 0.8
    multiplier_cap: float = 1.3
    significant_imbalance: float = 0.1
    excellent_imbalance: float = 0.05
    max_avg_land_per_win: float = 2500
    max_avg_gold_per_win: float = 2500000


def _default_npc_targets() -> tuple:
    return (
        {"id": "npc1", "land": 800, "defense": 800, "offense": 400},
        {"id": "npc2", "land": 1200, "defense": 1200, "offense": 600},
    )


@dataclass(frozen=True)
class BalanceConfig:
    """All tunables for one simulation run. Immutable and safe to share."""
    baseline: BaselineConfig = field(default_factory=BaselineConfig)
    combat: CombatConfig = field(default_factory=CombatConfig)
    economy: EconomyConfig = field(default_factory=EconomyConfig)
    victory: VictoryConfig = field(default_factory=VictoryConfig)
    recommendations: RecommendationConfig = field(default_factory=RecommendationConfig)
    npc_targets: tuple = field(default_factory=_default_npc_targets)

    @classmethod
    def load(cls, path: Optional[Path | str] = None) -> "BalanceConfig":
        """Load tunables from YAML, falling back to defaults per key."""
        config_path = Path(path) if path else data_path() / "balance.yaml"
        if not config_path.exists():
            logger.warning(f"Balance config not found: {config_path}, using defaults")
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        config = cls.from_dict(data)
        logger.info(f"Loaded balance config from {config_path}")
        return config

    @classmethod
    def from_dict(cls, data: dict) -> "BalanceConfig":
        combat_data = dict(data.get("combat") or {})
        band_overrides = combat_data.pop("land_bands", None) or {}
        combat = _merge(CombatConfig(), combat_data)
        bands = dict(combat.land_bands)
        bands.update(band_overrides)
        combat = replace(combat, land_bands={
            tier: (float(low), float(high)) for tier, (low, high) in bands.items()
        })

        npc_targets = data.get("npc_targets")
        if npc_targets is None:
            npc_targets = _default_npc_targets()

        return cls(
            baseline=_merge(BaselineConfig(), data.get("baseline", {})),
            combat=combat,
            economy=_merge(EconomyConfig(), data.get("economy", {})),
            victory=_merge(VictoryConfig(), data.get("victory", {})),
            recommendations=_merge(RecommendationConfig(), data.get("recommendations", {})),
            npc_targets=tuple(dict(t) for t in npc_targets),
        )

    def with_max_turns(self, max_turns: int) -> "BalanceConfig":
        return replace(self, victory=replace(self.victory, max_turns=max_turns))


def _merge(section, overrides: dict):
    """Return a copy of a config section with known keys overridden."""
    known = {f.name for f in fields(section)}
    unknown = set(overrides or {}) - known
    if unknown:
        logger.warning(f"Ignoring unknown {type(section).__name__} keys: {sorted(unknown)}")
    return replace(section, **{k: v for k, v in (overrides or {}).items() if k in known})
