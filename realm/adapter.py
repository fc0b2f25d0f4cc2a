"""
Read-only adapter from host kingdom records to simulation state.

Host records are plain dicts shaped like the game client's kingdom objects:

    {
        "id": "k-42", "race": "Goblin",
        "resources": {"gold": 120000, "population": 900, "land": 1500, "mana": 800, "turns": 50},
        "units": {"peasants": 200, "militia": 150, "knights": 100, "cavalry": 50},
        "buildings": {"forts": 50, "quarries": 120, "farms": 300},
    }

Missing sections and fields count as zero. The record is never modified.
"""

import logging
from typing import Optional

from .kingdom import AgentState, Target
from .races import RaceTable

logger = logging.getLogger(__name__)

# Per-unit combat value before the racial military multiplier
UNIT_OFFENSE = {"peasants": 10, "militia": 25, "knights": 50, "cavalry": 75}
UNIT_DEFENSE = {"peasants": 8, "militia": 20, "knights": 45, "cavalry": 60}
FORT_DEFENSE = 100


def _section(record: dict, name: str) -> dict:
    return record.get(name) or {}


def _number(data: dict, key: str) -> float:
    value = data.get(key, 0)
    try:
        return max(0.0, float(value or 0))
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric {key}={value!r} in kingdom record")
        return 0.0


def army_power(units: dict, forts: float = 0, military_multiplier: float = 1.0) -> tuple[float, float]:
    """Offense and defense of an army composition."""
    offense = sum(_number(units, unit) * value for unit, value in UNIT_OFFENSE.items())
    defense = sum(_number(units, unit) * value for unit, value in UNIT_DEFENSE.items())
    defense += forts * FORT_DEFENSE
    return offense * military_multiplier, defense * military_multiplier


def from_kingdom(record: dict, races: RaceTable) -> AgentState:
    """Snapshot a host kingdom record as an AgentState."""
    race_name = record.get("race")
    if race_name not in races:
        logger.warning(f"Kingdom {record.get('id')!r} has unknown race {race_name!r}")
    profile = races.get(race_name)

    resources = _section(record, "resources")
    buildings = _section(record, "buildings")
    units = _section(record, "units")

    forts = _number(buildings, "forts") or _number(_section(record, "stats"), "forts")
    if units:
        offense, defense = army_power(units, forts, profile.military_multiplier)
    else:
        offense = _number(record, "offense")
        defense = _number(record, "defense")

    structures = _number(record, "structures")
    if not structures:
        structures = sum(_number(buildings, name) for name in buildings)

    return AgentState(
        race=profile.name,
        land=_number(resources, "land"),
        gold=_number(resources, "gold"),
        population=_number(resources, "population"),
        structures=structures,
        offense=offense,
        defense=defense,
        mana=_number(resources, "mana"),
        turn=int(_number(resources, "turns")),
        kingdom_id=str(record["id"]) if record.get("id") is not None else None,
    )


def target_from_kingdom(record: dict, races: RaceTable, target_id: Optional[str] = None) -> Target:
    """Legal-target view of a host kingdom."""
    state = from_kingdom(record, races)
    return state.as_target(target_id)
