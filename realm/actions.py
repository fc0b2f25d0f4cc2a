"""
Actions a kingdom can take on its turn.

ActionIntent is a closed set of variants; the turn manager dispatches on the
concrete type and rejects anything else, so adding an action means touching
this module and TurnManager.apply_action together.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional


@dataclass(frozen=True)
class ActionIntent:
    """Base for every action. Priority is 0-100; reasoning is never empty."""
    kind: ClassVar[str] = ""
    priority: float = 0.0
    reasoning: str = ""

    def describe(self) -> str:
        return f"{self.kind} (priority {self.priority:.1f}): {self.reasoning}"


@dataclass(frozen=True)
class Attack(ActionIntent):
    kind: ClassVar[str] = "attack"
    target_id: str = ""
    army: Optional[float] = None  # None commits the whole offense


@dataclass(frozen=True)
class Build(ActionIntent):
    """Spend gold on new land and structures."""
    kind: ClassVar[str] = "build"


@dataclass(frozen=True)
class Defend(ActionIntent):
    kind: ClassVar[str] = "defend"
    amount: float = 0.0


@dataclass(frozen=True)
class Economic(ActionIntent):
    """Spend gold on income-producing structures."""
    kind: ClassVar[str] = "economic"
    amount: float = 0.0


@dataclass(frozen=True)
class Magic(ActionIntent):
    """Spend mana on protective wards."""
    kind: ClassVar[str] = "magic"
    amount: float = 0.0


@dataclass(frozen=True)
class Wait(ActionIntent):
    kind: ClassVar[str] = "wait"


ACTION_TYPES = (Attack, Magic, Defend, Build, Economic, Wait)

# Tie-break order when two candidates share a priority (lower wins)
ACTION_PRECEDENCE = {cls.kind: rank for rank, cls in enumerate(ACTION_TYPES)}
