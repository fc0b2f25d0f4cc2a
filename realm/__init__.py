"""
Kingdom simulation engine - game mechanics for balance testing.
"""

from .config import BalanceConfig, data_path
from .races import RaceProfile, RaceTable
from .kingdom import AgentState, Target, networth
from .actions import (
    ActionIntent, Attack, Build, Defend, Economic, Magic, Wait, ACTION_PRECEDENCE,
)
from .combat import (
    BattleResolver, SimplifiedResolver, CombatOutcome, OutcomeTier, MidpointRandom,
)
from .economy import EconomySystem, build_rate_from_quarries
from .turn import TurnManager, GamePhase, GameResult, WinCondition
from .balance import BalanceReport, BalanceTally, RaceTally, aggregate, format_report
from .adapter import from_kingdom, target_from_kingdom

__all__ = [
    "BalanceConfig",
    "data_path",
    "RaceProfile",
    "RaceTable",
    "AgentState",
    "Target",
    "networth",
    "ActionIntent",
    "Attack",
    "Build",
    "Defend",
    "Economic",
    "Magic",
    "Wait",
    "ACTION_PRECEDENCE",
    "BattleResolver",
    "SimplifiedResolver",
    "CombatOutcome",
    "OutcomeTier",
    "MidpointRandom",
    "EconomySystem",
    "build_rate_from_quarries",
    "TurnManager",
    "GamePhase",
    "GameResult",
    "WinCondition",
    "BalanceReport",
    "BalanceTally",
    "RaceTally",
    "aggregate",
    "format_report",
    "from_kingdom",
    "target_from_kingdom",
]
