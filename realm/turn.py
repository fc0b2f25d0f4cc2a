"""
Turn sequencing for a two-kingdom balance game.

Each turn: start -> both kingdoms act -> passive growth -> on_turn_end
callback -> victory check. The manager owns both AgentStates and the game's
random source; agents only ever see snapshots and targets.
"""

import random
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from .actions import ActionIntent, Attack, Build, Defend, Economic, Magic, Wait
from .combat import BattleResolver
from .config import BalanceConfig
from .economy import EconomySystem
from .kingdom import AgentState, Target
from .races import RaceTable

logger = logging.getLogger(__name__)

PLAYERS = ("player1", "player2")
DRAW = "draw"


class GamePhase(Enum):
    RUNNING = "running"
    COMPLETE = "complete"


class WinCondition(Enum):
    ELIMINATION = "elimination"
    LAND_ADVANTAGE = "land_advantage"
    TIMEOUT = "timeout"


@dataclass
class TurnState:
    """State of the current turn."""
    turn_number: int
    actions: dict[str, ActionIntent] = field(default_factory=dict)
    reports: list = field(default_factory=list)


@dataclass
class GameState:
    """Progress of one game."""
    turn: int = 0
    max_turns: int = 200
    phase: GamePhase = GamePhase.RUNNING
    winner: Optional[str] = None
    win_condition: Optional[WinCondition] = None
    turn_history: list[TurnState] = field(default_factory=list)


@dataclass(frozen=True)
class GameResult:
    """Outcome of one finished game."""
    winner: str
    turns: int
    win_condition: WinCondition
    player1: AgentState
    player2: AgentState
    player1_race: str
    player2_race: str
    player1_strategy: str = "balanced"
    player2_strategy: str = "balanced"
    seed: Optional[object] = None
    # Unknown race/strategy names that were replaced by defaults
    fallbacks: tuple = ()

    @property
    def is_draw(self) -> bool:
        return self.winner == DRAW

    def race_of(self, player: str) -> str:
        return self.player1_race if player == "player1" else self.player2_race

    def strategy_of(self, player: str) -> str:
        return self.player1_strategy if player == "player1" else self.player2_strategy

    def state_of(self, player: str) -> AgentState:
        return self.player1 if player == "player1" else self.player2

    def to_dict(self) -> dict:
        return {
            "winner": self.winner,
            "turns": self.turns,
            "win_condition": self.win_condition.value,
            "player1": self.player1.to_dict(),
            "player2": self.player2.to_dict(),
            "player1_strategy": self.player1_strategy,
            "player2_strategy": self.player2_strategy,
            "seed": self.seed,
            "fallbacks": list(self.fallbacks),
        }


def opponent_of(player: str) -> str:
    return "player2" if player == "player1" else "player1"


class TurnManager:
    """Manages turn execution, action resolution and victory checks."""

    def __init__(
        self,
        races: RaceTable,
        config: Optional[BalanceConfig] = None,
        rng: Optional[random.Random] = None,
        rng_seed: Optional[object] = None,
        keep_history: bool = False,
    ):
        self.races = races
        self.config = config or BalanceConfig()
        self.rng = rng if rng is not None else random.Random(rng_seed)
        self.keep_history = keep_history

        self.combat = BattleResolver(self.config.combat, rng=self.rng)
        self.economy = EconomySystem(self.config.economy, rng=self.rng)
        self.npc_targets = [Target.from_dict(t) for t in self.config.npc_targets]

        self.states: dict[str, AgentState] = {}
        self.game_state = GameState(max_turns=self.config.victory.max_turns)
        self.current_turn: Optional[TurnState] = None

        # Callbacks
        self.on_turn_start: Optional[Callable] = None
        self.on_turn_end: Optional[Callable] = None

    @property
    def is_running(self) -> bool:
        return self.game_state.phase is GamePhase.RUNNING

    def initialize_game(self, player1_race: str, player2_race: str):
        """Create both kingdoms from the baseline with racial bonuses applied."""
        self.game_state = GameState(max_turns=self.config.victory.max_turns)
        self.current_turn = None
        self.states = {}
        for player, race in zip(PLAYERS, (player1_race, player2_race)):
            profile = self.races.get(race)
            self.states[player] = AgentState.baseline(profile, self.config.baseline, kingdom_id=player)

        # Degenerate configs (zero turn cap, tiny baseline) end immediately
        self._check_victory_conditions()

    def legal_targets(self, player: str) -> list[Target]:
        """Opponent snapshot first, then the NPC pool."""
        opponent = self.states[opponent_of(player)]
        return [opponent.as_target(opponent_of(player))] + list(self.npc_targets)

    def start_turn(self) -> TurnState:
        """Start a new turn."""
        self.game_state.turn += 1
        turn = self.game_state.turn
        for state in self.states.values():
            state.turn = turn

        self.current_turn = TurnState(turn_number=turn)

        if self.on_turn_start:
            self.on_turn_start(self.current_turn)

        return self.current_turn

    def apply_action(self, player: str, action: ActionIntent) -> dict:
        """Resolve one kingdom's action against the live game state."""
        if not self.current_turn:
            raise RuntimeError("Turn not started")

        state = self.states[player]
        profile = self.races.get(state.race)

        if isinstance(action, Attack):
            report = self._resolve_attack(player, action)
        elif isinstance(action, Build):
            report = self.economy.build(state, profile)
        elif isinstance(action, Defend):
            report = self.economy.defend(state, action.amount)
        elif isinstance(action, Economic):
            report = self.economy.invest(state, action.amount)
        elif isinstance(action, Magic):
            report = self.economy.cast_wards(state, action.amount, profile)
        elif isinstance(action, Wait):
            report = {"action": "wait"}
        else:
            raise TypeError(f"Unknown action type: {type(action).__name__}")

        state.clamp()
        report["player"] = player
        self.current_turn.actions[player] = action
        self.current_turn.reports.append(report)
        logger.debug(f"Turn {self.game_state.turn} {player}: {action.describe()}")
        return report

    def _resolve_attack(self, player: str, action: Attack) -> dict:
        attacker = self.states[player]
        army = attacker.offense if action.army is None else max(0.0, min(action.army, attacker.offense))

        defender = None
        if action.target_id == opponent_of(player):
            defender = self.states[action.target_id]
            defense, land = defender.defense, defender.land
        else:
            npc = next((t for t in self.npc_targets if t.id == action.target_id), None)
            if npc is None:
                logger.warning(f"{player} attacked unknown target {action.target_id!r}")
                return {"action": "attack", "target": action.target_id, "result": "invalid_target"}
            defense, land = npc.defense, npc.land

        outcome = self.combat.engage(army, defense, land)
        attacker.offense -= army * outcome.attacker_loss

        land_taken = outcome.land_gained
        gold_taken = outcome.gold_transfer
        if defender is not None:
            defender.defense *= 1 - outcome.defender_loss
            land_taken = min(land_taken, defender.land)
            gold_taken = min(gold_taken, defender.gold)
            defender.land -= land_taken
            defender.gold -= gold_taken
            defender.clamp()

        attacker.land += land_taken
        attacker.gold += gold_taken
        attacker.land_gained += land_taken
        attacker.gold_gained += gold_taken

        return {
            "action": "attack",
            "target": action.target_id,
            "result": outcome.tier.value,
            "ratio": round(outcome.ratio, 3),
            "land": land_taken,
            "gold": gold_taken,
            "notes": outcome.notes,
        }

    def apply_growth(self) -> dict:
        """Passive growth for both kingdoms."""
        return {
            player: self.economy.grow(state, self.races.get(state.race))
            for player, state in self.states.items()
        }

    def execute_full_turn(self, actions: dict[str, ActionIntent]) -> TurnState:
        """Run one whole turn with actions already chosen for both players."""
        self.start_turn()
        for player in PLAYERS:
            self.apply_action(player, actions.get(player) or Wait(reasoning="No orders"))
        self.end_turn()
        return self.current_turn

    def end_turn(self):
        """Growth, end-of-turn callback, then the victory check."""
        if not self.current_turn:
            return

        growth = self.apply_growth()
        self.current_turn.reports.append({"action": "growth", **growth})

        if self.on_turn_end:
            self.on_turn_end(self.current_turn)

        self._check_victory_conditions()

        if self.keep_history:
            self.game_state.turn_history.append(self.current_turn)

    def _check_victory_conditions(self):
        """Check elimination, land advantage and the turn cap, in that order."""
        victory = self.config.victory
        land1 = self.states["player1"].land
        land2 = self.states["player2"].land

        winner = None
        condition = None
        if land1 < victory.elimination_land or land2 < victory.elimination_land:
            condition = WinCondition.ELIMINATION
            winner = _higher_land(land1, land2)
        elif land1 > land2 * victory.land_advantage:
            condition, winner = WinCondition.LAND_ADVANTAGE, "player1"
        elif land2 > land1 * victory.land_advantage:
            condition, winner = WinCondition.LAND_ADVANTAGE, "player2"
        elif self.game_state.turn >= self.game_state.max_turns:
            condition = WinCondition.TIMEOUT
            winner = _higher_land(land1, land2)

        if condition is not None:
            self.game_state.phase = GamePhase.COMPLETE
            self.game_state.winner = winner
            self.game_state.win_condition = condition
            logger.debug(f"Game over on turn {self.game_state.turn}: {winner} by {condition.value}")

    def result(
        self,
        strategies: tuple[str, str] = ("balanced", "balanced"),
        seed: Optional[object] = None,
        fallbacks: tuple = (),
    ) -> GameResult:
        """Terminal snapshot of a finished game."""
        if self.is_running:
            raise RuntimeError("Game is still running")

        player1 = self.states["player1"].snapshot()
        player2 = self.states["player2"].snapshot()
        return GameResult(
            winner=self.game_state.winner,
            turns=self.game_state.turn,
            win_condition=self.game_state.win_condition,
            player1=player1,
            player2=player2,
            player1_race=player1.race,
            player2_race=player2.race,
            player1_strategy=strategies[0],
            player2_strategy=strategies[1],
            seed=seed,
            fallbacks=tuple(fallbacks),
        )


def _higher_land(land1: float, land2: float) -> str:
    if land1 > land2:
        return "player1"
    if land2 > land1:
        return "player2"
    return DRAW
