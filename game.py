"""
Main game runner for kingdom balance simulation.

Orchestrates one game between two strategic agents.
"""

import os
import json
import random
import logging
from typing import Optional

from dotenv import load_dotenv

from realm import BalanceConfig, RaceTable, TurnManager, GameResult
from agents import create_agent, is_known_strategy

logger = logging.getLogger(__name__)


class GameSimulation:
    """Main simulation orchestrator."""

    def __init__(
        self,
        race_a: str = "Human",
        strategy_a: str = "balanced",
        race_b: str = "Human",
        strategy_b: str = "balanced",
        races: Optional[RaceTable] = None,
        config: Optional[BalanceConfig] = None,
        seed: Optional[object] = None,
        rng: Optional[random.Random] = None,
        keep_history: bool = False,
    ):
        self.races = races or RaceTable.load()
        self.config = config or BalanceConfig.load()
        self.seed = seed
        self.rng = rng if rng is not None else random.Random(seed)
        self.race_names = (race_a, race_b)

        self.fallbacks = []
        for race in self.race_names:
            if race not in self.races:
                self.fallbacks.append(f"race:{race}")
        for strategy in (strategy_a, strategy_b):
            if not is_known_strategy(strategy):
                self.fallbacks.append(f"strategy:{strategy}")

        self.turn_manager = TurnManager(self.races, self.config, rng=self.rng, keep_history=keep_history)
        self.agents = {
            "player1": create_agent(strategy_a, self.races, rng=self.rng, combat=self.config.combat),
            "player2": create_agent(strategy_b, self.races, rng=self.rng, combat=self.config.combat),
        }
        self.strategies = (self.agents["player1"].strategy, self.agents["player2"].strategy)

    def initialize(self):
        """Initialize the game."""
        self.turn_manager.initialize_game(*self.race_names)
        logger.debug(
            f"Game start: {self.race_names[0]} ({self.strategies[0]}) vs "
            f"{self.race_names[1]} ({self.strategies[1]}), seed {self.seed}"
        )

    def run_turn(self) -> dict:
        """Run a single turn: both agents decide on the same state, then act in order."""
        turn_state = self.turn_manager.start_turn()

        intents = {
            player: agent.decide(self.turn_manager.states[player], self.turn_manager.legal_targets(player))
            for player, agent in self.agents.items()
        }
        for player, intent in intents.items():
            self.turn_manager.apply_action(player, intent)

        self.turn_manager.end_turn()
        return {
            "turn": turn_state.turn_number,
            "actions": {player: intent.describe() for player, intent in intents.items()},
            "land": {player: state.land for player, state in self.turn_manager.states.items()},
        }

    def run_game(self) -> GameResult:
        """Run the full game."""
        self.initialize()
        while self.turn_manager.is_running:
            self.run_turn()

        result = self.turn_manager.result(self.strategies, seed=self.seed, fallbacks=self.fallbacks)
        logger.debug(f"Game over after {result.turns} turns: {result.winner} ({result.win_condition.value})")
        return result


def simulate_game(
    race_a: str,
    strategy_a: str,
    race_b: str,
    strategy_b: str,
    races: Optional[RaceTable] = None,
    config: Optional[BalanceConfig] = None,
    seed: Optional[object] = None,
    rng: Optional[random.Random] = None,
) -> GameResult:
    """Play one game to completion and return its result."""
    sim = GameSimulation(
        race_a, strategy_a, race_b, strategy_b,
        races=races, config=config, seed=seed, rng=rng,
    )
    return sim.run_game()


def main():
    """Run a single kingdom game."""
    import argparse

    load_dotenv()
    logging.basicConfig(level=os.getenv("REALM_LOG_LEVEL", "INFO").upper())

    parser = argparse.ArgumentParser(description="Kingdom balance simulation - single game")
    parser.add_argument("--race-a", default="Human", help="Race for player 1")
    parser.add_argument("--strategy-a", default="balanced", help="Strategy for player 1")
    parser.add_argument("--race-b", default="Goblin", help="Race for player 2")
    parser.add_argument("--strategy-b", default="balanced", help="Strategy for player 2")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--turns", type=int, default=None, help="Turn cap (default: config)")
    parser.add_argument("--config", default=None, help="Balance config YAML")
    parser.add_argument("--races-file", default=None, help="Race table YAML")
    parser.add_argument("--trace", action="store_true", help="Log every turn")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")

    args = parser.parse_args()

    races = RaceTable.load(args.races_file)
    config = BalanceConfig.load(args.config)
    if args.turns is not None:
        config = config.with_max_turns(args.turns)

    sim = GameSimulation(
        args.race_a, args.strategy_a, args.race_b, args.strategy_b,
        races=races, config=config, seed=args.seed,
    )
    sim.initialize()
    while sim.turn_manager.is_running:
        turn_log = sim.run_turn()
        if args.trace:
            logger.info(f"Turn {turn_log['turn']}: {turn_log['actions']}")
    result = sim.turn_manager.result(sim.strategies, seed=sim.seed, fallbacks=sim.fallbacks)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return

    print("\n" + "=" * 60)
    print("FINAL RESULTS")
    print("=" * 60)
    print(f"Turns played: {result.turns}")
    print(f"Winner: {result.winner} ({result.win_condition.value})")
    for player in ("player1", "player2"):
        state = result.state_of(player)
        print(
            f"{player}: {state.race} ({result.strategy_of(player)}) - "
            f"land {state.land:.0f}, gold {state.gold:.0f}, networth {state.networth:.0f}"
        )
    if result.fallbacks:
        print(f"Fallbacks: {', '.join(result.fallbacks)}")


if __name__ == "__main__":
    main()
