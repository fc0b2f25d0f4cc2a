"""
Game orchestration tests: turn loop, action resolution, win conditions.
"""

import pytest

from game import GameSimulation, simulate_game
from realm.actions import ActionIntent, Attack, Build, Wait
from realm.combat import MidpointRandom
from realm.config import BalanceConfig
from realm.races import RaceTable
from realm.turn import GamePhase, TurnManager, WinCondition


@pytest.fixture(scope="module")
def races():
    return RaceTable.load()


@pytest.fixture(scope="module")
def short_config():
    return BalanceConfig.load().with_max_turns(40)


def neutral_manager(max_turns=200, rng=None):
    config = BalanceConfig().with_max_turns(max_turns)
    manager = TurnManager(RaceTable.uniform(["Alpha", "Beta"]), config, rng=rng or MidpointRandom())
    manager.initialize_game("Alpha", "Beta")
    return manager


class TestGameLoop:
    @pytest.mark.parametrize("race_a,strategy_a,race_b,strategy_b", [
        ("Human", "balanced", "Goblin", "balanced"),
        ("Droben", "aggressive", "Sidhe", "defensive"),
        ("Dwarven", "economic", "Vampire", "aggressive"),
        ("Fae", "defensive", "Fae", "economic"),
    ])
    def test_games_terminate_within_cap(self, races, short_config, race_a, strategy_a, race_b, strategy_b):
        for seed in range(5):
            result = simulate_game(race_a, strategy_a, race_b, strategy_b,
                                   races=races, config=short_config, seed=seed)
            assert 1 <= result.turns <= 40
            assert result.winner in ("player1", "player2", "draw")
            assert isinstance(result.win_condition, WinCondition)

    def test_same_seed_same_game(self, races, short_config):
        first = simulate_game("Human", "aggressive", "Goblin", "economic", races=races, config=short_config, seed=11)
        second = simulate_game("Human", "aggressive", "Goblin", "economic", races=races, config=short_config, seed=11)
        assert first.to_dict() == second.to_dict()

    def test_result_carries_terminal_snapshots(self, races, short_config):
        result = simulate_game("Elven", "balanced", "Centaur", "defensive", races=races, config=short_config, seed=2)
        assert result.player1.race == "Elven"
        assert result.player2.race == "Centaur"
        assert result.player1_strategy == "balanced"
        assert result.player2_strategy == "defensive"
        assert result.seed == 2
        assert result.fallbacks == ()

    def test_forced_elimination_on_turn_five(self, races):
        sim = GameSimulation("Human", "balanced", "Goblin", "balanced", races=races, config=BalanceConfig(), seed=5)

        def shrink_player2(turn_state):
            if turn_state.turn_number == 5:
                sim.turn_manager.states["player2"].land = 50

        sim.turn_manager.on_turn_end = shrink_player2
        result = sim.run_game()
        assert result.win_condition is WinCondition.ELIMINATION
        assert result.turns == 5
        assert result.winner == "player1"

    def test_zero_turn_cap_ends_immediately(self, races):
        result = simulate_game("Human", "balanced", "Human", "balanced",
                               races=races, config=BalanceConfig().with_max_turns(0), seed=1)
        assert result.turns == 0
        assert result.win_condition is WinCondition.TIMEOUT
        assert result.winner == "draw"

    def test_unknown_names_fall_back_observably(self, races, short_config):
        result = simulate_game("Minotaur", "berserk", "Human", "balanced",
                               races=races, config=short_config, seed=3)
        assert result.player1_race == "Human"
        assert result.player1_strategy == "balanced"
        assert "race:Minotaur" in result.fallbacks
        assert "strategy:berserk" in result.fallbacks

    def test_callbacks_fire_every_turn(self, races):
        sim = GameSimulation("Human", "balanced", "Goblin", "balanced", races=races,
                             config=BalanceConfig().with_max_turns(6), seed=8)
        started = []
        sim.turn_manager.on_turn_start = lambda turn_state: started.append(turn_state.turn_number)
        result = sim.run_game()
        assert started == list(range(1, result.turns + 1))


class TestTurnManager:
    def test_attack_on_npc_takes_land_and_loot(self):
        manager = neutral_manager()
        attacker = manager.states["player1"]
        attacker.offense = 2000
        manager.start_turn()

        report = manager.apply_action("player1", Attack(priority=50, reasoning="test", target_id="npc1"))
        assert report["result"] == "with_ease"
        assert report["land"] == 57
        assert attacker.land == 1057
        assert attacker.gold == 50000 + 57000
        assert attacker.offense == pytest.approx(1900)
        assert attacker.land_gained == 57
        assert manager.npc_targets[0].land == 800

    def test_attack_on_opponent_transfers_land_and_gold(self):
        manager = neutral_manager()
        attacker, defender = manager.states["player1"], manager.states["player2"]
        attacker.offense = 5000
        manager.start_turn()

        manager.apply_action("player1", Attack(priority=50, reasoning="test", target_id="player2"))
        assert attacker.land == 1071
        assert defender.land == 929
        assert attacker.gold == 100000
        assert defender.gold == 0
        assert defender.defense == pytest.approx(800)
        assert attacker.offense == pytest.approx(4750)

    def test_failed_attack_costs_attacker(self):
        manager = neutral_manager()
        attacker, defender = manager.states["player1"], manager.states["player2"]
        manager.start_turn()

        report = manager.apply_action("player1", Attack(priority=50, reasoning="test", target_id="player2"))
        assert report["result"] == "failed"
        assert attacker.land == 1000
        assert attacker.offense == pytest.approx(750)
        assert defender.defense == pytest.approx(950)

    def test_unknown_target_is_reported(self):
        manager = neutral_manager()
        manager.start_turn()
        report = manager.apply_action("player1", Attack(priority=50, reasoning="test", target_id="ghost"))
        assert report["result"] == "invalid_target"
        assert manager.states["player1"].land == 1000

    def test_unknown_action_type_raises(self):
        class Parley(ActionIntent):
            kind = "parley"

        manager = neutral_manager()
        manager.start_turn()
        with pytest.raises(TypeError):
            manager.apply_action("player1", Parley(priority=1, reasoning="talk"))

    def test_legal_targets(self):
        manager = neutral_manager()
        ids = [t.id for t in manager.legal_targets("player1")]
        assert ids == ["player2", "npc1", "npc2"]
        assert manager.legal_targets("player2")[0].id == "player1"

    def test_land_advantage(self):
        manager = neutral_manager()
        manager.on_turn_end = lambda turn_state: setattr(manager.states["player2"], "land", 300)
        manager.execute_full_turn({"player1": Wait(reasoning="hold"), "player2": Wait(reasoning="hold")})
        assert manager.game_state.phase is GamePhase.COMPLETE
        result = manager.result()
        assert result.win_condition is WinCondition.LAND_ADVANTAGE
        assert result.winner == "player1"

    def test_timeout_tie_is_draw(self):
        manager = neutral_manager(max_turns=1)
        manager.execute_full_turn({"player1": Wait(reasoning="hold"), "player2": Wait(reasoning="hold")})
        result = manager.result()
        assert result.win_condition is WinCondition.TIMEOUT
        assert result.winner == "draw"
        assert result.turns == 1

    def test_timeout_higher_land_wins(self):
        manager = neutral_manager(max_turns=1)
        manager.execute_full_turn({"player1": Build(reasoning="grow"), "player2": Wait(reasoning="hold")})
        result = manager.result()
        assert result.winner == "player1"
        assert result.player1.land == 1050

    def test_result_requires_finished_game(self):
        manager = neutral_manager()
        with pytest.raises(RuntimeError):
            manager.result()

    def test_history_is_opt_in(self):
        manager = neutral_manager(max_turns=3)
        manager.keep_history = True
        while manager.is_running:
            manager.execute_full_turn({})
        assert [t.turn_number for t in manager.game_state.turn_history] == [1, 2, 3]
