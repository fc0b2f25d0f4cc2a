"""
Balance aggregation and suite runner tests.
"""

import random

import pytest

from balance_suite import Pairing, SuiteConfig, play_game, run_balance_suite
from realm.balance import (
    BalanceTally, RaceTally, aggregate, format_report, imbalance_score, recommend,
)
from realm.config import BalanceConfig, RecommendationConfig
from realm.kingdom import AgentState
from realm.races import RaceProfile, RaceTable
from realm.turn import GameResult, WinCondition


def make_result(winner, race1="Alpha", race2="Beta", land_gained=100, gold_gained=50000,
                strategies=("balanced", "balanced")):
    p1 = AgentState(race=race1, land=1000, kingdom_id="player1")
    p2 = AgentState(race=race2, land=1000, kingdom_id="player2")
    if winner == "player1":
        p1.land_gained, p1.gold_gained = land_gained, gold_gained
    elif winner == "player2":
        p2.land_gained, p2.gold_gained = land_gained, gold_gained
    return GameResult(
        winner=winner,
        turns=10,
        win_condition=WinCondition.TIMEOUT,
        player1=p1,
        player2=p2,
        player1_race=race1,
        player2_race=race2,
        player1_strategy=strategies[0],
        player2_strategy=strategies[1],
    )


@pytest.fixture
def lopsided():
    # Alpha wins 3 of 4 decided games, plus one draw
    return [
        make_result("player1"),
        make_result("player1"),
        make_result("player2", race1="Beta", race2="Alpha"),
        make_result("player2"),
        make_result("draw"),
    ]


class TestTallies:
    def test_win_rates(self, lopsided):
        report = aggregate(lopsided)
        alpha, beta = report.race_stats["Alpha"], report.race_stats["Beta"]
        assert (alpha.wins, alpha.losses, alpha.draws) == (3, 1, 1)
        assert (beta.wins, beta.losses, beta.draws) == (1, 3, 1)
        assert alpha.win_rate == pytest.approx(0.75)
        assert beta.win_rate == pytest.approx(0.25)
        assert report.total_games == 5
        assert report.draws == 1
        for tally in report.race_stats.values():
            assert 0 <= tally.win_rate <= 1
            assert tally.win_rate == pytest.approx(tally.wins / (tally.wins + tally.losses))

    def test_spoils_count_wins_only(self, lopsided):
        alpha = aggregate(lopsided).race_stats["Alpha"]
        assert alpha.land_gained == 300
        assert alpha.gold_gained == 150000
        assert alpha.avg_land_per_win == pytest.approx(100)

    def test_no_games_means_zero_rate(self):
        assert RaceTally().win_rate == 0.0
        assert RaceTally(draws=3).win_rate == 0.0

    def test_imbalance_is_population_stdev(self, lopsided):
        report = aggregate(lopsided)
        assert report.imbalance == pytest.approx(0.25)
        assert imbalance_score({}) == 0.0

    def test_draws_only_race_counts_toward_imbalance(self):
        stats = {
            "Alpha": RaceTally(wins=5, losses=5),
            "Beta": RaceTally(wins=5, losses=5),
            "Gamma": RaceTally(draws=4),
        }
        assert imbalance_score(stats) == pytest.approx(0.2357, abs=1e-4)
        assert imbalance_score({"Gamma": RaceTally(draws=4)}) == 0.0
        assert imbalance_score({"Alpha": RaceTally(), "Beta": RaceTally(wins=1)}) == 0.0

    def test_draws_only_race_is_flagged_underpowered(self):
        stats = {"Alpha": RaceTally(wins=5, losses=5), "Gamma": RaceTally(draws=4)}
        text = "\n".join(recommend(stats, imbalance_score(stats)))
        assert "Gamma is underpowered" in text

    def test_merge_is_associative_and_commutative(self, lopsided):
        a, b, c = (BalanceTally.from_results([r]) for r in lopsided[:3])
        left = a.merge(b).merge(c)
        right = c.merge(a.merge(b))
        assert left.races == right.races
        assert left.strategies == right.strategies
        assert left.games == right.games == 3

    def test_strategy_stats(self):
        results = [make_result("player1", strategies=("aggressive", "defensive"))] * 2
        report = aggregate(results)
        assert report.strategy_stats["aggressive"].wins == 2
        assert report.strategy_stats["defensive"].losses == 2

    def test_empty_aggregation(self):
        report = aggregate([])
        assert report.is_empty
        assert report.imbalance == 0.0
        assert report.recommendations == []
        assert "0 games" in format_report(report)


class TestRecommendations:
    def test_flags_strong_and_weak_races(self, lopsided):
        races = RaceTable([RaceProfile.neutral("Alpha"), RaceProfile.neutral("Beta")])
        report = aggregate(lopsided, races=races)
        text = "\n".join(report.recommendations)
        assert report.recommendations[0].startswith("Significant imbalance")
        assert "Alpha is overpowered" in text
        assert "from 1.00 to 0.90" in text
        assert "Beta is underpowered" in text
        assert "from 1.00 to 1.10" in text

    def test_multiplier_floor_and_cap(self):
        races = RaceTable([
            RaceProfile(name="Alpha", military_multiplier=0.85),
            RaceProfile(name="Beta", military_multiplier=1.25),
        ])
        stats = {"Alpha": RaceTally(wins=9, losses=1), "Beta": RaceTally(wins=1, losses=9)}
        text = "\n".join(recommend(stats, 0.4, races))
        assert "from 0.85 to 0.80" in text
        assert "from 1.25 to 1.30" in text

    def test_balanced_roster(self):
        stats = {"Alpha": RaceTally(wins=50, losses=50), "Beta": RaceTally(wins=50, losses=50)}
        recommendations = recommend(stats, 0.0)
        assert recommendations == ["Excellent balance (score 0.000)"]

    def test_minor_imbalance(self):
        stats = {"Alpha": RaceTally(wins=57, losses=43), "Beta": RaceTally(wins=43, losses=57)}
        assert recommend(stats, imbalance_score(stats))[0].startswith("Good balance")

    def test_too_much_gain_per_victory(self):
        config = RecommendationConfig(max_avg_land_per_win=50, max_avg_gold_per_win=10000)
        stats = {"Alpha": RaceTally(wins=2, losses=2, land_gained=400, gold_gained=100000)}
        text = "\n".join(recommend(stats, 0.0, config=config))
        assert "Alpha is gaining too much land per victory" in text
        assert "Alpha is gaining too much gold per victory" in text


@pytest.fixture(scope="module")
def races():
    return RaceTable.load()


@pytest.fixture(scope="module")
def quick_config():
    return BalanceConfig.load().with_max_turns(25)


class TestBalanceSuite:
    def test_round_robin_pairings(self):
        suite = SuiteConfig.round_robin(["Human", "Goblin", "Elven"], ["balanced", "aggressive"], games_per_pairing=3)
        assert len(suite.pairings) == 3 * 2 * 2 * 2
        assert all(p.race_a != p.race_b for p in suite.pairings)
        assert len(suite.jobs()) == len(suite.pairings) * 3
        mirrored = SuiteConfig.round_robin(["Human", "Goblin"], mirror=True)
        assert Pairing("Human", "balanced", "Human", "balanced") in mirrored.pairings

    def test_zero_pairings_gives_empty_report(self, races, quick_config):
        report = run_balance_suite(SuiteConfig(), races=races, config=quick_config)
        assert report.is_empty
        assert not report.partial

    def test_order_independence(self, races, quick_config):
        suite = SuiteConfig.round_robin(["Human", "Goblin", "Droben"], ["balanced", "aggressive"],
                                        games_per_pairing=2, seed=9)
        baseline = run_balance_suite(suite, races=races, config=quick_config, batch_size=3)

        shuffled = SuiteConfig(pairings=list(suite.pairings), games_per_pairing=2, seed=9)
        random.Random(4).shuffle(shuffled.pairings)
        reordered = run_balance_suite(shuffled, races=races, config=quick_config, batch_size=5)
        threaded = run_balance_suite(shuffled, races=races, config=quick_config, workers=4, batch_size=2)

        jobs = suite.jobs()
        random.Random(5).shuffle(jobs)
        folded = aggregate([play_game(p, rep, 9, races, quick_config) for p, rep in jobs], races, quick_config)

        assert baseline.to_dict() == reordered.to_dict() == threaded.to_dict() == folded.to_dict()

    def test_game_budget_gives_partial_report(self, races, quick_config):
        suite = SuiteConfig.round_robin(["Human", "Goblin"], games_per_pairing=10)
        report = run_balance_suite(suite, races=races, config=quick_config, max_games=7)
        assert report.partial
        assert report.total_games == 7

    def test_exhausted_time_budget_is_not_an_error(self, races, quick_config):
        suite = SuiteConfig.round_robin(["Human", "Goblin"], games_per_pairing=10)
        report = run_balance_suite(suite, races=races, config=quick_config, time_budget=0)
        assert report.partial
        assert report.total_games == 0

    def test_progress_callback(self, races, quick_config):
        calls = []
        suite = SuiteConfig.round_robin(["Human", "Goblin"], games_per_pairing=3)
        run_balance_suite(suite, races=races, config=quick_config, batch_size=2,
                          progress=lambda done, total: calls.append((done, total)))
        assert calls[-1] == (6, 6)
        assert [done for done, _ in calls] == sorted(done for done, _ in calls)

    def test_every_game_within_turn_cap(self, races, quick_config):
        suite = SuiteConfig.round_robin(races.names[:4], ["aggressive", "economic"], games_per_pairing=1)
        for pairing, rep in suite.jobs():
            assert play_game(pairing, rep, 1, races, quick_config).turns <= 25

    def test_identical_races_are_balanced(self):
        races = RaceTable.uniform(["Alpha", "Beta"])
        config = BalanceConfig.load().with_max_turns(20)
        suite = SuiteConfig.round_robin(["Alpha", "Beta"], ["balanced"], games_per_pairing=1000, seed=2024)
        report = run_balance_suite(suite, races=races, config=config, workers=4)
        assert report.total_games == 2000
        assert report.imbalance < 0.05
