"""
Balance aggregation over finished games.

Reduces GameResults into per-race and per-strategy tallies, an imbalance
score and rule-based tuning recommendations. Tallies merge associatively
and commutatively, so workers can fold their own games and the partial
tallies can be combined in any order.
"""

import logging
import statistics
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .config import BalanceConfig, RecommendationConfig
from .races import RaceTable
from .turn import GameResult, PLAYERS, opponent_of

logger = logging.getLogger(__name__)


@dataclass
class RaceTally:
    """Win/loss record for one race (or strategy). Spoils count wins only."""
    wins: int = 0
    losses: int = 0
    draws: int = 0
    land_gained: int = 0
    gold_gained: int = 0

    @property
    def games(self) -> int:
        return self.wins + self.losses + self.draws

    @property
    def decided(self) -> int:
        return self.wins + self.losses

    @property
    def win_rate(self) -> float:
        return self.wins / self.decided if self.decided else 0.0

    @property
    def avg_land_per_win(self) -> float:
        return self.land_gained / self.wins if self.wins else 0.0

    @property
    def avg_gold_per_win(self) -> float:
        return self.gold_gained / self.wins if self.wins else 0.0

    def merge(self, other: "RaceTally") -> "RaceTally":
        return RaceTally(
            wins=self.wins + other.wins,
            losses=self.losses + other.losses,
            draws=self.draws + other.draws,
            land_gained=self.land_gained + other.land_gained,
            gold_gained=self.gold_gained + other.gold_gained,
        )

    def to_dict(self) -> dict:
        return {
            "wins": self.wins,
            "losses": self.losses,
            "draws": self.draws,
            "games": self.games,
            "win_rate": round(self.win_rate, 4),
            "total_land_gained": self.land_gained,
            "total_gold_gained": self.gold_gained,
            "avg_land_per_win": round(self.avg_land_per_win, 2),
            "avg_gold_per_win": round(self.avg_gold_per_win, 2),
        }


def _merge_tallies(left: dict, right: dict) -> dict:
    merged = dict(left)
    for name, tally in right.items():
        merged[name] = merged[name].merge(tally) if name in merged else tally
    return merged


def _merge_counts(left: dict, right: dict) -> dict:
    merged = dict(left)
    for key, count in right.items():
        merged[key] = merged.get(key, 0) + count
    return merged


@dataclass
class BalanceTally:
    """Mergeable accumulator for a batch of games."""
    races: dict[str, RaceTally] = field(default_factory=dict)
    strategies: dict[str, RaceTally] = field(default_factory=dict)
    games: int = 0
    draws: int = 0
    turns: int = 0
    win_conditions: dict[str, int] = field(default_factory=dict)
    fallbacks: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_results(cls, results: Iterable[GameResult]) -> "BalanceTally":
        tally = cls()
        for result in results:
            tally.add(result)
        return tally

    def add(self, result: GameResult):
        """Fold one finished game into the tally."""
        self.games += 1
        self.turns += result.turns
        condition = result.win_condition.value
        self.win_conditions[condition] = self.win_conditions.get(condition, 0) + 1
        for name in result.fallbacks:
            self.fallbacks[name] = self.fallbacks.get(name, 0) + 1

        if result.is_draw:
            self.draws += 1

        for player in PLAYERS:
            outcome = _outcome_for(result, player)
            race = result.race_of(player)
            strategy = result.strategy_of(player)
            self.races[race] = self.races.get(race, RaceTally()).merge(outcome)
            self.strategies[strategy] = self.strategies.get(strategy, RaceTally()).merge(outcome)

    def merge(self, other: "BalanceTally") -> "BalanceTally":
        return BalanceTally(
            races=_merge_tallies(self.races, other.races),
            strategies=_merge_tallies(self.strategies, other.strategies),
            games=self.games + other.games,
            draws=self.draws + other.draws,
            turns=self.turns + other.turns,
            win_conditions=_merge_counts(self.win_conditions, other.win_conditions),
            fallbacks=_merge_counts(self.fallbacks, other.fallbacks),
        )


def _outcome_for(result: GameResult, player: str) -> RaceTally:
    if result.is_draw:
        return RaceTally(draws=1)
    if result.winner == player:
        state = result.state_of(player)
        return RaceTally(
            wins=1,
            land_gained=int(round(state.land_gained)),
            gold_gained=int(round(state.gold_gained)),
        )
    if result.winner == opponent_of(player):
        return RaceTally(losses=1)
    return RaceTally()


@dataclass
class BalanceReport:
    """Statistical verdict over a batch of games."""
    race_stats: dict[str, RaceTally] = field(default_factory=dict)
    strategy_stats: dict[str, RaceTally] = field(default_factory=dict)
    imbalance: float = 0.0
    recommendations: list[str] = field(default_factory=list)
    total_games: int = 0
    draws: int = 0
    avg_turns: float = 0.0
    win_conditions: dict[str, int] = field(default_factory=dict)
    fallbacks: dict[str, int] = field(default_factory=dict)
    # True when a game-count or time budget stopped the run early
    partial: bool = False

    @property
    def is_empty(self) -> bool:
        return self.total_games == 0

    def to_dict(self) -> dict:
        return {
            "race_stats": {name: t.to_dict() for name, t in sorted(self.race_stats.items())},
            "strategy_stats": {name: t.to_dict() for name, t in sorted(self.strategy_stats.items())},
            "imbalance": round(self.imbalance, 4),
            "recommendations": list(self.recommendations),
            "total_games": self.total_games,
            "draws": self.draws,
            "avg_turns": round(self.avg_turns, 2),
            "win_conditions": dict(sorted(self.win_conditions.items())),
            "fallbacks": dict(sorted(self.fallbacks.items())),
            "partial": self.partial,
        }


def imbalance_score(race_stats: dict[str, RaceTally]) -> float:
    """Population standard deviation of win rates over every race that played.

    A race whose games were all draws counts with a win rate of 0.
    """
    rates = [t.win_rate for t in race_stats.values() if t.games > 0]
    if not rates:
        return 0.0
    return statistics.pstdev(rates)


def recommend(
    race_stats: dict[str, RaceTally],
    imbalance: float,
    races: Optional[RaceTable] = None,
    config: Optional[RecommendationConfig] = None,
) -> list[str]:
    """Rule-based tuning suggestions. Deterministic for a given tally."""
    cfg = config or RecommendationConfig()
    played = {name: t for name, t in sorted(race_stats.items()) if t.games > 0}
    if not played:
        return []

    recommendations = []
    if imbalance > cfg.significant_imbalance:
        recommendations.append(
            f"Significant imbalance detected (score {imbalance:.3f}): rebalancing recommended"
        )
    elif imbalance < cfg.excellent_imbalance:
        recommendations.append(f"Excellent balance (score {imbalance:.3f})")
    else:
        recommendations.append(
            f"Good balance with minor adjustments possible (score {imbalance:.3f})"
        )

    strongest = min(played, key=lambda name: (-played[name].win_rate, name))
    weakest = min(played, key=lambda name: (played[name].win_rate, name))

    rate = played[strongest].win_rate
    if rate > cfg.overpowered_win_rate:
        current = _military_multiplier(races, strongest)
        proposed = max(cfg.multiplier_floor, current - cfg.multiplier_step)
        recommendations.append(
            f"{strongest} is overpowered ({rate:.1%} win rate): reduce military "
            f"multiplier from {current:.2f} to {proposed:.2f}"
        )

    rate = played[weakest].win_rate
    if weakest != strongest and rate < cfg.underpowered_win_rate:
        current = _military_multiplier(races, weakest)
        proposed = min(cfg.multiplier_cap, current + cfg.multiplier_step)
        recommendations.append(
            f"{weakest} is underpowered ({rate:.1%} win rate): raise military "
            f"multiplier from {current:.2f} to {proposed:.2f}"
        )

    for name, tally in played.items():
        if tally.avg_land_per_win > cfg.max_avg_land_per_win:
            recommendations.append(
                f"{name} is gaining too much land per victory "
                f"({tally.avg_land_per_win:.0f} acres on average)"
            )
        if tally.avg_gold_per_win > cfg.max_avg_gold_per_win:
            recommendations.append(
                f"{name} is gaining too much gold per victory "
                f"({tally.avg_gold_per_win:.0f} gold on average)"
            )

    return recommendations


def _military_multiplier(races: Optional[RaceTable], name: str) -> float:
    if races is None or name not in races:
        return 1.0
    return races.get(name).military_multiplier


def build_report(
    tally: BalanceTally,
    races: Optional[RaceTable] = None,
    config: Optional[BalanceConfig] = None,
    partial: bool = False,
) -> BalanceReport:
    """Turn a merged tally into a report."""
    config = config or BalanceConfig()
    imbalance = imbalance_score(tally.races)
    if tally.fallbacks:
        logger.warning(f"Balance run used fallbacks: {dict(sorted(tally.fallbacks.items()))}")

    return BalanceReport(
        race_stats=dict(tally.races),
        strategy_stats=dict(tally.strategies),
        imbalance=imbalance,
        recommendations=recommend(tally.races, imbalance, races, config.recommendations),
        total_games=tally.games,
        draws=tally.draws,
        avg_turns=tally.turns / tally.games if tally.games else 0.0,
        win_conditions=dict(tally.win_conditions),
        fallbacks=dict(tally.fallbacks),
        partial=partial,
    )


def aggregate(
    results: Iterable[GameResult],
    races: Optional[RaceTable] = None,
    config: Optional[BalanceConfig] = None,
    partial: bool = False,
) -> BalanceReport:
    """Reduce a collection of finished games into a BalanceReport."""
    return build_report(BalanceTally.from_results(results), races, config, partial)


def format_report(report: BalanceReport) -> str:
    """Plain-text rendering of a report for the CLI."""
    lines = [
        "=" * 80,
        f"  BALANCE REPORT - {report.total_games} games"
        + (" (partial)" if report.partial else ""),
        "=" * 80,
        "",
        f"{'RACE':<14} {'Wins':>6} {'Losses':>7} {'Draws':>6} {'Win%':>7} {'Land/win':>9} {'Gold/win':>11}",
        "-" * 66,
    ]
    for name, tally in sorted(report.race_stats.items(), key=lambda kv: (-kv[1].win_rate, kv[0])):
        lines.append(
            f"{name:<14} {tally.wins:>6} {tally.losses:>7} {tally.draws:>6} "
            f"{tally.win_rate * 100:>6.1f}% {tally.avg_land_per_win:>9.0f} {tally.avg_gold_per_win:>11.0f}"
        )

    if report.strategy_stats:
        lines += ["", f"{'STRATEGY':<14} {'Wins':>6} {'Losses':>7} {'Draws':>6} {'Win%':>7}", "-" * 44]
        for name, tally in sorted(report.strategy_stats.items()):
            lines.append(
                f"{name:<14} {tally.wins:>6} {tally.losses:>7} {tally.draws:>6} {tally.win_rate * 100:>6.1f}%"
            )

    lines += [
        "",
        f"Imbalance score: {report.imbalance:.4f}",
        f"Average game length: {report.avg_turns:.1f} turns",
        f"Win conditions: {', '.join(f'{k}={v}' for k, v in sorted(report.win_conditions.items())) or 'none'}",
    ]
    if report.fallbacks:
        lines.append(f"Fallbacks: {', '.join(f'{k} x{v}' for k, v in sorted(report.fallbacks.items()))}")

    lines += ["", "RECOMMENDATIONS"]
    lines += [f"  - {r}" for r in report.recommendations] or ["  (none)"]
    return "\n".join(lines)
