"""
Headless balance suite - plays many games and reports race/strategy balance.

Usage:
    python balance_suite.py                          # all races, balanced, 100 games per pairing
    python balance_suite.py --games 500 --seed 7     # more games, different seed
    python balance_suite.py --races Human Goblin --strategies aggressive defensive
    python balance_suite.py --workers 4 --processes  # process pool
    python balance_suite.py --time-budget 60         # stop after a minute, partial report
"""

import os
import json
import time
import logging
from dataclasses import dataclass, field
from concurrent.futures import ThreadPoolExecutor, ProcessPoolExecutor, as_completed
from typing import Callable, Optional, Sequence

from dotenv import load_dotenv

from realm import BalanceConfig, RaceTable, GameResult
from realm.balance import BalanceReport, BalanceTally, build_report, format_report
from agents import POLICIES
from game import simulate_game

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pairing:
    """One race/strategy matchup; player 1 is always the A side."""
    race_a: str
    strategy_a: str
    race_b: str
    strategy_b: str

    @property
    def label(self) -> str:
        return f"{self.race_a}/{self.strategy_a} vs {self.race_b}/{self.strategy_b}"


@dataclass
class SuiteConfig:
    """What to play: pairings, repetitions and the base seed."""
    pairings: list[Pairing] = field(default_factory=list)
    games_per_pairing: int = 100
    seed: int = 42

    @classmethod
    def round_robin(
        cls,
        races: Sequence[str],
        strategies: Sequence[str] = ("balanced",),
        games_per_pairing: int = 100,
        seed: int = 42,
        mirror: bool = False,
    ) -> "SuiteConfig":
        """Every ordered race pairing crossed with every ordered strategy pairing."""
        pairings = [
            Pairing(race_a, strategy_a, race_b, strategy_b)
            for race_a in races
            for race_b in races
            if mirror or race_a != race_b
            for strategy_a in strategies
            for strategy_b in strategies
        ]
        return cls(pairings=pairings, games_per_pairing=games_per_pairing, seed=seed)

    def jobs(self) -> list[tuple[Pairing, int]]:
        return [
            (pairing, rep)
            for pairing in self.pairings
            for rep in range(max(0, self.games_per_pairing))
        ]


def game_seed(base_seed: int, pairing: Pairing, rep: int) -> str:
    """Per-game seed from the pairing and repetition only, never from run order."""
    return (
        f"{base_seed}-{pairing.race_a}-{pairing.strategy_a}-"
        f"{pairing.race_b}-{pairing.strategy_b}-{rep}"
    )


def play_batch(
    jobs: Sequence[tuple[Pairing, int]],
    base_seed: int,
    races: RaceTable,
    config: BalanceConfig,
) -> BalanceTally:
    """Play a batch of games and fold them into a worker-local tally."""
    tally = BalanceTally()
    for pairing, rep in jobs:
        tally.add(play_game(pairing, rep, base_seed, races, config))
    return tally


def play_game(
    pairing: Pairing,
    rep: int,
    base_seed: int,
    races: RaceTable,
    config: BalanceConfig,
) -> GameResult:
    return simulate_game(
        pairing.race_a, pairing.strategy_a, pairing.race_b, pairing.strategy_b,
        races=races, config=config, seed=game_seed(base_seed, pairing, rep),
    )


def run_balance_suite(
    suite: SuiteConfig,
    races: Optional[RaceTable] = None,
    config: Optional[BalanceConfig] = None,
    workers: int = 1,
    use_processes: bool = False,
    max_games: Optional[int] = None,
    time_budget: Optional[float] = None,
    progress: Optional[Callable[[int, int], None]] = None,
    batch_size: int = 50,
) -> BalanceReport:
    """Run every configured game and reduce them into a BalanceReport.

    Games are independent and may run on a thread or process pool; each
    worker folds its own batch and the batch tallies are merged as they
    finish. A game-count or wall-clock budget stops the run early and marks
    the report partial.
    """
    races = races or RaceTable.load()
    config = config or BalanceConfig.load()

    jobs = suite.jobs()
    if not jobs:
        logger.warning("Balance suite has no pairings configured, returning empty report")
        return build_report(BalanceTally(), races, config)

    partial = False
    if max_games is not None and len(jobs) > max_games:
        jobs = jobs[:max(0, max_games)]
        partial = True

    batch_size = max(1, batch_size)
    batches = [jobs[i:i + batch_size] for i in range(0, len(jobs), batch_size)]
    total = len(jobs)
    deadline = time.monotonic() + time_budget if time_budget is not None else None

    logger.info(
        f"Running {total} games over {len(suite.pairings)} pairings "
        f"({workers} worker{'s' if workers != 1 else ''})"
    )

    tally = BalanceTally()
    done = 0
    if workers <= 1:
        for batch in batches:
            if deadline is not None and time.monotonic() >= deadline:
                partial = True
                break
            tally = tally.merge(play_batch(batch, suite.seed, races, config))
            done += len(batch)
            if progress:
                progress(done, total)
    else:
        pool_cls = ProcessPoolExecutor if use_processes else ThreadPoolExecutor
        with pool_cls(max_workers=workers) as pool:
            futures = {
                pool.submit(play_batch, batch, suite.seed, races, config): len(batch)
                for batch in batches
            }
            for future in as_completed(futures):
                if future.cancelled():
                    continue
                tally = tally.merge(future.result())
                done += futures[future]
                if progress:
                    progress(done, total)
                if deadline is not None and time.monotonic() >= deadline and done < total:
                    partial = True
                    for pending in futures:
                        pending.cancel()

    if partial:
        logger.warning(f"Balance suite stopped early: {tally.games} of {len(suite.jobs())} games played")

    return build_report(tally, races, config, partial=partial)


def _progress_logger() -> Callable[[int, int], None]:
    """Progress callback that logs once per completed tenth of the run."""
    logged = set()

    def report(done: int, total: int):
        decile = done * 10 // total
        if decile not in logged:
            logged.add(decile)
            logger.info(f"  {done}/{total} games ({done / total:.0%})")

    return report


def main():
    import argparse

    load_dotenv()
    logging.basicConfig(level=os.getenv("REALM_LOG_LEVEL", "INFO").upper())

    parser = argparse.ArgumentParser(description="Kingdom balance suite")
    parser.add_argument("--games", type=int, default=100, help="Games per pairing (default: 100)")
    parser.add_argument("--seed", type=int, default=42, help="Base RNG seed (default: 42)")
    parser.add_argument("--races", nargs="+", default=None, help="Races to test (default: all)")
    parser.add_argument("--strategies", nargs="+", choices=list(POLICIES.keys()),
                        default=["balanced"], help="Strategies to test (default: balanced)")
    parser.add_argument("--mirror", action="store_true", help="Include same-race pairings")
    parser.add_argument("--workers", type=int, default=1, help="Worker pool size")
    parser.add_argument("--processes", action="store_true", help="Use processes instead of threads")
    parser.add_argument("--max-games", type=int, default=None, help="Stop after this many games")
    parser.add_argument("--time-budget", type=float, default=None, help="Stop after this many seconds")
    parser.add_argument("--turns", type=int, default=None, help="Turn cap (default: config)")
    parser.add_argument("--config", default=None, help="Balance config YAML")
    parser.add_argument("--races-file", default=None, help="Race table YAML")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    args = parser.parse_args()

    races = RaceTable.load(args.races_file)
    config = BalanceConfig.load(args.config)
    if args.turns is not None:
        config = config.with_max_turns(args.turns)

    suite = SuiteConfig.round_robin(
        args.races or races.names,
        strategies=args.strategies,
        games_per_pairing=args.games,
        seed=args.seed,
        mirror=args.mirror,
    )
    report = run_balance_suite(
        suite,
        races=races,
        config=config,
        workers=args.workers,
        use_processes=args.processes,
        max_games=args.max_games,
        time_budget=args.time_budget,
        progress=_progress_logger(),
    )

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(format_report(report))


if __name__ == "__main__":
    main()
