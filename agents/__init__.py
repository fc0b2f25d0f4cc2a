"""
Strategic agents for kingdom simulation.

Deterministic priority scoring, with an optional noisy wrapper for playout
diversity in long balance runs.
"""

import random
from typing import Optional, Sequence

from realm.actions import ActionIntent
from realm.config import CombatConfig
from realm.kingdom import AgentState, Target
from realm.races import RaceTable

from .base import StrategicAgent
from .noisy import NoisyAgent
from .policies import POLICIES, StrategyPolicy, is_known_strategy
from .strategic import PriorityAgent

__all__ = [
    "StrategicAgent",
    "PriorityAgent",
    "NoisyAgent",
    "StrategyPolicy",
    "POLICIES",
    "is_known_strategy",
    "create_agent",
    "decide",
]


def create_agent(
    strategy: str,
    races: Optional[RaceTable] = None,
    rng: Optional[random.Random] = None,
    combat: Optional[CombatConfig] = None,
) -> StrategicAgent:
    """Build the agent for a named strategy.

    Policies with noise get a NoisyAgent driven by ``rng``; without an rng
    the agent stays fully deterministic.
    """
    policy = StrategyPolicy.named(strategy)
    if policy.noise > 0 and rng is not None:
        return NoisyAgent(policy, races, rng=rng, combat=combat)
    return PriorityAgent(policy, races, combat)


def decide(
    state: AgentState,
    legal_targets: Sequence[Target] = (),
    policy: Optional[StrategyPolicy] = None,
    races: Optional[RaceTable] = None,
) -> ActionIntent:
    """One deterministic AI decision, for hosts driving a single turn."""
    return PriorityAgent(policy, races).decide(state, legal_targets)
