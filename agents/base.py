"""
Base strategic agent for kingdom simulations.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from realm.actions import ActionIntent
from realm.kingdom import AgentState, Target
from realm.races import RaceTable

from .policies import StrategyPolicy


class StrategicAgent(ABC):
    """Base class for agents that pick one action per turn."""

    def __init__(self, policy: Optional[StrategyPolicy] = None, races: Optional[RaceTable] = None):
        self.policy = policy or StrategyPolicy.named("balanced")
        self.races = races or RaceTable.load()

    @property
    def strategy(self) -> str:
        return self.policy.name

    @abstractmethod
    def decide(self, state: AgentState, legal_targets: Sequence[Target] = ()) -> ActionIntent:
        """Choose exactly one action for this turn.

        Agents must treat ``state`` as read-only; the turn manager applies
        the returned intent.
        """
        pass
