"""
Stochastic wrapper around the priority agent.

Occasionally plays the runner-up candidate so long balance runs do not
replay the exact same game for every seed. The random source is injected by
the game so results stay reproducible per seed.
"""

import random
from typing import Optional, Sequence

from realm.actions import ActionIntent
from realm.kingdom import AgentState, Target

from .strategic import PriorityAgent


class NoisyAgent(PriorityAgent):
    """Priority agent that deviates to its second choice with probability ``noise``."""

    def __init__(self, policy=None, races=None, rng: Optional[random.Random] = None, noise: Optional[float] = None,
                 combat=None):
        super().__init__(policy, races, combat)
        self.rng = rng if rng is not None else random.Random()
        self.noise = self.policy.noise if noise is None else noise

    def decide(self, state: AgentState, legal_targets: Sequence[Target] = ()) -> ActionIntent:
        candidates = self.evaluate(state, legal_targets)
        if len(candidates) > 1 and self.noise > 0 and self.rng.random() < self.noise:
            return candidates[1]
        return self.select(candidates)
