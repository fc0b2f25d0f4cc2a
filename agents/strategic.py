"""
Priority-based strategic AI.

Each turn the agent scores one candidate per action family from its own
state, its race profile and the targets it can see, weights the scores by
its policy, and plays the highest. Decisions are a pure function of the
inputs: no random source is consulted and nothing is mutated.
"""

import logging
from typing import Optional, Sequence

from realm.actions import (
    ACTION_PRECEDENCE, ActionIntent, Attack, Build, Defend, Economic, Magic, Wait,
)
from realm.combat import OutcomeTier, SimplifiedResolver, power_ratio
from realm.kingdom import AgentState, Target
from realm.races import RaceProfile

from .base import StrategicAgent

logger = logging.getLogger(__name__)

FOUNDATION_LAND = 3000
LOW_OFFENSE_RATIO = 0.008
FOUNDATION_PRIORITY = 85
DEVELOPED_BUILD_RATE = 90
CASH_RESERVE_FACTOR = 1.25
MIN_SPEND = 1000

BUILD_RATE_TARGET = 16
DEFENSIVE_BUILD_RATE_TARGET = 20
DEFEND_PRIORITY = 85
THREAT_RATIO = 1.2

MAGIC_AFFINITY_CUTOFF = 1.05
MAGIC_MANA_THRESHOLD = 1000
OPPORTUNISTIC_MANA_THRESHOLD = 5000
OPPORTUNISTIC_MAGIC_PRIORITY = 40

# Priority floors for threshold triggers; policy weights never push these below
FOUNDATION_FLOOR = 81
BUILD_RATE_DEFEND_FLOOR = 81
MAGIC_AFFINITY_FLOOR = 91

WITH_EASE_BONUS = 5
WAIT_PRIORITY = 10

PHASE_FACTORS = {"early": 0.9, "mid": 0.8, "late": 0.7}


class PriorityAgent(StrategicAgent):
    """Deterministic agent that plays its highest-priority candidate."""

    def __init__(self, policy=None, races=None, combat=None):
        super().__init__(policy, races)
        self.projector = SimplifiedResolver(combat)

    def decide(self, state: AgentState, legal_targets: Sequence[Target] = ()) -> ActionIntent:
        return self.select(self.evaluate(state, legal_targets))

    def evaluate(self, state: AgentState, legal_targets: Sequence[Target] = ()) -> list[ActionIntent]:
        """All candidate actions for this turn, best first."""
        profile = self.races.get(state.race)
        candidates = [
            self._evaluate_attack(state, profile, legal_targets),
            self._evaluate_magic(state, profile),
            self._evaluate_defense(state, profile, legal_targets),
            self._evaluate_expansion(state, profile),
            self._evaluate_investment(state, profile),
            Wait(
                priority=self._weighted("wait", WAIT_PRIORITY),
                reasoning="No strategic action available, holding position",
            ),
        ]
        candidates = [c for c in candidates if c is not None]
        candidates.sort(key=_rank, reverse=True)
        return candidates

    def select(self, candidates: Sequence[ActionIntent]) -> ActionIntent:
        if not candidates:
            return Wait(priority=WAIT_PRIORITY, reasoning="No candidates, holding position")
        return max(candidates, key=_rank)

    def select_target(self, state: AgentState, legal_targets: Sequence[Target]) -> Optional[Target]:
        """Best target by projected tier, then ratio, then acres, then id.

        A failed-tier target is only returned when every target would fail.
        """
        best = None
        best_key = None
        for target in legal_targets:
            tier, ratio, land = self._project(state, target)
            key = (tier.rank, ratio, land)
            if best is None or key > best_key or (key == best_key and target.id < best.id):
                best, best_key = target, key
        return best

    def _project(self, state: AgentState, target: Target) -> tuple[OutcomeTier, float, int]:
        outcome = self.projector.resolve(state.offense, target.defense, target.land)
        return outcome.tier, outcome.ratio, outcome.land_gained

    def _weighted(self, kind: str, base: float) -> float:
        return round(max(0.0, min(100.0, base * self.policy.weight(kind))), 2)

    def _floored(self, kind: str, base: float, floor: float) -> float:
        """Weighted priority that never drops below the unweighted base or the floor."""
        return max(self._weighted(kind, base), min(100.0, max(base, floor)))

    def _evaluate_attack(self, state, profile: RaceProfile, legal_targets) -> Optional[ActionIntent]:
        target = self.select_target(state, legal_targets)
        if target is None or state.offense <= 0:
            return None

        tier, ratio, land = self._project(state, target)
        if tier is OutcomeTier.FAILED or tier.rank < self.policy.min_attack_tier.rank:
            return None

        base = profile.military_priority
        if tier is OutcomeTier.WITH_EASE:
            base += WITH_EASE_BONUS
        return Attack(
            priority=self._weighted("attack", base),
            reasoning=(
                f"{profile.name} military strike on {target.id}: "
                f"{tier.value} projected at {ratio:.2f}x, ~{land} acres"
            ),
            target_id=target.id,
        )

    def _evaluate_magic(self, state, profile: RaceProfile) -> Optional[ActionIntent]:
        amount = int(state.mana * self.policy.magic_spend)
        if amount <= 0:
            return None

        if profile.magic_multiplier > MAGIC_AFFINITY_CUTOFF and state.mana > MAGIC_MANA_THRESHOLD:
            reasoning = f"{profile.name} sorcery focus: {state.mana:.0f} mana available for wards"
            priority = self._floored("magic", profile.magic_priority, MAGIC_AFFINITY_FLOOR)
            return Magic(priority=priority, reasoning=reasoning, amount=amount)
        if state.mana <= OPPORTUNISTIC_MANA_THRESHOLD:
            return None
        return Magic(
            priority=self._weighted("magic", OPPORTUNISTIC_MAGIC_PRIORITY),
            reasoning=f"{profile.name} opportunistic magic: {state.mana:.0f} mana banked",
            amount=amount,
        )

    def _evaluate_defense(self, state, profile: RaceProfile, legal_targets) -> Optional[ActionIntent]:
        amount = int(state.gold * self.policy.defend_spend)
        if state.gold < MIN_SPEND or amount <= 0:
            return None

        base = 0.0
        floor = 0.0
        reasons = []
        target_br = DEFENSIVE_BUILD_RATE_TARGET if profile.is_defensive else BUILD_RATE_TARGET
        if state.build_rate < target_br:
            base = profile.military_priority + 10 if profile.is_defensive else DEFEND_PRIORITY
            floor = BUILD_RATE_DEFEND_FLOOR
            reasons.append(
                f"build rate {state.build_rate} below build-rate target {target_br}"
            )

        threats = [t for t in legal_targets if t.offense > 0]
        if threats:
            threat = max(threats, key=lambda t: (t.offense, t.id))
            ratio = power_ratio(threat.offense, state.defense)
            if ratio >= THREAT_RATIO:
                base = max(base, DEFEND_PRIORITY, profile.military_priority)
                reasons.append(
                    f"{threat.id} offense {threat.offense:.0f} vs defense {state.defense:.0f}"
                )

        if not reasons:
            return None
        priority = self._floored("defend", base, floor) if floor else self._weighted("defend", base)
        return Defend(
            priority=priority,
            reasoning=f"{profile.name} defensive priority: " + "; ".join(reasons),
            amount=amount,
        )

    def _evaluate_expansion(self, state, profile: RaceProfile) -> Optional[ActionIntent]:
        if state.gold < MIN_SPEND:
            return None

        offense_ratio = state.offense / state.networth if state.networth > 0 else 0.0
        if state.land < FOUNDATION_LAND and offense_ratio < LOW_OFFENSE_RATIO:
            return Build(
                priority=self._floored("build", FOUNDATION_PRIORITY + profile.economy, FOUNDATION_FLOOR),
                reasoning=(
                    f"{profile.name} economic foundation: land {state.land:.0f} below "
                    f"{FOUNDATION_LAND}, offense ratio {offense_ratio:.4f}"
                ),
            )

        if state.build_rate >= DEVELOPED_BUILD_RATE:
            base = profile.economic_priority * PHASE_FACTORS[state.game_phase]
            return Build(
                priority=self._weighted("build", base),
                reasoning=(
                    f"{profile.name} expansion: land {state.build_rate}% developed, "
                    f"{state.game_phase} game"
                ),
            )
        return None

    def _evaluate_investment(self, state, profile: RaceProfile) -> Optional[ActionIntent]:
        amount = int(state.gold * self.policy.economic_spend)
        if state.gold < MIN_SPEND or amount <= 0 or state.build_rate >= DEVELOPED_BUILD_RATE:
            return None

        reserve = state.land * 1000 * CASH_RESERVE_FACTOR
        base = profile.economic_priority * PHASE_FACTORS[state.game_phase]
        return Economic(
            priority=self._weighted("economic", base),
            reasoning=(
                f"{profile.name} income investment: build rate {state.build_rate}, "
                f"cash {state.gold:.0f} of {reserve:.0f} reserve"
            ),
            amount=amount,
        )


def _rank(action: ActionIntent) -> tuple[float, int]:
    """Sort key: priority, then the fixed action precedence."""
    return action.priority, -ACTION_PRECEDENCE[action.kind]
