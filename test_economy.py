"""
Economy and growth tests.
"""

import pytest

from realm.combat import MidpointRandom
from realm.config import EconomyConfig
from realm.economy import EconomySystem, build_rate_from_quarries
from realm.kingdom import AgentState
from realm.races import RaceProfile

NEUTRAL = RaceProfile.neutral("Test")


def make_state(**kwargs):
    defaults = dict(race="Test", land=1000, gold=10000, population=500,
                    structures=800, offense=1000, defense=1000, mana=500)
    defaults.update(kwargs)
    return AgentState(**defaults)


@pytest.fixture
def economy():
    return EconomySystem(rng=MidpointRandom())


def test_build_converts_half_the_treasury(economy):
    state = make_state(gold=10000)
    report = economy.build(state, NEUTRAL)
    assert report == {"action": "build", "gold_spent": 5000, "land": 10, "structures": 8}
    assert state.gold == 5000
    assert state.land == 1010
    assert state.structures == 808


def test_build_scales_with_economy_multiplier(economy):
    rich = RaceProfile(name="Rich", economy_multiplier=1.5)
    state = make_state(gold=10000)
    economy.build(state, rich)
    assert state.land == 1015


def test_build_with_empty_treasury_does_nothing(economy):
    state = make_state(gold=0)
    report = economy.build(state, NEUTRAL)
    assert report["land"] == 0
    assert state.land == 1000


def test_defend_clamps_to_available_gold(economy):
    state = make_state(gold=3000)
    report = economy.defend(state, 10000)
    assert report["gold_spent"] == 3000
    assert report["defense"] == 30
    assert state.gold == 0
    assert state.defense == 1030


def test_invest_buys_structures(economy):
    state = make_state(gold=10000)
    economy.invest(state, 4000)
    assert state.structures == 820
    assert state.gold == 6000


def test_wards_spend_mana(economy):
    mage = RaceProfile(name="Mage", magic_multiplier=1.3)
    state = make_state(mana=1000)
    report = economy.cast_wards(state, 500, mage)
    assert report["defense"] == 130
    assert state.mana == 500
    assert state.defense == 1130


def test_growth_without_variance(economy):
    state = make_state(gold=0)
    report = economy.grow(state, NEUTRAL)
    assert report["income"] == 40000
    assert report["population"] == 100
    assert report["mana"] == 50
    assert report["recruits"] == 5
    assert report["event"] is None
    assert state.gold == 40000
    assert state.population == 600
    assert state.offense == 1005


def test_income_stays_within_variance():
    economy = EconomySystem(EconomyConfig(event_chance=0))
    for _ in range(100):
        state = make_state(gold=0, structures=1000)
        economy.grow(state, NEUTRAL)
        assert 45000 <= state.gold <= 55000


def test_training_event():
    economy = EconomySystem(EconomyConfig(event_chance=1.0), rng=MidpointRandom())
    state = make_state()
    report = economy.grow(state, NEUTRAL)
    assert report["event"] == "training_bonus"
    assert state.defense == pytest.approx(1050)


def test_growth_never_leaves_negative_resources(economy):
    state = make_state(gold=-100, mana=-5, structures=0)
    economy.grow(state, NEUTRAL)
    assert state.gold >= 0
    assert state.mana >= 0


@pytest.mark.parametrize("quarries,rate", [(0, 4), (5, 6), (32, 16), (50, 21), (100, 30)])
def test_build_rate_from_quarries(quarries, rate):
    assert build_rate_from_quarries(quarries) == rate
