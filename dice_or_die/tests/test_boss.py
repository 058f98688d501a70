from __future__ import annotations

import pytest

from dice_or_die.core.boss import bribe, check_boss_resolution, record_boss_throw, start_boss_encounter
from dice_or_die.core.engine import create_initial_state, initialize_game, snapshot
from dice_or_die.core.loader import StageCatalog, default_catalog
from dice_or_die.core.models import BossDefeatCondition, FixedDie, ReverseFixedDie
from dice_or_die.core.stage import rng_from_state
from dice_or_die.core.turn import roll_dice


def _boss_state(
    hp: int = 15,
    throws: int = 3,
    bribe_cost: int = 40,
    stage: int = 1,
    catalog=None,
    money: int = 0,
):
    catalog = catalog or default_catalog()
    state = create_initial_state(808)
    initialize_game(state, catalog)
    state.player_stage = stage
    state.player_money = money
    config = catalog.get(stage).model_copy(
        update={"boss_defeat_condition": BossDefeatCondition(dice_throws=throws, hp=hp, bribe_cost=bribe_cost)}
    )
    start_boss_encounter(state, config)
    return state, catalog


def _throw(state, catalog, damage: int):
    record_boss_throw(state, damage)
    return check_boss_resolution(state, catalog, rng_from_state(state))


def test_exact_last_throw_wins_even_with_budget_spent():
    state, catalog = _boss_state(hp=15, throws=3)

    _throw(state, catalog, 6)
    _throw(state, catalog, 6)
    assert state.game_phase == "boss_encounter"
    assert state.boss.dice_throw_budget == 1

    _throw(state, catalog, 4)

    assert state.boss is None
    assert state.player_stage == 2
    assert state.player_lap == 1
    assert state.game_phase == "rolling"
    assert state.counters.bosses_defeated == 1
    assert state.counters.perfect_boss_defeats == 0


def test_spent_budget_with_empty_bag_is_a_defeat():
    state, catalog = _boss_state(hp=15, throws=2)

    _throw(state, catalog, 5)
    _throw(state, catalog, 5)

    assert state.game_phase == "game_lost"
    assert not state.aborted
    assert state.counters.bosses_defeated == 0


@pytest.mark.parametrize(("throws", "perfect"), [([10, 5], 1), ([10, 6], 0)])
def test_perfect_defeat_only_on_exact_damage(throws, perfect):
    state, catalog = _boss_state(hp=15, throws=2)
    for damage in throws:
        _throw(state, catalog, damage)

    assert state.counters.bosses_defeated == 1
    assert state.counters.perfect_boss_defeats == perfect


def test_bag_dice_keep_the_fight_going_after_budget_runs_out():
    state, catalog = _boss_state(hp=15, throws=1)
    state.dice_bag.dice = [ReverseFixedDie(value=3), FixedDie(value=6)]

    assert roll_dice(state, catalog).accepted
    assert state.boss.dice_throw_budget == 0
    assert state.game_phase == "boss_encounter"

    no_budget = roll_dice(state, catalog)
    assert not no_budget.accepted

    assert roll_dice(state, catalog, 0).accepted
    assert state.boss.throws_log[-1] == 3
    assert state.boss.dice_throw_budget == 0
    assert state.counters.total_rolls == 2


def test_boss_fight_with_nothing_to_throw_or_pay_fails_immediately():
    state, _ = _boss_state(throws=0, bribe_cost=40, money=39)
    assert state.game_phase == "game_lost"


def test_boss_with_no_throws_can_still_be_bribed_when_affordable():
    state, catalog = _boss_state(throws=0, bribe_cost=40, money=1000)
    assert state.game_phase == "boss_encounter"
    assert not roll_dice(state, catalog).accepted

    result = bribe(state, catalog)

    assert result.accepted
    assert state.player_money == 960
    assert state.counters.bribes_bosses == 1
    assert state.player_stage == 2
    assert state.game_phase == "rolling"


def test_bribe_deducts_cost_and_skips_fight_statistics():
    state, catalog = _boss_state(bribe_cost=40)
    state.player_money = 100

    result = bribe(state, catalog)

    assert result.accepted
    assert state.player_money == 60
    assert state.counters.bribes_bosses == 1
    assert state.counters.bosses_defeated == 0
    assert state.counters.perfect_boss_defeats == 0
    assert state.player_stage == 2
    assert state.board_rows == catalog.get(2).rows


def test_bribe_without_enough_money_changes_nothing():
    state, catalog = _boss_state(bribe_cost=40)
    state.player_money = 39
    before = snapshot(state)

    result = bribe(state, catalog)

    assert not result.accepted
    assert snapshot(state) == before


def test_bribe_outside_boss_encounter_is_rejected():
    catalog = default_catalog()
    state = create_initial_state(1)
    initialize_game(state, catalog)
    state.player_money = 1000
    assert not bribe(state, catalog).accepted


def test_beating_the_last_stage_wins_the_run():
    catalog = default_catalog()
    state, _ = _boss_state(stage=catalog.max_stage, catalog=catalog)
    state.player_money = 10_000

    bribe(state, catalog)

    assert state.game_phase == "game_won"
    assert state.run_over
    assert not roll_dice(state, catalog).accepted


def test_missing_next_stage_aborts_into_terminal_state():
    full = default_catalog()
    gapped = StageCatalog(
        stages=[full.get(1), full.get(3)],
        stage_by_number={1: full.get(1), 3: full.get(3)},
    )
    state, _ = _boss_state(catalog=gapped)
    state.player_money = 500

    bribe(state, gapped)

    assert state.game_phase == "game_lost"
    assert state.aborted
    assert state.abort_reason


def test_bool_bag_index_is_not_a_slot_against_boss():
    state, catalog = _boss_state(throws=0, money=1000)
    state.dice_bag.dice = [FixedDie(value=2), FixedDie(value=6)]
    before = snapshot(state)

    assert not roll_dice(state, catalog, True).accepted
    assert snapshot(state) == before
