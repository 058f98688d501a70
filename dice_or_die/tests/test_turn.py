from __future__ import annotations

from dice_or_die.core.board import bottom_right_corner_id
from dice_or_die.core.choices import accept_choice
from dice_or_die.core.engine import create_initial_state, initialize_game, snapshot
from dice_or_die.core.loader import default_catalog
from dice_or_die.core.models import EffectDetails, FixedDie, ReverseFixedDie
from dice_or_die.core.turn import roll_dice


def _quiet_board_state(seed: int | str = 2024):
    """Stage 1 run with every dynamic effect cleared so a test can plant its own."""
    catalog = default_catalog()
    state = create_initial_state(seed)
    initialize_game(state, catalog)
    for square in state.board.squares:
        square.clear_effect()
    return state, catalog


def _roll_fixed(state, catalog, value: int, reverse: bool = False):
    die = ReverseFixedDie(value=value) if reverse else FixedDie(value=value)
    state.dice_bag.dice.append(die)
    return roll_dice(state, catalog, len(state.dice_bag.dice) - 1)


def test_bottom_right_corner_always_costs_twenty():
    state, catalog = _quiet_board_state()
    corner = bottom_right_corner_id(state.board_rows, state.board_cols)
    state.player_position = corner - 2
    state.player_money = 5

    result = _roll_fixed(state, catalog, 2)

    assert result.accepted
    assert state.player_position == corner
    assert state.player_money == -15
    assert state.game_phase == "rolling"


def test_normal_money_is_credited_per_pass_and_not_again_on_landing():
    state, catalog = _quiet_board_state()
    for square_id in (1, 2, 3):
        square = state.board.squares[square_id]
        square.effect_type = "normal_money"
        square.effect_details = EffectDetails(amount=2)

    _roll_fixed(state, catalog, 3)

    assert state.player_position == 3
    assert state.player_money == 6


def test_reverse_movement_passes_money_squares_without_credit():
    state, catalog = _quiet_board_state()
    for square_id in (1, 2, 3):
        square = state.board.squares[square_id]
        square.effect_type = "normal_money"
        square.effect_details = EffectDetails(amount=2)
    state.player_position = 4

    result = _roll_fixed(state, catalog, 3, reverse=True)

    assert state.player_position == 1
    assert state.player_money == 0
    assert state.last_roll.direction == "backward"
    assert state.last_position_before_move == 4
    assert [entry.data["position"] for entry in result.logs if entry.type == "move"] == [3, 2, 1]


def test_reverse_movement_wraps_without_counting_a_lap():
    state, catalog = _quiet_board_state()
    _roll_fixed(state, catalog, 2, reverse=True)
    assert state.player_position == state.board.total_squares - 2
    assert state.player_lap == 1


def test_huge_money_can_only_be_claimed_once_per_lap():
    state, catalog = _quiet_board_state()
    square = state.board.squares[3]
    square.effect_type = "huge_money"
    square.effect_details = EffectDetails(amount=50)

    _roll_fixed(state, catalog, 3)
    assert state.player_money == 50
    assert square.effect_type == "none"

    state.player_position = 0
    _roll_fixed(state, catalog, 3)
    assert state.player_money == 50


def test_bad_square_deducts_its_penalty():
    state, catalog = _quiet_board_state()
    square = state.board.squares[2]
    square.effect_type = "temp_bad_lap"
    square.is_temp_bad = True
    square.effect_details = EffectDetails(penalty=12)

    _roll_fixed(state, catalog, 2)

    assert state.player_money == -12


def test_lap_rollover_reassigns_effects_and_keeps_moving():
    state, catalog = _quiet_board_state()
    state.player_position = state.board.total_squares - 1

    result = _roll_fixed(state, catalog, 2)

    assert state.player_lap == 2
    assert state.player_position == 1
    types = [entry.type for entry in result.logs]
    assert types.index("lap") < types.index("effects")
    assert any(square.effect_type != "none" for square in state.board.squares)


def test_final_lap_diverts_to_boss_and_discards_remaining_steps():
    state, catalog = _quiet_board_state()
    config = catalog.get(1)
    state.player_lap = config.laps_to_complete - 1
    state.player_position = state.board.total_squares - 1

    result = _roll_fixed(state, catalog, 4)

    assert state.game_phase == "boss_encounter"
    assert state.player_position == 0
    assert state.player_lap == config.laps_to_complete
    assert state.boss is not None
    assert state.boss.hp == config.boss_defeat_condition.hp
    assert state.boss.dice_throw_budget == config.boss_defeat_condition.dice_throws
    assert [entry.type for entry in result.logs].count("move") == 1


def test_dice_vs_money_offer_then_accept_money():
    state, catalog = _quiet_board_state()
    state.board.squares[2].effect_type = "choice_dice_money"

    _roll_fixed(state, catalog, 2)

    offer = state.choice_offer
    assert state.game_phase == "awaiting_choice"
    assert offer.kind == "dice_vs_money"
    assert offer.source_square_id == 2
    assert [option.action for option in offer.options] == ["get_money_bonus", "get_chosen_die"]
    assert offer.options[0].value == 10

    result = accept_choice(state, 0)

    assert result.accepted
    assert state.player_money == 10
    assert state.choice_offer is None
    assert state.game_phase == "rolling"
    assert state.board.squares[2].effect_type == "none"


def test_pick_a_die_offer_adds_the_chosen_die():
    state, catalog = _quiet_board_state()
    state.board.squares[4].effect_type = "choice_pick_die"

    _roll_fixed(state, catalog, 4)

    offer = state.choice_offer
    assert offer.kind == "pick_a_die"
    assert 3 <= len(offer.options) <= 4
    chosen = offer.options[-1]

    accept_choice(state, chosen)

    assert state.dice_bag.dice == [chosen.die]
    assert state.counters.dice_obtained == 1
    assert state.board.squares[4].effect_type == "none"


def test_rolling_while_a_choice_is_pending_is_a_no_op():
    state, catalog = _quiet_board_state()
    state.board.squares[1].effect_type = "choice_dice_money"
    _roll_fixed(state, catalog, 1)
    before = snapshot(state)

    result = roll_dice(state, catalog)

    assert not result.accepted
    assert "awaiting_choice" in result.reason
    assert snapshot(state) == before


def test_invalid_bag_index_is_rejected_without_mutation():
    state, catalog = _quiet_board_state()
    before = snapshot(state)

    result = roll_dice(state, catalog, 3)

    assert not result.accepted
    assert snapshot(state) == before


def test_accept_choice_without_an_offer_is_rejected():
    state, _ = _quiet_board_state()
    result = accept_choice(state, 0)
    assert not result.accepted
    assert state.game_phase == "rolling"


def test_roll_counts_turns_and_consumes_bag_die():
    state, catalog = _quiet_board_state()
    _roll_fixed(state, catalog, 1)
    roll_dice(state, catalog)

    assert state.turn == 2
    assert state.counters.total_rolls == 2
    assert state.dice_bag.is_empty
    assert state.last_roll.kind == "normal"


def test_missing_stage_config_aborts_the_run():
    state, catalog = _quiet_board_state()
    state.player_stage = 42

    result = roll_dice(state, catalog)

    assert not result.accepted
    assert state.game_phase == "game_lost"
    assert state.aborted
    assert "42" in state.abort_reason


def test_bool_is_not_accepted_as_bag_slot_or_option_index():
    state, catalog = _quiet_board_state()
    state.dice_bag.dice = [FixedDie(value=1), FixedDie(value=2)]
    before = snapshot(state)

    assert not roll_dice(state, catalog, True).accepted
    assert snapshot(state) == before

    state.board.squares[3].effect_type = "choice_dice_money"
    _roll_fixed(state, catalog, 3)
    assert state.game_phase == "awaiting_choice"
    pending = snapshot(state)

    assert not accept_choice(state, True).accepted
    assert snapshot(state) == pending
