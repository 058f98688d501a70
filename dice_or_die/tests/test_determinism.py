from __future__ import annotations

from dice_or_die.core.engine import create_initial_state, run_simulation
from dice_or_die.core.loader import default_catalog


def _snapshot_state(state):
    return {
        "seed": state.seed,
        "turn": state.turn,
        "stage": state.player_stage,
        "lap": state.player_lap,
        "position": state.player_position,
        "money": state.player_money,
        "phase": state.game_phase,
        "bag": [die.model_dump() for die in state.dice_bag.dice],
        "counters": state.counters.model_dump(),
        "board": [(square.effect_type, square.effect_details) for square in state.board.squares],
        "rng": (state.rng_state, state.rng_calls),
    }


def test_same_seed_and_policy_produce_identical_results():
    catalog = default_catalog()

    final_a, log_a = run_simulation(create_initial_state(777), catalog, max_turns=120, policy="random")
    final_b, log_b = run_simulation(create_initial_state(777), catalog, max_turns=120, policy="random")

    assert _snapshot_state(final_a) == _snapshot_state(final_b)
    assert [entry.format() for entry in log_a] == [entry.format() for entry in log_b]


def test_different_seeds_produce_different_boards():
    catalog = default_catalog()
    final_a, _ = run_simulation(create_initial_state(1), catalog, max_turns=0)
    final_b, _ = run_simulation(create_initial_state(2), catalog, max_turns=0)

    assert _snapshot_state(final_a)["board"] != _snapshot_state(final_b)["board"]
