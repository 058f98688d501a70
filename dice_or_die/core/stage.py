from __future__ import annotations

from .board import DEFAULT_RULES, assign_lap_effects, generate_board
from .loader import StageCatalog
from .models import FRESH_LAP, LogEntry, RunState, StageConfig, make_log_entry
from .rng import DeterministicRNG
from .settings import GameplaySettings


def rng_from_state(state: RunState) -> DeterministicRNG:
    return DeterministicRNG(seed=state.seed, state=state.rng_state, calls=state.rng_calls)


def sync_rng_to_state(state: RunState, rng: DeterministicRNG) -> None:
    state.rng_state = rng.state
    state.rng_calls = rng.calls


def abort_run(state: RunState, reason: str) -> LogEntry:
    state.aborted = True
    state.abort_reason = reason
    state.game_phase = "game_lost"
    state.choice_offer = None
    state.boss = None
    state.message = f"Game over: {reason}"
    return make_log_entry(state, "system", state.message, data={"aborted": True})


def refresh_lap_effects(
    state: RunState,
    config: StageConfig,
    rng: DeterministicRNG,
    rules: GameplaySettings = DEFAULT_RULES,
) -> LogEntry:
    summary = assign_lap_effects(state.board, config, state.player_stage, rng, rules)
    state.message = f"Lap {state.player_lap} board effects are set!"
    return make_log_entry(state, "effects", state.message, data=summary.counts())


def setup_stage(
    state: RunState,
    catalog: StageCatalog,
    rng: DeterministicRNG,
    rules: GameplaySettings = DEFAULT_RULES,
) -> list[LogEntry]:
    config = catalog.get(state.player_stage)
    if config is None:
        return [abort_run(state, f"no stage configuration for stage {state.player_stage}")]

    state.board_rows = config.rows
    state.board_cols = config.cols
    state.player_lap = FRESH_LAP
    state.player_position = 0
    state.last_position_before_move = 0
    state.last_roll = None
    state.choice_offer = None
    state.boss = None
    state.boss_last_roll = None
    state.board = generate_board(config)

    logs = [
        make_log_entry(
            state,
            "stage",
            f"Stage {state.player_stage} begins on a {config.rows}x{config.cols} board.",
            data={"squares": state.board.total_squares, "boss": config.boss_name},
        )
    ]
    logs.append(refresh_lap_effects(state, config, rng, rules))
    state.message = f"Stage {state.player_stage} - Lap {state.player_lap}/{config.laps_to_complete}. Roll the die!"
    state.game_phase = "rolling"
    return logs
