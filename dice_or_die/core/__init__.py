"""Deterministic Dice or Die game engine."""

from .board import assign_lap_effects, corner_square_ids, generate_board, total_board_squares
from .boss import bribe, roll_against_boss
from .choices import accept_choice
from .dice import roll_die
from .engine import (
    autoplay_step,
    create_initial_state,
    cycle_animation_speed,
    initialize_game,
    preview_target_square,
    reset_game,
    run_simulation,
    set_animation_speed,
    snapshot,
)
from .loader import ContentValidationError, StageCatalog, default_catalog, load_stage_catalog
from .models import CommandResult, DiceBag, LogEntry, RunState, StageConfig
from .settings import EngineSettings
from .summary import RunSummary, summarize_run
from .turn import roll_dice

__all__ = [
    "CommandResult",
    "ContentValidationError",
    "DiceBag",
    "EngineSettings",
    "LogEntry",
    "RunState",
    "RunSummary",
    "StageCatalog",
    "StageConfig",
    "accept_choice",
    "assign_lap_effects",
    "autoplay_step",
    "bribe",
    "corner_square_ids",
    "create_initial_state",
    "cycle_animation_speed",
    "default_catalog",
    "generate_board",
    "initialize_game",
    "load_stage_catalog",
    "preview_target_square",
    "reset_game",
    "roll_against_boss",
    "roll_dice",
    "roll_die",
    "run_simulation",
    "set_animation_speed",
    "snapshot",
    "summarize_run",
    "total_board_squares",
]
