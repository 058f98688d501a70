from __future__ import annotations

from .board import BAD_PENALTY_RANGE, DEFAULT_RULES
from .boss import roll_against_boss, start_boss_encounter
from .choices import build_dice_vs_money_offer, build_pick_die_offer
from .dice import DieRoll, is_bag_index, roll_die, take_from_bag
from .loader import StageCatalog
from .models import CommandResult, LogEntry, RunState, StageConfig, die_label, make_log_entry, rejected
from .rng import DeterministicRNG
from .settings import GameplaySettings
from .stage import abort_run, refresh_lap_effects, rng_from_state, sync_rng_to_state


def move_player(
    state: RunState,
    roll: DieRoll,
    config: StageConfig,
    rng: DeterministicRNG,
    rules: GameplaySettings = DEFAULT_RULES,
) -> tuple[bool, list[LogEntry]]:
    """Walks the player one square at a time. Returns (boss_started, logs)."""
    logs: list[LogEntry] = []
    total_squares = state.board.total_squares
    state.game_phase = "player_moving_animation"
    state.last_position_before_move = state.player_position
    if total_squares == 0:
        return False, logs

    direction = 1 if roll.steps > 0 else -1
    earned = 0
    for _ in range(roll.value):
        state.player_position = (state.player_position + direction) % total_squares
        logs.append(
            make_log_entry(
                state,
                "move",
                f"Moved to square {state.player_position}.",
                data={"position": state.player_position, "direction": roll.direction},
            )
        )
        if direction < 0:
            continue

        if state.player_position == 0:
            state.player_lap += 1
            state.message = f"Completed a lap! Now on Lap {state.player_lap}/{config.laps_to_complete}."
            logs.append(make_log_entry(state, "lap", state.message, data={"lap": state.player_lap}))
            if state.player_lap >= config.laps_to_complete:
                logs.extend(start_boss_encounter(state, config))
                return True, logs
            logs.append(refresh_lap_effects(state, config, rng, rules))
            continue

        square = state.board.squares[state.player_position]
        if square.effect_type == "normal_money" and square.effect_details and square.effect_details.amount:
            amount = square.effect_details.amount
            state.player_money += amount
            earned += amount
            logs.append(
                make_log_entry(
                    state,
                    "money",
                    f"Passed a money square: +${amount}.",
                    data={"amount": amount, "square": square.id},
                )
            )

    if earned > 0:
        state.message = f"Landed on square {state.player_position}. Earned ${earned} this turn."
    else:
        state.message = f"Landed on square {state.player_position}."
    return False, logs


def resolve_landing(
    state: RunState,
    rng: DeterministicRNG,
    rules: GameplaySettings = DEFAULT_RULES,
) -> list[LogEntry]:
    state.game_phase = "landed"
    square = state.board.squares[state.player_position]
    logs: list[LogEntry] = []
    notes: list[str] = []

    if square.base_type == "corner_br":
        state.player_money -= rules.bottom_right_penalty
        notes.append(f"Bad corner! Lost ${rules.bottom_right_penalty}.")
        logs.append(make_log_entry(state, "landing", notes[-1], data={"amount": -rules.bottom_right_penalty}))

    details = square.effect_details
    effect = square.effect_type
    if effect == "temp_bad_lap":
        penalty = details.penalty if details and details.penalty else rng.randint(*BAD_PENALTY_RANGE) * state.player_stage
        state.player_money -= penalty
        notes.append(f"Trap! Lost ${penalty}.")
        logs.append(make_log_entry(state, "landing", notes[-1], data={"amount": -penalty}))
    elif effect == "huge_money":
        amount = details.amount if details and details.amount else rules.huge_money_base * state.player_stage
        state.player_money += amount
        square.clear_effect()
        notes.append(f"Huge money! +${amount}.")
        logs.append(make_log_entry(state, "landing", notes[-1], data={"amount": amount}))
    elif effect == "choice_dice_money":
        state.choice_offer = build_dice_vs_money_offer(state, square.id, rng, rules)
        notes.append(state.choice_offer.message)
        logs.append(make_log_entry(state, "choice", notes[-1], data={"kind": state.choice_offer.kind}))
    elif effect == "choice_pick_die":
        state.choice_offer = build_pick_die_offer(square.id, rng)
        notes.append(state.choice_offer.message)
        logs.append(make_log_entry(state, "choice", notes[-1], data={"kind": state.choice_offer.kind}))
    elif effect == "normal_money":
        # credited while walking over it
        pass

    if notes:
        state.message = f"{state.message} {' '.join(notes)}".strip()
    state.game_phase = "awaiting_choice" if state.choice_offer is not None else "rolling"
    return logs


def roll_dice(
    state: RunState,
    catalog: StageCatalog,
    bag_index: int | None = None,
    rules: GameplaySettings = DEFAULT_RULES,
) -> CommandResult:
    if state.game_phase == "boss_encounter":
        return roll_against_boss(state, catalog, bag_index, rules)
    if state.run_over:
        return rejected("The run is over. Reset to play again.")
    if state.game_phase != "rolling":
        return rejected(f"Cannot roll while the game is in '{state.game_phase}'.")
    if state.board.total_squares == 0:
        return rejected("The board is not set up yet. Initialize the game first.")
    if bag_index is not None and not is_bag_index(state.dice_bag, bag_index):
        return rejected(f"There is no die in bag slot {bag_index}.")

    config = catalog.get(state.player_stage)
    if config is None:
        entry = abort_run(state, f"no stage configuration for stage {state.player_stage}")
        return CommandResult(accepted=False, reason=state.abort_reason, logs=[entry])

    rng = rng_from_state(state)
    die = take_from_bag(state.dice_bag, bag_index)
    if die is None:
        return rejected(f"There is no die in bag slot {bag_index}.")
    state.turn += 1
    state.counters.total_rolls += 1
    state.game_phase = "dice_rolling_animation"
    roll = roll_die(die, rng)
    state.last_roll = roll.record()
    logs = [
        make_log_entry(
            state,
            "roll",
            f"Rolled a {die_label(die)} die: {roll.value} {roll.direction}.",
            data={"die": die.model_dump(), "steps": roll.steps},
        )
    ]

    boss_started, move_logs = move_player(state, roll, config, rng, rules)
    logs.extend(move_logs)
    if not boss_started:
        logs.extend(resolve_landing(state, rng, rules))
    sync_rng_to_state(state, rng)
    return CommandResult(accepted=True, logs=logs)
