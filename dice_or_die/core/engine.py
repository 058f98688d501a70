from __future__ import annotations

import json
from typing import Any, Literal

from .board import DEFAULT_RULES
from .boss import bribe
from .choices import accept_choice
from .dice import is_predictable, resolve_steps
from .loader import StageCatalog, default_catalog
from .models import (
    FIRST_STAGE,
    ChoiceOffer,
    ChoiceOption,
    CommandResult,
    D20Die,
    DiceBag,
    Die,
    FixedDie,
    LogEntry,
    NormalDie,
    RunCounters,
    RunState,
    make_log_entry,
    rejected,
)
from .rng import DeterministicRNG
from .settings import GameplaySettings
from .stage import rng_from_state, setup_stage, sync_rng_to_state
from .turn import roll_dice

AutoplayPolicy = Literal["money", "dice", "random"]
ANIMATION_SPEED_NAMES = {0: "Instant", 1: "Normal", 2: "Faster"}
ANIMATION_SPEED_CYCLE = {1: 2, 2: 0, 0: 1}


def create_initial_state(seed: int | str, rules: GameplaySettings = DEFAULT_RULES) -> RunState:
    rng = DeterministicRNG.from_seed(seed)
    return RunState(
        seed=seed,
        rng_state=rng.state,
        rng_calls=rng.calls,
        dice_bag=DiceBag(capacity=rules.max_dice_in_bag),
    )


def initialize_game(
    state: RunState,
    catalog: StageCatalog | None = None,
    rules: GameplaySettings = DEFAULT_RULES,
) -> CommandResult:
    """Puts the run back on stage 1 with no money, no dice and a freshly generated board."""
    catalog = catalog or default_catalog()
    state.turn = 0
    state.player_money = 0
    state.player_stage = FIRST_STAGE
    state.dice_bag = DiceBag(capacity=rules.max_dice_in_bag)
    state.counters = RunCounters()
    state.aborted = False
    state.abort_reason = None

    rng = rng_from_state(state)
    logs = setup_stage(state, catalog, rng, rules)
    sync_rng_to_state(state, rng)
    if state.aborted:
        return CommandResult(accepted=False, reason=state.abort_reason, logs=logs)
    return CommandResult(accepted=True, logs=logs)


def reset_game(
    state: RunState,
    catalog: StageCatalog | None = None,
    seed: int | str | None = None,
    rules: GameplaySettings = DEFAULT_RULES,
) -> tuple[RunState, CommandResult]:
    """Builds a replacement RunState.

    Without a new seed the replacement keeps drawing from the old RNG stream, so
    consecutive runs in one session get different boards yet stay reproducible.
    """
    if seed is not None:
        fresh = create_initial_state(seed, rules)
    else:
        fresh = create_initial_state(state.seed, rules)
        fresh.rng_state = state.rng_state
        fresh.rng_calls = state.rng_calls
    fresh.animation_speed = state.animation_speed
    result = initialize_game(fresh, catalog, rules)
    return fresh, result


def set_animation_speed(state: RunState, speed: int) -> CommandResult:
    if not isinstance(speed, int) or isinstance(speed, bool) or speed not in ANIMATION_SPEED_NAMES:
        return rejected(f"Animation speed must be one of 0, 1 or 2 (got {speed!r}).")
    state.animation_speed = speed  # type: ignore[assignment]
    state.message = f"Animation speed: {ANIMATION_SPEED_NAMES[speed]}"
    return CommandResult(accepted=True, logs=[make_log_entry(state, "system", state.message)])


def cycle_animation_speed(state: RunState) -> CommandResult:
    return set_animation_speed(state, ANIMATION_SPEED_CYCLE[state.animation_speed])


def preview_target_square(state: RunState, die: Die) -> int | None:
    """Square a predictable die would stop on. Random kinds have no preview."""
    total_squares = state.board.total_squares
    if total_squares == 0 or not is_predictable(die):
        return None
    # predictable dice never touch the rng
    steps = resolve_steps(die, DeterministicRNG.from_seed(0))
    return (state.player_position + steps) % total_squares


def snapshot(state: RunState) -> dict[str, Any]:
    return json.loads(state.model_dump_json())


def _die_score(die: Die) -> float:
    if isinstance(die, D20Die):
        return 10.5
    if isinstance(die, FixedDie):
        return float(die.value)
    if isinstance(die, NormalDie):
        return 3.5
    return 1.0


def _choose_option(
    policy: AutoplayPolicy,
    offer: ChoiceOffer,
    state: RunState,
    rng: DeterministicRNG,
) -> ChoiceOption:
    if policy == "random":
        return offer.options[rng.next_int(0, len(offer.options))]

    money = [option for option in offer.options if option.action == "get_money_bonus"]
    dice = [option for option in offer.options if option.die is not None]
    if policy == "money" and money:
        return money[0]
    if dice and not state.dice_bag.is_full:
        return max(dice, key=lambda option: _die_score(option.die))
    return money[0] if money else offer.options[0]


def _best_bag_index(state: RunState) -> int | None:
    if state.dice_bag.is_empty:
        return None
    ordered = sorted(enumerate(state.dice_bag.dice), key=lambda pair: (-_die_score(pair[1]), pair[0]))
    return ordered[0][0]


def _boss_command(
    state: RunState,
    catalog: StageCatalog,
    allow_bribe: bool,
    rules: GameplaySettings,
) -> CommandResult:
    boss = state.boss
    if allow_bribe and boss is not None and state.player_money >= boss.bribe_cost:
        return bribe(state, catalog, rules)
    if boss is not None and boss.dice_throw_budget > 0:
        return roll_dice(state, catalog, None, rules)
    if state.dice_bag.is_empty:
        # nothing left to throw; paying is the only way through
        return bribe(state, catalog, rules)
    return roll_dice(state, catalog, _best_bag_index(state), rules)


def autoplay_step(
    state: RunState,
    catalog: StageCatalog,
    policy: AutoplayPolicy = "money",
    allow_bribe: bool = True,
    rules: GameplaySettings = DEFAULT_RULES,
) -> CommandResult:
    if state.game_phase == "awaiting_choice" and state.choice_offer is not None:
        rng = rng_from_state(state)
        option = _choose_option(policy, state.choice_offer, state, rng)
        sync_rng_to_state(state, rng)
        return accept_choice(state, option)
    if state.game_phase == "boss_encounter":
        return _boss_command(state, catalog, allow_bribe, rules)
    if policy == "random" and not state.dice_bag.is_empty:
        rng = rng_from_state(state)
        use_bag = rng.chance(0.25)
        bag_index = rng.next_int(0, len(state.dice_bag.dice)) if use_bag else None
        sync_rng_to_state(state, rng)
        return roll_dice(state, catalog, bag_index, rules)
    return roll_dice(state, catalog, None, rules)


def run_simulation(
    initial_state: RunState,
    catalog: StageCatalog,
    max_turns: int,
    policy: AutoplayPolicy = "money",
    allow_bribe: bool = True,
    rules: GameplaySettings = DEFAULT_RULES,
) -> tuple[RunState, list[LogEntry]]:
    state = initial_state
    timeline: list[LogEntry] = []
    if state.board.total_squares == 0 and not state.run_over:
        timeline.extend(initialize_game(state, catalog, rules).logs)
    for _ in range(max_turns):
        if state.run_over:
            break
        result = autoplay_step(state, catalog, policy, allow_bribe, rules)
        timeline.extend(result.logs)
        if not result.accepted:
            timeline.append(make_log_entry(state, "system", f"Autoplay stopped: {result.reason}"))
            break
    return state, timeline
