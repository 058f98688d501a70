from __future__ import annotations

from .board import DEFAULT_RULES
from .dice import draw_pick_offer, draw_reward_die
from .models import (
    ChoiceOffer,
    ChoiceOption,
    CommandResult,
    Die,
    LogEntry,
    RunState,
    die_label,
    make_log_entry,
    rejected,
)
from .rng import DeterministicRNG
from .settings import GameplaySettings


def build_dice_vs_money_offer(
    state: RunState,
    square_id: int,
    rng: DeterministicRNG,
    rules: GameplaySettings = DEFAULT_RULES,
) -> ChoiceOffer:
    money = rules.choice_money_base * state.player_stage
    die = draw_reward_die(rng)
    return ChoiceOffer(
        kind="dice_vs_money",
        message="Choose your reward:",
        options=[
            ChoiceOption(label=f"Get ${money}", action="get_money_bonus", value=money),
            ChoiceOption(label=f"Get a {die_label(die)} Die", action="get_chosen_die", die=die),
        ],
        source_square_id=square_id,
    )


def build_pick_die_offer(square_id: int, rng: DeterministicRNG) -> ChoiceOffer:
    options = [
        ChoiceOption(label=f"Die: {die_label(die)}", action="get_chosen_die", die=die)
        for die in draw_pick_offer(rng)
    ]
    return ChoiceOffer(
        kind="pick_a_die",
        message=f"Choose a die ({len(options)} options):",
        options=options,
        source_square_id=square_id,
    )


def add_die_to_bag(state: RunState, die: Die) -> LogEntry:
    """Capacity overflow drops the die; the player is told, nothing is raised."""
    if state.dice_bag.add(die):
        state.counters.dice_obtained += 1
        state.message = f"You got a die: {die_label(die)}"
        return make_log_entry(state, "dice", state.message, data={"die": die.model_dump(), "added": True})
    state.message = f"Dice bag full ({state.dice_bag.capacity})! {die_label(die)} was not added."
    return make_log_entry(state, "dice", state.message, data={"die": die.model_dump(), "added": False})


def _resolve_option(offer: ChoiceOffer, option: ChoiceOption | int) -> ChoiceOption | None:
    if isinstance(option, bool):
        return None
    if isinstance(option, int):
        if 0 <= option < len(offer.options):
            return offer.options[option]
        return None
    return next((candidate for candidate in offer.options if candidate == option), None)


def accept_choice(state: RunState, option: ChoiceOption | int) -> CommandResult:
    if state.game_phase != "awaiting_choice" or state.choice_offer is None:
        return rejected("There is no pending choice to accept.")
    offer = state.choice_offer
    chosen = _resolve_option(offer, option)
    if chosen is None:
        return rejected("That option is not part of the current offer.")

    logs: list[LogEntry] = [
        make_log_entry(state, "choice", f"Chose: {chosen.label}", data={"kind": offer.kind, "action": chosen.action})
    ]
    if chosen.action == "get_money_bonus":
        amount = chosen.value or 0
        state.player_money += amount
        state.message = f"Chose money! +${amount}."
        logs.append(make_log_entry(state, "money", state.message, data={"amount": amount}))
    elif chosen.die is not None:
        logs.append(add_die_to_bag(state, chosen.die))

    if 0 <= offer.source_square_id < state.board.total_squares:
        state.board.squares[offer.source_square_id].clear_effect()
    state.choice_offer = None
    state.game_phase = "rolling"
    return CommandResult(accepted=True, logs=logs)
