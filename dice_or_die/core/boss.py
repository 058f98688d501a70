from __future__ import annotations

from .board import DEFAULT_RULES
from .dice import boss_damage, is_bag_index, take_from_bag
from .loader import StageCatalog
from .models import BossState, CommandResult, LogEntry, RunState, StageConfig, die_label, make_log_entry, rejected
from .rng import DeterministicRNG
from .settings import GameplaySettings
from .stage import abort_run, rng_from_state, setup_stage, sync_rng_to_state


def start_boss_encounter(state: RunState, config: StageConfig) -> list[LogEntry]:
    condition = config.boss_defeat_condition
    state.boss = BossState(
        name=config.boss_name,
        image=config.boss_image,
        dice_throw_budget=condition.dice_throws,
        hp=condition.hp,
        max_hp=condition.hp,
        bribe_cost=condition.bribe_cost,
    )
    state.choice_offer = None
    state.boss_last_roll = None
    state.game_phase = "boss_encounter"
    state.message = f"{config.boss_name} blocks the way! Deal {condition.hp} damage in {condition.dice_throws} throws."
    logs = [
        make_log_entry(
            state,
            "boss",
            state.message,
            data={"hp": condition.hp, "throws": condition.dice_throws, "bribe_cost": condition.bribe_cost},
        )
    ]
    if _out_of_throws(state, state.boss) and state.player_money < state.boss.bribe_cost:
        logs.extend(fail_boss_fight(state))
    return logs


def _out_of_throws(state: RunState, boss: BossState) -> bool:
    return boss.dice_throw_budget == 0 and state.dice_bag.is_empty


def record_boss_throw(state: RunState, damage: int, from_budget: bool = True) -> LogEntry:
    boss = state.boss
    if boss is None:
        raise RuntimeError("record_boss_throw requires an active boss encounter.")
    boss.throws_log.append(damage)
    boss.hp -= damage
    if from_budget and boss.dice_throw_budget > 0:
        boss.dice_throw_budget -= 1
    state.boss_last_roll = damage
    state.message = (
        f"You threw a {damage}. Total damage {boss.damage_dealt}/{boss.max_hp}, "
        f"{boss.dice_throw_budget} throw(s) left."
    )
    return make_log_entry(
        state,
        "boss",
        state.message,
        data={"damage": damage, "total": boss.damage_dealt, "budget": boss.dice_throw_budget},
    )


def check_boss_resolution(
    state: RunState,
    catalog: StageCatalog,
    rng: DeterministicRNG,
    rules: GameplaySettings = DEFAULT_RULES,
) -> list[LogEntry]:
    """Victory is checked before exhaustion so an exact last hit always wins."""
    boss = state.boss
    if boss is None:
        return []
    if boss.damage_dealt >= boss.max_hp:
        return defeat_boss(state, catalog, rng, rules)
    if _out_of_throws(state, boss):
        return fail_boss_fight(state)
    return []


def defeat_boss(
    state: RunState,
    catalog: StageCatalog,
    rng: DeterministicRNG,
    rules: GameplaySettings = DEFAULT_RULES,
    bribed: bool = False,
) -> list[LogEntry]:
    boss = state.boss
    logs: list[LogEntry] = []
    if boss is not None and not bribed:
        state.counters.bosses_defeated += 1
        perfect = boss.damage_dealt == boss.max_hp
        if perfect:
            state.counters.perfect_boss_defeats += 1
            state.message = f"You defeated {boss.name} with exact damage! Perfect!"
        else:
            state.message = f"You defeated {boss.name}!"
        logs.append(make_log_entry(state, "boss", state.message, data={"perfect": perfect}))
    return logs + advance_stage(state, catalog, rng, rules)


def advance_stage(
    state: RunState,
    catalog: StageCatalog,
    rng: DeterministicRNG,
    rules: GameplaySettings = DEFAULT_RULES,
) -> list[LogEntry]:
    state.boss = None
    state.player_stage += 1
    if state.player_stage > catalog.max_stage:
        state.game_phase = "game_won"
        state.message = "CONGRATULATIONS! You've beaten all stages!"
        return [make_log_entry(state, "stage", state.message, data={"won": True})]
    if catalog.get(state.player_stage) is None:
        return [abort_run(state, f"no stage configuration for stage {state.player_stage}")]
    return setup_stage(state, catalog, rng, rules)


def fail_boss_fight(state: RunState) -> list[LogEntry]:
    name = state.boss.name if state.boss is not None else "the boss"
    state.game_phase = "game_lost"
    state.message = f"You failed to defeat {name}..."
    return [make_log_entry(state, "boss", state.message, data={"defeated": False})]


def roll_against_boss(
    state: RunState,
    catalog: StageCatalog,
    bag_index: int | None = None,
    rules: GameplaySettings = DEFAULT_RULES,
) -> CommandResult:
    boss = state.boss
    if state.game_phase != "boss_encounter" or boss is None:
        return rejected("There is no boss to fight right now.")
    if bag_index is None and boss.dice_throw_budget <= 0:
        return rejected("No throws left. Use a die from your bag or bribe the boss.")
    if bag_index is not None and not is_bag_index(state.dice_bag, bag_index):
        return rejected(f"There is no die in bag slot {bag_index}.")

    rng = rng_from_state(state)
    die = take_from_bag(state.dice_bag, bag_index)
    if die is None:
        return rejected(f"There is no die in bag slot {bag_index}.")
    state.turn += 1
    state.counters.total_rolls += 1
    damage = boss_damage(die, rng)
    logs = [
        make_log_entry(state, "roll", f"Threw a {die_label(die)} die at {boss.name}.", data={"die": die.model_dump()}),
        record_boss_throw(state, damage, from_budget=bag_index is None),
    ]
    logs.extend(check_boss_resolution(state, catalog, rng, rules))
    sync_rng_to_state(state, rng)
    return CommandResult(accepted=True, logs=logs)


def bribe(
    state: RunState,
    catalog: StageCatalog,
    rules: GameplaySettings = DEFAULT_RULES,
) -> CommandResult:
    boss = state.boss
    if state.game_phase != "boss_encounter" or boss is None:
        return rejected("There is no boss to bribe right now.")
    if state.player_money < boss.bribe_cost:
        return rejected(f"Not enough money to bribe {boss.name} (${boss.bribe_cost} needed).")

    rng = rng_from_state(state)
    state.player_money -= boss.bribe_cost
    state.counters.bribes_bosses += 1
    state.message = f"You bribed {boss.name} for ${boss.bribe_cost}."
    logs = [make_log_entry(state, "boss", state.message, data={"bribe_cost": boss.bribe_cost})]
    logs.extend(defeat_boss(state, catalog, rng, rules, bribed=True))
    sync_rng_to_state(state, rng)
    return CommandResult(accepted=True, logs=logs)
