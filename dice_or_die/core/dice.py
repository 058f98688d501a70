from __future__ import annotations

from dataclasses import dataclass

from .models import (
    D20Die,
    Die,
    DiceBag,
    FixedDie,
    NormalDie,
    ReverseFixedDie,
    ReverseRandomDie,
    RollDirection,
    RollRecord,
)
from .rng import DeterministicRNG, WeightedEntry

NORMAL_FACES = 6
D20_FACES = 20
REWARD_DIE_WEIGHTS: tuple[WeightedEntry[str], ...] = (
    WeightedEntry("fixed", 0.60),
    WeightedEntry("reverse_random", 0.25),
    WeightedEntry("d20", 0.15),
)
PICK_OFFER_RANGE = (3, 4)


@dataclass(slots=True)
class DieRoll:
    die: Die
    steps: int

    @property
    def value(self) -> int:
        return abs(self.steps)

    @property
    def direction(self) -> RollDirection:
        return "forward" if self.steps >= 0 else "backward"

    def record(self) -> RollRecord:
        return RollRecord(
            value=self.value,
            kind=self.die.kind,
            original_kind=self.die.kind,
            direction=self.direction,
        )


def resolve_steps(die: Die, rng: DeterministicRNG) -> int:
    """Signed step count for a die; reverse kinds move backwards."""
    if isinstance(die, NormalDie):
        return rng.randint(1, NORMAL_FACES)
    if isinstance(die, FixedDie):
        return die.value or 1
    if isinstance(die, D20Die):
        return rng.randint(1, D20_FACES)
    if isinstance(die, ReverseFixedDie):
        return -(die.value or 1)
    if isinstance(die, ReverseRandomDie):
        return -rng.randint(1, NORMAL_FACES)
    raise TypeError(f"Unsupported die type: {type(die).__name__}")


def roll_die(die: Die, rng: DeterministicRNG) -> DieRoll:
    return DieRoll(die=die, steps=resolve_steps(die, rng))


def boss_damage(die: Die, rng: DeterministicRNG) -> int:
    return abs(resolve_steps(die, rng))


def die_signature(die: Die) -> str:
    if isinstance(die, (FixedDie, ReverseFixedDie)):
        return f"{die.kind}_{die.value}"
    return die.kind


def is_predictable(die: Die) -> bool:
    return isinstance(die, (FixedDie, ReverseFixedDie))


def draw_reward_die(rng: DeterministicRNG) -> Die:
    kind = rng.pick_weighted(REWARD_DIE_WEIGHTS)
    if kind == "fixed":
        return FixedDie(value=rng.randint(2, 6))
    if kind == "reverse_random":
        return ReverseRandomDie()
    return D20Die()


def pick_die_pool(rng: DeterministicRNG) -> list[Die]:
    return [
        FixedDie(value=1),
        FixedDie(value=2),
        FixedDie(value=3),
        FixedDie(value=4),
        FixedDie(value=5),
        FixedDie(value=6),
        D20Die(),
        ReverseRandomDie(),
        ReverseFixedDie(value=rng.randint(1, 6)),
        NormalDie(),
    ]


def draw_pick_offer(rng: DeterministicRNG) -> list[Die]:
    pool = rng.shuffle(pick_die_pool(rng))
    wanted = rng.randint(*PICK_OFFER_RANGE)
    offered: list[Die] = []
    seen: set[str] = set()
    for die in pool:
        if len(offered) >= wanted:
            break
        signature = die_signature(die)
        if signature in seen:
            continue
        seen.add(signature)
        offered.append(die)
    return offered


def take_from_bag(bag: DiceBag, index: int | None) -> Die | None:
    """Removes the die at ``index``; ``None`` means the ephemeral normal die."""
    if index is None:
        return NormalDie()
    return bag.take(index)


def is_bag_index(bag: DiceBag, index: object) -> bool:
    if not isinstance(index, int) or isinstance(index, bool):
        return False
    return 0 <= index < len(bag.dice)
