from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

SquareBaseType = Literal["normal", "start", "corner_bl", "corner_br", "corner_tr"]
EffectType = Literal[
    "none",
    "temp_bad_lap",
    "huge_money",
    "normal_money",
    "choice_dice_money",
    "choice_pick_die",
]
GamePhase = Literal[
    "rolling",
    "dice_rolling_animation",
    "player_moving_animation",
    "landed",
    "awaiting_choice",
    "boss_encounter",
    "game_lost",
    "game_won",
]
DieKind = Literal["normal", "fixed", "d20", "reverse_fixed", "reverse_random"]
RollDirection = Literal["forward", "backward"]
ChoiceKind = Literal["dice_vs_money", "pick_a_die"]
ChoiceAction = Literal["get_money_bonus", "get_chosen_die"]
AnimationSpeed = Literal[0, 1, 2]
LogType = Literal[
    "roll", "move", "lap", "effects", "money", "landing", "choice", "dice", "boss", "stage", "system"
]

MAX_DICE_IN_BAG = 15
FRESH_LAP = 1
FIRST_STAGE = 1
TERMINAL_PHASES: tuple[GamePhase, GamePhase] = ("game_lost", "game_won")
DIE_LABELS: dict[str, str] = {
    "normal": "Random",
    "fixed": "Fixed",
    "d20": "D20",
    "reverse_fixed": "Reverse Fixed",
    "reverse_random": "Reverse Random",
}


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class FrozenModel(StrictModel):
    model_config = ConfigDict(frozen=True)


class BossDefeatCondition(FrozenModel):
    dice_throws: int = Field(alias="diceThrows", ge=0)
    hp: int = Field(ge=1)
    bribe_cost: int = Field(alias="bribeCost", ge=0)


class StageConfig(FrozenModel):
    stage: int = Field(ge=1)
    rows: int = Field(ge=1)
    cols: int = Field(ge=1)
    money_multiplier: float = Field(alias="moneyMultiplier", gt=0)
    laps_to_complete: int = Field(alias="lapsToComplete", ge=1)
    min_bad_squares: int = Field(alias="minBadSquares", ge=0)
    max_bad_squares: int = Field(alias="maxBadSquares", ge=0)
    min_choice_dice_money_squares: int = Field(alias="minChoiceDiceMoneySquares", ge=0)
    max_choice_dice_money_squares: int = Field(alias="maxChoiceDiceMoneySquares", ge=0)
    min_choice_pick_die_squares: int = Field(alias="minChoicePickDieSquares", ge=0)
    max_choice_pick_die_squares: int = Field(alias="maxChoicePickDieSquares", ge=0)
    boss_name: str = Field(alias="bossName", min_length=1)
    boss_image: str = Field(alias="bossImage", min_length=1)
    boss_defeat_condition: BossDefeatCondition = Field(alias="bossDefeatCondition")

    @model_validator(mode="after")
    def validate_quota_ranges(self) -> "StageConfig":
        ranges = (
            ("BadSquares", self.min_bad_squares, self.max_bad_squares),
            ("ChoiceDiceMoneySquares", self.min_choice_dice_money_squares, self.max_choice_dice_money_squares),
            ("ChoicePickDieSquares", self.min_choice_pick_die_squares, self.max_choice_pick_die_squares),
        )
        for name, low, high in ranges:
            if high < low:
                raise ValueError(f"max{name} must be greater than or equal to min{name}.")
        return self


class NormalDie(FrozenModel):
    kind: Literal["normal"] = "normal"


class FixedDie(FrozenModel):
    kind: Literal["fixed"] = "fixed"
    value: int = Field(default=1, ge=1, le=6)


class D20Die(FrozenModel):
    kind: Literal["d20"] = "d20"


class ReverseFixedDie(FrozenModel):
    kind: Literal["reverse_fixed"] = "reverse_fixed"
    value: int = Field(default=1, ge=1, le=6)


class ReverseRandomDie(FrozenModel):
    kind: Literal["reverse_random"] = "reverse_random"


Die = Annotated[
    Union[NormalDie, FixedDie, D20Die, ReverseFixedDie, ReverseRandomDie],
    Field(discriminator="kind"),
]


class DiceBag(StrictModel):
    dice: list[Die] = Field(default_factory=list)
    capacity: int = Field(default=MAX_DICE_IN_BAG, ge=1)

    @model_validator(mode="after")
    def validate_capacity(self) -> "DiceBag":
        if len(self.dice) > self.capacity:
            raise ValueError(f"Dice bag holds {len(self.dice)} dice but capacity is {self.capacity}.")
        return self

    @property
    def is_full(self) -> bool:
        return len(self.dice) >= self.capacity

    @property
    def is_empty(self) -> bool:
        return not self.dice

    @property
    def capacity_label(self) -> str:
        return f"{len(self.dice)}/{self.capacity}"

    def add(self, die: Die) -> bool:
        if self.is_full:
            return False
        self.dice.append(die)
        return True

    def take(self, index: int) -> Die | None:
        if index < 0 or index >= len(self.dice):
            return None
        return self.dice.pop(index)


class EffectDetails(StrictModel):
    penalty: int | None = None
    amount: int | None = None


class Square(StrictModel):
    id: int = Field(ge=0)
    base_type: SquareBaseType = "normal"
    effect_type: EffectType = "none"
    is_temp_bad: bool = False
    effect_details: EffectDetails | None = None

    def clear_effect(self) -> None:
        self.effect_type = "none"
        self.is_temp_bad = False
        self.effect_details = None


class Board(StrictModel):
    rows: int = Field(ge=0)
    cols: int = Field(ge=0)
    squares: list[Square] = Field(default_factory=list)

    @property
    def total_squares(self) -> int:
        return len(self.squares)


class ChoiceOption(StrictModel):
    label: str = Field(min_length=1)
    action: ChoiceAction
    value: int | None = None
    die: Die | None = None


class ChoiceOffer(StrictModel):
    kind: ChoiceKind
    message: str
    options: list[ChoiceOption] = Field(min_length=1)
    source_square_id: int = Field(ge=0)


class BossState(StrictModel):
    name: str
    image: str
    dice_throw_budget: int = Field(ge=0)
    hp: int
    max_hp: int = Field(ge=1)
    bribe_cost: int = Field(ge=0)
    throws_log: list[int] = Field(default_factory=list)

    @property
    def damage_dealt(self) -> int:
        return sum(self.throws_log)


class RunCounters(StrictModel):
    total_rolls: int = Field(default=0, ge=0)
    dice_obtained: int = Field(default=0, ge=0)
    bosses_defeated: int = Field(default=0, ge=0)
    perfect_boss_defeats: int = Field(default=0, ge=0)
    bribes_bosses: int = Field(default=0, ge=0)


class RollRecord(StrictModel):
    value: int = Field(ge=0)
    kind: DieKind
    original_kind: DieKind
    direction: RollDirection


class RunState(StrictModel):
    seed: int | str
    rng_state: int = Field(gt=0)
    rng_calls: int = Field(default=0, ge=0)
    turn: int = Field(default=0, ge=0)
    board_rows: int = 0
    board_cols: int = 0
    board: Board = Field(default_factory=lambda: Board(rows=0, cols=0))
    player_position: int = Field(default=0, ge=0)
    last_position_before_move: int = Field(default=0, ge=0)
    player_money: int = 0
    player_lap: int = FRESH_LAP
    player_stage: int = Field(default=FIRST_STAGE, ge=1)
    dice_bag: DiceBag = Field(default_factory=DiceBag)
    game_phase: GamePhase = "rolling"
    choice_offer: ChoiceOffer | None = None
    boss: BossState | None = None
    counters: RunCounters = Field(default_factory=RunCounters)
    message: str = "Roll the die to start!"
    last_roll: RollRecord | None = None
    boss_last_roll: int | None = None
    animation_speed: AnimationSpeed = 1
    aborted: bool = False
    abort_reason: str | None = None

    @property
    def run_over(self) -> bool:
        return self.game_phase in TERMINAL_PHASES


def die_label(die: Die) -> str:
    label = DIE_LABELS[die.kind]
    value = getattr(die, "value", None)
    if value is not None:
        return f"{label} ({value})"
    return label


@dataclass(slots=True)
class LogEntry:
    turn: int
    stage: int
    lap: int
    type: str
    line: str
    data: dict[str, Any] | None = None

    def format(self) -> str:
        return f"[t={self.turn:03d} s={self.stage} l={self.lap}] [{self.type.upper()}] {self.line}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "turn": self.turn,
            "stage": self.stage,
            "lap": self.lap,
            "type": self.type,
            "line": self.line,
            "data": self.data or {},
        }


def make_log_entry(state: RunState, entry_type: LogType, line: str, data: dict[str, Any] | None = None) -> LogEntry:
    return LogEntry(
        turn=state.turn,
        stage=state.player_stage,
        lap=state.player_lap,
        type=entry_type,
        line=line,
        data=data,
    )


@dataclass(slots=True)
class CommandResult:
    accepted: bool
    reason: str | None = None
    logs: list[LogEntry] = field(default_factory=list)


def rejected(reason: str) -> CommandResult:
    return CommandResult(accepted=False, reason=reason)
