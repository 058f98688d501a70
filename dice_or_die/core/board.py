from __future__ import annotations

import math
from dataclasses import dataclass, field

from .models import Board, EffectDetails, Square, SquareBaseType, StageConfig
from .rng import DeterministicRNG
from .settings import GameplaySettings

DEFAULT_RULES = GameplaySettings()
BAD_PENALTY_RANGE = (5, 15)
NORMAL_MONEY_RANGE = (1, 3)


@dataclass(slots=True)
class LapEffectSummary:
    bad: list[int] = field(default_factory=list)
    choice_dice_money: list[int] = field(default_factory=list)
    choice_pick_die: list[int] = field(default_factory=list)
    huge_money: list[int] = field(default_factory=list)
    normal_money: list[int] = field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return {
            "bad": len(self.bad),
            "choice_dice_money": len(self.choice_dice_money),
            "choice_pick_die": len(self.choice_pick_die),
            "huge_money": len(self.huge_money),
            "normal_money": len(self.normal_money),
        }


def total_board_squares(rows: int, cols: int) -> int:
    if rows <= 0 or cols <= 0:
        return 0
    if rows <= 1 or cols <= 1:
        return rows * cols
    return 2 * rows + 2 * cols - 4


def corner_square_ids(rows: int, cols: int) -> list[int]:
    """Perimeter indices of start, bottom-left, bottom-right and top-right, in walking order."""
    if rows <= 1 or cols <= 1:
        return []
    return [0, rows - 1, rows - 1 + (cols - 1), rows - 1 + (cols - 1) + (rows - 1)]


def bottom_right_corner_id(rows: int, cols: int) -> int | None:
    corners = corner_square_ids(rows, cols)
    if not corners:
        return None
    return corners[2]


def generate_board(config: StageConfig) -> Board:
    corners = corner_square_ids(config.rows, config.cols)
    corner_types: dict[int, SquareBaseType] = {}
    if corners:
        corner_types = {
            corners[0]: "start",
            corners[1]: "corner_bl",
            corners[2]: "corner_br",
            corners[3]: "corner_tr",
        }
    squares = [
        Square(id=index, base_type=corner_types.get(index, "normal"))
        for index in range(total_board_squares(config.rows, config.cols))
    ]
    return Board(rows=config.rows, cols=config.cols, squares=squares)


def candidate_square_ids(board: Board) -> list[int]:
    corners = set(corner_square_ids(board.rows, board.cols))
    return [square.id for square in board.squares if square.base_type == "normal" and square.id not in corners]


def _claim(candidates: list[int], quota: int) -> list[int]:
    claimed: list[int] = []
    for _ in range(quota):
        if not candidates:
            break
        claimed.append(candidates.pop())
    return claimed


def assign_lap_effects(
    board: Board,
    config: StageConfig,
    stage: int,
    rng: DeterministicRNG,
    rules: GameplaySettings = DEFAULT_RULES,
) -> LapEffectSummary:
    for square in board.squares:
        square.clear_effect()

    by_id = {square.id: square for square in board.squares}
    candidates = rng.shuffle(candidate_square_ids(board))
    summary = LapEffectSummary()

    bad_quota = rng.randint(config.min_bad_squares, config.max_bad_squares)
    for square_id in _claim(candidates, bad_quota):
        square = by_id[square_id]
        square.effect_type = "temp_bad_lap"
        square.is_temp_bad = True
        square.effect_details = EffectDetails(penalty=rng.randint(*BAD_PENALTY_RANGE) * stage)
        summary.bad.append(square_id)

    dice_money_quota = rng.randint(config.min_choice_dice_money_squares, config.max_choice_dice_money_squares)
    for square_id in _claim(candidates, dice_money_quota):
        by_id[square_id].effect_type = "choice_dice_money"
        summary.choice_dice_money.append(square_id)

    pick_die_quota = rng.randint(config.min_choice_pick_die_squares, config.max_choice_pick_die_squares)
    for square_id in _claim(candidates, pick_die_quota):
        by_id[square_id].effect_type = "choice_pick_die"
        summary.choice_pick_die.append(square_id)

    for square_id in candidates:
        square = by_id[square_id]
        if rng.chance(rules.huge_money_chance):
            square.effect_type = "huge_money"
            square.effect_details = EffectDetails(amount=rules.huge_money_base * stage)
            summary.huge_money.append(square_id)
        else:
            amount = math.floor(rng.randint(*NORMAL_MONEY_RANGE) * config.money_multiplier)
            square.effect_type = "normal_money"
            square.effect_details = EffectDetails(amount=amount)
            summary.normal_money.append(square_id)
    return summary
