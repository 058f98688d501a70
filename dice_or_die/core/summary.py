from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Literal

from .models import RunState

RunOutcome = Literal["won", "lost", "aborted", "in_progress"]
BossStyle = Literal["bribed_everything", "fought_everything", "perfect_fighter", "mixed", "none"]


@dataclass(slots=True)
class RunSummary:
    seed: int | str
    outcome: RunOutcome
    stage_reached: int
    money: int
    total_rolls: int
    dice_obtained: int
    dice_in_bag: int
    bosses_defeated: int
    perfect_boss_defeats: int
    bribes_bosses: int
    boss_style: BossStyle
    ending_tag: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _outcome(state: RunState) -> RunOutcome:
    if state.aborted:
        return "aborted"
    if state.game_phase == "game_won":
        return "won"
    if state.game_phase == "game_lost":
        return "lost"
    return "in_progress"


def classify_boss_style(bosses_defeated: int, perfect_defeats: int, bribes: int) -> BossStyle:
    if bosses_defeated + bribes == 0:
        return "none"
    if bosses_defeated == 0:
        return "bribed_everything"
    if bribes == 0:
        if perfect_defeats == bosses_defeated:
            return "perfect_fighter"
        return "fought_everything"
    return "mixed"


def summarize_run(state: RunState) -> RunSummary:
    """Read-only view over the run counters; never mutates the state."""
    counters = state.counters
    outcome = _outcome(state)
    style = classify_boss_style(counters.bosses_defeated, counters.perfect_boss_defeats, counters.bribes_bosses)
    if outcome == "won":
        ending_tag = style
    elif outcome == "lost":
        ending_tag = "fallen"
    else:
        ending_tag = outcome
    return RunSummary(
        seed=state.seed,
        outcome=outcome,
        stage_reached=state.player_stage,
        money=state.player_money,
        total_rolls=counters.total_rolls,
        dice_obtained=counters.dice_obtained,
        dice_in_bag=len(state.dice_bag.dice),
        bosses_defeated=counters.bosses_defeated,
        perfect_boss_defeats=counters.perfect_boss_defeats,
        bribes_bosses=counters.bribes_bosses,
        boss_style=style,
        ending_tag=ending_tag,
    )
