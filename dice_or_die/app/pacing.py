from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from dice_or_die.core.models import LogEntry
from dice_or_die.core.settings import AnimationSettings


@dataclass(slots=True)
class PacingCue:
    entry: LogEntry
    delay_ms: int


Pacer = Callable[[PacingCue], None]


def animation_delay(base_ms: int, speed: int) -> int:
    """Instant mode skips every delay; otherwise higher speeds divide the base duration."""
    if speed <= 0:
        return 0
    return int(base_ms / speed)


def base_duration_ms(entry: LogEntry, animation: AnimationSettings) -> int:
    if entry.type == "roll":
        if entry.data and "steps" not in entry.data:
            return animation.boss_throw_ms
        return animation.dice_roll_ms
    if entry.type == "move":
        return animation.player_step_ms
    if entry.type == "lap":
        return animation.lap_pause_ms
    if entry.type == "effects":
        return animation.lap_setup_ms
    if entry.type == "choice":
        return animation.choice_settle_ms
    return 0


def build_pacing(logs: list[LogEntry], speed: int, animation: AnimationSettings | None = None) -> list[PacingCue]:
    animation = animation or AnimationSettings()
    return [PacingCue(entry=entry, delay_ms=animation_delay(base_duration_ms(entry, animation), speed)) for entry in logs]
