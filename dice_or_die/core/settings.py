from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .models import MAX_DICE_IN_BAG


class GameplaySettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    seed: int | str = 1337
    max_dice_in_bag: int = Field(default=MAX_DICE_IN_BAG, ge=1, le=99)
    bottom_right_penalty: int = Field(default=20, ge=0)
    huge_money_chance: float = Field(default=0.15, ge=0.0, le=1.0)
    huge_money_base: int = Field(default=10, ge=0)
    choice_money_base: int = Field(default=10, ge=0)


class AnimationSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    speed: Literal[0, 1, 2] = 1
    dice_roll_ms: int = Field(default=1000, ge=0)
    player_step_ms: int = Field(default=300, ge=0)
    lap_pause_ms: int = Field(default=1000, ge=0)
    lap_setup_ms: int = Field(default=500, ge=0)
    choice_settle_ms: int = Field(default=500, ge=0)
    boss_throw_ms: int = Field(default=1000, ge=0)


class EngineSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    gameplay: GameplaySettings = Field(default_factory=GameplaySettings)
    animation: AnimationSettings = Field(default_factory=AnimationSettings)

    def as_dict(self) -> dict[str, Any]:
        return json.loads(self.model_dump_json())


def merge_settings(payload: dict[str, Any] | None) -> dict[str, Any]:
    if not isinstance(payload, dict):
        payload = {}
    return EngineSettings.model_validate(payload).as_dict()


def default_settings() -> dict[str, Any]:
    return EngineSettings().as_dict()
