from __future__ import annotations

import logging
from typing import Any, Callable

from dice_or_die.app.pacing import Pacer, build_pacing
from dice_or_die.core.boss import bribe
from dice_or_die.core.choices import accept_choice
from dice_or_die.core.engine import (
    create_initial_state,
    cycle_animation_speed,
    initialize_game,
    preview_target_square,
    reset_game,
    set_animation_speed,
    snapshot,
)
from dice_or_die.core.loader import StageCatalog, default_catalog
from dice_or_die.core.models import ChoiceOption, CommandResult, Die, RunState, rejected
from dice_or_die.core.settings import EngineSettings, GameplaySettings
from dice_or_die.core.summary import RunSummary, summarize_run
from dice_or_die.core.turn import roll_dice

BUSY_REASON = "A turn is still in progress."


class GameSession:
    """Owns one RunState and serializes every command through a busy flag."""

    def __init__(
        self,
        catalog: StageCatalog | None = None,
        settings: EngineSettings | None = None,
        seed: int | str | None = None,
        pacer: Pacer | None = None,
        app_logger: logging.Logger | None = None,
        gameplay_logger: logging.Logger | None = None,
    ) -> None:
        self.catalog = catalog or default_catalog()
        self.settings = settings or EngineSettings()
        self.pacer = pacer
        self.logger = app_logger or logging.getLogger("dice_or_die")
        self.gameplay_logger = gameplay_logger or logging.getLogger("dice_or_die.gameplay")
        self.busy = False
        run_seed = seed if seed is not None else self.settings.gameplay.seed
        self.state: RunState = create_initial_state(run_seed, self.settings.gameplay)
        self.state.animation_speed = self.settings.animation.speed

    @property
    def rules(self) -> GameplaySettings:
        return self.settings.gameplay

    def _dispatch(self, name: str, command: Callable[[], CommandResult]) -> CommandResult:
        if self.busy:
            self.logger.debug("Rejected %s: %s", name, BUSY_REASON)
            return rejected(BUSY_REASON)
        self.busy = True
        try:
            was_aborted = self.state.aborted
            result = command()
            self._publish(result)
            if result.accepted:
                self._pace(result)
            else:
                self.logger.debug("Rejected %s: %s", name, result.reason)
            if self.state.aborted and not was_aborted:
                self.logger.error("Run aborted during %s: %s", name, self.state.abort_reason)
            return result
        finally:
            self.busy = False

    def _publish(self, result: CommandResult) -> None:
        for entry in result.logs:
            self.gameplay_logger.info("[%s] %s", entry.type, entry.line)

    def _pace(self, result: CommandResult) -> None:
        if self.pacer is None:
            return
        for cue in build_pacing(result.logs, self.state.animation_speed, self.settings.animation):
            self.pacer(cue)

    def initialize_game(self) -> CommandResult:
        return self._dispatch("initialize_game", lambda: initialize_game(self.state, self.catalog, self.rules))

    def roll_dice(self, bag_index: int | None = None) -> CommandResult:
        return self._dispatch("roll_dice", lambda: roll_dice(self.state, self.catalog, bag_index, self.rules))

    def accept_choice(self, option: ChoiceOption | int) -> CommandResult:
        return self._dispatch("accept_choice", lambda: accept_choice(self.state, option))

    def bribe(self) -> CommandResult:
        return self._dispatch("bribe", lambda: bribe(self.state, self.catalog, self.rules))

    def reset_game(self, seed: int | str | None = None) -> CommandResult:
        def _reset() -> CommandResult:
            self.state, result = reset_game(self.state, self.catalog, seed, self.rules)
            self.logger.info("Run reset (seed=%s).", self.state.seed)
            return result

        return self._dispatch("reset_game", _reset)

    def set_animation_speed(self, speed: int) -> CommandResult:
        return self._dispatch("set_animation_speed", lambda: set_animation_speed(self.state, speed))

    def cycle_animation_speed(self) -> CommandResult:
        return self._dispatch("cycle_animation_speed", lambda: cycle_animation_speed(self.state))

    def preview_target_square(self, die: Die) -> int | None:
        return preview_target_square(self.state, die)

    def snapshot(self) -> dict[str, Any]:
        return snapshot(self.state)

    def summary(self) -> RunSummary:
        return summarize_run(self.state)
