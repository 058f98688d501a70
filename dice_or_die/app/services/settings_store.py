from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from dice_or_die.core.settings import EngineSettings, default_settings, merge_settings


class SettingsStore:
    def __init__(self, settings_path: Path) -> None:
        self.settings_path = settings_path

    def load(self) -> dict[str, Any]:
        if not self.settings_path.exists():
            settings = default_settings()
            self.save(settings)
            return settings
        try:
            payload = json.loads(self.settings_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            payload = {}
        try:
            settings = merge_settings(payload)
        except ValidationError:
            settings = default_settings()
        self.save(settings)
        return settings

    def load_model(self) -> EngineSettings:
        return EngineSettings.model_validate(self.load())

    def save(self, settings: dict[str, Any]) -> None:
        self.settings_path.parent.mkdir(parents=True, exist_ok=True)
        self.settings_path.write_text(json.dumps(settings, indent=2), encoding="utf-8")
