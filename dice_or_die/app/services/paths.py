from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


APP_DIR_NAME = "DiceOrDie"
SETTINGS_FILE_NAME = "settings.json"


def _is_windows() -> bool:
    return os.name == "nt"


@dataclass(slots=True)
class UserPaths:
    root: Path
    logs: Path
    config: Path

    @property
    def settings_file(self) -> Path:
        return self.config / SETTINGS_FILE_NAME


def _candidate_roots(app_name: str) -> list[Path]:
    candidates: list[Path] = []
    override = os.environ.get("DICE_OR_DIE_HOME")
    if override:
        candidates.append(Path(override))

    local_app_data = os.environ.get("LOCALAPPDATA")
    if _is_windows() and local_app_data:
        candidates.append(Path(local_app_data) / app_name)

    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        candidates.append(Path(xdg_data) / app_name)

    candidates.append(Path.home() / app_name)
    return candidates


def resolve_user_paths(app_name: str = APP_DIR_NAME) -> UserPaths:
    last_error: Exception | None = None
    for root in _candidate_roots(app_name):
        logs = root / "logs"
        config = root / "config"
        try:
            logs.mkdir(parents=True, exist_ok=True)
            config.mkdir(parents=True, exist_ok=True)
            return UserPaths(root=root, logs=logs, config=config)
        except OSError as exc:
            last_error = exc
            continue
    raise RuntimeError("Unable to initialize user data directories.") from last_error
