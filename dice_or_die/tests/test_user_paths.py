from __future__ import annotations

from pathlib import Path

from dice_or_die.app.services import paths


def test_override_root_is_first_candidate(monkeypatch, tmp_path: Path) -> None:
    override = tmp_path / "override"
    local = tmp_path / "LocalAppData"
    monkeypatch.setenv("DICE_OR_DIE_HOME", str(override))
    monkeypatch.setattr(paths, "_is_windows", lambda: True)
    monkeypatch.setenv("LOCALAPPDATA", str(local))

    roots = paths._candidate_roots(paths.APP_DIR_NAME)
    assert roots[0] == override
    assert roots[1] == local / paths.APP_DIR_NAME
    assert roots[-1] == Path.home() / paths.APP_DIR_NAME


def test_local_app_data_is_ignored_off_windows(monkeypatch, tmp_path: Path) -> None:
    local = tmp_path / "LocalAppData"
    monkeypatch.delenv("DICE_OR_DIE_HOME", raising=False)
    monkeypatch.setattr(paths, "_is_windows", lambda: False)
    monkeypatch.setenv("LOCALAPPDATA", str(local))

    roots = paths._candidate_roots(paths.APP_DIR_NAME)
    assert local / paths.APP_DIR_NAME not in roots


def test_resolve_user_paths_creates_runtime_directories(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DICE_OR_DIE_HOME", str(tmp_path / "DiceOrDie"))

    resolved = paths.resolve_user_paths()
    assert resolved.root == tmp_path / "DiceOrDie"
    assert resolved.logs.exists()
    assert resolved.config.exists()
    assert resolved.settings_file == resolved.config / "settings.json"


def test_unwritable_root_falls_through_to_next_candidate(monkeypatch, tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    fallback = tmp_path / "xdg"
    monkeypatch.setenv("DICE_OR_DIE_HOME", str(blocker))
    monkeypatch.delenv("LOCALAPPDATA", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(fallback))

    resolved = paths.resolve_user_paths()
    assert resolved.root == fallback / paths.APP_DIR_NAME
