from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from .models import StageConfig

T = TypeVar("T")

DEFAULT_CONTENT_DIR = Path(__file__).resolve().parents[1] / "content"
STAGES_FILE_NAME = "stages.json"


class ContentValidationError(ValueError):
    def __init__(self, message: str, details: list[str] | None = None) -> None:
        self.details = details or []
        suffix = "\n".join(self.details)
        super().__init__(f"{message}\n{suffix}" if suffix else message)


@dataclass(slots=True)
class StageCatalog:
    stages: list[StageConfig]
    stage_by_number: dict[int, StageConfig]

    @property
    def max_stage(self) -> int:
        return max(self.stage_by_number, default=0)

    def get(self, stage: int) -> StageConfig | None:
        return self.stage_by_number.get(stage)


def _load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ContentValidationError(f"Missing content file: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ContentValidationError(f"Invalid JSON in {path.name}: {exc.msg} at line {exc.lineno}") from exc


def _load_typed_list(path: Path, item_type: type[T]) -> list[T]:
    data = _load_json(path)
    adapter = TypeAdapter(list[item_type])  # type: ignore[index]
    try:
        return adapter.validate_python(data)
    except ValidationError as exc:
        errors = []
        for issue in exc.errors():
            issue_path = ".".join(str(part) for part in issue.get("loc", [])) or "(root)"
            errors.append(f"{path.name}:{issue_path}: {issue.get('msg', 'validation error')}")
        raise ContentValidationError(f"Schema validation failed for {path.name}.", errors) from exc


def _assert_stage_ordinals(stages: list[StageConfig]) -> None:
    if not stages:
        raise ContentValidationError("Stage catalog must define at least one stage.")
    seen: set[int] = set()
    for entry in stages:
        if entry.stage in seen:
            raise ContentValidationError(f"Duplicate stage ordinal '{entry.stage}'.")
        seen.add(entry.stage)
    expected = set(range(1, len(stages) + 1))
    missing = sorted(expected - seen)
    if missing:
        raise ContentValidationError(
            "Stage ordinals must run contiguously from 1.",
            [f"missing stage {number}" for number in missing],
        )


def load_stage_catalog(content_dir: Path | str | None = None) -> StageCatalog:
    base_path = Path(content_dir) if content_dir is not None else DEFAULT_CONTENT_DIR
    stages = _load_typed_list(base_path / STAGES_FILE_NAME, StageConfig)
    _assert_stage_ordinals(stages)
    ordered = sorted(stages, key=lambda entry: entry.stage)
    return StageCatalog(
        stages=ordered,
        stage_by_number={entry.stage: entry for entry in ordered},
    )


@lru_cache(maxsize=1)
def default_catalog() -> StageCatalog:
    return load_stage_catalog(DEFAULT_CONTENT_DIR)
