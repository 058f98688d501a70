from __future__ import annotations

import hashlib
import json
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from dice_or_die.app.services.narrative import ending_line
from dice_or_die.core.engine import create_initial_state, run_simulation
from dice_or_die.core.loader import ContentValidationError, load_stage_catalog
from dice_or_die.core.summary import summarize_run

app = typer.Typer(add_completion=False, help="Autoplay a deterministic Dice or Die run for balancing and testing.")
console = Console()


class PolicyChoice(str, Enum):
    money = "money"
    dice = "dice"
    random = "random"


def _normalize_seed(raw_seed: str) -> int | str:
    try:
        return int(raw_seed)
    except ValueError:
        return raw_seed


def _state_signature_payload(state, logs) -> dict:
    return {
        "seed": state.seed,
        "turn": state.turn,
        "stage": state.player_stage,
        "lap": state.player_lap,
        "position": state.player_position,
        "money": state.player_money,
        "phase": state.game_phase,
        "bag": [die.model_dump(mode="python") for die in state.dice_bag.dice],
        "counters": state.counters.model_dump(mode="python"),
        "aborted": state.aborted,
        "rng_state": state.rng_state,
        "rng_calls": state.rng_calls,
        "timeline": [entry.to_dict() for entry in logs],
    }


def state_signature(state, logs) -> str:
    payload = _state_signature_payload(state, logs)
    return hashlib.sha256(json.dumps(payload, sort_keys=True).encode("utf-8")).hexdigest()[:16]


@app.command()
def main(
    seed: str = typer.Option("123", "--seed", help="Seed value (int or string)."),
    max_turns: int = typer.Option(300, "--max-turns", min=1, help="Max number of autoplay commands."),
    policy: PolicyChoice = typer.Option(PolicyChoice.money, "--policy", help="Choice policy: money|dice|random."),
    bribe: bool = typer.Option(True, "--bribe/--no-bribe", help="Bribe bosses whenever affordable."),
    content_dir: Optional[Path] = typer.Option(None, "--content-dir", help="Directory holding stages.json."),
    quiet: bool = typer.Option(False, "--quiet", help="Only print the summary."),
) -> None:
    try:
        catalog = load_stage_catalog(content_dir)
    except ContentValidationError as exc:
        console.print(f"[bold red]Content load failed:[/bold red] {exc}")
        raise typer.Exit(1) from exc

    state = create_initial_state(_normalize_seed(seed))
    final_state, logs = run_simulation(state, catalog, max_turns=max_turns, policy=policy.value, allow_bribe=bribe)

    if not quiet:
        for entry in logs:
            console.print(entry.format(), markup=False)

    run = summarize_run(final_state)
    summary = Table(title="Simulation Summary")
    summary.add_column("Field", style="cyan", no_wrap=True)
    summary.add_column("Value", style="white")
    summary.add_row("Seed", str(run.seed))
    summary.add_row("Policy", f"{policy.value} ({'bribes' if bribe else 'no bribes'})")
    summary.add_row("Outcome", run.outcome)
    summary.add_row("Stage", f"{run.stage_reached}/{catalog.max_stage}")
    summary.add_row("Turns", str(final_state.turn))
    summary.add_row("Money", f"${run.money}")
    summary.add_row("Dice Bag", final_state.dice_bag.capacity_label)
    summary.add_row("Rolls", str(run.total_rolls))
    summary.add_row("Dice Obtained", str(run.dice_obtained))
    summary.add_row(
        "Bosses",
        f"defeated={run.bosses_defeated}, perfect={run.perfect_boss_defeats}, bribed={run.bribes_bosses}",
    )
    summary.add_row("Ending", run.ending_tag)
    summary.add_row("Abort Reason", final_state.abort_reason or "-")
    console.print()
    console.print(summary)
    console.print(f"\n[italic]{ending_line(run)}[/italic]")
    console.print(f"\n[bold green]Deterministic signature:[/bold green] {state_signature(final_state, logs)}")


if __name__ == "__main__":
    app()
