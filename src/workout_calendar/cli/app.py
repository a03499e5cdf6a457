"""Shared Typer app object, shared option types, and store utility."""

from datetime import date
from pathlib import Path
from typing import Annotated, Optional

import typer

from ..io.serializers import validate_date
from ..io.snapshot_store import SnapshotStore, get_default_data_dir

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-p", help="Directory with program.json, progress.json, completions.jsonl"),
]

# Shared --today option: pins the reference date (default: system date)
TodayOption = Annotated[
    Optional[str],
    typer.Option("--today", help="Reference date YYYY-MM-DD (default: today)"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="workout-calendar",
    help="Workout calendar: maps your training program onto dates and tracks completions.",
    no_args_is_help=True,
)


def get_store(data_dir: Path | None) -> SnapshotStore:
    """Get snapshot store from path or default location."""
    if data_dir is None:
        data_dir = get_default_data_dir()
    return SnapshotStore(data_dir)


def resolve_today(today: str | None) -> date:
    """
    Reference date for a command.

    The system clock is read here, at the CLI boundary, and nowhere in the
    engine.

    Raises:
        ValidationError: If ``today`` is malformed
    """
    if today is None:
        return date.today()
    return validate_date(today)
