"""Progress commands: upcoming, missed, history."""

import json
from typing import Annotated, Optional

import typer

from ...core.config import load_settings
from ...core.history import completion_history
from ...core.progress import missed_slots, schedule_offset, upcoming_slots
from ...io.serializers import (
    ValidationError,
    history_item_to_dict,
    missed_to_dict,
    slot_to_dict,
)
from .. import views
from ..app import DataDirOption, JsonOption, TodayOption, app, get_store, resolve_today


@app.command("upcoming")
def show_upcoming(
    count: Annotated[
        Optional[int],
        typer.Option("--count", "-n", help="Number of workouts to show (default from config)"),
    ] = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """Show the next workouts from your current position in the program."""
    store = get_store(data_dir)
    try:
        settings = load_settings()
        snapshot = store.load_snapshot()
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if count is not None and count < 1:
        views.print_error("--count must be at least 1")
        raise typer.Exit(1)

    slots = upcoming_slots(snapshot.program, snapshot.progress, count, settings)

    if json_out:
        print(json.dumps(
            [{**slot_to_dict(s), "position": i} for i, s in enumerate(slots)],
            indent=2,
        ))
        return

    views.print_upcoming(slots)


@app.command("missed")
def show_missed(
    today: TodayOption = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """Show workouts you have fallen behind on since the program started."""
    store = get_store(data_dir)
    try:
        ref_today = resolve_today(today)
        settings = load_settings()
        snapshot = store.load_snapshot()
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    missed = missed_slots(snapshot.program, snapshot.progress, ref_today, settings)
    offset = schedule_offset(snapshot.program, snapshot.progress, ref_today, settings)

    if json_out:
        print(json.dumps({
            "missedWorkouts": [missed_to_dict(m) for m in missed],
            "offset": offset,
        }, indent=2))
        return

    views.print_missed(missed, offset)


@app.command("history")
def show_history(
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Maximum records to show (default from config)"),
    ] = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """Show logged workouts, newest first."""
    store = get_store(data_dir)
    try:
        settings = load_settings()
        snapshot = store.load_snapshot()
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if limit is not None and limit < 1:
        views.print_error("--limit must be at least 1")
        raise typer.Exit(1)

    items = completion_history(
        snapshot.program,
        snapshot.completions,
        limit if limit is not None else settings.history_limit,
    )

    if json_out:
        print(json.dumps([history_item_to_dict(i) for i in items], indent=2))
        return

    views.print_history(items)
