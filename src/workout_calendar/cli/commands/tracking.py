"""Tracking commands: init, log."""

import json
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from loguru import logger

from ...core.config import load_settings
from ...core.models import CompletionRecord, ProgramSlot, ProgressPointer
from ...core.progress import advance_pointer, upcoming_slots
from ...io.serializers import (
    ValidationError,
    completion_to_dict,
    parse_timestamp,
    progress_to_dict,
    validate_date,
)
from ...io.snapshot_store import load_program_file
from .. import views
from ..app import DataDirOption, JsonOption, app, get_store, resolve_today


def parse_slot_coordinate(raw: str) -> tuple[int, int]:
    """
    Parse a WEEK:DAY coordinate such as ``3:2``.

    Raises:
        ValidationError: If the value is not two positive integers
    """
    parts = raw.replace("/", ":").split(":")
    if len(parts) != 2:
        raise ValidationError(f"Invalid slot {raw!r}. Expected WEEK:DAY, e.g. 3:2")
    try:
        week, day = int(parts[0]), int(parts[1])
    except ValueError as e:
        raise ValidationError(f"Invalid slot {raw!r}. Expected WEEK:DAY, e.g. 3:2") from e
    if week < 1 or day < 1:
        raise ValidationError(f"Invalid slot {raw!r}. Week and day must be positive")
    return week, day


@app.command("init")
def init(
    program_file: Annotated[
        Path,
        typer.Option("--program-file", "-f", help="Program definition (YAML or JSON)"),
    ],
    start_date: Annotated[
        Optional[str],
        typer.Option("--start-date", "-s", help="Program start date (YYYY-MM-DD, default: today)"),
    ] = None,
    week: Annotated[int, typer.Option("--week", help="Starting week")] = 1,
    day: Annotated[int, typer.Option("--day", help="Starting day")] = 1,
    data_dir: DataDirOption = None,
) -> None:
    """
    Activate a program: store it and put the progress pointer on its first slot.

    Switching programs replaces program.json and progress.json; logged
    workouts are kept.
    """
    store = get_store(data_dir)
    try:
        program = load_program_file(program_file)
        start = validate_date(start_date) if start_date is not None else resolve_today(None)
        progress = ProgressPointer(start_date=start, current_week=week, current_day=day)
    except FileNotFoundError:
        views.print_error(f"Program file not found: {program_file}")
        raise typer.Exit(1)
    except OSError as e:
        views.print_error(f"Cannot read program file {program_file}: {e.strerror or e}")
        raise typer.Exit(1)
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if program.is_empty:
        views.print_warning("Program has no workouts; every date will show as rest.")

    store.init(program, progress)

    views.print_success(
        f"Activated '{program.name}' ({len(program.slots)} workouts, "
        f"{program.total_weeks} weeks) starting {start.isoformat()}"
    )
    views.print_info(f"Data directory: {store.data_dir}")


@app.command("log")
def log_workout(
    slot: Annotated[
        Optional[str],
        typer.Option("--slot", help="Workout to log as WEEK:DAY (default: current workout)"),
    ] = None,
    skipped: Annotated[
        bool,
        typer.Option("--skipped", help="Record the workout as skipped"),
    ] = False,
    notes: Annotated[Optional[str], typer.Option("--notes", "-n", help="Notes")] = None,
    rating: Annotated[Optional[int], typer.Option("--rating", "-r", help="Rating 1-5")] = None,
    duration: Annotated[
        Optional[int],
        typer.Option("--duration", "-d", help="Actual duration in minutes"),
    ] = None,
    at: Annotated[
        Optional[str],
        typer.Option("--at", help="When it happened (ISO timestamp, default: now)"),
    ] = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Log a completed (or skipped) workout.

    Logging the workout the pointer is on advances the pointer to the next
    one; logging any other workout leaves the pointer where it is.

      workout-calendar log --notes "felt strong" --rating 4 --duration 55
      workout-calendar log --slot 2:3 --at 2025-01-17T18:30 --skipped
    """
    store = get_store(data_dir)
    if not store.exists():
        views.print_error(f"No program found in {store.data_dir}")
        views.print_info("Run 'init' first to activate a program.")
        raise typer.Exit(1)

    try:
        settings = load_settings()
        snapshot = store.load_snapshot()
        occurred_at = parse_timestamp(at) if at is not None else datetime.now().replace(microsecond=0)
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    program, progress = snapshot.program, snapshot.progress
    if program is None or progress is None or program.is_empty:
        views.print_error("No active program with workouts to log against.")
        raise typer.Exit(1)

    current = upcoming_slots(program, progress, 1, settings)
    target: ProgramSlot | None
    try:
        if slot is None:
            target = current[0] if current else None
        else:
            target = program.slot_for(*parse_slot_coordinate(slot))
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if target is None or target.slot_id is None:
        views.print_error(f"No workout at {slot or 'the current position'} in '{program.name}'")
        raise typer.Exit(1)

    try:
        record = CompletionRecord(
            workout_slot_ref=target.slot_id,
            occurred_at=occurred_at,
            skipped=skipped,
            notes=notes,
            rating=rating,
            duration=duration,
            record_id=store.next_record_id(),
        )
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    store.append_completion(record)

    new_progress = progress
    if current and current[0].key == target.key:
        new_progress = advance_pointer(program, progress, settings)
        store.save_progress(new_progress)
        logger.info(
            f"Pointer moved from week {progress.current_week} day {progress.current_day} "
            f"to week {new_progress.current_week} day {new_progress.current_day}"
        )

    if json_out:
        print(json.dumps({
            "record": completion_to_dict(record),
            "progress": progress_to_dict(new_progress),
        }, indent=2))
        return

    verb = "Skipped" if skipped else "Logged"
    views.print_success(
        f"{verb} week {target.week} day {target.day}"
        f"{': ' + target.name if target.name else ''} at {occurred_at.strftime('%Y-%m-%d %H:%M')}"
    )
    if new_progress is not progress:
        views.print_info(
            f"Next workout: week {new_progress.current_week} day {new_progress.current_day}"
        )
