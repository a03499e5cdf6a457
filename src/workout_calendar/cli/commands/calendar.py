"""Calendar commands: calendar, today."""

import json
from typing import Annotated, Optional

import typer

from ...core.config import load_settings
from ...core.errors import CalendarError
from ...core.models import DateRange
from ...core.projector import aggregate, project
from ...io.serializers import (
    ValidationError,
    calendar_to_dict,
    entry_to_dict,
    parse_date_range,
    validate_month,
)
from .. import views
from ..app import DataDirOption, JsonOption, TodayOption, app, get_store, resolve_today


def _resolve_range(month: str | None, start: str | None, end: str | None, today) -> DateRange:
    """Pick the requested range: explicit --from/--to, else --month, else today's month."""
    if start is not None or end is not None:
        if start is None or end is None:
            raise ValidationError("--from and --to must be given together")
        return parse_date_range(start, end)
    if month is not None:
        return DateRange.for_month(*validate_month(month))
    return DateRange.for_month(today.year, today.month)


@app.command("calendar")
def show_calendar(
    month: Annotated[
        Optional[str],
        typer.Option("--month", "-m", help="Month to show (YYYY-MM, default: current month)"),
    ] = None,
    start: Annotated[
        Optional[str],
        typer.Option("--from", help="First date of an explicit range (YYYY-MM-DD)"),
    ] = None,
    end: Annotated[
        Optional[str],
        typer.Option("--to", help="Last date of an explicit range (YYYY-MM-DD)"),
    ] = None,
    today: TodayOption = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show every date in a month (or range) with its workout status.

      workout-calendar calendar --month 2025-01
      workout-calendar calendar --from 2025-01-06 --to 2025-01-19 --json
    """
    store = get_store(data_dir)
    try:
        ref_today = resolve_today(today)
        date_range = _resolve_range(month, start, end, ref_today)
        settings = load_settings()
        snapshot = store.load_snapshot()
        entries = project(
            date_range,
            snapshot.program,
            snapshot.progress,
            snapshot.completions,
            ref_today,
            settings,
        )
    except (ValidationError, ValueError, CalendarError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    summary = aggregate(entries)

    if json_out:
        print(json.dumps(calendar_to_dict(entries, summary), indent=2))
        return

    if snapshot.program is None or snapshot.progress is None:
        views.print_info("No active program. Run 'init' to activate one.")

    title = f"Workout Calendar {date_range.start.isoformat()} .. {date_range.end.isoformat()}"
    views.print_calendar(entries, summary, ref_today, title)


@app.command("today")
def show_today(
    today: TodayOption = None,
    json_out: JsonOption = False,
    data_dir: DataDirOption = None,
) -> None:
    """Show the workout scheduled for today and its status."""
    store = get_store(data_dir)
    try:
        ref_today = resolve_today(today)
        snapshot = store.load_snapshot()
        entries = project(
            DateRange(ref_today, ref_today),
            snapshot.program,
            snapshot.progress,
            snapshot.completions,
            ref_today,
            load_settings(),
        )
    except (ValidationError, ValueError, CalendarError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    entry = entries[ref_today.isoformat()]

    if json_out:
        print(json.dumps({ref_today.isoformat(): entry_to_dict(entry)}, indent=2))
        return

    views.print_today(entry, snapshot.progress)
