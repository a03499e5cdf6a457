"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of calendar data.
"""

from datetime import date
from typing import Mapping

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.models import (
    CalendarEntry,
    CalendarSummary,
    HistoryItem,
    MissedSlot,
    ProgramSlot,
    ProgressPointer,
    Status,
)

console = Console()

STATUS_STYLES: dict[Status, str] = {
    "upcoming": "blue",
    "completed": "green",
    "skipped": "red",
    "missed": "red",
    "rest": "dim",
}

STATUS_MARKERS: dict[Status, str] = {
    "upcoming": "·",
    "completed": "✓",
    "skipped": "✗",
    "missed": "✗",
    "rest": " ",
}


def _fmt_status(status: Status) -> str:
    style = STATUS_STYLES[status]
    return f"[{style}]{STATUS_MARKERS[status]} {status}[/{style}]"


def _fmt_slot(slot: ProgramSlot | None) -> str:
    if slot is None:
        return "-"
    name = escape(slot.name or slot.workout_type)
    return f"{name} ({slot.estimated_duration} min)"


def _fmt_date_cell(day: date, today: date) -> str:
    """Date column: bold for today."""
    text = f"{day.isoformat()} {day.strftime('%a')}"
    if day == today:
        return f"[bold]{text}[/bold]"
    return text


def format_calendar_table(
    entries: Mapping[str, CalendarEntry],
    today: date,
    title: str = "Workout Calendar",
) -> Table:
    """
    Create a Rich table with one row per projected date.

    Args:
        entries: Output of ``project``
        today: Reference date (highlighted)
        title: Table title

    Returns:
        Rich Table object
    """
    table = Table(title=title)

    table.add_column("Date", style="cyan")
    table.add_column("Status")
    table.add_column("Wk/Day", justify="right", style="magenta")
    table.add_column("Workout")
    table.add_column("Logged", style="dim")

    for entry in entries.values():
        slot = entry.slot
        wk_day = f"W{slot.week} D{slot.day}" if slot is not None else ""
        logged = ""
        if entry.completion is not None:
            rec = entry.completion
            logged = rec.occurred_at.strftime("%H:%M")
            if rec.rating is not None:
                logged += f"  {rec.rating}/5"
            if rec.notes:
                logged += f"  {escape(rec.notes)}"

        table.add_row(
            _fmt_date_cell(entry.date, today),
            _fmt_status(entry.status),
            wk_day,
            _fmt_slot(slot) if slot is not None else "",
            logged,
        )

    return table


def format_summary(summary: CalendarSummary) -> str:
    """Format monthly counters as one line."""
    return (
        f"[green]Completed: {summary.completed}[/green]  "
        f"[red]Skipped: {summary.skipped}[/red]  "
        f"[red]Missed: {summary.missed}[/red]  "
        f"[blue]Upcoming: {summary.upcoming}[/blue]"
    )


def print_calendar(
    entries: Mapping[str, CalendarEntry],
    summary: CalendarSummary,
    today: date,
    title: str = "Workout Calendar",
) -> None:
    """
    Print the calendar table followed by its summary.

    Args:
        entries: Projected entries
        summary: Aggregate of ``entries``
        today: Reference date
        title: Table title
    """
    console.print(format_calendar_table(entries, today, title))
    console.print(format_summary(summary))


def print_today(entry: CalendarEntry, progress: ProgressPointer | None) -> None:
    """Print the reference date's workout and status."""
    console.print(f"[bold]{entry.date.isoformat()}[/bold]  {_fmt_status(entry.status)}")
    if entry.slot is None:
        console.print("Rest day. No workout scheduled.")
    else:
        slot = entry.slot
        console.print(f"Week {slot.week} Day {slot.day}: [bold]{_fmt_slot(slot)}[/bold]")
        if slot.description:
            console.print(escape(slot.description))
        for ex in slot.exercises:
            console.print(f"  - {escape(str(ex))}")
    if progress is not None:
        console.print(
            f"[dim]Pointer: week {progress.current_week} day {progress.current_day}[/dim]"
        )


def print_upcoming(slots: list[ProgramSlot]) -> None:
    """Print the next slots from the progress pointer."""
    if not slots:
        console.print("[yellow]No upcoming workouts.[/yellow]")
        return

    table = Table(title="Upcoming Workouts")
    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Wk/Day", justify="right", style="magenta")
    table.add_column("Workout")
    table.add_column("Type", style="green")

    for i, slot in enumerate(slots):
        table.add_row(str(i), f"W{slot.week} D{slot.day}", _fmt_slot(slot), slot.workout_type)

    console.print(table)


def print_missed(missed: list[MissedSlot], offset: int) -> None:
    """Print slots the pointer is behind on."""
    if not missed:
        if offset < 0:
            console.print(f"[green]On track: {-offset} workout(s) ahead of schedule.[/green]")
        else:
            console.print("[green]On track: no missed workouts.[/green]")
        return

    table = Table(title=f"Missed Workouts ({len(missed)} behind)")
    table.add_column("Due", style="cyan")
    table.add_column("Wk/Day", justify="right", style="magenta")
    table.add_column("Workout")

    for item in missed:
        table.add_row(
            item.scheduled_date.isoformat(),
            f"W{item.slot.week} D{item.slot.day}",
            _fmt_slot(item.slot),
        )

    console.print(table)


def print_history(items: list[HistoryItem]) -> None:
    """
    Print completion history, newest first.

    Args:
        items: History items to display
    """
    if not items:
        console.print("[yellow]No workouts logged yet.[/yellow]")
        return

    table = Table(title="Workout History")
    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("When", style="cyan")
    table.add_column("Workout")
    table.add_column("Wk/Day", justify="right", style="magenta")
    table.add_column("Result")
    table.add_column("Min", justify="right")
    table.add_column("Rating", justify="right")
    table.add_column("Notes", style="dim")

    for item in items:
        rec = item.record
        result = _fmt_status("skipped" if rec.skipped else "completed")
        table.add_row(
            str(rec.record_id) if rec.record_id is not None else "-",
            rec.occurred_at.strftime("%Y-%m-%d %H:%M"),
            escape(item.display_name),
            f"W{item.week} D{item.day}" if item.slot is not None else "-",
            result,
            str(rec.duration) if rec.duration is not None else "-",
            f"{rec.rating}/5" if rec.rating is not None else "-",
            escape(rec.notes or ""),
        )

    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
