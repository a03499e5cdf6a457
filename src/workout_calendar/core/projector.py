"""
Calendar projection for workout-calendar.

Runs slot resolution and status classification across a date range and
tallies the result.  The projection is a pure function of its inputs: the
same program, pointer, ledger and reference date always produce the same
entries, and nothing passed in is modified.
"""

from collections import Counter
from datetime import date
from typing import Iterable, Mapping, Sequence

from loguru import logger

from .classifier import group_by_date, select_from_index, status_for
from .config import DEFAULT_SETTINGS, CalendarSettings
from .errors import CalendarComputationError
from .models import (
    CalendarEntry,
    CalendarSummary,
    CompletionRecord,
    DateRange,
    Program,
    ProgressPointer,
)
from .resolver import SlotIndex, resolve_slot


def _rest_calendar(date_range: DateRange) -> dict[str, CalendarEntry]:
    return {day.isoformat(): CalendarEntry(date=day, status="rest") for day in date_range.days()}


def project(
    date_range: DateRange,
    program: Program | None,
    progress: ProgressPointer | None,
    completions: Iterable[CompletionRecord],
    today: date,
    settings: CalendarSettings | None = None,
) -> dict[str, CalendarEntry]:
    """
    Build one CalendarEntry per date in ``date_range``.

    A missing program, missing pointer or empty program is a normal state
    (the user has no active program): every date comes back as rest.

    Args:
        date_range: Inclusive range to project
        program: Active program, or None
        progress: Progress pointer for the active program, or None
        completions: Completion ledger in append order
        today: Reference date; never read from the system clock here
        settings: Week layout (defaults to config constants)

    Returns:
        Dict keyed by ISO date (yyyy-mm-dd), in date order

    Raises:
        CalendarComputationError: If date arithmetic fails
    """
    settings = settings or DEFAULT_SETTINGS

    if program is None or progress is None or program.is_empty:
        logger.debug(
            f"No active program; {len(date_range)} rest entries "
            f"for {date_range.start.isoformat()}..{date_range.end.isoformat()}"
        )
        return _rest_calendar(date_range)

    try:
        index = SlotIndex.build(program, settings)
        by_date = group_by_date(completions)

        entries: dict[str, CalendarEntry] = {}
        for day in date_range.days():
            slot = resolve_slot(day, program, progress, today, settings, index=index)
            record = select_from_index(day, by_date) if slot is not None else None
            status = status_for(day, slot, record, today)
            entries[day.isoformat()] = CalendarEntry(
                date=day,
                status=status,
                slot=slot,
                completion=record if status in ("completed", "skipped") else None,
            )
    except (OverflowError, ValueError, TypeError) as e:
        raise CalendarComputationError(
            f"Failed to project {date_range.start.isoformat()}..{date_range.end.isoformat()}: {e}"
        ) from e

    logger.debug(
        f"Projected {len(entries)} days for program {program.program_id!r} "
        f"(today={today.isoformat()}): {aggregate(entries).as_dict()}"
    )
    return entries


def project_month(
    year: int,
    month: int,
    program: Program | None,
    progress: ProgressPointer | None,
    completions: Iterable[CompletionRecord],
    today: date,
    settings: CalendarSettings | None = None,
) -> dict[str, CalendarEntry]:
    """Project every day of ``year``-``month``."""
    return project(DateRange.for_month(year, month), program, progress, completions, today, settings)


def aggregate(entries: Mapping[str, CalendarEntry] | Sequence[CalendarEntry]) -> CalendarSummary:
    """
    Count completed, skipped, missed and upcoming entries.

    Always recomputed from the entries themselves.

    Args:
        entries: Output of ``project`` (or any collection of entries)

    Returns:
        CalendarSummary; rest days are not counted
    """
    values = entries.values() if isinstance(entries, Mapping) else entries
    counts = Counter(entry.status for entry in values)
    return CalendarSummary(
        completed=counts["completed"],
        skipped=counts["skipped"],
        missed=counts["missed"],
        upcoming=counts["upcoming"],
    )
