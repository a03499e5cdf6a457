"""
Progress-pointer queries.

Pure helpers for the completion workflow and dashboard views: where the
pointer moves after a workout is logged, which slots come next, and which
slots the user has fallen behind on.  None of them modify the pointer they
are given.
"""

from dataclasses import replace
from datetime import date, timedelta

from .config import DEFAULT_SETTINGS, CalendarSettings
from .models import MissedSlot, Program, ProgramSlot, ProgressPointer
from .resolver import SlotIndex, expected_position


def advance_pointer(
    program: Program,
    progress: ProgressPointer,
    settings: CalendarSettings | None = None,
) -> ProgressPointer:
    """
    Return the pointer after the current slot is completed or skipped.

    Moves to the next slot in (week, day) order.  After the last slot the
    pointer cycles back to the first one.  A pointer sitting on a
    coordinate with no slot moves to the first slot after it.

    Args:
        program: Active program
        progress: Current pointer

    Returns:
        A new ProgressPointer (the same one if the program has no slots)
    """
    index = SlotIndex.build(program, settings or DEFAULT_SETTINGS)
    if not index.ordered:
        return progress

    i = index.position_of(*progress.position)
    if index.ordered[i].key == progress.position:
        i += 1
    nxt = index.at(i)
    return replace(progress, current_week=nxt.week, current_day=nxt.day)


def upcoming_slots(
    program: Program | None,
    progress: ProgressPointer | None,
    count: int | None = None,
    settings: CalendarSettings | None = None,
) -> list[ProgramSlot]:
    """
    The pointer slot followed by the next slots in program order.

    Args:
        program: Active program, or None
        progress: Progress pointer, or None
        count: Number of slots (default: settings.upcoming_window)
        settings: Week layout and query windows

    Returns:
        Up to ``count`` slots, cycling past the end of the program
    """
    settings = settings or DEFAULT_SETTINGS
    if program is None or progress is None:
        return []
    if count is None:
        count = settings.upcoming_window

    index = SlotIndex.build(program, settings)
    if not index.ordered or count <= 0:
        return []

    start = index.position_of(*progress.position)
    return [index.at(start + i) for i in range(count)]


def nominal_date(
    progress: ProgressPointer,
    slot: ProgramSlot,
    settings: CalendarSettings = DEFAULT_SETTINGS,
    cycle: int = 0,
    total_weeks: int = 0,
) -> date:
    """
    Calendar date a slot falls on by elapsed-day arithmetic.

    ``cycle`` counts completed passes through a ``total_weeks`` program, so
    the same slot has a later date on every repetition.
    """
    week = cycle * total_weeks + slot.week
    offset = (week - 1) * settings.days_per_week + (slot.day - 1)
    return progress.start_date + timedelta(days=offset)


def _slots_between(
    index: SlotIndex,
    low: tuple[int, int],
    high: tuple[int, int],
) -> list[ProgramSlot]:
    return [slot for slot in index.ordered if low <= slot.key < high]


def _position_in_cycle(
    index: SlotIndex,
    progress: ProgressPointer,
    today: date,
    settings: CalendarSettings,
) -> tuple[int, tuple[int, int]] | None:
    """
    Elapsed-day position for ``today`` folded into the current program cycle.

    The pointer cycles back to the first slot after the last one, so it is
    only comparable with the expected position of the same cycle.

    Returns:
        (cycle, (week, weekday)), or None before the program start
    """
    expected = expected_position(progress, today, settings)
    if expected is None:
        return None
    cycle, week = index.wrap_week(expected[0])
    return cycle, (week, expected[1])


def missed_slots(
    program: Program | None,
    progress: ProgressPointer | None,
    today: date,
    settings: CalendarSettings | None = None,
) -> list[MissedSlot]:
    """
    Slots between the pointer and where the calendar says the user should be.

    Only non-empty when the pointer lags elapsed-day arithmetic for
    ``today`` within the current cycle.  Each slot carries the date it was
    due in that cycle.

    Args:
        program: Active program, or None
        progress: Progress pointer, or None
        today: Reference date
        settings: Week layout

    Returns:
        MissedSlot list in program order
    """
    settings = settings or DEFAULT_SETTINGS
    if program is None or progress is None or program.is_empty:
        return []

    index = SlotIndex.build(program, settings)
    current = _position_in_cycle(index, progress, today, settings)
    if current is None:
        return []
    cycle, expected = current
    if progress.position >= expected:
        return []

    return [
        MissedSlot(
            slot=slot,
            scheduled_date=nominal_date(progress, slot, settings, cycle, index.total_weeks),
        )
        for slot in _slots_between(index, progress.position, expected)
    ]


def schedule_offset(
    program: Program | None,
    progress: ProgressPointer | None,
    today: date,
    settings: CalendarSettings | None = None,
) -> int:
    """
    How many slots the pointer is behind (positive) or ahead (negative).

    Measured within the current cycle.  Returns 0 before the program starts
    or without a program.
    """
    settings = settings or DEFAULT_SETTINGS
    if program is None or progress is None or program.is_empty:
        return 0

    index = SlotIndex.build(program, settings)
    current = _position_in_cycle(index, progress, today, settings)
    if current is None:
        return 0
    _, expected = current

    if progress.position <= expected:
        return len(_slots_between(index, progress.position, expected))
    return -len(_slots_between(index, expected, progress.position))
