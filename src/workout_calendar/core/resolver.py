"""
Slot resolution: which program slot applies to a calendar date.

Past and present dates are resolved purely from days elapsed since the
program start, so history never changes when the progress pointer moves.
Future dates are resolved from the progress pointer, which carries the
skips and reschedules that elapsed-day arithmetic cannot see.  Both paths
cycle so a finished program repeats instead of running out.
"""

from dataclasses import dataclass
from datetime import date

from .config import DEFAULT_SETTINGS, CalendarSettings
from .models import Program, ProgramSlot, ProgressPointer


@dataclass(frozen=True)
class SlotIndex:
    """
    Precomputed lookups for one program under one week layout.

    ``ordered`` lists the schedulable slots (rest-day slots removed) in
    (week, day) order; it is the sequence the progress pointer walks.
    """

    by_key: dict[tuple[int, int], ProgramSlot]
    ordered: tuple[ProgramSlot, ...]
    total_weeks: int

    @classmethod
    def build(cls, program: Program, settings: CalendarSettings = DEFAULT_SETTINGS) -> "SlotIndex":
        by_key = {slot.key: slot for slot in program.slots}
        ordered = tuple(s for s in program.slots if s.day != settings.rest_day)
        return cls(by_key=by_key, ordered=ordered, total_weeks=program.total_weeks)

    def __len__(self) -> int:
        return len(self.ordered)

    def position_of(self, week: int, day: int) -> int:
        """
        Index of the (week, day) slot in ``ordered``.

        A coordinate with no schedulable slot maps to the next slot after it
        in program order, wrapping to 0 past the end.

        Raises:
            ValueError: If the index has no schedulable slots
        """
        if not self.ordered:
            raise ValueError("Program has no schedulable slots")
        target = (week, day)
        for i, slot in enumerate(self.ordered):
            if slot.key >= target:
                return i
        return 0

    def at(self, index: int) -> ProgramSlot:
        """Slot at ``index``, cycling over the ordered list."""
        return self.ordered[index % len(self.ordered)]

    def wrap_week(self, week: int) -> tuple[int, int]:
        """
        Split an elapsed week into (completed cycles, week within the cycle).

        Week 9 of a 4-week program is (2, 1): two full passes, then week 1.
        """
        if not self.total_weeks:
            return 0, week
        return (week - 1) // self.total_weeks, (week - 1) % self.total_weeks + 1

    def by_elapsed_position(self, week: int, day: int) -> ProgramSlot | None:
        """Match an elapsed-day (week, day), wrapping weeks past the program end."""
        _, week = self.wrap_week(week)
        return self.by_key.get((week, day))


def elapsed_days(start_date: date, day: date) -> int:
    """Whole days from ``start_date`` to ``day`` (negative before the start)."""
    return (day - start_date).days


def split_elapsed(elapsed: int, settings: CalendarSettings = DEFAULT_SETTINGS) -> tuple[int, int]:
    """
    Convert elapsed days into a 1-based (week, weekday) pair.

    Args:
        elapsed: Non-negative days since program start
        settings: Week layout

    Returns:
        (week, weekday) where weekday runs 1..days_per_week
    """
    return (elapsed // settings.days_per_week + 1, elapsed % settings.days_per_week + 1)


def expected_position(
    progress: ProgressPointer,
    day: date,
    settings: CalendarSettings = DEFAULT_SETTINGS,
) -> tuple[int, int] | None:
    """
    Where elapsed-day arithmetic says the user should be on ``day``.

    Returns:
        (week, weekday), or None if ``day`` is before the program start
    """
    elapsed = elapsed_days(progress.start_date, day)
    if elapsed < 0:
        return None
    return split_elapsed(elapsed, settings)


def is_rest_day(
    progress: ProgressPointer,
    day: date,
    settings: CalendarSettings = DEFAULT_SETTINGS,
) -> bool:
    """True if ``day`` falls on the configured rest-day position."""
    position = expected_position(progress, day, settings)
    return position is not None and position[1] == settings.rest_day


def resolve_slot(
    day: date,
    program: Program | None,
    progress: ProgressPointer | None,
    today: date,
    settings: CalendarSettings | None = None,
    *,
    index: SlotIndex | None = None,
) -> ProgramSlot | None:
    """
    Determine which program slot should apply to ``day``.

    Args:
        day: Calendar date to resolve
        program: Active program, or None when the user has none
        progress: Progress pointer for the active program
        today: Reference date separating past from future
        settings: Week layout (defaults to DAYS_PER_WEEK / REST_DAY_INDEX)
        index: Prebuilt SlotIndex for ``program``; built on demand if omitted

    Returns:
        The scheduled ProgramSlot, or None for a rest day
    """
    settings = settings or DEFAULT_SETTINGS
    if program is None or progress is None or program.is_empty:
        return None

    position = expected_position(progress, day, settings)
    if position is None:
        return None

    week, weekday = position
    if weekday == settings.rest_day:
        return None

    if index is None:
        index = SlotIndex.build(program, settings)

    if day <= today:
        return index.by_elapsed_position(week, weekday)

    if not index.ordered:
        return None

    # The pointer slot belongs to today, or to the start date when the
    # program has not started yet.
    anchor = max(today, progress.start_date)
    days_ahead = (day - anchor).days
    pointer_index = index.position_of(*progress.position)
    return index.at(pointer_index + days_ahead)
