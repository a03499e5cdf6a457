"""
Data models for workout-calendar.

Program slots, the user's progress pointer, completion records and the
derived calendar entries produced by the projector.  Everything here is
immutable: the engine reads a snapshot and never writes back.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterator, Literal

from .config import DELETED_WORKOUT_NAME

Status = Literal["upcoming", "completed", "skipped", "missed", "rest"]


@dataclass(frozen=True)
class ProgramSlot:
    """
    One planned workout, addressed by its (week, day) coordinate.

    ``slot_id`` is the storage identifier that completion records point at.
    """

    week: int
    day: int
    name: str = ""
    description: str = ""
    estimated_duration: int = 60  # minutes
    workout_type: str = "Training"
    exercises: tuple = ()
    slot_id: int | None = None

    def __post_init__(self) -> None:
        """Validate slot data."""
        if self.week < 1:
            raise ValueError(f"week must be positive, got {self.week}")
        if self.day < 1:
            raise ValueError(f"day must be positive, got {self.day}")
        if self.estimated_duration < 0:
            raise ValueError("estimated_duration must be non-negative")
        # Lists from JSON become tuples so the slot stays hashable.
        if not isinstance(self.exercises, tuple):
            object.__setattr__(self, "exercises", tuple(self.exercises))

    @property
    def key(self) -> tuple[int, int]:
        return (self.week, self.day)


@dataclass(frozen=True)
class Program:
    """
    An append-only catalog of workout slots.

    Slots are kept sorted by (week, day) regardless of input order.
    """

    program_id: int | str
    name: str
    slots: tuple[ProgramSlot, ...] = ()

    def __post_init__(self) -> None:
        """Sort slots and reject duplicate coordinates or ids."""
        ordered = tuple(sorted(self.slots, key=lambda s: s.key))

        seen_keys: set[tuple[int, int]] = set()
        seen_ids: set[int] = set()
        for slot in ordered:
            if slot.key in seen_keys:
                raise ValueError(
                    f"Duplicate slot for week {slot.week} day {slot.day} "
                    f"in program {self.program_id!r}"
                )
            seen_keys.add(slot.key)
            if slot.slot_id is not None:
                if slot.slot_id in seen_ids:
                    raise ValueError(f"Duplicate slot_id {slot.slot_id}")
                seen_ids.add(slot.slot_id)

        object.__setattr__(self, "slots", ordered)

    @property
    def is_empty(self) -> bool:
        return not self.slots

    @property
    def total_weeks(self) -> int:
        """Highest week number in the program (0 when empty)."""
        return max((s.week for s in self.slots), default=0)

    def slot_for(self, week: int, day: int) -> ProgramSlot | None:
        for slot in self.slots:
            if slot.week == week and slot.day == day:
                return slot
        return None

    def slot_by_id(self, slot_id: int) -> ProgramSlot | None:
        for slot in self.slots:
            if slot.slot_id == slot_id:
                return slot
        return None


@dataclass(frozen=True)
class ProgressPointer:
    """
    A user's position inside their active program.

    ``current_week``/``current_day`` track the slot the user is on right now,
    which can drift from what elapsed days since ``start_date`` predict.
    """

    start_date: date
    current_week: int = 1
    current_day: int = 1

    def __post_init__(self) -> None:
        """Validate pointer data."""
        if isinstance(self.start_date, datetime):
            object.__setattr__(self, "start_date", self.start_date.date())
        if self.current_week < 1:
            raise ValueError("current_week must be positive")
        if self.current_day < 1:
            raise ValueError("current_day must be positive")

    @property
    def position(self) -> tuple[int, int]:
        return (self.current_week, self.current_day)


@dataclass(frozen=True)
class CompletionRecord:
    """
    A logged workout event (completed or skipped).

    ``occurred_at`` is expected to already be in the user's local time;
    only its calendar date is used for matching.
    """

    workout_slot_ref: int
    occurred_at: datetime
    skipped: bool = False
    notes: str | None = None
    rating: int | None = None  # 1-5
    duration: int | None = None  # minutes
    record_id: int | None = None

    def __post_init__(self) -> None:
        """Validate completion data."""
        if self.rating is not None and not 1 <= self.rating <= 5:
            raise ValueError(f"rating must be between 1 and 5, got {self.rating}")
        if self.duration is not None and self.duration < 0:
            raise ValueError("duration must be non-negative")

    @property
    def occurred_on(self) -> date:
        return self.occurred_at.date()


@dataclass(frozen=True)
class CalendarEntry:
    """The engine's verdict for a single date.  Derived, never stored."""

    date: date
    status: Status
    slot: ProgramSlot | None = None
    completion: CompletionRecord | None = None


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar dates."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(
                f"Range start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    @classmethod
    def for_month(cls, year: int, month: int) -> "DateRange":
        """Build the range covering every day of ``year``-``month``."""
        last_day = calendar.monthrange(year, month)[1]
        return cls(date(year, month, 1), date(year, month, last_day))

    def days(self) -> Iterator[date]:
        for offset in range(len(self)):
            yield self.start + timedelta(days=offset)

    def __len__(self) -> int:
        return (self.end - self.start).days + 1


@dataclass(frozen=True)
class CalendarSummary:
    """Tally of entry statuses over a projected range (rest days not counted)."""

    completed: int = 0
    skipped: int = 0
    missed: int = 0
    upcoming: int = 0

    @property
    def total(self) -> int:
        return self.completed + self.skipped + self.missed + self.upcoming

    def as_dict(self) -> dict[str, int]:
        return {
            "completed": self.completed,
            "skipped": self.skipped,
            "missed": self.missed,
            "upcoming": self.upcoming,
        }


@dataclass(frozen=True)
class MissedSlot:
    """A slot the pointer has not reached although its nominal date has passed."""

    slot: ProgramSlot
    scheduled_date: date


@dataclass(frozen=True)
class HistoryItem:
    """A completion record joined with the slot it refers to, if it still exists."""

    record: CompletionRecord
    slot: ProgramSlot | None = None

    @property
    def display_name(self) -> str:
        if self.slot is None:
            return DELETED_WORKOUT_NAME
        return self.slot.name or f"Week {self.slot.week} Day {self.slot.day}"

    @property
    def week(self) -> int:
        return self.slot.week if self.slot is not None else 0

    @property
    def day(self) -> int:
        return self.slot.day if self.slot is not None else 0


@dataclass(frozen=True)
class CalendarSnapshot:
    """Program, pointer and ledger read together from one storage snapshot."""

    program: Program | None
    progress: ProgressPointer | None
    completions: tuple[CompletionRecord, ...] = field(default_factory=tuple)
