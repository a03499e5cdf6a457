"""
Rule-focused unit tests for the slot resolver and status classifier.

Dates are anchored on a program starting Monday 2025-01-06 so that every
seventh day (Sundays: 01-12, 01-19, 01-26, ...) is the default rest day.
Expected values are hand-computed from elapsed-day arithmetic.
"""

from datetime import date, datetime

import pytest

from workout_calendar.core.classifier import classify, group_by_date, select_completion
from workout_calendar.core.config import (
    DAYS_PER_WEEK,
    DEFAULT_SETTINGS,
    REST_DAY_INDEX,
    CalendarSettings,
)
from workout_calendar.core.models import (
    CompletionRecord,
    DateRange,
    Program,
    ProgramSlot,
    ProgressPointer,
)
from workout_calendar.core.resolver import (
    SlotIndex,
    expected_position,
    is_rest_day,
    resolve_slot,
    split_elapsed,
)

START = date(2025, 1, 6)  # Monday


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _make_program(weeks: int = 4, days: int = 6) -> Program:
    """Program with ``days`` slots per week, ids numbered in (week, day) order."""
    slots = [
        ProgramSlot(week=w, day=d, name=f"W{w}D{d}", slot_id=(w - 1) * days + d)
        for w in range(1, weeks + 1)
        for d in range(1, days + 1)
    ]
    return Program(program_id=1, name="Test Program", slots=tuple(slots))


def _pointer(week: int = 1, day: int = 1, start: date = START) -> ProgressPointer:
    return ProgressPointer(start_date=start, current_week=week, current_day=day)


def _record(
    when: datetime,
    slot_ref: int = 1,
    skipped: bool = False,
    record_id: int | None = None,
) -> CompletionRecord:
    return CompletionRecord(
        workout_slot_ref=slot_ref,
        occurred_at=when,
        skipped=skipped,
        record_id=record_id,
    )


# ===========================================================================
# Models
# ===========================================================================

class TestModels:
    """Validation and ordering on the data model."""

    def test_program_sorts_slots_by_week_then_day(self):
        program = Program(
            program_id=1,
            name="p",
            slots=(
                ProgramSlot(week=2, day=1, slot_id=3),
                ProgramSlot(week=1, day=2, slot_id=2),
                ProgramSlot(week=1, day=1, slot_id=1),
            ),
        )
        assert [s.key for s in program.slots] == [(1, 1), (1, 2), (2, 1)]

    def test_duplicate_week_day_rejected(self):
        with pytest.raises(ValueError, match="Duplicate slot"):
            Program(
                program_id=1,
                name="p",
                slots=(ProgramSlot(week=1, day=1), ProgramSlot(week=1, day=1)),
            )

    def test_duplicate_slot_id_rejected(self):
        with pytest.raises(ValueError, match="Duplicate slot_id"):
            Program(
                program_id=1,
                name="p",
                slots=(ProgramSlot(week=1, day=1, slot_id=7), ProgramSlot(week=1, day=2, slot_id=7)),
            )

    @pytest.mark.parametrize("week,day", [(0, 1), (1, 0), (-1, 3)])
    def test_slot_coordinates_must_be_positive(self, week, day):
        with pytest.raises(ValueError):
            ProgramSlot(week=week, day=day)

    def test_slot_exercises_become_tuple(self):
        slot = ProgramSlot(week=1, day=1, exercises=["row", "run"])
        assert slot.exercises == ("row", "run")

    def test_pointer_accepts_datetime_start(self):
        p = ProgressPointer(start_date=datetime(2025, 1, 6, 9, 30))
        assert p.start_date == START
        assert p.position == (1, 1)

    def test_rating_out_of_range_rejected(self):
        with pytest.raises(ValueError, match="rating"):
            CompletionRecord(workout_slot_ref=1, occurred_at=datetime(2025, 1, 7), rating=6)

    def test_total_weeks(self):
        assert _make_program(weeks=3).total_weeks == 3
        assert Program(program_id=1, name="empty").total_weeks == 0

    def test_date_range_rejects_reversed_bounds(self):
        with pytest.raises(ValueError):
            DateRange(date(2025, 1, 10), date(2025, 1, 9))

    def test_date_range_for_month_handles_leap_february(self):
        r = DateRange.for_month(2024, 2)
        assert r.end == date(2024, 2, 29)
        assert len(r) == 29
        assert len(list(r.days())) == 29

    def test_date_range_reaches_last_representable_day(self):
        r = DateRange(date.max, date.max)
        assert list(r.days()) == [date.max]


# ===========================================================================
# Settings
# ===========================================================================

class TestSettings:
    """CalendarSettings validation."""

    def test_defaults_match_constants(self):
        assert DEFAULT_SETTINGS.days_per_week == DAYS_PER_WEEK == 7
        assert DEFAULT_SETTINGS.rest_day == REST_DAY_INDEX == 7

    @pytest.mark.parametrize("rest_day", [0, 8])
    def test_rest_day_out_of_week_rejected(self, rest_day):
        with pytest.raises(ValueError, match="rest_day"):
            CalendarSettings(rest_day=rest_day)

    def test_days_per_week_must_be_positive(self):
        with pytest.raises(ValueError):
            CalendarSettings(days_per_week=0, rest_day=1)

    def test_from_mapping_ignores_unknown_keys(self):
        s = CalendarSettings.from_mapping({"rest_day": 1, "colour": "blue"})
        assert s.rest_day == 1
        assert s.days_per_week == 7


# ===========================================================================
# Elapsed-day arithmetic
# ===========================================================================

class TestElapsedArithmetic:
    """split_elapsed / expected_position."""

    @pytest.mark.parametrize(
        "elapsed,expected",
        [(0, (1, 1)), (1, (1, 2)), (6, (1, 7)), (7, (2, 1)), (11, (2, 5)), (20, (3, 7))],
    )
    def test_split_elapsed(self, elapsed, expected):
        assert split_elapsed(elapsed) == expected

    def test_expected_position_before_start_is_none(self):
        assert expected_position(_pointer(), date(2025, 1, 5)) is None

    def test_sunday_is_rest_for_monday_start(self):
        assert is_rest_day(_pointer(), date(2025, 1, 12))
        assert not is_rest_day(_pointer(), date(2025, 1, 13))


# ===========================================================================
# Slot resolver
# ===========================================================================

class TestResolvePastAndPresent:
    """Dates on or before today resolve by elapsed-day arithmetic."""

    def test_past_date_matches_elapsed_week_and_day(self):
        # 2025-01-08: elapsed 2 → week 1 day 3
        slot = resolve_slot(date(2025, 1, 8), _make_program(), _pointer(), today=date(2025, 1, 10))
        assert slot.key == (1, 3)

    def test_today_uses_elapsed_arithmetic_not_pointer(self):
        # today 2025-01-14: elapsed 8 → (2, 2), pointer deliberately elsewhere
        today = date(2025, 1, 14)
        slot = resolve_slot(today, _make_program(), _pointer(4, 5), today=today)
        assert slot.key == (2, 2)

    def test_before_start_is_rest(self):
        slot = resolve_slot(date(2025, 1, 5), _make_program(), _pointer(), today=date(2025, 1, 10))
        assert slot is None

    def test_rest_day_ignores_program_content(self):
        """A day-7 slot exists, but Sunday is still rest."""
        program = _make_program(days=7)
        slot = resolve_slot(date(2025, 1, 12), program, _pointer(), today=date(2025, 1, 20))
        assert slot is None

    def test_missing_day_in_week_resolves_to_rest(self):
        """Program with 3 workouts per week: day 4 has no slot."""
        program = _make_program(days=3)
        # 2025-01-09: elapsed 3 → (1, 4)
        assert resolve_slot(date(2025, 1, 9), program, _pointer(), today=date(2025, 1, 20)) is None

    def test_past_dates_cycle_after_program_end(self):
        """One-week program: week 2 of the calendar repeats week 1."""
        program = _make_program(weeks=1)
        # 2025-01-14: elapsed 8 → (2, 2) → wraps to (1, 2)
        slot = resolve_slot(date(2025, 1, 14), program, _pointer(), today=date(2025, 2, 28))
        assert slot.key == (1, 2)

    def test_past_date_independent_of_pointer(self):
        program = _make_program()
        today = date(2025, 1, 20)
        for week, day in [(1, 1), (3, 2), (4, 6)]:
            slot = resolve_slot(date(2025, 1, 9), program, _pointer(week, day), today=today)
            assert slot.key == (1, 4)


class TestResolveFuture:
    """Future dates resolve from the progress pointer."""

    def test_pointer_drift_overrides_elapsed_arithmetic(self):
        # today 2025-01-14 → elapsed (2, 2); pointer is at (3, 2).
        # 2025-01-16 is two days ahead: pointer index 13 + 2 = 15 → (3, 4).
        program = _make_program()
        slot = resolve_slot(date(2025, 1, 16), program, _pointer(3, 2), today=date(2025, 1, 14))
        assert slot.key == (3, 4)
        assert slot.key != (2, 4)  # what elapsed-day arithmetic would give

    def test_future_wraps_past_program_end(self):
        # 12 slots; pointer (2, 6) is index 11; three days ahead → 14 → 14 % 12 = 2 → (1, 3)
        program = _make_program(weeks=2)
        slot = resolve_slot(date(2025, 1, 10), program, _pointer(2, 6), today=date(2025, 1, 7))
        assert slot.key == (1, 3)

    def test_cycling_property_over_a_month(self):
        program = _make_program(weeks=2)
        ordered = list(program.slots)
        today = date(2025, 1, 7)
        pointer = _pointer(2, 6)
        for day in DateRange(date(2025, 1, 8), date(2025, 2, 7)).days():
            slot = resolve_slot(day, program, pointer, today=today)
            if is_rest_day(pointer, day):
                assert slot is None
                continue
            ahead = (day - today).days
            assert slot == ordered[(11 + ahead) % len(ordered)]

    def test_future_rest_day_still_rest(self):
        program = _make_program()
        # 2025-01-12 is a Sunday, today is the Friday before
        assert resolve_slot(date(2025, 1, 12), program, _pointer(1, 5), today=date(2025, 1, 10)) is None

    def test_pointer_on_missing_slot_moves_to_next_slot(self):
        # Pointer (1, 7) has no slot in a 6-day program → treated as (2, 1) (index 6).
        program = _make_program(days=6)
        slot = resolve_slot(date(2025, 1, 8), program, _pointer(1, 7), today=date(2025, 1, 7))
        assert slot.key == (2, 2)

    def test_pointer_beyond_program_end_wraps_to_start(self):
        program = _make_program(weeks=2)
        slot = resolve_slot(date(2025, 1, 8), program, _pointer(9, 1), today=date(2025, 1, 7))
        assert slot.key == (1, 2)

    def test_program_not_started_yet_anchors_on_start_date(self):
        program = _make_program()
        today = date(2025, 1, 1)
        assert resolve_slot(date(2025, 1, 6), program, _pointer(), today=today).key == (1, 1)
        assert resolve_slot(date(2025, 1, 7), program, _pointer(), today=today).key == (1, 2)
        assert resolve_slot(date(2025, 1, 5), program, _pointer(), today=today) is None

    def test_no_program_or_pointer_is_rest(self):
        today = date(2025, 1, 10)
        assert resolve_slot(date(2025, 1, 13), None, _pointer(), today=today) is None
        assert resolve_slot(date(2025, 1, 13), _make_program(), None, today=today) is None
        empty = Program(program_id=1, name="empty")
        assert resolve_slot(date(2025, 1, 13), empty, _pointer(3, 2), today=today) is None

    def test_only_rest_day_slots_resolve_to_rest(self):
        program = Program(program_id=1, name="sundays", slots=(ProgramSlot(week=1, day=7, slot_id=1),))
        assert resolve_slot(date(2025, 1, 13), program, _pointer(), today=date(2025, 1, 10)) is None

    def test_custom_rest_day(self):
        settings = CalendarSettings(rest_day=1)
        program = _make_program(days=7)
        # Start date itself is weekday 1 → rest
        assert resolve_slot(START, program, _pointer(), date(2025, 1, 10), settings) is None
        assert resolve_slot(date(2025, 1, 12), program, _pointer(), date(2025, 1, 20), settings).key == (1, 7)


class TestSlotIndex:
    """Ordered slot list used by the pointer."""

    def test_ordered_excludes_rest_day_slots(self):
        index = SlotIndex.build(_make_program(weeks=2, days=7))
        assert len(index) == 12
        assert all(s.day != 7 for s in index.ordered)

    def test_position_of_exact_and_missing(self):
        index = SlotIndex.build(_make_program(weeks=2))
        assert index.position_of(1, 1) == 0
        assert index.position_of(2, 6) == 11
        assert index.position_of(1, 7) == 6
        assert index.position_of(3, 1) == 0

    def test_position_of_empty_index_raises(self):
        index = SlotIndex.build(Program(program_id=1, name="empty"))
        with pytest.raises(ValueError):
            index.position_of(1, 1)

    @pytest.mark.parametrize(
        "week,expected",
        [(1, (0, 1)), (4, (0, 4)), (5, (1, 1)), (9, (2, 1)), (12, (2, 4))],
    )
    def test_wrap_week(self, week, expected):
        index = SlotIndex.build(_make_program(weeks=4))
        assert index.wrap_week(week) == expected


# ===========================================================================
# Status classifier
# ===========================================================================

class TestSelectCompletion:
    """Choosing the authoritative record for a date."""

    def test_latest_record_on_date_wins(self):
        early = _record(datetime(2025, 1, 8, 7, 0), record_id=1)
        late = _record(datetime(2025, 1, 8, 19, 0), skipped=True, record_id=2)
        assert select_completion(date(2025, 1, 8), [late, early]) is late

    def test_equal_timestamps_go_to_later_ledger_entry(self):
        first = _record(datetime(2025, 1, 8, 7, 0), record_id=1)
        second = _record(datetime(2025, 1, 8, 7, 0), skipped=True, record_id=2)
        assert select_completion(date(2025, 1, 8), [first, second]) is second
        assert select_completion(date(2025, 1, 8), [second, first]) is first

    def test_other_dates_ignored(self):
        rec = _record(datetime(2025, 1, 9, 0, 5))
        assert select_completion(date(2025, 1, 8), [rec]) is None

    def test_group_by_date_keeps_ledger_positions(self):
        a = _record(datetime(2025, 1, 8, 7))
        b = _record(datetime(2025, 1, 8, 8))
        c = _record(datetime(2025, 1, 9, 8))
        grouped = group_by_date([a, b, c])
        assert grouped[date(2025, 1, 8)] == [(0, a), (1, b)]
        assert grouped[date(2025, 1, 9)] == [(2, c)]


class TestClassify:
    """Classification rules in priority order."""

    SLOT = ProgramSlot(week=1, day=2, slot_id=2)
    TODAY = date(2025, 1, 10)

    def test_no_slot_is_rest_even_with_record(self):
        rec = _record(datetime(2025, 1, 12, 9))
        assert classify(date(2025, 1, 12), None, [rec], self.TODAY) == "rest"

    def test_completed(self):
        rec = _record(datetime(2025, 1, 7, 9))
        assert classify(date(2025, 1, 7), self.SLOT, [rec], self.TODAY) == "completed"

    def test_skipped(self):
        rec = _record(datetime(2025, 1, 7, 9), skipped=True)
        assert classify(date(2025, 1, 7), self.SLOT, [rec], self.TODAY) == "skipped"

    def test_latest_record_decides(self):
        done = _record(datetime(2025, 1, 7, 9))
        skip = _record(datetime(2025, 1, 7, 20), skipped=True)
        assert classify(date(2025, 1, 7), self.SLOT, [skip, done], self.TODAY) == "skipped"

    def test_past_without_record_is_missed(self):
        assert classify(date(2025, 1, 7), self.SLOT, [], self.TODAY) == "missed"

    def test_today_without_record_is_upcoming(self):
        assert classify(self.TODAY, self.SLOT, [], self.TODAY) == "upcoming"

    def test_future_without_record_is_upcoming(self):
        assert classify(date(2025, 1, 20), self.SLOT, [], self.TODAY) == "upcoming"

    def test_record_on_future_date_counts(self):
        rec = _record(datetime(2025, 1, 20, 6))
        assert classify(date(2025, 1, 20), self.SLOT, [rec], self.TODAY) == "completed"

    def test_never_returns_none_for_a_slot(self):
        ledger = [_record(datetime(2025, 1, 8, 9)), _record(datetime(2025, 1, 9, 9), skipped=True)]
        for day in DateRange(date(2025, 1, 1), date(2025, 1, 31)).days():
            status = classify(day, self.SLOT, ledger, self.TODAY)
            assert status in ("upcoming", "completed", "skipped", "missed")
