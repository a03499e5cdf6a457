"""
JSON serialization for calendar data models.

Handles conversion between dataclasses and JSON-compatible dicts, and the
validation of caller-supplied dates, months and ranges.  External documents
use camelCase keys (``estimatedDuration``, ``startDate``, ``occurredAt``);
snake_case keys are accepted on input as well.
"""

import json
import re
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Mapping

from ..core.models import (
    CalendarEntry,
    CalendarSummary,
    CompletionRecord,
    DateRange,
    HistoryItem,
    MissedSlot,
    Program,
    ProgramSlot,
    ProgressPointer,
)
from ..core.config import DEFAULT_ESTIMATED_DURATION, DEFAULT_WORKOUT_TYPE


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")


def validate_date(date_str: str) -> date:
    """
    Validate a YYYY-MM-DD string and return the date it names.

    Args:
        date_str: Date string to validate

    Returns:
        Parsed date

    Raises:
        ValidationError: If date format is invalid
    """
    if not isinstance(date_str, str) or not _DATE_RE.match(date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e


def validate_month(month_str: str) -> tuple[int, int]:
    """
    Validate a YYYY-MM month string.

    Returns:
        (year, month)

    Raises:
        ValidationError: If the month is malformed or out of range
    """
    if not isinstance(month_str, str) or not _MONTH_RE.match(month_str):
        raise ValidationError(
            f"Month parameter required in YYYY-MM format, got {month_str!r}"
        )
    year, month = (int(part) for part in month_str.split("-"))
    if not 1 <= month <= 12 or year < 1:
        raise ValidationError(f"Invalid month: {month_str}")
    return year, month


def parse_date_range(start: str, end: str) -> DateRange:
    """
    Build an inclusive DateRange from two YYYY-MM-DD strings.

    Raises:
        ValidationError: If either bound is malformed or start > end
    """
    start_date = validate_date(start)
    end_date = validate_date(end)
    try:
        return DateRange(start_date, end_date)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO timestamp (or bare date) into a naive local datetime.

    Offset-aware values are converted to local time and the offset dropped,
    so every record in the ledger compares on the same clock.

    Raises:
        ValidationError: If the value is not ISO formatted
    """
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid timestamp: {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(f"Invalid timestamp: {value}. Expected ISO 8601") from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def validate_positive_int(value: Any, name: str) -> int:
    """
    Validate that a value is a positive integer.

    Raises:
        ValidationError: If value is not an integer >= 1
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"{name} must be a positive integer, got {value!r}")
    return value


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key (camelCase or snake_case spelling)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _require(data: Mapping[str, Any], *keys: str) -> Any:
    value = _pick(data, *keys)
    if value is None:
        raise ValidationError(f"Missing required field {keys[0]!r}")
    return value


# ---------------------------------------------------------------------------
# Program
# ---------------------------------------------------------------------------


def slot_to_dict(slot: ProgramSlot) -> dict[str, Any]:
    """
    Convert ProgramSlot to JSON-compatible dict.

    Args:
        slot: ProgramSlot to convert

    Returns:
        Dict representation
    """
    return {
        "id": slot.slot_id,
        "week": slot.week,
        "day": slot.day,
        "name": slot.name,
        "description": slot.description,
        "estimatedDuration": slot.estimated_duration,
        "workoutType": slot.workout_type,
        "exercises": list(slot.exercises),
    }


def dict_to_slot(data: Mapping[str, Any]) -> ProgramSlot:
    """
    Convert dict to ProgramSlot.

    Missing duration and workout type fall back to the configured defaults.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, Mapping):
        raise ValidationError(f"Slot must be an object, got {type(data).__name__}")

    week = validate_positive_int(_require(data, "week"), "week")
    day = validate_positive_int(_require(data, "day"), "day")
    exercises = _pick(data, "exercises", default=[])
    if not isinstance(exercises, (list, tuple)):
        raise ValidationError(f"exercises for week {week} day {day} must be a list")

    try:
        return ProgramSlot(
            week=week,
            day=day,
            name=str(_pick(data, "name", default="")),
            description=str(_pick(data, "description", default="")),
            estimated_duration=int(
                _pick(data, "estimatedDuration", "estimated_duration", "duration",
                      default=DEFAULT_ESTIMATED_DURATION)
            ),
            workout_type=str(_pick(data, "workoutType", "workout_type", default=DEFAULT_WORKOUT_TYPE)),
            exercises=tuple(exercises),
            slot_id=_pick(data, "id", "slot_id"),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid slot week {week} day {day}: {e}") from e


def program_to_dict(program: Program) -> dict[str, Any]:
    """Convert Program to JSON-compatible dict."""
    return {
        "id": program.program_id,
        "name": program.name,
        "slots": [slot_to_dict(s) for s in program.slots],
    }


def dict_to_program(data: Mapping[str, Any]) -> Program:
    """
    Convert dict to Program.

    Slots without an ``id`` get fresh ids above the highest existing one,
    in (week, day) order, so completion records can always reference them.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, Mapping):
        raise ValidationError("Program document must be an object")

    raw_slots = _pick(data, "slots", "workouts", default=[])
    if not isinstance(raw_slots, list):
        raise ValidationError("Program 'slots' must be a list")

    slots = sorted((dict_to_slot(s) for s in raw_slots), key=lambda s: s.key)
    used_ids = {s.slot_id for s in slots if s.slot_id is not None}
    next_id = max(used_ids, default=0) + 1
    numbered: list[ProgramSlot] = []
    for slot in slots:
        if slot.slot_id is None:
            slot = replace(slot, slot_id=next_id)
            next_id += 1
        numbered.append(slot)

    try:
        return Program(
            program_id=_pick(data, "id", "program_id", default=1),
            name=str(_pick(data, "name", default="Program")),
            slots=tuple(numbered),
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


# ---------------------------------------------------------------------------
# Progress pointer
# ---------------------------------------------------------------------------


def progress_to_dict(progress: ProgressPointer) -> dict[str, Any]:
    """Convert ProgressPointer to JSON-compatible dict."""
    return {
        "startDate": progress.start_date.isoformat(),
        "currentWeek": progress.current_week,
        "currentDay": progress.current_day,
    }


def dict_to_progress(data: Mapping[str, Any]) -> ProgressPointer:
    """
    Convert dict to ProgressPointer.

    ``startDate`` may be a bare date or a full timestamp; only the date is kept.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, Mapping):
        raise ValidationError("Progress document must be an object")

    raw_start = _require(data, "startDate", "start_date")
    start = parse_timestamp(str(raw_start)).date()

    return ProgressPointer(
        start_date=start,
        current_week=validate_positive_int(
            _pick(data, "currentWeek", "current_week", default=1), "currentWeek"
        ),
        current_day=validate_positive_int(
            _pick(data, "currentDay", "current_day", default=1), "currentDay"
        ),
    )


# ---------------------------------------------------------------------------
# Completion ledger
# ---------------------------------------------------------------------------


def completion_to_dict(record: CompletionRecord) -> dict[str, Any]:
    """Convert CompletionRecord to JSON-compatible dict."""
    d: dict[str, Any] = {
        "id": record.record_id,
        "workoutSlotRef": record.workout_slot_ref,
        "occurredAt": record.occurred_at.isoformat(),
        "skipped": record.skipped,
    }
    # Optional fields only when set, keeping ledger lines short
    if record.notes is not None:
        d["notes"] = record.notes
    if record.rating is not None:
        d["rating"] = record.rating
    if record.duration is not None:
        d["duration"] = record.duration
    return d


def dict_to_completion(data: Mapping[str, Any]) -> CompletionRecord:
    """
    Convert dict to CompletionRecord.

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, Mapping):
        raise ValidationError("Completion record must be an object")

    slot_ref = _require(data, "workoutSlotRef", "workout_slot_ref", "workoutId")
    if isinstance(slot_ref, bool) or not isinstance(slot_ref, int):
        raise ValidationError(f"workoutSlotRef must be an integer, got {slot_ref!r}")

    skipped = _pick(data, "skipped", default=False)
    if not isinstance(skipped, bool):
        raise ValidationError(f"skipped must be true or false, got {skipped!r}")

    try:
        return CompletionRecord(
            workout_slot_ref=slot_ref,
            occurred_at=parse_timestamp(_require(data, "occurredAt", "occurred_at", "completedAt")),
            skipped=skipped,
            notes=_pick(data, "notes"),
            rating=_pick(data, "rating"),
            duration=_pick(data, "duration"),
            record_id=_pick(data, "id", "record_id"),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(str(e)) from e


def completion_to_json_line(record: CompletionRecord) -> str:
    """Serialize a completion record as a single JSONL line."""
    return json.dumps(completion_to_dict(record), separators=(",", ":"))


# ---------------------------------------------------------------------------
# Engine output
# ---------------------------------------------------------------------------


def entry_to_dict(entry: CalendarEntry) -> dict[str, Any]:
    """
    Convert CalendarEntry to the presentation-layer contract.

    ``slot`` and ``completionRecord`` are present only when set.
    """
    d: dict[str, Any] = {"status": entry.status}
    if entry.slot is not None:
        d["slot"] = slot_to_dict(entry.slot)
    if entry.completion is not None:
        d["completionRecord"] = completion_to_dict(entry.completion)
    return d


def calendar_to_dict(
    entries: Mapping[str, CalendarEntry],
    summary: CalendarSummary,
) -> dict[str, Any]:
    """Bundle projected entries and their summary for JSON output."""
    return {
        "entries": {key: entry_to_dict(entry) for key, entry in entries.items()},
        "summary": summary.as_dict(),
    }


def missed_to_dict(missed: MissedSlot) -> dict[str, Any]:
    return {
        "scheduledDate": missed.scheduled_date.isoformat(),
        "week": missed.slot.week,
        "day": missed.slot.day,
        "slot": slot_to_dict(missed.slot),
    }


def history_item_to_dict(item: HistoryItem) -> dict[str, Any]:
    d = completion_to_dict(item.record)
    d.update({"workoutName": item.display_name, "week": item.week, "day": item.day})
    return d
