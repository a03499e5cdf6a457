"""
Status classification for a resolved calendar date.

Given the slot that applies to a date and the completion ledger, assign
exactly one of: rest, completed, skipped, missed, upcoming.
"""

from datetime import date
from typing import Iterable, Mapping, Sequence

from .models import CompletionRecord, ProgramSlot, Status


def group_by_date(
    completions: Iterable[CompletionRecord],
) -> dict[date, list[tuple[int, CompletionRecord]]]:
    """
    Index completion records by the calendar date they occurred on.

    Each record is kept with its ledger position so ties on ``occurred_at``
    resolve to the record appended last.
    """
    by_date: dict[date, list[tuple[int, CompletionRecord]]] = {}
    for position, record in enumerate(completions):
        by_date.setdefault(record.occurred_on, []).append((position, record))
    return by_date


def select_from_index(
    day: date,
    by_date: Mapping[date, Sequence[tuple[int, CompletionRecord]]],
) -> CompletionRecord | None:
    """Pick the authoritative record for ``day`` from a ``group_by_date`` index."""
    candidates = by_date.get(day)
    if not candidates:
        return None
    _, record = max(candidates, key=lambda item: (item[1].occurred_at, item[0]))
    return record


def select_completion(
    day: date,
    completions: Iterable[CompletionRecord],
) -> CompletionRecord | None:
    """
    Return the single authoritative completion record for ``day``.

    When several records fall on the same date the latest ``occurred_at``
    wins; equal timestamps go to the record that appears later in the ledger.

    Args:
        day: Calendar date to match
        completions: Completion ledger in append order

    Returns:
        The winning record, or None if nothing was logged that day
    """
    return select_from_index(day, group_by_date(completions))


def status_for(
    day: date,
    slot: ProgramSlot | None,
    record: CompletionRecord | None,
    today: date,
) -> Status:
    """Apply the classification rules once the record has been selected."""
    if slot is None:
        return "rest"
    if record is not None:
        return "skipped" if record.skipped else "completed"
    if day < today:
        return "missed"
    return "upcoming"


def classify(
    day: date,
    slot: ProgramSlot | None,
    completions: Iterable[CompletionRecord],
    today: date,
) -> Status:
    """
    Classify a date.

    Rules, in priority order:
    1. No slot scheduled → rest (even if something was logged that day)
    2. A record exists → skipped or completed, per the record
    3. No record and the date is before today → missed
    4. Otherwise → upcoming

    Args:
        day: Calendar date being classified
        slot: Slot resolved for ``day`` (None on rest days)
        completions: Completion ledger
        today: Reference date

    Returns:
        The date's status; never None
    """
    if slot is None:
        return "rest"
    return status_for(day, slot, select_completion(day, completions), today)
