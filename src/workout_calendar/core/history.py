"""Completion history joined with program slots."""

from typing import Iterable

from .models import CompletionRecord, HistoryItem, Program


def completion_history(
    program: Program | None,
    completions: Iterable[CompletionRecord],
    limit: int | None = None,
) -> list[HistoryItem]:
    """
    Pair each completion record with the slot it refers to, newest first.

    Records whose slot was removed from the program (or logged against a
    program the user has since left) keep ``slot=None`` and display as
    "Deleted Workout".

    Args:
        program: Active program, or None
        completions: Completion ledger in append order
        limit: Maximum number of items to return

    Returns:
        HistoryItem list sorted by occurred_at descending

    Raises:
        ValueError: If limit is negative
    """
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")

    indexed = list(enumerate(completions))
    indexed.sort(key=lambda item: (item[1].occurred_at, item[0]), reverse=True)

    items: list[HistoryItem] = []
    for _, record in indexed:
        slot = program.slot_by_id(record.workout_slot_ref) if program is not None else None
        items.append(HistoryItem(record=record, slot=slot))

    if limit is not None:
        items = items[:limit]
    return items
