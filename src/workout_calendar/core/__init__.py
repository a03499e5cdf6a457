"""
Calendar engine for workout-calendar.

Maps a week/day program onto dates, classifies each date and tallies the
result.  The functions exported here are the engine's public surface.
"""

from .classifier import classify, select_completion
from .config import CalendarSettings, load_settings
from .errors import CalendarComputationError, CalendarError
from .history import completion_history
from .progress import advance_pointer, missed_slots, schedule_offset, upcoming_slots
from .projector import aggregate, project, project_month
from .resolver import resolve_slot

__all__ = [
    "CalendarComputationError",
    "CalendarError",
    "CalendarSettings",
    "advance_pointer",
    "aggregate",
    "classify",
    "completion_history",
    "load_settings",
    "missed_slots",
    "project",
    "project_month",
    "resolve_slot",
    "schedule_offset",
    "select_completion",
    "upcoming_slots",
]
