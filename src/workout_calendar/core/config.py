"""
Configuration constants for the workout-calendar engine.

All adjustable parameters are centralized here.  ``load_settings()``
overlays the bundled calendar.yaml and the optional user override on top
of these defaults.
"""

from dataclasses import dataclass
from typing import Any, Final

# =============================================================================
# WEEK LAYOUT
# =============================================================================

DAYS_PER_WEEK: Final[int] = 7  # Calendar days per program week
REST_DAY_INDEX: Final[int] = 7  # 1-based weekday position that is always rest

# =============================================================================
# QUERY WINDOWS
# =============================================================================

UPCOMING_WINDOW: Final[int] = 3  # Slots shown by the upcoming-workouts query
HISTORY_LIMIT: Final[int] = 50  # Completion records shown by default

# =============================================================================
# SLOT DEFAULTS (applied when a program file omits a field)
# =============================================================================

DEFAULT_ESTIMATED_DURATION: Final[int] = 60  # minutes
DEFAULT_WORKOUT_TYPE: Final[str] = "Training"
DELETED_WORKOUT_NAME: Final[str] = "Deleted Workout"


@dataclass(frozen=True)
class CalendarSettings:
    """Week layout and query windows used by the engine."""

    days_per_week: int = DAYS_PER_WEEK
    rest_day: int = REST_DAY_INDEX
    upcoming_window: int = UPCOMING_WINDOW
    history_limit: int = HISTORY_LIMIT

    def __post_init__(self) -> None:
        """Validate settings."""
        if self.days_per_week < 1:
            raise ValueError("days_per_week must be positive")
        if not 1 <= self.rest_day <= self.days_per_week:
            raise ValueError(
                f"rest_day must be between 1 and {self.days_per_week}, got {self.rest_day}"
            )
        if self.upcoming_window < 1:
            raise ValueError("upcoming_window must be positive")
        if self.history_limit < 1:
            raise ValueError("history_limit must be positive")

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "CalendarSettings":
        """Build settings from a config section, ignoring unknown keys."""
        return cls(
            days_per_week=int(data.get("days_per_week", DAYS_PER_WEEK)),
            rest_day=int(data.get("rest_day", REST_DAY_INDEX)),
            upcoming_window=int(data.get("upcoming_window", UPCOMING_WINDOW)),
            history_limit=int(data.get("history_limit", HISTORY_LIMIT)),
        )


DEFAULT_SETTINGS: Final[CalendarSettings] = CalendarSettings()


def load_settings() -> CalendarSettings:
    """
    Load settings from the merged YAML configuration.

    Returns:
        CalendarSettings built from the ``schedule`` section, falling back
        to the module defaults for missing keys.

    Raises:
        ValueError: If a configured value is out of range
    """
    from .engine.config_loader import load_model_config

    section = load_model_config().get("schedule", {})
    if not isinstance(section, dict):
        section = {}
    return CalendarSettings.from_mapping(section)
