"""workout-calendar: maps week/day training programs onto calendar dates."""

from loguru import logger

__version__ = "0.1.0"

# Silent when imported as a library; the CLI re-enables it via setup_logger.
logger.disable("workout_calendar")
