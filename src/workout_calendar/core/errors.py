"""Exception types raised by the calendar engine."""


class CalendarError(Exception):
    """Base class for workout-calendar engine errors."""

    pass


class CalendarComputationError(CalendarError):
    """
    Raised when date arithmetic fails inside the engine.

    Missing programs, missing progress and empty ledgers are not errors;
    they resolve to ``rest``.  This exception marks a genuine fault such as
    a date outside the representable range.
    """

    pass
