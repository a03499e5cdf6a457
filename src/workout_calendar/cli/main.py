"""
CLI entry point using Typer.

Provides commands for following a training program on the calendar:
- init: Activate a program from a YAML/JSON file
- calendar: Show a month (or date range) with per-date status
- today: Show today's workout
- upcoming: Show the next workouts from the progress pointer
- missed: Show workouts the pointer has fallen behind on
- history: Show logged workouts
- log: Log a completed or skipped workout
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..logger import setup_logger
from .app import app
from .commands import calendar, progress, tracking  # noqa: F401  (registers commands)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
    log_file: Annotated[
        Optional[Path],
        typer.Option("--log-file", help="Also write logs to this file (rotated)"),
    ] = None,
) -> None:
    """
    Workout calendar: maps your training program onto dates and tracks completions.
    """
    setup_logger(level="DEBUG" if verbose else "WARNING", log_file=log_file)


if __name__ == "__main__":
    app()
