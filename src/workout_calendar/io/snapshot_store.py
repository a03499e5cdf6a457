"""
File-based storage for a user's program, progress pointer and ledger.

Layout of a data directory:
- program.json      active program and its slots
- progress.json     progress pointer for the active program
- completions.jsonl append-only completion ledger, one JSON object per line
"""

import json
from pathlib import Path

import yaml
from loguru import logger

from ..core.models import CalendarSnapshot, CompletionRecord, Program, ProgressPointer
from .serializers import (
    ValidationError,
    completion_to_json_line,
    dict_to_completion,
    dict_to_program,
    dict_to_progress,
    program_to_dict,
    progress_to_dict,
)


class SnapshotStore:
    """
    Manages the three calendar inputs stored under one directory.

    The engine needs a consistent snapshot, so callers should use
    ``load_snapshot()`` rather than mixing reads taken at different times.
    """

    def __init__(self, data_dir: str | Path):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding program.json, progress.json and
                completions.jsonl
        """
        self.data_dir = Path(data_dir)
        self.program_path = self.data_dir / "program.json"
        self.progress_path = self.data_dir / "progress.json"
        self.completions_path = self.data_dir / "completions.jsonl"

    def exists(self) -> bool:
        """Check if the store has been initialized."""
        return self.program_path.exists() and self.completions_path.exists()

    def init(self, program: Program, progress: ProgressPointer) -> None:
        """
        Create the data directory and activate ``program``.

        An existing ledger is kept; program and progress are replaced.
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.save_program(program)
        self.save_progress(progress)
        if not self.completions_path.exists():
            self.completions_path.touch()
        logger.info(
            f"Activated program {program.program_id!r} ({len(program.slots)} slots) "
            f"starting {progress.start_date.isoformat()} in {self.data_dir}"
        )

    def load_program(self) -> Program | None:
        """
        Load the active program.

        Returns:
            Program, or None if no program is active

        Raises:
            ValidationError: If program.json is malformed
        """
        if not self.program_path.exists():
            return None
        try:
            with open(self.program_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Error parsing {self.program_path}: {e}") from e
        return dict_to_program(data)

    def save_program(self, program: Program) -> None:
        with open(self.program_path, "w", encoding="utf-8") as f:
            json.dump(program_to_dict(program), f, indent=2)

    def load_progress(self) -> ProgressPointer | None:
        """
        Load the progress pointer.

        Returns:
            ProgressPointer, or None if the user has not activated a program

        Raises:
            ValidationError: If progress.json is malformed
        """
        if not self.progress_path.exists():
            return None
        try:
            with open(self.progress_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Error parsing {self.progress_path}: {e}") from e
        return dict_to_progress(data)

    def save_progress(self, progress: ProgressPointer) -> None:
        """Overwrite the stored progress pointer."""
        with open(self.progress_path, "w", encoding="utf-8") as f:
            json.dump(progress_to_dict(progress), f, indent=2)

    def load_completions(self) -> list[CompletionRecord]:
        """
        Load the completion ledger in append order.

        Returns:
            List of CompletionRecord (empty if the ledger does not exist yet)

        Raises:
            ValidationError: If any line is malformed
        """
        if not self.completions_path.exists():
            return []

        records: list[CompletionRecord] = []
        with open(self.completions_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(dict_to_completion(json.loads(line)))
                except (json.JSONDecodeError, ValidationError) as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.completions_path}: {e}"
                    ) from e
        return records

    def next_record_id(self) -> int:
        """Id for the next appended record (one above the highest stored id)."""
        ids = [r.record_id for r in self.load_completions() if r.record_id is not None]
        return max(ids, default=0) + 1

    def append_completion(self, record: CompletionRecord) -> None:
        """
        Append a record to the ledger.

        Raises:
            FileNotFoundError: If the store has not been initialized
        """
        if not self.completions_path.exists():
            raise FileNotFoundError(
                f"Ledger not found: {self.completions_path}. Run 'init' first."
            )
        with open(self.completions_path, "a", encoding="utf-8") as f:
            f.write(completion_to_json_line(record) + "\n")

    def load_snapshot(self) -> CalendarSnapshot:
        """Read program, pointer and ledger together."""
        return CalendarSnapshot(
            program=self.load_program(),
            progress=self.load_progress(),
            completions=tuple(self.load_completions()),
        )


def load_program_file(path: str | Path) -> Program:
    """
    Read a program definition from a YAML or JSON file.

    Args:
        path: File with a top-level ``slots`` (or ``workouts``) list

    Returns:
        Program

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the file cannot be parsed or is invalid
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        try:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ValidationError(f"Error parsing program file {path}: {e}") from e
    return dict_to_program(data)


def get_default_data_dir() -> Path:
    """Default data directory (~/.workout-calendar)."""
    return Path.home() / ".workout-calendar"

