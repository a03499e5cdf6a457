"""
Configuration file discovery and merging for the calendar engine.

Two YAML documents feed ``load_settings()``:

- ``calendar.yaml`` shipped inside the package, holding the ``schedule``
  section (week length, rest day, query windows);
- ``~/.workout-calendar/calendar.yaml``, an optional per-user file whose
  keys replace the shipped ones section by section.

A file that cannot be read, does not parse, or is not a mapping is skipped
with a warning; the values in config.py then apply.
"""

from __future__ import annotations

import importlib.resources
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from loguru import logger

CONFIG_FILENAME = "calendar.yaml"
USER_CONFIG_DIRNAME = ".workout-calendar"


def _read_sections(path: Path) -> dict[str, Any]:
    """Parse one config file into its top-level sections."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Ignoring config file {path}: {e}")
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {path}: top level is not a mapping")
        return {}
    return data


def _overlay(base: Mapping[str, Any], layer: Mapping[str, Any]) -> dict[str, Any]:
    """
    Return ``base`` with ``layer`` applied on top.

    Nested mappings are merged key by key; any other value in ``layer``
    replaces the one in ``base``.  Neither argument is modified.
    """
    merged = {key: value for key, value in base.items()}
    for key, value in layer.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = _overlay(current, value)
        else:
            merged[key] = value
    return merged


def get_bundled_yaml_path() -> Path | None:
    """Location of the calendar.yaml shipped with the package, if present."""
    resource = importlib.resources.files("workout_calendar").joinpath(CONFIG_FILENAME)
    if resource.is_file():
        return Path(str(resource))
    source_tree = Path(__file__).resolve().parents[2] / CONFIG_FILENAME
    return source_tree if source_tree.exists() else None


def get_user_yaml_path() -> Path | None:
    """Location of the per-user override under $HOME, if the user created one."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    candidate = home / USER_CONFIG_DIRNAME / CONFIG_FILENAME
    return candidate if candidate.exists() else None


def load_model_config() -> dict[str, Any]:
    """
    Read the shipped config and apply the user override on top.

    Returns:
        Section name -> settings mapping; empty when neither file is usable
    """
    sources = [
        ("bundled", get_bundled_yaml_path()),
        ("user", get_user_yaml_path()),
    ]

    config: dict[str, Any] = {}
    for label, path in sources:
        if path is None:
            continue
        logger.debug(f"Reading {label} config from {path}")
        config = _overlay(config, _read_sections(path))
    return config
