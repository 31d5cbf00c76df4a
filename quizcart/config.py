"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

config.py - Settings loaded from quizcart.yaml

Lookup order for the settings file:
1. Explicit path (--config)
2. QUIZCART_CONFIG environment variable
3. quizcart.yaml in the current directory

A missing file is not an error; defaults apply. Example:

    workspace_name: quizcart_work
    output_dir: ./forms
    ledger_path: ./forms/forms.csv
    builder: files          # or: canvas
    canvas_course_id: 12345
    canvas_credentials: ~/.canvas/quizcart.yaml
    max_files: 10000
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from quizcart.errors import ConfigurationError

CONFIG_FILENAME = "quizcart.yaml"
CONFIG_ENV_VAR = "QUIZCART_CONFIG"

BUILDERS = ("files", "canvas")


@dataclass
class Settings:
    workspace_root: Path = Path(tempfile.gettempdir())
    workspace_name: str = "quizcart_work"
    output_dir: Path = Path("forms")
    ledger_path: Optional[Path] = None
    builder: str = "files"
    canvas_course_id: Optional[int] = None
    canvas_credentials: Optional[Path] = None

    # Zip bomb / DoS limits; a breach fails the whole archive
    max_files: int = 10000
    max_total_size: int = 500 * 1024 * 1024
    max_file_size: int = 50 * 1024 * 1024


_PATH_FIELDS = {"workspace_root", "output_dir", "ledger_path", "canvas_credentials"}
_INT_FIELDS = {
    "canvas_course_id",
    "max_files",
    "max_total_size",
    "max_file_size",
}


def find_config_file(explicit: Optional[Path] = None) -> Optional[Path]:
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigurationError(f"Config file not found: {explicit}")
        return explicit

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        if not path.is_file():
            raise ConfigurationError(f"{CONFIG_ENV_VAR} points to a missing file: {path}")
        return path

    local = Path.cwd() / CONFIG_FILENAME
    return local if local.is_file() else None


def settings_from_dict(data: Dict[str, Any]) -> Settings:
    """Build Settings from a mapping, validating keys and value types."""
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown setting(s): {', '.join(unknown)}")

    values: Dict[str, Any] = {}
    for key, value in data.items():
        if value is None:
            continue
        if key in _PATH_FIELDS:
            values[key] = Path(str(value)).expanduser()
        elif key in _INT_FIELDS:
            try:
                values[key] = int(value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Setting '{key}' must be an integer, got {value!r}") from e
        else:
            values[key] = str(value)

    settings = Settings(**values)
    if settings.builder not in BUILDERS:
        raise ConfigurationError(
            f"Setting 'builder' must be one of {', '.join(BUILDERS)}, got {settings.builder!r}"
        )
    if not settings.workspace_name or "/" in settings.workspace_name:
        raise ConfigurationError(f"Invalid workspace_name: {settings.workspace_name!r}")
    return settings


def load_settings(config_path: Optional[Path] = None) -> Settings:
    path = find_config_file(config_path)
    if path is None:
        return Settings()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping of settings")

    return settings_from_dict(data)
