"""
# Quizcart
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

canvas_client.py - Canvas API client for the Canvas form builder.

Credentials are taken from, in order:
1. CANVAS_API_URL and CANVAS_API_KEY environment variables
2. the YAML file named by the `canvas_credentials` setting
3. ~/.canvas/quizcart.yaml

The credentials file is a two-key mapping:

    api_url: https://canvas.yourinstitution.edu
    api_key: your_canvas_token
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import yaml

from quizcart.config import Settings
from quizcart.errors import ConfigurationError

# Lazy import - only load canvasapi when actually needed
if TYPE_CHECKING:
    from canvasapi import Canvas

DEFAULT_CREDENTIALS_FILE = Path.home() / ".canvas" / "quizcart.yaml"


@dataclass(frozen=True)
class CanvasCredentials:
    api_url: str
    api_key: str


def _credentials_from_env() -> Optional[CanvasCredentials]:
    api_url = os.environ.get("CANVAS_API_URL")
    api_key = os.environ.get("CANVAS_API_KEY")
    if api_url and api_key:
        return CanvasCredentials(api_url=api_url.rstrip("/"), api_key=api_key)
    return None


def _credentials_from_file(path: Path) -> CanvasCredentials:
    if not path.is_file():
        raise ConfigurationError(
            f"Canvas credentials file not found: {path}\n"
            f"Set CANVAS_API_URL and CANVAS_API_KEY, or create the file with\n"
            f"  api_url: https://canvas.yourinstitution.edu\n"
            f"  api_key: your_canvas_token"
        )

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse {path}: {e}") from e

    if not isinstance(data, dict) or not data.get("api_url") or not data.get("api_key"):
        raise ConfigurationError(f"Credentials file must define api_url and api_key: {path}")

    return CanvasCredentials(api_url=str(data["api_url"]).rstrip("/"), api_key=str(data["api_key"]))


def load_canvas_credentials(settings: Optional[Settings] = None) -> CanvasCredentials:
    """
    Resolve Canvas credentials.

    Args:
        settings: Quizcart settings; `canvas_credentials` names the YAML file

    Returns:
        CanvasCredentials with a trailing-slash-free API URL

    Raises:
        ConfigurationError: no environment credentials and no usable file
    """
    from_env = _credentials_from_env()
    if from_env is not None:
        return from_env

    path = DEFAULT_CREDENTIALS_FILE
    if settings is not None and settings.canvas_credentials is not None:
        path = settings.canvas_credentials
    return _credentials_from_file(path)


def make_canvas_api_obj(settings: Optional[Settings] = None) -> "Canvas":
    """Create and return a canvasapi.Canvas client."""
    from canvasapi import Canvas  # Lazy import
    credentials = load_canvas_credentials(settings)
    return Canvas(credentials.api_url, credentials.api_key)
