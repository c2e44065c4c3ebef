"""Configuration loading from pyproject.toml."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from monorelease.config.models import MonoreleaseConfig
from monorelease.exceptions import ConfigNotFoundError, ConfigValidationError

PYPROJECT = "pyproject.toml"
TOOL_SECTION = "monorelease"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find the closest pyproject.toml, searching upward from ``start``.

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists in start or its parents
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / PYPROJECT
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No {PYPROJECT} found in {current} or any parent directory")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"{path} does not exist")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e


def extract_monorelease_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.monorelease]`` table, or an empty dict."""
    return pyproject.get("tool", {}).get(TOOL_SECTION, {})


def load_config(root: Path) -> MonoreleaseConfig:
    """Load the repository configuration from the root's pyproject.toml.

    Unlike module lookups this does not search parent directories: the
    configuration belongs to the repository root. A root without a
    pyproject.toml gets the default configuration.

    Raises:
        ConfigValidationError: If the configuration is invalid
    """
    pyproject_path = root / PYPROJECT
    if not pyproject_path.is_file():
        return MonoreleaseConfig()

    data = extract_monorelease_config(load_pyproject_toml(pyproject_path))
    try:
        return MonoreleaseConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid [tool.{TOOL_SECTION}] configuration:\n{e}") from e
