"""Module definition files.

A module is a directory holding a ``pyproject.toml``. Its identity is the
``[project].name`` of that file and its requirements are the distributions
listed in ``[project].dependencies``. Both are normalized with
:func:`packaging.utils.canonicalize_name` so that requirements match module
identities regardless of case or separator style.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name

from monorelease.core.changes import MODULE_FILE_NAME
from monorelease.exceptions import ModuleFileError


@dataclass(frozen=True)
class ModuleFile:
    """The parts of a module definition file the release engine needs."""

    module_path: str
    requires: tuple[str, ...] = field(default_factory=tuple)
    path: Path | None = None


def load_module_file(directory: Path | str) -> ModuleFile:
    """Load the module definition file located in ``directory``.

    Args:
        directory: Module directory containing pyproject.toml

    Returns:
        Parsed module file

    Raises:
        ModuleFileError: If the file is missing, unreadable, or has no name
    """
    module_file_path = Path(directory) / MODULE_FILE_NAME

    try:
        content = module_file_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ModuleFileError(f"Module file not found: {module_file_path}") from e
    except OSError as e:
        raise ModuleFileError(f"Failed to read module file {module_file_path}: {e}") from e

    return read_module_file(content, module_file_path)


def read_module_file(content: str, path: Path | None = None) -> ModuleFile:
    """Parse the contents of a module definition file.

    Raises:
        ModuleFileError: If the content is not valid TOML, has no
            ``[project].name``, or lists an invalid requirement
    """
    location = str(path) if path is not None else MODULE_FILE_NAME

    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ModuleFileError(f"Invalid TOML in {location}: {e}") from e

    project = data.get("project", {})
    name = project.get("name")
    if not name or not isinstance(name, str):
        raise ModuleFileError(f"Module name not present in {location}, expected [project].name")

    requires = []
    for spec in project.get("dependencies", []):
        try:
            requirement = Requirement(spec)
        except InvalidRequirement as e:
            raise ModuleFileError(f"Invalid requirement {spec!r} in {location}: {e}") from e
        requires.append(canonicalize_name(requirement.name))

    return ModuleFile(
        module_path=canonicalize_name(name),
        requires=tuple(dict.fromkeys(requires)),
        path=path,
    )
