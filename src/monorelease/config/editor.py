"""In-place editing of pinned dependencies in pyproject.toml.

Dependencies outside the repository are pinned in the
``[tool.monorelease.dependencies]`` table of the root ``pyproject.toml``.
Edits preserve formatting and comments by using targeted regex replacement
rather than full TOML parsing and rewriting. The edited content is parsed
again before it is written, so a layout the regexes don't understand is
reported instead of being corrupted.
"""

from __future__ import annotations

import json
import re
import tomllib
from typing import TYPE_CHECKING

from monorelease.config.loader import extract_monorelease_config, find_pyproject_toml
from monorelease.exceptions import ConfigValidationError, DependencyNotFoundError
from monorelease.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

logger = get_logger(__name__)

DEPENDENCIES_TABLE = "[tool.monorelease.dependencies]"

# Header line of the table up to the next table header or EOF
_TABLE_RE = re.compile(
    r"^\[tool\.monorelease\.dependencies\][^\n]*\n(?P<body>.*?)(?=^[ \t]*\[|\Z)",
    re.MULTILINE | re.DOTALL,
)


def set_dependency(path: Path | None, name: str, version: str) -> str | None:
    """Pin a dependency to a version.

    Args:
        path: Path to pyproject.toml or directory to search from
        name: Dependency name
        version: Version to pin

    Returns:
        The version previously pinned, or None if the dependency is new

    Raises:
        ConfigValidationError: If the file is invalid or can't be edited in place
    """
    pyproject_path = _resolve(path)
    content = _read(pyproject_path)
    dependencies = _dependencies(content, pyproject_path)
    previous = dependencies.get(name)

    entry = f"{_toml_string(name)} = {_toml_string(version)}\n"
    match = _TABLE_RE.search(content)

    if match is None:
        if dependencies:
            raise ConfigValidationError(
                f"Cannot edit dependencies in {pyproject_path}: "
                f"expected a {DEPENDENCIES_TABLE} table"
            )
        separator = "\n" if content else ""
        new_content = f"{content}{separator}{DEPENDENCIES_TABLE}\n{entry}"
    else:
        body = match.group("body")
        entry_re = _entry_re(name)
        if entry_re.search(body):
            new_body = entry_re.sub(lambda _: entry, body, count=1)
        else:
            # Append after the last entry, keeping blank lines before the next table.
            stripped = body.rstrip("\n")
            rest = body[len(stripped) :]
            new_body = f"{stripped}\n{entry}{rest[1:]}" if stripped else f"{entry}{rest}"
        new_content = content[: match.start("body")] + new_body + content[match.end("body") :]

    _write(pyproject_path, new_content, {**dependencies, name: version})

    if previous is None:
        logger.info("Adding dependency %s: %s", name, version)
    else:
        logger.info("Updating dependency %s: %s, to %s", name, previous, version)
    return previous


def delete_dependency(path: Path | None, name: str) -> str:
    """Remove a pinned dependency.

    Returns:
        The version that was pinned

    Raises:
        DependencyNotFoundError: If the dependency isn't pinned
        ConfigValidationError: If the file is invalid or can't be edited in place
    """
    pyproject_path = _resolve(path)
    content = _read(pyproject_path)
    dependencies = _dependencies(content, pyproject_path)
    if name not in dependencies:
        raise DependencyNotFoundError(name)

    match = _TABLE_RE.search(content)
    entry_re = _entry_re(name)
    if match is None or not entry_re.search(match.group("body")):
        raise ConfigValidationError(
            f"Cannot edit dependency {name} in {pyproject_path}: "
            f"expected one {DEPENDENCIES_TABLE} entry per line"
        )

    new_body = entry_re.sub("", match.group("body"), count=1)
    new_content = content[: match.start("body")] + new_body + content[match.end("body") :]

    expected = {key: value for key, value in dependencies.items() if key != name}
    _write(pyproject_path, new_content, expected)

    logger.info("Deleting dependency %s: %s", name, dependencies[name])
    return dependencies[name]


def _resolve(path: Path | None) -> Path:
    if path is None:
        return find_pyproject_toml()
    if path.is_dir():
        return find_pyproject_toml(path)
    return path


def _read(pyproject_path: Path) -> str:
    content = pyproject_path.read_text(encoding="utf-8")
    if content and not content.endswith("\n"):
        content += "\n"
    return content


def _dependencies(content: str, pyproject_path: Path) -> dict[str, str]:
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {pyproject_path}: {e}") from e
    return dict(extract_monorelease_config(data).get("dependencies", {}))


def _write(pyproject_path: Path, content: str, expected: dict[str, str]) -> None:
    if _dependencies(content, pyproject_path) != expected:
        raise ConfigValidationError(
            f"Failed to update {DEPENDENCIES_TABLE} in {pyproject_path} in place"
        )
    pyproject_path.write_text(content, encoding="utf-8")


def _entry_re(name: str) -> re.Pattern[str]:
    key = re.escape(name)
    return re.compile(
        rf"^[ \t]*(?:\"{key}\"|'{key}'|{key})[ \t]*=[^\n]*(?:\n|\Z)",
        re.MULTILINE,
    )


def _toml_string(value: str) -> str:
    # JSON string escapes are valid TOML basic string escapes.
    return json.dumps(value, ensure_ascii=False)
