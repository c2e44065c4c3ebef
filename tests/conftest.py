"""Shared fixtures for monorelease tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from monorelease.core.tree import ModuleTree

ModuleWriter = Callable[..., Path]


class FakeFinder:
    """Module finder over a prepared tree."""

    def __init__(self, root: Path, modules: ModuleTree) -> None:
        self._root = root
        self._modules = modules

    @property
    def root(self) -> Path:
        return self._root

    @property
    def modules(self) -> ModuleTree:
        return self._modules


class FakeVCS:
    """Changes provider answering from canned data.

    ``changes`` maps a start tag to the files changed since it; ``trees``
    maps ``(ref, path)`` to the files listed under the path at that ref.
    """

    def __init__(
        self,
        changes: dict[str, list[str]] | None = None,
        trees: dict[tuple[str, str], list[str]] | None = None,
    ) -> None:
        self._changes = changes or {}
        self._trees = trees or {}
        self.changes_calls: list[tuple[str, str, str]] = []
        self.ls_tree_calls: list[tuple[str, str]] = []

    def changes(self, from_ref: str, to_ref: str, path: str = ".") -> list[str]:
        self.changes_calls.append((from_ref, to_ref, path))
        return list(self._changes.get(from_ref, []))

    def ls_tree(self, ref: str, path: str) -> list[str]:
        self.ls_tree_calls.append((ref, path))
        return list(self._trees.get((ref, path), []))


@pytest.fixture
def write_module(tmp_path: Path) -> ModuleWriter:
    """Return a function creating a module directory with a pyproject.toml."""

    def _write(rel_path: str, name: str, dependencies: list[str] | None = None) -> Path:
        directory = tmp_path / rel_path
        directory.mkdir(parents=True, exist_ok=True)
        deps = ", ".join(f'"{dep}"' for dep in dependencies or [])
        (directory / "pyproject.toml").write_text(
            f'[project]\nname = "{name}"\nversion = "0.0.0"\ndependencies = [{deps}]\n'
        )
        return directory

    return _write


@pytest.fixture
def repo_tree(tmp_path: Path) -> ModuleTree:
    """Empty module tree rooted at the temporary directory."""
    return ModuleTree(root_path=tmp_path)


@pytest.fixture
def temp_repo_with_pyproject(tmp_path: Path) -> Path:
    """Repository root with a configured pyproject.toml."""
    (tmp_path / "pyproject.toml").write_text(
        """\
[project]
name = "acme"
version = "1.0.0"
dependencies = ["requests>=2", "Acme_Core"]

[tool.monorelease.modules."services/api"]
pre_release = "rc"

[tool.monorelease.modules."tools/internal"]
no_tag = true

[tool.monorelease.dependencies]
"acme-core" = "v1.4.0"
"""
    )
    return tmp_path
