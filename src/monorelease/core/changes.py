"""Attribute changed files to the module that owns them."""

from __future__ import annotations

import posixpath
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from monorelease.core.tree import ModuleTreeNode

MODULE_FILE_NAME = "pyproject.toml"
SOURCE_SUFFIX = ".py"


def is_python_source(name: str) -> bool:
    """Return whether a file name is a Python source file."""
    return not name.startswith(".") and name.endswith(SOURCE_SUFFIX)


def is_module_file(name: str) -> bool:
    """Return whether a file name is the module definition file."""
    return name == MODULE_FILE_NAME


def split_path(file_path: str) -> tuple[str, str]:
    """Split a slash separated path into (directory, name).

    Files at the top level belong to the ``"."`` directory.
    """
    directory, name = posixpath.split(file_path)
    return posixpath.normpath(directory) if directory else ".", name


def filter_module_files(module: ModuleTreeNode, files: Iterable[str]) -> list[str]:
    """Return the files that belong to ``module`` itself.

    Only Python sources and module definition files are considered. Files in
    directories owned by a nested sub-module are excluded.

    Args:
        module: Module to filter files for
        files: Paths relative to the repository root

    Returns:
        Sorted list of the module's files, empty if none apply
    """
    # directory -> whether module directly owns it; saves a tree search per file
    relevant_dirs: dict[str, bool] = {}
    relevant_files: list[str] = []

    for file_path in files:
        directory, name = split_path(file_path)
        if not (is_python_source(name) or is_module_file(name)):
            continue

        relevant = relevant_dirs.get(directory)
        if relevant is None:
            relevant = module.parent_of(directory)
            relevant_dirs[directory] = relevant

        if relevant:
            relevant_files.append(file_path)

    return sorted(relevant_files)


def is_module_changed(module: ModuleTreeNode, changes: Iterable[str]) -> bool:
    """Return whether any of the changes apply to the module directly."""
    return len(filter_module_files(module, changes)) != 0
