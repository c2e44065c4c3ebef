"""Core release logic for monorelease.

This package contains the building blocks of a release calculation:
- The module path tree and attribution of changed files to modules
- Semantic versions and next version calculation
- Changelog annotations
- Change detection, dependency propagation and the release manifest
  (in :mod:`~monorelease.core.calculate`, :mod:`~monorelease.core.dependencies`
  and :mod:`~monorelease.core.manifest`)
"""

from __future__ import annotations

from monorelease.core.changelog import Annotation, ChangeType, SemVerIncrement, get_version_increment
from monorelease.core.changes import filter_module_files, is_module_changed
from monorelease.core.tree import ModuleTree, ModuleTreeNode
from monorelease.core.version import Version, compare_versions, parse_version
from monorelease.core.versioning import calculate_next_version

__all__ = [
    # Changelog
    "Annotation",
    "ChangeType",
    "SemVerIncrement",
    "get_version_increment",
    # Changes
    "filter_module_files",
    "is_module_changed",
    # Tree
    "ModuleTree",
    "ModuleTreeNode",
    # Version
    "Version",
    "calculate_next_version",
    "compare_versions",
    "parse_version",
]
