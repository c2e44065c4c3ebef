"""Repository layout: module discovery and module definition files."""

from __future__ import annotations

from monorelease.project.discovery import Discoverer
from monorelease.project.pyproject import ModuleFile, load_module_file, read_module_file

__all__ = [
    "Discoverer",
    "ModuleFile",
    "load_module_file",
    "read_module_file",
]
