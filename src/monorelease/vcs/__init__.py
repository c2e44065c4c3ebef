"""Version control integration."""

from __future__ import annotations

from monorelease.vcs.git import GitRepository
from monorelease.vcs.tags import ModuleTags, parse_module_tags, to_module_tag

__all__ = [
    "GitRepository",
    "ModuleTags",
    "parse_module_tags",
    "to_module_tag",
]
