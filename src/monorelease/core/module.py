"""Per-module release state for one calculation pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Flag, auto

from monorelease.config.models import ModuleConfig
from monorelease.core.changelog import Annotation
from monorelease.project.pyproject import ModuleFile


class ModuleChange(Flag):
    """Why a module needs a release. Members combine freely."""

    NONE = 0
    SOURCE_CHANGE = auto()
    """Files of the module changed since its latest tag."""
    NEW_MODULE = auto()
    """The module has never been tagged."""
    DEPENDENCY_UPDATE = auto()
    """A module it requires, directly or transitively, is being released."""

    def __str__(self) -> str:
        return ", ".join(
            name for name, member in _NAMES.items() if member in self
        )

    def to_dict(self) -> dict[str, bool]:
        """Serialize as named booleans, omitting the unset ones."""
        return {key: True for key, member in _KEYS.items() if member in self}

    @classmethod
    def from_dict(cls, data: dict[str, bool]) -> ModuleChange:
        changes = cls.NONE
        for key, member in _KEYS.items():
            if data.get(key):
                changes |= member
        return changes


_NAMES = {
    "SourceChange": ModuleChange.SOURCE_CHANGE,
    "NewModule": ModuleChange.NEW_MODULE,
    "DependencyUpdate": ModuleChange.DEPENDENCY_UPDATE,
}

_KEYS = {
    "source_change": ModuleChange.SOURCE_CHANGE,
    "new_module": ModuleChange.NEW_MODULE,
    "dependency_update": ModuleChange.DEPENDENCY_UPDATE,
}


@dataclass
class Module:
    """A repository module and what is known about its release state."""

    file: ModuleFile
    relative_repo_path: str
    latest: str | None = None
    changes: ModuleChange = ModuleChange.NONE
    file_changes: list[str] = field(default_factory=list)
    annotations: list[Annotation] = field(default_factory=list)
    config: ModuleConfig = field(default_factory=ModuleConfig)

    @property
    def module_path(self) -> str:
        return self.file.module_path

    @property
    def requires(self) -> tuple[str, ...]:
        return self.file.requires
