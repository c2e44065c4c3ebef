"""Changelog annotations.

Annotations are small JSON documents stored in the repository's
``.changelog/`` directory, one per change::

    {
        "id": "3b1f6a0c-...",
        "type": "feature",
        "description": "Add retry support to the client",
        "modules": ["services/api"]
    }

Each annotation names the modules (by relative repository path) it applies
to. Its type decides how large a version bump the change calls for. The
description text is carried along untouched.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from monorelease.exceptions import ChangelogError
from monorelease.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = get_logger(__name__)

CHANGELOG_DIR = ".changelog"


class ChangeType(StrEnum):
    """Kind of change an annotation describes."""

    FEATURE = "feature"
    BUGFIX = "bugfix"
    DEPENDENCY = "dependency"
    DOCUMENTATION = "documentation"
    ANNOUNCEMENT = "announcement"
    RELEASE = "release"


class SemVerIncrement(IntEnum):
    """Version bump requested by annotations, ordered by precedence."""

    DEFAULT = 0
    PATCH = 1
    MINOR = 2
    RELEASE = 3


_INCREMENTS: dict[ChangeType, SemVerIncrement] = {
    ChangeType.FEATURE: SemVerIncrement.MINOR,
    ChangeType.BUGFIX: SemVerIncrement.PATCH,
    ChangeType.RELEASE: SemVerIncrement.RELEASE,
}


class Annotation(BaseModel):
    """A changelog entry associated with one or more modules."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: ChangeType
    description: str = ""
    modules: list[str] = Field(default_factory=list)

    @property
    def increment(self) -> SemVerIncrement:
        return _INCREMENTS.get(self.type, SemVerIncrement.DEFAULT)


def get_version_increment(annotations: Iterable[Annotation]) -> SemVerIncrement:
    """Return the largest version increment requested by the annotations.

    A release request outranks a feature, which outranks a bug fix. Other
    annotation types leave the default increment.
    """
    return max((a.increment for a in annotations), default=SemVerIncrement.DEFAULT)


def group_annotations_by_module(annotations: Iterable[Annotation]) -> dict[str, list[Annotation]]:
    """Map each module's relative path to the annotations applying to it."""
    grouped: dict[str, list[Annotation]] = {}
    for annotation in annotations:
        for module in annotation.modules:
            grouped.setdefault(module, []).append(annotation)
    return grouped


def annotation_ids(annotations: Iterable[Annotation]) -> list[str]:
    return [a.id for a in annotations]


def load_annotations(root: Path) -> list[Annotation]:
    """Load every annotation in the repository's ``.changelog`` directory.

    Args:
        root: Repository root directory

    Returns:
        Annotations sorted by id, empty if the directory doesn't exist

    Raises:
        ChangelogError: If an annotation file cannot be read or is invalid
    """
    changelog_dir = root / CHANGELOG_DIR
    if not changelog_dir.is_dir():
        logger.debug("No %s directory at %s", CHANGELOG_DIR, root)
        return []

    annotations = []
    for path in sorted(changelog_dir.glob("*.json")):
        try:
            annotations.append(Annotation.model_validate_json(path.read_bytes()))
        except OSError as e:
            raise ChangelogError(f"Failed to read changelog annotation {path}: {e}") from e
        except ValidationError as e:
            raise ChangelogError(f"Invalid changelog annotation {path}:\n{e}") from e

    logger.debug("Loaded %d changelog annotations", len(annotations))
    return sorted(annotations, key=lambda a: a.id)
