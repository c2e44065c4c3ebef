"""Release manifests.

A manifest is the outcome of a release calculation: the version transition
of every module being released, and the tags to create for them. It is
written as JSON so that later release steps can replay it::

    {
        "id": "2024-03-05",
        "with_release_tag": true,
        "modules": {
            "services/api": {
                "module_path": "acme-api",
                "from": "v1.2.0",
                "to": "v1.3.0",
                "changes": {"source_change": true}
            }
        },
        "tags": ["services/api/v1.3.0"]
    }
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)

from monorelease.core.calculate import TOMBSTONE_ATTRIBUTE
from monorelease.core.changelog import annotation_ids
from monorelease.core.module import ModuleChange
from monorelease.core.versioning import calculate_next_version
from monorelease.exceptions import ReleaseError
from monorelease.logging import get_logger
from monorelease.vcs.tags import to_module_tag

if TYPE_CHECKING:
    from pathlib import Path

    from monorelease.core.module import Module
    from monorelease.core.tree import ModuleTree
    from monorelease.vcs.tags import ModuleTags

logger = get_logger(__name__)

RELEASE_TAG_PREFIX = "release-"
_RELEASE_DATE_FORMAT = "%Y-%m-%d"
_RELEASE_TAG_RE = re.compile(r"^(?P<date>\d{4}-\d{2}-\d{2})(?:\.(?P<num>\d+))?$")


class ModuleManifest(BaseModel):
    """Version transition of one module."""

    model_config = ConfigDict(populate_by_name=True)

    module_path: str
    from_: str | None = Field(default=None, alias="from")
    to: str
    changes: ModuleChange = ModuleChange.NONE
    file_changes: list[str] | None = None
    annotations: list[str] | None = None

    @field_validator("changes", mode="before")
    @classmethod
    def _parse_changes(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return ModuleChange.from_dict(value)
        return value

    @field_serializer("changes")
    def _serialize_changes(self, changes: ModuleChange) -> dict[str, bool]:
        return changes.to_dict()


class Manifest(BaseModel):
    """Description of a release: changed modules and the tags to create."""

    id: str
    with_release_tag: bool = True
    modules: dict[str, ModuleManifest] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)

    def to_json(self, indent: int = 4) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)

    @classmethod
    def from_json(cls, data: str | bytes) -> Manifest:
        return cls.model_validate_json(data)


def load_manifest(path: Path) -> Manifest:
    """Read a manifest written by ``calculate``.

    Raises:
        ReleaseError: If the file can't be read or isn't a valid manifest
    """
    try:
        return Manifest.from_json(path.read_bytes())
    except OSError as e:
        raise ReleaseError(f"Failed to read release manifest {path}: {e}") from e
    except ValidationError as e:
        raise ReleaseError(f"Invalid release manifest {path}: {e}") from e


def build_release_manifest(
    tree: ModuleTree,
    release_id: str,
    modules: dict[str, Module],
    verbose: bool = False,
    pre_release: str = "",
    tags: ModuleTags | None = None,
) -> Manifest:
    """Build the manifest for the modules being released.

    Repositories with a single module don't get a repository-wide release
    tag; the module's version doubles as the release id.

    Args:
        tree: Module tree of the repository
        release_id: Release id for multi-module repositories
        modules: Modules with changes, keyed by module identity
        verbose: Include the changed files of each module
        pre_release: Pre-release identifier requested for all modules
        tags: Latest module tags, used for the id of an unchanged single module

    Returns:
        The release manifest

    Raises:
        ReleaseError: If the version of a single module repository is unknown
        VersionError: If a next version cannot be calculated
    """
    manifest_modules: dict[str, ModuleManifest] = {}
    release_tags: set[str] = set()

    for module_path in sorted(modules):
        module = modules[module_path]
        if not module.changes or module.config.no_tag:
            continue

        next_version = calculate_next_version(
            module_path,
            module.latest,
            module.config,
            module.annotations,
            pre_release,
        )
        logger.info("%s: %s -> %s", module.relative_repo_path, module.latest or "new", next_version)

        manifest_modules[module.relative_repo_path] = ModuleManifest(
            module_path=module_path,
            from_=module.latest,
            to=next_version,
            changes=module.changes,
            file_changes=list(module.file_changes) if verbose and module.file_changes else None,
            annotations=annotation_ids(module.annotations) or None,
        )
        release_tags.add(to_module_tag(module.relative_repo_path, next_version))

    manifest = Manifest(
        id=release_id,
        with_release_tag=True,
        modules=dict(sorted(manifest_modules.items())),
        tags=sorted(release_tags),
    )

    repo_modules = [n for n in tree.iterator() if not n.has_attribute(TOMBSTONE_ATTRIBUTE)]
    if len(repo_modules) == 1:
        manifest.id = _single_module_release_id(repo_modules[0].path, manifest, modules, tags)
        manifest.with_release_tag = False

    return manifest


def _single_module_release_id(
    rel_path: str,
    manifest: Manifest,
    modules: dict[str, Module],
    tags: ModuleTags | None,
) -> str:
    if rel_path in manifest.modules:
        return manifest.modules[rel_path].to

    module = find_module_via_relative_repo_path(modules, rel_path)
    latest = module.latest if module is not None else None
    if latest is None and tags is not None:
        latest = tags.latest(rel_path)
    if latest is None:
        raise ReleaseError(f"root module metadata not found, {rel_path}")
    return latest


def find_module_via_relative_repo_path(modules: dict[str, Module], rel_path: str) -> Module | None:
    """Return the module located at the relative repository path, if any."""
    for module in modules.values():
        if module.relative_repo_path == rel_path:
            return module
    return None


def next_release_id(
    tags: list[str],
    now: Callable[[], datetime] = lambda: datetime.now(UTC),
) -> str:
    """Return the id for the next release.

    Ids are the current UTC date. A second release on the same day gets a
    ``.2`` suffix, a third ``.3``, and so on, based on the existing
    ``release-YYYY-MM-DD[.N]`` tags.

    Args:
        tags: Every tag in the repository
        now: Clock returning the current time
    """
    today = now().astimezone(UTC).strftime(_RELEASE_DATE_FORMAT)
    latest = 0

    for tag in tags:
        if not tag.startswith(RELEASE_TAG_PREFIX):
            continue
        match = _RELEASE_TAG_RE.match(tag[len(RELEASE_TAG_PREFIX) :])
        if match is None or match.group("date") != today:
            continue
        latest = max(latest, int(match.group("num") or 1))

    if latest == 0:
        return today
    return f"{today}.{latest + 1}"
