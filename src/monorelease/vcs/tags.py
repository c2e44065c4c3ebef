"""Module tags.

Every module has its own tag namespace. A module at ``services/api`` is
released as ``services/api/v1.2.3``; the module at the repository root is
released with a bare ``v1.2.3`` tag. Tags that don't follow this convention
(``release-2024-01-02`` for instance) are ignored.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from monorelease.core.version import Version, is_valid
from monorelease.exceptions import InvalidVersionError

ROOT_MODULE_PATH = "."


class ModuleTags(Mapping[str, list[str]]):
    """Versions tagged for each module path, highest version last."""

    def __init__(self, versions: Mapping[str, Iterable[str]] | None = None) -> None:
        self._versions = {
            path: sorted(set(tagged), key=_version_key) for path, tagged in (versions or {}).items()
        }

    def __getitem__(self, path: str) -> list[str]:
        return list(self._versions[path])

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._versions))

    def __len__(self) -> int:
        return len(self._versions)

    def __repr__(self) -> str:
        return f"ModuleTags({self._versions!r})"

    def latest(self, path: str) -> str | None:
        """Return the highest version tagged for the module, if any."""
        versions = self._versions.get(path)
        if not versions:
            return None
        return versions[-1]


def _version_key(version: str) -> tuple[Version, str]:
    # Build metadata doesn't affect precedence; the tag text breaks ties.
    return Version.parse(version), version


def parse_module_tags(tags: Iterable[str]) -> ModuleTags:
    """Group a repository's tags by module path."""
    versions: dict[str, list[str]] = {}
    for tag in tags:
        path, _, version = tag.rpartition("/")
        if not is_valid(version):
            continue
        versions.setdefault(path or ROOT_MODULE_PATH, []).append(version)
    return ModuleTags(versions)


def to_module_tag(module_path: str, version: str) -> str:
    """Return the tag for a module's version.

    Raises:
        InvalidVersionError: If the version is not a valid semver
    """
    if not is_valid(version):
        raise InvalidVersionError(f"invalid version for module tag, {module_path}, {version!r}")

    if module_path in ("", ROOT_MODULE_PATH):
        return version
    return f"{module_path}/{version}"
