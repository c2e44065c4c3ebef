"""Next version calculation.

The next version of a module depends on its latest tag, the pre-release
track it is configured for, the changelog annotations applying to it, and
whether a preview release was requested for the whole repository::

    latest            track     annotations   preview   next
    (none)            -         -             -         v1.0.0-preview
    (none)            -         release       -         v1.0.0
    v1.0.0            -         -             -         v1.0.1
    v1.0.1            -         feature       -         v1.1.0
    v1.0.1            rc        -             -         v1.0.2-rc
    v1.1.0-preview.1  preview   feature       -         v1.1.0-preview.2
    v1.1.0-preview.2  rc        -             -         v1.1.0-rc
    v1.1.0-rc.5       -         release       -         v1.1.0
    v1.2.3            -         feature       beta      v1.3.0-beta
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from monorelease.core.changelog import SemVerIncrement, get_version_increment
from monorelease.core.version import Version
from monorelease.exceptions import NotAPreReleaseError, VersionNotIncreasingError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from monorelease.config.models import ModuleConfig
    from monorelease.core.changelog import Annotation

DEFAULT_PRE_RELEASE = "preview"

_PATH_MAJOR_RE = re.compile(r"^(?P<prefix>.+)-(?P<major>v(?:[2-9]|[1-9]\d+))$")


def split_path_version(module_path: str) -> tuple[str, str]:
    """Split a module identity into its prefix and major version suffix.

    ``acme-client-v2`` splits into ``("acme-client", "v2")``. Identities
    without a suffix of v2 or above return an empty major.
    """
    match = _PATH_MAJOR_RE.match(module_path)
    if match is None:
        return module_path, ""
    return match.group("prefix"), match.group("major")


def calculate_next_version(
    module_path: str,
    latest: str | None,
    config: ModuleConfig,
    annotations: Iterable[Annotation] = (),
    pre_release_identifier: str = "",
) -> str:
    """Calculate the next version for a module.

    Args:
        module_path: Module identity, used for its major version suffix
        latest: Latest tagged version of the module, None if never tagged
        config: Release policy of the module
        annotations: Changelog annotations applying to this module
        pre_release_identifier: Pre-release requested for every module in
            this release, empty for a regular release

    Returns:
        The next version, always higher than ``latest``

    Raises:
        InvalidVersionError: If ``latest`` is not a valid version
        NotAPreReleaseError: If a release is requested but latest isn't a pre-release
        VersionNotIncreasingError: If the calculated version isn't higher than latest
    """
    _, path_major = split_path_version(module_path)
    increment = get_version_increment(annotations)

    if not latest:
        return _new_module_version(path_major, increment, config, pre_release_identifier)

    parsed = Version.parse(latest).canonical()

    if pre_release_identifier:
        next_version = _pre_release_version(parsed, increment, pre_release_identifier)
    else:
        next_version = _release_version(parsed, increment, config)

    if next_version <= parsed:
        raise VersionNotIncreasingError(str(next_version), latest)

    return str(next_version)


def _new_module_version(
    path_major: str,
    increment: SemVerIncrement,
    config: ModuleConfig,
    pre_release_identifier: str,
) -> str:
    base = f"{path_major or 'v1'}.0.0"

    # New modules start out as pre-releases unless an annotation asks for a release.
    if increment == SemVerIncrement.RELEASE and not pre_release_identifier:
        return base

    identifier = pre_release_identifier or config.pre_release or DEFAULT_PRE_RELEASE
    return f"{base}-{identifier.lstrip('-')}"


def _pre_release_version(
    parsed: Version,
    increment: SemVerIncrement,
    identifier: str,
) -> Version:
    # Already a pre-release, or about to become a release: only the
    # pre-release changes, e.g. v1.4.0-preview => v1.4.0-rc
    if increment == SemVerIncrement.RELEASE or parsed.is_prerelease:
        return parsed.with_prerelease(identifier)

    # v1.2.3 => v1.3.0-rc for features, v1.2.4-rc otherwise
    if increment == SemVerIncrement.MINOR:
        return parsed.bump_minor().with_prerelease(identifier)
    return parsed.bump_patch().with_prerelease(identifier)


def _release_version(parsed: Version, increment: SemVerIncrement, config: ModuleConfig) -> Version:
    if increment == SemVerIncrement.RELEASE:
        # v1.4.0-preview.3 => v1.4.0
        if not parsed.is_prerelease:
            raise NotAPreReleaseError(
                f"changelog annotation requests release bump, but {parsed} is not a pre-release"
            )
        return parsed.with_prerelease("")

    if parsed.is_prerelease:
        return parsed.with_prerelease(_next_prerelease(parsed.prerelease, config.pre_release))

    if config.pre_release:
        # Starts a new pre-release cycle regardless of the increment: v1.3.6 => v1.3.7-rc
        return parsed.bump_patch().with_prerelease(config.pre_release)

    if increment == SemVerIncrement.MINOR:
        return parsed.bump_minor()
    return parsed.bump_patch()


def _next_prerelease(prerelease: str, track: str) -> str:
    """Advance a pre-release along its track.

    ``preview`` => ``preview.1``, ``preview.2`` => ``preview.3``. When the
    module is configured for a different track, switches to that track
    instead: ``preview.2`` => ``rc``.
    """
    head, _, counter = prerelease.rpartition(".")
    if head and counter.isdigit():
        current_track = head
    else:
        current_track, counter = prerelease, ""

    track = track.lstrip("-")
    if track and track != current_track:
        return track

    if not counter:
        return f"{prerelease}.1"
    return f"{current_track}.{int(counter) + 1}"
