"""Semantic versions as used in module tags.

Tags carry a ``v`` prefix (``v1.2.3``, ``v2.0.0-rc.1``). Precedence follows
Semantic Versioning 2.0.0: build metadata is ignored, and a pre-release sorts
before the release it precedes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from functools import total_ordering

from monorelease.exceptions import InvalidVersionError

_NUMBER = r"0|[1-9]\d*"
_IDENT = r"[0-9A-Za-z-]+"
_VERSION_RE = re.compile(
    rf"^v(?P<major>{_NUMBER})\.(?P<minor>{_NUMBER})\.(?P<patch>{_NUMBER})"
    rf"(?:-(?P<prerelease>{_IDENT}(?:\.{_IDENT})*))?"
    rf"(?:\+(?P<build>{_IDENT}(?:\.{_IDENT})*))?$"
)


@total_ordering
@dataclass(frozen=True)
class Version:
    """A ``vMAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]`` version."""

    major: int
    minor: int
    patch: int
    prerelease: str = ""
    build: str = ""

    @classmethod
    def parse(cls, value: str) -> Version:
        """Parse a version string.

        Raises:
            InvalidVersionError: If the string is not a ``v`` prefixed semver
        """
        match = _VERSION_RE.match(value)
        if match is None:
            raise InvalidVersionError(f"failed to parse semver: {value!r}")

        prerelease = match.group("prerelease") or ""
        for part in prerelease.split(".") if prerelease else ():
            if part.isdigit() and len(part) > 1 and part.startswith("0"):
                raise InvalidVersionError(
                    f"failed to parse semver: {value!r}, numeric pre-release "
                    "identifiers must not have leading zeros"
                )

        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=prerelease,
            build=match.group("build") or "",
        )

    def __str__(self) -> str:
        version = f"v{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version += f"-{self.prerelease}"
        if self.build:
            version += f"+{self.build}"
        return version

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() == other._precedence_key()

    def __hash__(self) -> int:
        return hash(self._precedence_key())

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return _compare(self, other) < 0

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def canonical(self) -> Version:
        """Return the version without build metadata."""
        return replace(self, build="")

    def with_prerelease(self, prerelease: str) -> Version:
        """Return the version with its pre-release replaced (and build dropped)."""
        return replace(self, prerelease=prerelease.lstrip("-"), build="")

    def bump_minor(self) -> Version:
        return Version(self.major, self.minor + 1, 0)

    def bump_patch(self) -> Version:
        return Version(self.major, self.minor, self.patch + 1)

    def _precedence_key(self) -> tuple[int, int, int, str]:
        return (self.major, self.minor, self.patch, self.prerelease)


def parse_version(value: str) -> Version:
    """Parse a version string. See :meth:`Version.parse`."""
    return Version.parse(value)


def is_valid(value: str) -> bool:
    """Return whether the string is a valid ``v`` prefixed semver."""
    try:
        Version.parse(value)
    except InvalidVersionError:
        return False
    return True


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings, returning -1, 0 or 1."""
    return _compare(Version.parse(a), Version.parse(b))


def _compare(a: Version, b: Version) -> int:
    left = (a.major, a.minor, a.patch)
    right = (b.major, b.minor, b.patch)
    if left != right:
        return -1 if left < right else 1
    return _compare_prerelease(a.prerelease, b.prerelease)


def _compare_prerelease(a: str, b: str) -> int:
    if a == b:
        return 0
    # A release has higher precedence than any of its pre-releases.
    if not a:
        return 1
    if not b:
        return -1

    a_parts = a.split(".")
    b_parts = b.split(".")
    for x, y in zip(a_parts, b_parts):
        if x == y:
            continue
        x_num, y_num = x.isdigit(), y.isdigit()
        if x_num and y_num:
            return -1 if int(x) < int(y) else 1
        if x_num != y_num:
            # Numeric identifiers sort before alphanumeric ones.
            return -1 if x_num else 1
        return -1 if x < y else 1

    if len(a_parts) == len(b_parts):
        return 0
    return -1 if len(a_parts) < len(b_parts) else 1
