"""Tests for semantic version parsing and ordering."""

from __future__ import annotations

import pytest

from monorelease.core.version import Version, compare_versions, is_valid, parse_version
from monorelease.exceptions import InvalidVersionError


class TestVersionParse:
    """Tests for Version.parse()."""

    def test_parse_release(self):
        """Parse a plain release."""
        v = Version.parse("v1.2.3")

        assert (v.major, v.minor, v.patch) == (1, 2, 3)
        assert v.prerelease == ""
        assert not v.is_prerelease

    def test_parse_prerelease_and_build(self):
        """Parse pre-release and build metadata."""
        v = parse_version("v1.2.3-rc.1+build.5")

        assert v.prerelease == "rc.1"
        assert v.build == "build.5"
        assert v.is_prerelease
        assert str(v) == "v1.2.3-rc.1+build.5"

    @pytest.mark.parametrize(
        "value",
        ["1.1.0", "v1.1", "v1", "v01.0.0", "v1.0.0-", "v1.0.0-rc.01", "v1.0.0+", "release-2021-05-06", ""],
    )
    def test_invalid(self, value: str):
        """Malformed versions are rejected."""
        with pytest.raises(InvalidVersionError):
            Version.parse(value)
        assert not is_valid(value)


class TestVersionOrdering:
    """Tests for semver precedence."""

    @pytest.mark.parametrize(
        ("lower", "higher"),
        [
            ("v1.0.0", "v1.0.1"),
            ("v1.0.9", "v1.1.0"),
            ("v1.9.9", "v2.0.0"),
            ("v1.0.0-alpha", "v1.0.0"),
            ("v1.0.0-alpha", "v1.0.0-alpha.1"),
            ("v1.0.0-alpha.1", "v1.0.0-alpha.beta"),
            ("v1.0.0-alpha.beta", "v1.0.0-beta"),
            ("v1.0.0-beta.2", "v1.0.0-beta.11"),
            ("v1.0.0-beta.11", "v1.0.0-rc.1"),
            ("v1.1.0-preview.2", "v1.1.0-rc"),
        ],
    )
    def test_precedence(self, lower: str, higher: str):
        """Versions sort by semver precedence."""
        assert Version.parse(lower) < Version.parse(higher)
        assert compare_versions(lower, higher) == -1
        assert compare_versions(higher, lower) == 1

    def test_build_metadata_ignored(self):
        """Build metadata doesn't affect precedence."""
        assert Version.parse("v1.0.0+a") == Version.parse("v1.0.0+b")
        assert compare_versions("v1.0.0+a", "v1.0.0") == 0

    def test_sorting(self):
        """Lists of versions sort by precedence."""
        versions = ["v1.10.0", "v1.2.0", "v1.2.0-rc.1", "v0.9.0"]

        assert sorted(versions, key=Version.parse) == ["v0.9.0", "v1.2.0-rc.1", "v1.2.0", "v1.10.0"]


class TestVersionHelpers:
    """Tests for the bump helpers."""

    def test_bumps_drop_prerelease_and_build(self):
        """Numeric bumps return plain releases."""
        v = Version.parse("v1.2.3-rc.1+meta")

        assert str(v.bump_patch()) == "v1.2.4"
        assert str(v.bump_minor()) == "v1.3.0"

    def test_with_prerelease(self):
        """with_prerelease() replaces the pre-release."""
        v = Version.parse("v1.2.3+meta")

        assert str(v.with_prerelease("preview")) == "v1.2.3-preview"
        assert str(v.with_prerelease("-rc")) == "v1.2.3-rc"
        assert str(Version.parse("v1.2.3-rc.4").with_prerelease("")) == "v1.2.3"

    def test_canonical(self):
        """canonical() strips build metadata."""
        assert str(Version.parse("v1.1.0+build.12345").canonical()) == "v1.1.0"
