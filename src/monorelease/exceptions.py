"""Exception hierarchy for monorelease.

Every error raised by the engine derives from :class:`MonoreleaseError`, so
front ends can catch one type and abort the pass. No partial manifest is ever
produced once one of these is raised.
"""

from __future__ import annotations


class MonoreleaseError(Exception):
    """Base class for all monorelease errors."""


# Configuration


class ConfigError(MonoreleaseError):
    """Configuration could not be loaded."""


class ConfigNotFoundError(ConfigError):
    """No pyproject.toml was found where one was expected."""


class ConfigValidationError(ConfigError):
    """The configuration section is malformed."""


class DependencyNotFoundError(ConfigError):
    """A pinned dependency to remove is not in the configuration."""

    def __init__(self, name: str) -> None:
        super().__init__(f"module {name} is not a dependency")
        self.name = name


class MetadataLocationError(ConfigError):
    """A module's metadata_package is not a directory the module owns."""

    def __init__(self, module_path: str, location: str) -> None:
        super().__init__(
            f"{module_path} metadata_package location {location!r} must be within "
            "the module and not in a sub-module"
        )
        self.module_path = module_path
        self.location = location


# Module tree


class ModuleTreeError(MonoreleaseError):
    """Invalid operation on a module tree."""


class OutsideRootError(ModuleTreeError):
    """A module path is not nested within the tree's root path."""

    def __init__(self, path: str, root: str) -> None:
        super().__init__(f"module {path!r} is not nested within {root!r}")
        self.path = path
        self.root = root


class DuplicateModuleError(ModuleTreeError):
    """A module with the same relative path is already in the tree."""

    def __init__(self, path: str, rel_path: str) -> None:
        super().__init__(f"module already exists with relative path, {path}, {rel_path}")
        self.path = path
        self.rel_path = rel_path


# Project files


class ModuleFileError(MonoreleaseError):
    """A module definition file is missing or lacks its identity."""


# Release calculation


class ReleaseError(MonoreleaseError):
    """The release could not be calculated."""


class TombstoneHasSourceError(ReleaseError):
    """A module removed from the repository still has source files."""

    def __init__(self, path: str, files: list[str]) -> None:
        super().__init__(f"tombstone module {path!r} has source files, {files}")
        self.path = path
        self.files = files


class UntaggedModuleHasDependentsError(ReleaseError):
    """A module configured with no_tag is required by other modules."""

    def __init__(self, module_path: str, dependents: list[str]) -> None:
        super().__init__(
            f"module {module_path} is configured for no releases, "
            f"but has {len(dependents)} dependents"
        )
        self.module_path = module_path
        self.dependents = dependents


class DependencyCycleError(ReleaseError):
    """In-repo modules require each other in a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        super().__init__(f"dependency cycle between modules: {' -> '.join(cycle)}")
        self.cycle = cycle


# Versions


class VersionError(MonoreleaseError):
    """Version related failures."""


class InvalidVersionError(VersionError):
    """A version string is not a valid semantic version."""


class NotAPreReleaseError(VersionError):
    """A release promotion was requested for a version that is not a pre-release."""


class VersionNotIncreasingError(VersionError):
    """The computed next version does not sort after the latest version."""

    def __init__(self, next_version: str, latest: str) -> None:
        super().__init__(f"computed next version {next_version} is not higher than {latest}")
        self.next_version = next_version
        self.latest = latest


# Collaborators


class GitError(MonoreleaseError):
    """A git command failed."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        if self.stderr:
            return f"{self.args[0]}: {self.stderr.strip()}"
        return str(self.args[0])


class ChangelogError(MonoreleaseError):
    """Changelog annotations could not be loaded."""
