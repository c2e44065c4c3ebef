"""Configuration models for monorelease.

Configuration lives in the repository root's ``pyproject.toml``::

    [tool.monorelease.modules."services/api"]
    pre_release = "rc"

    [tool.monorelease.modules."tools/internal"]
    no_tag = true

    [tool.monorelease.dependencies]
    "acme-core" = "v1.4.0"
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModuleConfig(BaseModel):
    """Release policy for a single module."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    no_tag: bool = Field(
        default=False,
        description="Never tag (release) this module",
    )
    pre_release: str = Field(
        default="",
        description="Pre-release track for the module, e.g. 'preview' or 'rc'",
    )
    metadata_package: str | None = Field(
        default=None,
        description="Alternate location, relative to the module, for generated version metadata",
    )


class MonoreleaseConfig(BaseModel):
    """Root configuration for monorelease."""

    model_config = ConfigDict(extra="forbid")

    modules: dict[str, ModuleConfig] = Field(
        default_factory=dict,
        description="Per-module policy keyed by relative repository path",
    )
    dependencies: dict[str, str] = Field(
        default_factory=dict,
        description="Versions pinned for dependencies outside the repository",
    )

    def module(self, path: str) -> ModuleConfig:
        """Return the policy for a module, or the default policy."""
        return self.modules.get(path, ModuleConfig())
