"""Configuration management for monorelease."""

from __future__ import annotations

from monorelease.config.editor import delete_dependency, set_dependency
from monorelease.config.loader import load_config
from monorelease.config.models import ModuleConfig, MonoreleaseConfig

__all__ = [
    "ModuleConfig",
    "MonoreleaseConfig",
    "delete_dependency",
    "load_config",
    "set_dependency",
]
