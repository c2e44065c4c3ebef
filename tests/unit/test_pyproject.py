"""Tests for module definition files."""

from __future__ import annotations

from pathlib import Path

import pytest

from monorelease.exceptions import ModuleFileError
from monorelease.project.pyproject import load_module_file, read_module_file


class TestReadModuleFile:
    """Tests for read_module_file()."""

    def test_name_and_requirements(self):
        """Name and requirements are canonicalized."""
        module_file = read_module_file(
            """\
[project]
name = "Acme_Client"
dependencies = [
    "acme.core>=1.2",
    "requests[socks]>=2; python_version >= '3.8'",
    "Acme-Core<2",
]
"""
        )

        assert module_file.module_path == "acme-client"
        assert module_file.requires == ("acme-core", "requests")
        assert module_file.path is None

    def test_no_dependencies(self):
        """Modules may have no requirements."""
        assert read_module_file('[project]\nname = "acme"\n').requires == ()

    def test_missing_name(self):
        """A module file without a project name is rejected."""
        with pytest.raises(ModuleFileError, match="Module name not present"):
            read_module_file('[project]\nversion = "1.0"\n')

    def test_missing_project_table(self):
        """A pyproject.toml with tool sections only is not a module."""
        with pytest.raises(ModuleFileError):
            read_module_file("[tool.ruff]\nline-length = 100\n")

    def test_invalid_toml(self):
        """Malformed TOML is rejected."""
        with pytest.raises(ModuleFileError, match="Invalid TOML"):
            read_module_file("[project\n")

    def test_invalid_requirement(self):
        """Malformed requirements are rejected."""
        with pytest.raises(ModuleFileError, match="Invalid requirement"):
            read_module_file('[project]\nname = "acme"\ndependencies = ["acme["]\n')


class TestLoadModuleFile:
    """Tests for load_module_file()."""

    def test_load(self, write_module):
        """Load the pyproject.toml of a module directory."""
        directory = write_module("services/api", "acme-api", ["acme-core"])

        module_file = load_module_file(directory)

        assert module_file.module_path == "acme-api"
        assert module_file.requires == ("acme-core",)
        assert module_file.path == directory / "pyproject.toml"

    def test_missing_file(self, tmp_path: Path):
        """A directory without a pyproject.toml raises."""
        with pytest.raises(ModuleFileError, match="not found"):
            load_module_file(tmp_path)
