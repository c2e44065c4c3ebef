"""Tests for dependency update propagation."""

from __future__ import annotations

import pytest

from monorelease.config.models import ModuleConfig
from monorelease.core.dependencies import (
    build_inverse_dependency_graph,
    calculate_dependency_updates,
    find_dependency_cycle,
)
from monorelease.core.module import Module, ModuleChange
from monorelease.exceptions import DependencyCycleError, UntaggedModuleHasDependentsError
from monorelease.project.pyproject import ModuleFile


def make_module(
    name: str,
    *requires: str,
    changes: ModuleChange = ModuleChange.NONE,
    no_tag: bool = False,
) -> Module:
    return Module(
        file=ModuleFile(module_path=name, requires=requires),
        relative_repo_path=name,
        latest="v1.0.0",
        changes=changes,
        config=ModuleConfig(no_tag=no_tag),
    )


def modules_of(*modules: Module) -> dict[str, Module]:
    return {m.module_path: m for m in modules}


class TestInverseDependencyGraph:
    """Tests for build_inverse_dependency_graph()."""

    def test_graph(self):
        """Dependents are listed per required module, sorted."""
        modules = modules_of(
            make_module("c", "b", "a"),
            make_module("b", "a", "requests"),
            make_module("a"),
        )

        assert build_inverse_dependency_graph(modules) == {"a": ["b", "c"], "b": ["c"]}

    def test_self_requirement_ignored(self):
        """A module requiring itself has no dependents."""
        assert build_inverse_dependency_graph(modules_of(make_module("a", "a"))) == {}


class TestFindDependencyCycle:
    """Tests for find_dependency_cycle()."""

    def test_acyclic(self):
        """Diamonds are not cycles."""
        graph = {"a": ["b", "c"], "b": ["d"], "c": ["d"]}

        assert find_dependency_cycle(graph) is None

    def test_cycle(self):
        """A cycle is returned as a closed path."""
        graph = {"a": ["b"], "b": ["c"], "c": ["a"]}

        assert find_dependency_cycle(graph) == ["a", "b", "c", "a"]

    def test_long_chain(self):
        """Chains deeper than the recursion limit are walked."""
        graph = {f"m{i}": [f"m{i + 1}"] for i in range(3000)}

        assert find_dependency_cycle(graph) is None

    def test_cycle_at_end_of_long_chain(self):
        """Cycles are found at any depth."""
        graph = {f"m{i}": [f"m{i + 1}"] for i in range(3000)}
        graph["m3000"] = ["m2999"]

        assert find_dependency_cycle(graph) == ["m2999", "m3000", "m2999"]


class TestCalculateDependencyUpdates:
    """Tests for calculate_dependency_updates()."""

    def test_transitive_updates(self):
        """A change propagates to direct and transitive dependents."""
        modules = modules_of(
            make_module("a", changes=ModuleChange.SOURCE_CHANGE),
            make_module("b", "a"),
            make_module("c", "b"),
            make_module("d"),
        )

        calculate_dependency_updates(modules)

        assert modules["a"].changes == ModuleChange.SOURCE_CHANGE
        assert modules["b"].changes == ModuleChange.DEPENDENCY_UPDATE
        assert modules["c"].changes == ModuleChange.DEPENDENCY_UPDATE
        assert modules["d"].changes == ModuleChange.NONE

    def test_flags_are_added(self):
        """Existing changes are kept when a dependency update is added."""
        modules = modules_of(
            make_module("a", changes=ModuleChange.NEW_MODULE),
            make_module("b", "a", changes=ModuleChange.SOURCE_CHANGE),
        )

        calculate_dependency_updates(modules)

        assert modules["b"].changes == ModuleChange.SOURCE_CHANGE | ModuleChange.DEPENDENCY_UPDATE

    def test_order_independent(self):
        """The outcome doesn't depend on the order modules were added."""
        expect = {
            "a": ModuleChange.NONE,
            "b": ModuleChange.NONE,
            "c": ModuleChange.SOURCE_CHANGE,
            "d": ModuleChange.DEPENDENCY_UPDATE,
            "e": ModuleChange.DEPENDENCY_UPDATE,
        }

        for names in (["a", "b", "c", "d", "e"], ["e", "d", "c", "b", "a"]):
            specs = {
                "a": (),
                "b": ("a",),
                "c": ("a",),
                "d": ("c", "b"),
                "e": ("d",),
            }
            modules = {}
            for name in names:
                changes = ModuleChange.SOURCE_CHANGE if name == "c" else ModuleChange.NONE
                modules[name] = make_module(name, *specs[name], changes=changes)

            calculate_dependency_updates(modules)

            assert {name: m.changes for name, m in modules.items()} == expect

    def test_long_chain_propagates(self):
        """A change at the bottom of a long chain reaches the top."""
        modules = modules_of(
            make_module("m0000", changes=ModuleChange.SOURCE_CHANGE),
            *(make_module(f"m{i:04d}", f"m{i - 1:04d}") for i in range(1, 1500)),
        )

        calculate_dependency_updates(modules)

        assert modules["m1499"].changes == ModuleChange.DEPENDENCY_UPDATE

    def test_no_tag_with_dependents_raises(self):
        """Changed no_tag modules can't be required by other modules."""
        modules = modules_of(
            make_module("internal", changes=ModuleChange.SOURCE_CHANGE, no_tag=True),
            make_module("api", "internal"),
        )

        with pytest.raises(UntaggedModuleHasDependentsError, match="internal"):
            calculate_dependency_updates(modules)

    def test_unchanged_no_tag_with_dependents(self):
        """Unchanged no_tag modules may have dependents."""
        modules = modules_of(
            make_module("internal", no_tag=True),
            make_module("api", "internal"),
        )

        calculate_dependency_updates(modules)

        assert modules["api"].changes == ModuleChange.NONE

    def test_no_tag_without_dependents(self):
        """Changed no_tag modules without dependents are fine."""
        modules = modules_of(make_module("internal", changes=ModuleChange.SOURCE_CHANGE, no_tag=True))

        calculate_dependency_updates(modules)

        assert modules["internal"].changes == ModuleChange.SOURCE_CHANGE

    def test_cycle_raises(self):
        """Modules requiring each other are rejected."""
        modules = modules_of(
            make_module("a", "b", changes=ModuleChange.SOURCE_CHANGE),
            make_module("b", "a"),
        )

        with pytest.raises(DependencyCycleError):
            calculate_dependency_updates(modules)
