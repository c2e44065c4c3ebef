"""Propagation of releases to dependent modules.

When a module is released, every in-repo module requiring it, directly or
through other modules, is released too so it can pick up the new version.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from monorelease.core.module import ModuleChange
from monorelease.exceptions import DependencyCycleError, UntaggedModuleHasDependentsError
from monorelease.logging import get_logger

if TYPE_CHECKING:
    from monorelease.core.module import Module

logger = get_logger(__name__)


def build_inverse_dependency_graph(modules: dict[str, Module]) -> dict[str, list[str]]:
    """Map each module to the sorted list of in-repo modules that require it.

    Modules without dependents have no entry. Requirements on distributions
    outside the repository are ignored.
    """
    graph: dict[str, list[str]] = {}
    for module_path in sorted(modules):
        for required in modules[module_path].requires:
            if required in modules and required != module_path:
                graph.setdefault(required, []).append(module_path)
    return graph


def find_dependency_cycle(graph: dict[str, list[str]]) -> list[str] | None:
    """Return one cycle in the graph as a closed path, or None if acyclic."""
    done: set[str] = set()

    for start in sorted(graph):
        if start in done:
            continue

        # Iterative walk: chains may be deeper than the recursion limit.
        path = [start]
        on_path = {start}
        pending = [iter(graph.get(start, ()))]
        while pending:
            node = next(pending[-1], None)
            if node is None:
                pending.pop()
                finished = path.pop()
                on_path.discard(finished)
                done.add(finished)
            elif node in on_path:
                return [*path[path.index(node) :], node]
            elif node not in done:
                path.append(node)
                on_path.add(node)
                pending.append(iter(graph.get(node, ())))

    return None


def calculate_dependency_updates(modules: dict[str, Module]) -> None:
    """Flag modules whose dependencies are being released.

    Sets :attr:`ModuleChange.DEPENDENCY_UPDATE` on every module that
    requires, directly or transitively, a module with changes. The flag is
    only ever added, so each module is enqueued at most once after the seed.

    Raises:
        DependencyCycleError: If in-repo modules require each other in a cycle
        UntaggedModuleHasDependentsError: If a changed module configured with
            ``no_tag`` is required by other modules
    """
    graph = build_inverse_dependency_graph(modules)

    cycle = find_dependency_cycle(graph)
    if cycle is not None:
        raise DependencyCycleError(cycle)

    to_visit = sorted(graph)
    queued = set(to_visit)

    while to_visit:
        current = to_visit.pop(0)
        queued.discard(current)
        module = modules[current]

        if not module.changes:
            continue

        dependents = graph.get(current, [])
        if module.config.no_tag:
            if dependents:
                raise UntaggedModuleHasDependentsError(current, dependents)
            continue

        for dependent in dependents:
            dependent_module = modules[dependent]
            if ModuleChange.DEPENDENCY_UPDATE in dependent_module.changes:
                continue

            dependent_module.changes |= ModuleChange.DEPENDENCY_UPDATE
            logger.debug("%s requires %s, flagging dependency update", dependent, current)

            if dependent in graph and dependent not in queued:
                to_visit.append(dependent)
                queued.add(dependent)
