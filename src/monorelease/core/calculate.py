"""Detection of the modules that need a release.

For every module in the repository, the changes since its latest tag are
collected and attributed to the module owning them. Modules without a tag
are new. Modules with neither are released only when a dependency of theirs
is, see :mod:`monorelease.core.dependencies`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from monorelease.core.changelog import group_annotations_by_module
from monorelease.core.changes import filter_module_files, is_module_file, is_python_source, split_path
from monorelease.core.dependencies import calculate_dependency_updates
from monorelease.core.module import Module, ModuleChange
from monorelease.exceptions import ModuleFileError, TombstoneHasSourceError
from monorelease.logging import get_logger
from monorelease.project.pyproject import load_module_file
from monorelease.vcs.tags import to_module_tag

if TYPE_CHECKING:
    from collections.abc import Iterable

    from monorelease.config.models import MonoreleaseConfig
    from monorelease.core.changelog import Annotation
    from monorelease.core.tree import ModuleTree, ModuleTreeNode
    from monorelease.vcs.tags import ModuleTags

logger = get_logger(__name__)

TOMBSTONE_ATTRIBUTE = "tombstone"
HEAD = "HEAD"


class ModuleFinder(Protocol):
    """Source of the repository's modules."""

    @property
    def root(self) -> Path:
        """Directory all modules are nested within."""
        ...

    @property
    def modules(self) -> ModuleTree:
        """Tree of the modules found under the root."""
        ...


class ChangesProvider(Protocol):
    """Version control queries needed to detect changes."""

    def changes(self, from_ref: str, to_ref: str, path: str = ".") -> list[str]:
        """Files that differ between two references, limited to a path."""
        ...

    def ls_tree(self, ref: str, path: str) -> list[str]:
        """Files under a path as of a reference."""
        ...


def calculate(
    finder: ModuleFinder,
    tags: ModuleTags,
    config: MonoreleaseConfig,
    annotations: Iterable[Annotation],
    vcs: ChangesProvider,
) -> dict[str, Module]:
    """Calculate the modules to release.

    Modules that were tagged in the past but no longer exist are added to
    the finder's tree as tombstones. They must not have any source left.

    Args:
        finder: Repository root and module tree
        tags: Latest tags of each module
        config: Repository release configuration
        annotations: Changelog annotations for the pending release
        vcs: Version control access

    Returns:
        Modules with changes to release, keyed by module identity

    Raises:
        TombstoneHasSourceError: If a removed module still has source files
        ModuleFileError: If a module definition file is missing or invalid
        UntaggedModuleHasDependentsError: If a no_tag module with changes has dependents
        DependencyCycleError: If modules require each other in a cycle
    """
    root = Path(finder.root)
    tree = finder.modules
    module_annotations = group_annotations_by_module(annotations)

    for tagged_path in tags:
        if tree.get(tagged_path) is None:
            tree.insert_rel(tagged_path, TOMBSTONE_ATTRIBUTE)
            logger.debug("Module %s was tagged but no longer exists", tagged_path)

    modules: dict[str, Module] = {}
    for node in tree.iterator():
        if node.has_attribute(TOMBSTONE_ATTRIBUTE):
            _check_tombstone(root, node)
            continue

        module_file = load_module_file(node.abs_path)
        if module_file.module_path in modules:
            raise ModuleFileError(
                f"module {module_file.module_path} is defined by both "
                f"{modules[module_file.module_path].relative_repo_path} and {node.path}"
            )

        latest = tags.latest(node.path)
        changes = ModuleChange.NONE
        file_changes: list[str] = []

        if latest is None:
            changes = ModuleChange.NEW_MODULE
        else:
            start_tag = to_module_tag(node.path, latest)
            file_changes = filter_module_files(node, vcs.changes(start_tag, HEAD, node.path))
            if file_changes or _has_carved_out_module(node, tags, start_tag, vcs):
                changes = ModuleChange.SOURCE_CHANGE

        logger.debug(
            "%s (%s): latest=%s changes=[%s]",
            node.path,
            module_file.module_path,
            latest or "-",
            changes,
        )

        modules[module_file.module_path] = Module(
            file=module_file,
            relative_repo_path=node.path,
            latest=latest,
            changes=changes,
            file_changes=file_changes,
            annotations=module_annotations.get(node.path, []),
            config=config.module(node.path),
        )

    calculate_dependency_updates(modules)

    return {
        module_path: module
        for module_path, module in modules.items()
        if module.changes and not module.config.no_tag
    }


def is_module_carved_out(module: ModuleTreeNode, files: Iterable[str]) -> bool:
    """Return whether a new module was carved out of its parent.

    ``files`` lists the module's directory as of the parent's latest tag. A
    module is carved out when its directory held Python source then, but no
    module definition file: the code belonged to the parent.
    """
    has_source = False
    has_module_file = False
    for file_path in filter_module_files(module, files):
        _, name = split_path(file_path)
        has_module_file = has_module_file or is_module_file(name)
        has_source = has_source or is_python_source(name)

    return has_source and not has_module_file


def _has_carved_out_module(
    module: ModuleTreeNode,
    tags: ModuleTags,
    start_tag: str,
    vcs: ChangesProvider,
) -> bool:
    for sub_module in module.iterator():
        if sub_module.has_attribute(TOMBSTONE_ATTRIBUTE):
            continue
        # Previously released modules were never part of the parent.
        if tags.latest(sub_module.path) is not None:
            continue

        if is_module_carved_out(sub_module, vcs.ls_tree(start_tag, sub_module.path)):
            logger.debug("%s was carved out of %s", sub_module.path, module.path)
            return True

    return False


def _check_tombstone(root: Path, module: ModuleTreeNode) -> None:
    files = filter_module_files(module, _list_rel_files(root, Path(module.abs_path)))
    if files:
        raise TombstoneHasSourceError(module.path, files)


def _list_rel_files(root: Path, directory: Path) -> list[str]:
    files = []
    for dir_path, _, file_names in os.walk(directory):
        for name in file_names:
            rel = os.path.relpath(os.path.join(dir_path, name), root)
            files.append(rel.replace(os.sep, "/"))
    return files
