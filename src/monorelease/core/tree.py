"""Path tree of the modules in a repository.

Modules nest inside each other the same way their directories do. The tree
keeps every layer sorted by relative path and guarantees that no two siblings
are ancestors of one another, so a depth-first walk always yields modules in a
stable order, parents before the modules nested inside them.

Example::

    tree = ModuleTree(root_path="/repo")
    tree.insert("/repo/services/api")
    tree.insert("/repo")              # re-parents services/api under "."
    tree.search("services/api/handlers")   # -> node for "services/api"
"""

from __future__ import annotations

import os
import posixpath
from collections.abc import Iterator

from monorelease.exceptions import DuplicateModuleError, OutsideRootError


class ModuleTreeNode:
    """A module in a :class:`ModuleTree`.

    ``path`` is relative to the tree's root path. When the tree has no root,
    it is the path the module was inserted with.
    """

    __slots__ = ("_abs_path", "_rel_path", "_sub_modules", "_attributes")

    def __init__(
        self,
        path: str,
        abs_path: str | None = None,
        attributes: frozenset[str] | set[str] | tuple[str, ...] = (),
        sub_modules: list[ModuleTreeNode] | None = None,
    ) -> None:
        self._rel_path = path
        self._abs_path = abs_path if abs_path is not None else path
        self._attributes = frozenset(attributes)
        self._sub_modules = sorted(sub_modules or [], key=_node_key)

    def __repr__(self) -> str:
        return f"ModuleTreeNode({self._rel_path!r})"

    @property
    def path(self) -> str:
        """Relative path of the module from the tree's root."""
        return self._rel_path

    @property
    def abs_path(self) -> str:
        """Path the module was inserted into the tree with."""
        return self._abs_path

    @property
    def attributes(self) -> frozenset[str]:
        return self._attributes

    @property
    def sub_modules(self) -> tuple[ModuleTreeNode, ...]:
        """Direct children of this module, sorted by path."""
        return tuple(self._sub_modules)

    def has_attribute(self, attribute: str) -> bool:
        return attribute in self._attributes

    def ancestor_of(self, path: str) -> bool:
        """Return True if this module contains ``path``.

        Sibling directories that only share a name prefix do not match:
        ``service/s3`` is not an ancestor of ``service/s3control``.
        """
        if self._rel_path in (".", path):
            return True
        return path.startswith(self._rel_path + "/")

    def parent_of(self, path: str) -> bool:
        """Return True if this module directly owns ``path``.

        False when a sub-module of this module is a closer ancestor of the
        path; use :meth:`search` to find that sub-module.
        """
        if not self.ancestor_of(path):
            return False
        return self.search(path) is None

    def search(self, path: str) -> ModuleTreeNode | None:
        """Return the closest descendant module that is an ancestor of ``path``."""
        return _search_nodes(path, self._sub_modules)

    def get(self, path: str) -> ModuleTreeNode | None:
        """Return this module or the descendant whose path is exactly ``path``."""
        if self._rel_path == path:
            return self
        node = _search_nodes(path, self._sub_modules)
        if node is not None and node.path == path:
            return node
        return None

    def iterator(self) -> Iterator[ModuleTreeNode]:
        """Depth-first iterator over the descendants, excluding this node."""
        return _walk(self._sub_modules)

    def list(self) -> list[ModuleTreeNode]:
        return list(self.iterator())

    def list_paths(self) -> list[str]:
        return [node.path for node in self.iterator()]


class ModuleTree:
    """Container organizing modules by their directory nesting.

    Args:
        root_path: Directory every module must be nested within. When set,
            node paths are relative to it and inserting a module outside of
            it raises :class:`OutsideRootError`.
    """

    def __init__(self, root_path: str | os.PathLike[str] | None = None) -> None:
        self._root_path = os.fspath(root_path) if root_path is not None else None
        self._sub_modules: list[ModuleTreeNode] = []

    def __iter__(self) -> Iterator[ModuleTreeNode]:
        return self.iterator()

    def __len__(self) -> int:
        return sum(1 for _ in self.iterator())

    @property
    def root_path(self) -> str | None:
        return self._root_path

    def insert_rel(self, rel_path: str, *attributes: str) -> ModuleTreeNode:
        """Insert a module given its path relative to the root."""
        if self._root_path is None:
            return self.insert(rel_path, *attributes)
        return self.insert(os.path.join(self._root_path, rel_path), *attributes)

    def insert(self, path: str | os.PathLike[str], *attributes: str) -> ModuleTreeNode:
        """Add a module, nesting it within its closest ancestor.

        Existing modules at the insertion layer that are nested within the new
        module are moved beneath it.

        Raises:
            OutsideRootError: If the path is not within the root path.
            DuplicateModuleError: If the relative path is already present.
        """
        module_path = os.fspath(path)
        rel_path = self._relative(module_path)

        if self.get(rel_path) is not None:
            raise DuplicateModuleError(module_path, rel_path)

        # Walk down while some sibling at the current layer contains the new
        # path; the layer where none does is where the module belongs.
        nodes = self._sub_modules
        while True:
            parent = next((n for n in nodes if n.ancestor_of(rel_path)), None)
            if parent is None:
                break
            nodes = parent._sub_modules

        new_node = ModuleTreeNode(rel_path, abs_path=module_path, attributes=attributes)

        adopted = [n for n in nodes if new_node.ancestor_of(n.path)]
        if adopted:
            nodes[:] = [n for n in nodes if not new_node.ancestor_of(n.path)]
            new_node._sub_modules.extend(adopted)
            new_node._sub_modules.sort(key=_node_key)

        nodes.append(new_node)
        nodes.sort(key=_node_key)
        return new_node

    def search(self, path: str) -> ModuleTreeNode | None:
        """Return the module that is the closest ancestor of ``path``."""
        return _search_nodes(path, self._sub_modules)

    def get(self, path: str) -> ModuleTreeNode | None:
        """Return the module with exactly this relative path, if present."""
        node = _search_nodes(path, self._sub_modules)
        if node is not None and node.path == path:
            return node
        return None

    def iterator(self) -> Iterator[ModuleTreeNode]:
        """Depth-first iterator over every module, each layer in sorted order."""
        return _walk(self._sub_modules)

    def list(self) -> list[ModuleTreeNode]:
        return list(self.iterator())

    def list_paths(self) -> list[str]:
        return [node.path for node in self.iterator()]

    def _relative(self, module_path: str) -> str:
        if self._root_path is None:
            return posixpath.normpath(module_path) if module_path else "."

        root = os.path.abspath(self._root_path)
        target = os.path.abspath(module_path)
        try:
            rel = os.path.relpath(target, root)
        except ValueError as e:
            # Different drives on Windows.
            raise OutsideRootError(module_path, self._root_path) from e

        rel = rel.replace(os.sep, "/")
        if rel == ".." or rel.startswith("../"):
            raise OutsideRootError(module_path, self._root_path)
        return rel


def _node_key(node: ModuleTreeNode) -> str:
    return node.path


def _search_nodes(path: str, nodes: list[ModuleTreeNode]) -> ModuleTreeNode | None:
    parent = None
    while True:
        match = next((n for n in nodes if n.ancestor_of(path)), None)
        if match is None:
            return parent
        parent = match
        nodes = match._sub_modules


def _walk(nodes: list[ModuleTreeNode]) -> Iterator[ModuleTreeNode]:
    # Children are pushed in reverse so they pop in sorted order.
    stack = list(reversed(nodes))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node._sub_modules))
