"""Tests for the module path tree."""

from __future__ import annotations

import itertools
from pathlib import Path

import pytest

from monorelease.core.tree import ModuleTree, ModuleTreeNode
from monorelease.exceptions import DuplicateModuleError, OutsideRootError


def build_tree(*paths: str, root_path: str | None = None) -> ModuleTree:
    tree = ModuleTree(root_path=root_path)
    for path in paths:
        tree.insert(path)
    return tree


def shape(nodes) -> list[tuple[str, list]]:
    """Nested (path, children) representation of a layer."""
    return [(node.path, shape(node.sub_modules)) for node in nodes]


class TestModuleTreeList:
    """Tests for ModuleTree.list() and depth first ordering."""

    @pytest.mark.parametrize(
        ("paths", "expect"),
        [
            (["a"], ["a"]),
            (["a", "b"], ["a", "b"]),
            (["a", "a/c", "b", "b/c"], ["a", "a/c", "b", "b/c"]),
            (["."], ["."]),
            ([".", "a", "a/c", "b", "b/c"], [".", "a", "a/c", "b", "b/c"]),
            (["b/c", "b", "a/c", "a", "."], [".", "a", "a/c", "b", "b/c"]),
        ],
    )
    def test_list_order(self, paths: list[str], expect: list[str]):
        """Modules are listed depth first, each layer sorted."""
        tree = build_tree(*paths)

        assert [m.path for m in tree.list()] == expect
        assert tree.list_paths() == expect

    def test_with_root_path(self):
        """Paths are relative to the root path."""
        tree = build_tree(
            "/foo/bar",
            "/foo/bar/a",
            "/foo/bar/a/c",
            "/foo/bar/b",
            "/foo/bar/b/c",
            root_path="/foo/bar",
        )

        assert tree.list_paths() == [".", "a", "a/c", "b", "b/c"]
        assert tree.get("a/c").abs_path == "/foo/bar/a/c"

    def test_empty_tree(self):
        """An empty tree lists nothing."""
        tree = ModuleTree()

        assert tree.list() == []
        assert len(tree) == 0


class TestModuleTreeIterator:
    """Tests for tree iteration."""

    def test_iterator_is_restartable(self):
        """Each call returns a fresh iterator."""
        tree = build_tree(".", "a", "a/b", "c")

        first = list(tree.iterator())
        second = list(tree.iterator())

        assert [n.path for n in first] == [".", "a", "a/b", "c"]
        assert first == second
        assert [n.path for n in tree] == [".", "a", "a/b", "c"]

    def test_node_iterator_excludes_node(self):
        """A node's iterator yields its descendants only."""
        tree = build_tree("a", "a/b", "a/b/c", "a/d", "e")

        assert tree.get("a").list_paths() == ["a/b", "a/b/c", "a/d"]
        assert tree.get("e").list_paths() == []

    def test_len_counts_all_nodes(self):
        """len() counts nested modules too."""
        assert len(build_tree(".", "a", "a/b", "c")) == 4


class TestModuleTreeInsert:
    """Tests for ModuleTree.insert()."""

    def test_insertion_order_independent(self):
        """Any insertion order yields the same tree."""
        paths = ["a/f/g", "a", "a/b", "c", "e/f/g"]
        expect = [
            ("a", [("a/b", []), ("a/f/g", [])]),
            ("c", []),
            ("e/f/g", []),
        ]

        for order in itertools.permutations(paths):
            tree = build_tree(*order)
            top_layer = [tree.get(path) for path in ("a", "c", "e/f/g")]
            assert shape(top_layer) == expect, order
            assert tree.list_paths() == ["a", "a/b", "a/f/g", "c", "e/f/g"], order

    def test_reparent_under_root(self):
        """Inserting the root module re-parents existing modules."""
        tree = build_tree("service/s3", "service/s3/internal/configtest", ".")

        root = tree.get(".")
        assert [n.path for n in root.sub_modules] == ["service/s3"]
        s3 = tree.get("service/s3")
        assert [n.path for n in s3.sub_modules] == ["service/s3/internal/configtest"]

    def test_reparent_multiple_siblings(self):
        """Every sibling nested in the new module moves under it."""
        tree = build_tree("a/x", "a/y", "b", "a/z/1")
        tree.insert("a")

        assert shape(tree.get("a").sub_modules) == [("a/x", []), ("a/y", []), ("a/z/1", [])]
        assert tree.list_paths() == ["a", "a/x", "a/y", "a/z/1", "b"]

    def test_common_prefix_siblings_stay_siblings(self):
        """Name prefixes that aren't directory boundaries don't nest."""
        tree = build_tree("service/s3", "service/s3control", "service/s3/manager")

        assert tree.get("service/s3control").sub_modules == ()
        assert [n.path for n in tree.get("service/s3").sub_modules] == ["service/s3/manager"]

    def test_insert_returns_node(self):
        """insert() returns the new node with its attributes."""
        tree = ModuleTree()
        node = tree.insert("a", "tombstone")

        assert isinstance(node, ModuleTreeNode)
        assert node.path == "a"
        assert node.has_attribute("tombstone")
        assert not node.has_attribute("other")

    def test_duplicate_raises(self):
        """Inserting the same relative path twice is an error."""
        tree = build_tree("a", "a/b")

        with pytest.raises(DuplicateModuleError):
            tree.insert("a/b")

    def test_outside_root_raises(self):
        """Modules must be nested within the root path."""
        tree = ModuleTree(root_path="/foo/bar")

        with pytest.raises(OutsideRootError):
            tree.insert("/foo/baz")

    def test_insert_rel(self, tmp_path: Path):
        """insert_rel() joins the relative path with the root."""
        tree = ModuleTree(root_path=tmp_path)
        tree.insert(tmp_path)
        node = tree.insert_rel("a/b", "tombstone")

        assert node.path == "a/b"
        assert node.abs_path == str(tmp_path / "a" / "b")
        assert tree.list_paths() == [".", "a/b"]

    def test_empty_relative_path_is_root(self):
        """An empty path is the root module."""
        tree = ModuleTree()
        tree.insert_rel("")

        assert tree.list_paths() == ["."]


class TestModuleTreeSearch:
    """Tests for search(), get() and the ancestor predicates."""

    def test_get_returns_exact_match(self):
        """get() finds every inserted path."""
        paths = [".", "a", "a/b", "a/b/c", "d"]
        tree = build_tree(*paths)

        for path in paths:
            assert tree.get(path).path == path

    def test_get_missing(self):
        """get() returns None for paths that aren't modules."""
        tree = build_tree("a", "a/b")

        assert tree.get("a/c") is None
        assert tree.get("b") is None

    def test_search_closest_ancestor(self):
        """search() finds the closest module containing a path."""
        tree = build_tree(".", "a", "a/b")

        assert tree.search("a/b/c/d.py").path == "a/b"
        assert tree.search("a/c").path == "a"
        assert tree.search("x/y").path == "."
        assert tree.search("ab").path == "."

    def test_search_without_root_module(self):
        """search() returns None when no module contains the path."""
        tree = build_tree("a", "a/b")

        assert tree.search("b/c") is None
        assert tree.search("ab/c") is None

    def test_ancestor_of(self):
        """ancestor_of() matches directory boundaries only."""
        node = ModuleTreeNode("service/s3")

        assert node.ancestor_of("service/s3")
        assert node.ancestor_of("service/s3/api")
        assert not node.ancestor_of("service/s3control")
        assert not node.ancestor_of("service")
        assert ModuleTreeNode(".").ancestor_of("anything/at/all")

    def test_parent_of(self):
        """parent_of() is False for paths owned by a sub-module."""
        tree = build_tree(".", "sub1")
        root = tree.get(".")

        assert root.parent_of(".")
        assert root.parent_of("sub3")
        assert not root.parent_of("sub1")
        assert not root.parent_of("sub1/deeper")
        assert tree.get("sub1").parent_of("sub1/deeper")
        assert not tree.get("sub1").parent_of("sub2")

    def test_node_get_and_search(self):
        """Node level lookups are limited to the node's subtree."""
        tree = build_tree("a", "a/b", "a/b/c", "d")
        a = tree.get("a")

        assert a.get("a") is a
        assert a.get("a/b/c").path == "a/b/c"
        assert a.get("d") is None
        assert a.search("a/b/x").path == "a/b"
        assert a.search("a/x") is None
