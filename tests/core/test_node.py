"""Tests for the script tree node."""

import pytest

from hlapi.core.node import Node


def build_tree() -> Node:
    root = Node()
    root.add(Node("a", 1))
    b = root.add(Node("b"))
    b.add(Node("b1", "x"))
    b.add(Node("b2"))
    root.add(Node("c"))
    return root


class TestStructure:
    """Test structural mutation."""

    def test_add_sets_parent(self):
        root = Node()
        child = root.add(Node("child"))
        assert child.parent is root
        assert len(root) == 1

    def test_add_detaches_from_previous_parent(self):
        first, second = Node("first"), Node("second")
        child = first.add(Node("child"))
        second.add(child)
        assert len(first) == 0
        assert child.parent is second

    def test_insert_at_index(self):
        root = build_tree()
        root.insert(0, Node("zero"))
        assert [n.name for n in root] == ["zero", "a", "b", "c"]

    def test_insert_before_and_after(self):
        root = build_tree()
        b = root.first("b")
        b.insert_before(Node("before"))
        b.insert_after(Node("after"))
        assert [n.name for n in root] == ["a", "before", "b", "after", "c"]

    def test_insert_before_root_raises(self):
        with pytest.raises(ValueError):
            Node("root").insert_before(Node("x"))

    def test_untie(self):
        root = build_tree()
        b = root.first("b").untie()
        assert b.parent is None
        assert [n.name for n in root] == ["a", "c"]

    def test_clear(self):
        root = build_tree()
        children = root.children
        root.clear()
        assert len(root) == 0
        assert all(child.parent is None for child in children)

    def test_children_is_a_snapshot(self):
        root = build_tree()
        snapshot = root.children
        root.add(Node("d"))
        assert len(snapshot) == 3


class TestQueries:
    """Test lookups and traversal."""

    def test_first_and_all(self):
        root = Node(children=[Node("x", 1), Node("y"), Node("x", 2)])
        assert root.first("x").value == 1
        assert [n.value for n in root.all("x")] == [1, 2]
        assert root.first("missing") is None

    def test_get(self):
        root = build_tree()
        assert root.get("a") == 1
        assert root.get("missing", "default") == "default"

    def test_descendants_document_order(self):
        root = build_tree()
        assert [n.name for n in root.descendants()] == ["a", "b", "b1", "b2", "c"]

    def test_root(self):
        root = build_tree()
        assert root.first("b").first("b1").root is root


class TestClone:
    """Test deep copies."""

    def test_clone_is_independent(self):
        root = build_tree()
        copy = root.clone()
        copy.first("b").add(Node("b3"))
        assert len(root.first("b")) == 2
        assert len(copy.first("b")) == 3

    def test_clone_shares_values(self):
        value = object()
        node = Node("n", value)
        assert node.clone().value is value

    def test_clone_has_no_parent(self):
        root = build_tree()
        assert root.first("b").clone().parent is None
