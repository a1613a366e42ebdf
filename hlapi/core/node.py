"""Node class for hlapi script trees.

A script is an ordered tree of nodes, each having a name, an optional value
of any type and an ordered list of children. Nodes keep a back-link to their
parent, which allows slots to navigate upwards and allows the interceptor
composer to detach and re-insert nodes without searching the whole tree.
"""

from typing import Any, Iterable, Iterator, List, Optional


class Node:
    """A single node in a script tree.

    Attributes:
        name: Node name (may be empty)
        value: Optional node value of any type
        parent: Parent node, or None for a root node
    """

    __slots__ = ("name", "value", "parent", "_children")

    def __init__(
        self: "Node",
        name: str = "",
        value: Any = None,
        children: Optional[Iterable["Node"]] = None,
    ) -> None:
        """Initialize a node.

        Args:
            name: Node name
            value: Node value
            children: Initial children, detached from any previous parent
        """
        self.name = name
        self.value = value
        self.parent: Optional["Node"] = None
        self._children: List["Node"] = []
        if children:
            self.add_range(children)

    def __repr__(self: "Node") -> str:
        return f"Node(name={self.name!r}, value={self.value!r}, children={len(self._children)})"

    def __iter__(self: "Node") -> Iterator["Node"]:
        return iter(self._children)

    def __len__(self: "Node") -> int:
        return len(self._children)

    @property
    def children(self: "Node") -> List["Node"]:
        """Snapshot of this node's children."""
        return list(self._children)

    @property
    def root(self: "Node") -> "Node":
        """Topmost ancestor of this node (the node itself if it has no parent)."""
        current = self
        while current.parent is not None:
            current = current.parent
        return current

    # Structural mutation

    def add(self: "Node", node: "Node") -> "Node":
        """Append a node as the last child, detaching it from its old parent.

        Returns:
            The appended node
        """
        node.untie()
        node.parent = self
        self._children.append(node)
        return node

    def add_range(self: "Node", nodes: Iterable["Node"]) -> None:
        """Append several nodes in order."""
        for node in list(nodes):
            self.add(node)

    def insert(self: "Node", index: int, node: "Node") -> "Node":
        """Insert a node at the given child index, detaching it first."""
        node.untie()
        node.parent = self
        self._children.insert(index, node)
        return node

    def insert_before(self: "Node", node: "Node") -> "Node":
        """Insert a node as the sibling immediately preceding this node.

        Raises:
            ValueError: If this node has no parent
        """
        if self.parent is None:
            raise ValueError("Cannot insert a sibling before a root node")
        node.untie()
        parent = self.parent
        node.parent = parent
        parent._children.insert(parent._index_of(self), node)
        return node

    def insert_after(self: "Node", node: "Node") -> "Node":
        """Insert a node as the sibling immediately following this node.

        Raises:
            ValueError: If this node has no parent
        """
        if self.parent is None:
            raise ValueError("Cannot insert a sibling after a root node")
        node.untie()
        parent = self.parent
        node.parent = parent
        parent._children.insert(parent._index_of(self) + 1, node)
        return node

    def remove(self: "Node", node: "Node") -> None:
        """Remove a direct child."""
        del self._children[self._index_of(node)]
        node.parent = None

    def untie(self: "Node") -> "Node":
        """Detach this node from its parent, if any."""
        if self.parent is not None:
            self.parent.remove(self)
        return self

    def clear(self: "Node") -> None:
        """Remove all children."""
        for child in self._children:
            child.parent = None
        self._children = []

    def _index_of(self: "Node", node: "Node") -> int:
        # Identity lookup, nodes do not define equality.
        for index, child in enumerate(self._children):
            if child is node:
                return index
        raise ValueError(f"Node [{node.name}] is not a child of [{self.name}]")

    # Queries

    def first(self: "Node", name: str) -> Optional["Node"]:
        """Return the first direct child with the given name."""
        for child in self._children:
            if child.name == name:
                return child
        return None

    def all(self: "Node", name: str) -> List["Node"]:
        """Return all direct children with the given name."""
        return [child for child in self._children if child.name == name]

    def descendants(self: "Node") -> Iterator["Node"]:
        """Iterate all descendants depth first, in document order."""
        for child in self._children:
            yield child
            yield from child.descendants()

    def get(self: "Node", name: str, default: Any = None) -> Any:
        """Return the value of the first child with the given name."""
        child = self.first(name)
        return child.value if child is not None else default

    def clone(self: "Node") -> "Node":
        """Deep copy of this node's name and children.

        Values are shared between the original and the copy.
        """
        return Node(self.name, self.value, [child.clone() for child in self._children])


__all__ = ["Node"]
