"""A thread-safe red-black binary search tree."""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol


class Color(enum.Enum):
    """The color of a tree node."""

    RED = False
    BLACK = True


class Key(Protocol):
    """A key that can be ordered against another key of the same kind."""

    def less_than(self, other: Any) -> bool: ...


@dataclass(frozen=True)
class IntKey:
    """An integer key."""

    value: int

    def less_than(self, other: Any) -> bool:
        """Return whether this key is less than ``other`` (an IntKey or int)."""
        other_value = other.value if isinstance(other, IntKey) else other
        if not isinstance(other_value, int) or isinstance(other_value, bool):
            raise TypeError(f"cannot compare IntKey with {type(other).__name__}")
        return self.value < other_value


@dataclass(frozen=True)
class StrKey:
    """A string key."""

    value: str

    def less_than(self, other: Any) -> bool:
        """Return whether this key is less than ``other`` (a StrKey or str)."""
        other_value = other.value if isinstance(other, StrKey) else other
        if not isinstance(other_value, str):
            raise TypeError(f"cannot compare StrKey with {type(other).__name__}")
        return self.value < other_value


@dataclass(eq=True)
class Node:
    """A node in the tree.  Equality compares keys, items, colors and subtrees."""

    key: Any = None
    item: Any = None
    color: Color = Color.RED
    left: Optional["Node"] = None
    right: Optional["Node"] = None
    parent: Optional["Node"] = field(default=None, compare=False, repr=False)


def _is_red(node: Optional[Node]) -> bool:
    return node is not None and node.color is Color.RED


class RedBlackTree:
    """A red-black tree mapping keys to values.  Thread-safe."""

    def __init__(self, root: Optional[Node] = None) -> None:
        self.root = root
        self._size = 0
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return self._size

    def insert(self, key: Key, value: Any) -> None:
        """Insert ``value`` at ``key``.  Equal keys are kept as separate nodes."""
        with self._lock:
            node = Node(key=key, item=value, color=Color.BLACK)
            self._tree_insert(node)
            self._insert_rebalance(node)
            self._size += 1

    def _tree_insert(self, new: Node) -> None:
        if self.root is None:
            self.root = new
            return
        new.color = Color.RED
        current = self.root
        while True:
            if current.key.less_than(new.key):
                if current.right is None:
                    current.right = new
                    break
                current = current.right
            else:
                if current.left is None:
                    current.left = new
                    break
                current = current.left
        new.parent = current

    def _insert_rebalance(self, n: Node) -> None:
        while n is not self.root and _is_red(n.parent):
            parent = n.parent
            grand = parent.parent
            if parent is grand.left:
                uncle = grand.right
                if _is_red(uncle):
                    parent.color = Color.BLACK
                    uncle.color = Color.BLACK
                    grand.color = Color.RED
                    n = grand
                    continue
                if n is parent.right:
                    n = parent
                    self.left_rotate(n)
                n.parent.color = Color.BLACK
                n.parent.parent.color = Color.RED
                self.right_rotate(n.parent.parent)
            else:
                uncle = grand.left
                if _is_red(uncle):
                    parent.color = Color.BLACK
                    uncle.color = Color.BLACK
                    grand.color = Color.RED
                    n = grand
                    continue
                if n is parent.left:
                    n = parent
                    self.right_rotate(n)
                n.parent.color = Color.BLACK
                n.parent.parent.color = Color.RED
                self.left_rotate(n.parent.parent)
        self.root.color = Color.BLACK

    def _replace_child(self, parent: Optional[Node], old: Node, new: Node) -> None:
        if parent is None:
            self.root = new
        elif parent.left is old:
            parent.left = new
        else:
            parent.right = new

    def left_rotate(self, node: Node) -> None:
        """Rotate ``node`` left; its right child takes its place."""
        with self._lock:
            pivot = node.right
            if pivot is None:
                raise ValueError("cannot rotate left a node without a right child")
            parent = node.parent
            inner = pivot.left
            pivot.parent = parent
            node.parent = pivot
            pivot.left = node
            node.right = inner
            if inner is not None:
                inner.parent = node
            self._replace_child(parent, node, pivot)

    def right_rotate(self, node: Node) -> None:
        """Rotate ``node`` right; its left child takes its place."""
        with self._lock:
            pivot = node.left
            if pivot is None:
                raise ValueError("cannot rotate right a node without a left child")
            parent = node.parent
            inner = pivot.right
            pivot.parent = parent
            node.parent = pivot
            pivot.right = node
            node.left = inner
            if inner is not None:
                inner.parent = node
            self._replace_child(parent, node, pivot)