"""
2-3 Tree implementation with order statistics.

All leaves sit at the same depth and hold the key-value pairs; internal
nodes cache the maximum key and the leaf count of their subtree. A doubly
linked list threads the leaves in key order, bracketed by two permanent
sentinel leaves. Search, insert, delete and rank are O(log N); walking k
consecutive entries is O(k).
"""

import logging
from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass
from typing import Any

from pricetree.interfaces.ordered_index import OrderStatisticContainer
from pricetree.models.bounds import Bounds, bounds_for
from pricetree.models.exceptions import (
    DuplicateKeyError,
    KeyOutOfBoundsError,
    SentinelError,
    StaleHandleError,
)
from pricetree.models.sortedcontainers.arena import NodeArena, NodeHandle

logger = logging.getLogger(__name__)


@dataclass
class Node:
    """Node in the 2-3 Tree. Links are arena slot indices."""

    key: Any
    value: Any = None
    is_leaf: bool = False
    size: int = 0
    parent: int | None = None
    left: int | None = None
    middle: int | None = None
    right: int | None = None
    prev: int | None = None
    next: int | None = None


class TwoThreeTree(OrderStatisticContainer):
    """
    2-3 Tree implementation of OrderStatisticContainer.

    Properties maintained:
    1. Every leaf is at the same depth
    2. Every internal node has 2 or 3 children
    3. An internal node's key is the max key below it, its size the leaf count
    4. The leaf list runs from the min sentinel to the max sentinel in order
    5. Keys are unique
    """

    def __init__(self, example_key: Any = None, bounds: Bounds | None = None) -> None:
        """
        Initialize an empty tree.

        Args:
            example_key: A value of the key type, used to pick sentinel bounds.
            bounds: Explicit sentinel bounds. Takes precedence over example_key.

        Raises:
            UnsupportedKeyTypeError: If no bounds exist for example_key's type.
        """
        self._bounds: Bounds = bounds if bounds is not None else bounds_for(example_key)
        self._arena: NodeArena[Node] = NodeArena()
        self._count: int = 0

        self._head = self._arena.alloc(
            Node(key=self._bounds.minimum, is_leaf=True, size=1)
        )
        self._tail = self._arena.alloc(
            Node(key=self._bounds.maximum, is_leaf=True, size=1)
        )
        self._arena[self._head].next = self._tail
        self._arena[self._tail].prev = self._head

        self._root = self._arena.alloc(Node(key=None))
        self._set_children(self._root, self._head, self._tail, None)

    @property
    def bounds(self) -> Bounds:
        return self._bounds

    @property
    def height(self) -> int:
        """Number of edges between the root and any leaf."""
        height = 0
        index = self._root
        while not self._arena[index].is_leaf:
            index = self._arena[index].left
            height += 1
        return height

    @property
    def minimum_sentinel(self) -> NodeHandle:
        return self._arena.handle(self._head)

    @property
    def maximum_sentinel(self) -> NodeHandle:
        return self._arena.handle(self._tail)

    def validate_key(self, key: Any) -> None:
        """
        Check that key may be stored in this tree.

        Raises:
            KeyOutOfBoundsError: If key is not strictly between the sentinels.
        """
        if not self._bounds.contains(key):
            raise KeyOutOfBoundsError(key, self._bounds)

    def search(self, key: Any) -> NodeHandle | None:
        """Find the leaf holding key. O(log N)"""
        index = self._descend(key)
        if index == self._head or index == self._tail:
            return None
        if self._arena[index].key == key:
            return self._arena.handle(index)
        return None

    def insert(self, key: Any, value: Any) -> NodeHandle:
        """Insert a new key-value pair. O(log N)"""
        self.validate_key(key)
        successor = self._descend(key)
        if self._arena[successor].key == key:
            raise DuplicateKeyError(key)

        leaf = self._arena.alloc(Node(key=key, value=value, is_leaf=True, size=1))
        self._link_before(leaf, successor)

        node = self._arena[successor].parent
        carry = self._insert_and_split(node, leaf)
        while node != self._root:
            node = self._arena[node].parent
            if carry is not None:
                carry = self._insert_and_split(node, carry)
            else:
                self._refresh(node)

        if carry is not None:
            new_root = self._arena.alloc(Node(key=None))
            self._set_children(new_root, node, carry, None)
            self._root = new_root
            logger.debug(f"Root split, tree height is now {self.height}")

        self._count += 1
        return self._arena.handle(leaf)

    def delete(self, handle: NodeHandle) -> None:
        """Remove the leaf addressed by handle. O(log N)"""
        leaf = self._resolve_leaf(handle)
        if leaf == self._head or leaf == self._tail:
            raise SentinelError("Sentinel leaves cannot be deleted")

        removed = self._arena[leaf]
        self._arena[removed.prev].next = removed.next
        self._arena[removed.next].prev = removed.prev

        node = removed.parent
        parent = self._arena[node]
        if leaf == parent.left:
            self._set_children(node, parent.middle, parent.right, None)
        elif leaf == parent.middle:
            self._set_children(node, parent.left, parent.right, None)
        else:
            self._set_children(node, parent.left, parent.middle, None)
        self._arena.free(leaf)
        self._count -= 1

        while node is not None:
            current = self._arena[node]
            if current.middle is not None:
                self._refresh(node)
                node = current.parent
            elif node != self._root:
                node = self._borrow_or_merge(node)
            else:
                self._root = current.left
                self._arena[self._root].parent = None
                self._arena.free(node)
                node = None
                logger.debug(f"Root collapsed, tree height is now {self.height}")

    def discard(self, key: Any) -> bool:
        """
        Remove key if present.

        Returns:
            True if the key was found and removed, False otherwise.
        """
        handle = self.search(key)
        if handle is None:
            return False
        self.delete(handle)
        return True

    def rank(self, handle: NodeHandle) -> int:
        """
        Return the 1-based position of the leaf among all leaves.

        The minimum sentinel has rank 1, so the smallest stored key has rank 2.
        """
        child = self._resolve_leaf(handle)
        rank = 1
        node = self._arena[child].parent
        while node is not None:
            parent = self._arena[node]
            if child == parent.middle:
                rank += self._arena[parent.left].size
            elif child == parent.right:
                rank += self._arena[parent.left].size + self._arena[parent.middle].size
            child = node
            node = parent.parent
        return rank

    def rank_of_key(self, key: Any) -> int:
        """
        Return 1 + the number of leaves whose key is smaller than key.

        Equals rank(search(key)) for stored keys, and the rank key would
        get if inserted otherwise. Does not modify the tree.
        """
        smaller = 0
        node = self._arena[self._root]
        while not node.is_leaf:
            left = self._arena[node.left]
            if key <= left.key:
                node = left
                continue
            smaller += left.size
            middle = self._arena[node.middle]
            if node.right is None or key <= middle.key:
                node = middle
            else:
                smaller += middle.size
                node = self._arena[node.right]
        if node.key < key:
            smaller += 1
        return smaller + 1

    def ceiling(self, key: Any) -> NodeHandle:
        """Return the first leaf whose key is >= key (possibly the max sentinel)."""
        return self._arena.handle(self._descend(key))

    def successor(self, handle: NodeHandle) -> NodeHandle | None:
        index = self._arena[self._resolve_leaf(handle)].next
        return None if index is None else self._arena.handle(index)

    def predecessor(self, handle: NodeHandle) -> NodeHandle | None:
        index = self._arena[self._resolve_leaf(handle)].prev
        return None if index is None else self._arena.handle(index)

    def is_sentinel(self, handle: NodeHandle) -> bool:
        leaf = self._resolve_leaf(handle)
        return leaf == self._head or leaf == self._tail

    def key_of(self, handle: NodeHandle) -> Any:
        return self._arena[self._resolve_leaf(handle)].key

    def value_of(self, handle: NodeHandle) -> Any:
        return self._arena[self._resolve_leaf(handle)].value

    def get(self, key: Any, default: Any = None) -> Any:
        """Retrieve value by key. O(log N)"""
        handle = self.search(key)
        return default if handle is None else self.value_of(handle)

    def has(self, key: Any) -> bool:
        return self.search(key) is not None

    def size(self) -> int:
        return self._count

    def __len__(self) -> int:
        return self._count

    def __contains__(self, key: Any) -> bool:
        return self.has(key)

    def __iter__(self) -> Iterator[tuple[Any, Any]]:
        return self.iterator()

    def iterator(
        self, start: Any | None = None, end: Any | None = None
    ) -> Iterator[tuple[Any, Any]]:
        return _RangeIterator(self, self._first_in_range(start), end)

    def __aiter__(self) -> AsyncIterator[tuple[Any, Any]]:
        return self.async_iterator()

    def async_iterator(
        self, start: Any | None = None, end: Any | None = None
    ) -> AsyncIterator[tuple[Any, Any]]:
        return _AsyncRangeIterator(self, self._first_in_range(start), end)

    def __repr__(self) -> str:
        return f"TwoThreeTree(size={self._count}, height={self.height})"

    def _first_in_range(self, start: Any | None) -> int:
        """First leaf to visit when iterating from start."""
        if start is None:
            return self._arena[self._head].next
        index = self._descend(start)
        if index == self._head:
            index = self._arena[index].next
        return index

    def _resolve_leaf(self, handle: NodeHandle) -> int:
        index = self._arena.resolve(handle)
        if not self._arena[index].is_leaf:
            raise StaleHandleError(f"{handle!r} does not address a leaf")
        return index

    def _descend(self, key: Any) -> int:
        """Walk down to the leftmost leaf whose key is >= key."""
        index = self._root
        node = self._arena[index]
        while not node.is_leaf:
            if key <= self._arena[node.left].key:
                index = node.left
            elif node.right is None or key <= self._arena[node.middle].key:
                index = node.middle
            else:
                index = node.right
            node = self._arena[index]
        return index

    def _link_before(self, leaf: int, successor: int) -> None:
        """Splice leaf into the leaf list right before successor."""
        new = self._arena[leaf]
        after = self._arena[successor]
        new.prev = after.prev
        new.next = successor
        if after.prev is not None:
            self._arena[after.prev].next = leaf
        after.prev = leaf

    def _refresh(self, index: int) -> None:
        """Recompute an internal node's max key and size from its children."""
        node = self._arena[index]
        last = node.right if node.right is not None else node.middle
        if last is None:
            last = node.left
        node.key = self._arena[last].key
        node.size = sum(
            self._arena[child].size
            for child in (node.left, node.middle, node.right)
            if child is not None
        )

    def _set_children(
        self, index: int, left: int, middle: int | None, right: int | None
    ) -> None:
        node = self._arena[index]
        node.left = left
        node.middle = middle
        node.right = right
        for child in (left, middle, right):
            if child is not None:
                self._arena[child].parent = index
        self._refresh(index)

    def _insert_and_split(self, index: int, child: int) -> int | None:
        """
        Add child to the internal node at index.

        Returns:
            None if the node absorbed the child, otherwise the new sibling
            holding the node's upper two children, to be added to the parent.
        """
        node = self._arena[index]
        left, middle, right = node.left, node.middle, node.right
        key = self._arena[child].key

        if right is None:
            if key < self._arena[left].key:
                self._set_children(index, child, left, middle)
            elif key < self._arena[middle].key:
                self._set_children(index, left, child, middle)
            else:
                self._set_children(index, left, middle, child)
            return None

        sibling = self._arena.alloc(Node(key=None))
        if key < self._arena[left].key:
            self._set_children(index, child, left, None)
            self._set_children(sibling, middle, right, None)
        elif key < self._arena[middle].key:
            self._set_children(index, left, child, None)
            self._set_children(sibling, middle, right, None)
        elif key < self._arena[right].key:
            self._set_children(index, left, middle, None)
            self._set_children(sibling, child, right, None)
        else:
            self._set_children(index, left, middle, None)
            self._set_children(sibling, right, child, None)
        return sibling

    def _borrow_or_merge(self, index: int) -> int:
        """
        Repair an internal node left with a single child.

        Borrows a child from the adjacent sibling when it has three,
        otherwise merges into that sibling and frees the node.

        Returns:
            The parent index, which may itself be left with one child.
        """
        node = self._arena[index]
        parent_index = node.parent
        parent = self._arena[parent_index]
        only = node.left

        if index == parent.left:
            sibling_index = parent.middle
            sibling = self._arena[sibling_index]
            if sibling.right is not None:
                self._set_children(index, only, sibling.left, None)
                self._set_children(sibling_index, sibling.middle, sibling.right, None)
                return parent_index
            self._set_children(sibling_index, only, sibling.left, sibling.middle)
            self._set_children(parent_index, sibling_index, parent.right, None)
        elif index == parent.middle:
            sibling_index = parent.left
            sibling = self._arena[sibling_index]
            if sibling.right is not None:
                self._set_children(index, sibling.right, only, None)
                self._set_children(sibling_index, sibling.left, sibling.middle, None)
                return parent_index
            self._set_children(sibling_index, sibling.left, sibling.middle, only)
            self._set_children(parent_index, sibling_index, parent.right, None)
        else:
            sibling_index = parent.middle
            sibling = self._arena[sibling_index]
            if sibling.right is not None:
                self._set_children(index, sibling.right, only, None)
                self._set_children(sibling_index, sibling.left, sibling.middle, None)
                return parent_index
            self._set_children(sibling_index, sibling.left, sibling.middle, only)
            self._set_children(parent_index, parent.left, sibling_index, None)

        self._arena.free(index)
        return parent_index


class _RangeIterator(Iterator[tuple[Any, Any]]):
    """Iterator walking the leaf list of a 2-3 Tree."""

    def __init__(self, tree: TwoThreeTree, first: int, end: Any | None) -> None:
        self._tree = tree
        self._next: NodeHandle | None = tree._arena.handle(first)
        self._end = end

    def __iter__(self) -> Iterator[tuple[Any, Any]]:
        return self

    def __next__(self) -> tuple[Any, Any]:
        if self._next is None:
            raise StopIteration

        index = self._tree._resolve_leaf(self._next)
        node = self._tree._arena[index]

        # Stop at the max sentinel or the end bound
        if index == self._tree._tail or (self._end is not None and node.key >= self._end):
            self._next = None
            raise StopIteration

        self._next = self._tree._arena.handle(node.next)
        return node.key, node.value


class _AsyncRangeIterator(AsyncIterator[tuple[Any, Any]]):
    """Async iterator walking the leaf list of a 2-3 Tree (in-memory, no I/O)."""

    def __init__(self, tree: TwoThreeTree, first: int, end: Any | None) -> None:
        self._walk = _RangeIterator(tree, first, end)

    def __aiter__(self) -> "_AsyncRangeIterator":
        return self

    async def __anext__(self) -> tuple[Any, Any]:
        try:
            return next(self._walk)
        except StopIteration:
            raise StopAsyncIteration from None
