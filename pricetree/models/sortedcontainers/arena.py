"""
Node arena with generation-checked handles.

Tree nodes live in numbered slots and refer to each other by slot index.
Handles given to callers carry the slot's generation, so a handle to a
freed (or reused) slot is detected instead of silently aliasing a new node.
"""

import itertools
from dataclasses import dataclass
from typing import Generic, TypeVar

from pricetree.models.exceptions import StaleHandleError

T = TypeVar("T")

_arena_ids = itertools.count(1)


@dataclass(frozen=True)
class NodeHandle:
    """Opaque reference to a node owned by one arena."""

    arena_id: int
    index: int
    generation: int


class NodeArena(Generic[T]):
    """
    Slot storage for tree nodes.

    Freed slots are recycled through a free list; each free bumps the slot's
    generation.
    """

    def __init__(self) -> None:
        self._id = next(_arena_ids)
        self._slots: list[T | None] = []
        self._generations: list[int] = []
        self._free: list[int] = []
        self._live = 0

    @property
    def id(self) -> int:
        return self._id

    def alloc(self, item: T) -> int:
        """Store item in a free slot and return the slot index."""
        if self._free:
            index = self._free.pop()
            self._slots[index] = item
        else:
            index = len(self._slots)
            self._slots.append(item)
            self._generations.append(0)
        self._live += 1
        return index

    def free(self, index: int) -> None:
        """Release a slot. Handles issued for it become stale."""
        if self._slots[index] is None:
            raise StaleHandleError(f"Slot {index} is already free")
        self._slots[index] = None
        self._generations[index] += 1
        self._free.append(index)
        self._live -= 1

    def __getitem__(self, index: int) -> T:
        item = self._slots[index]
        if item is None:
            raise StaleHandleError(f"Slot {index} is free")
        return item

    def __len__(self) -> int:
        return self._live

    def handle(self, index: int) -> NodeHandle:
        return NodeHandle(self._id, index, self._generations[index])

    def resolve(self, handle: NodeHandle) -> int:
        """
        Map a handle back to its slot index.

        Raises:
            StaleHandleError: If the handle belongs to another arena, or its
                slot was freed after the handle was issued.
        """
        if not isinstance(handle, NodeHandle) or handle.arena_id != self._id:
            raise StaleHandleError(f"{handle!r} does not belong to this tree")
        index = handle.index
        if not 0 <= index < len(self._slots):
            raise StaleHandleError(f"{handle!r} points outside the tree")
        if self._slots[index] is None or self._generations[index] != handle.generation:
            raise StaleHandleError(f"{handle!r} refers to a deleted node")
        return index
