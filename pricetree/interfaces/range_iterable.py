"""
RangeIterable protocol for ordered indexes that can be walked by key range.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterator
from typing import Any


class RangeIterable(ABC):
    """
    Protocol for indexes that can enumerate a key range in ascending order.

    Walks are read-only; mutating the index during a walk is unsupported.
    A walk yields (key, value) pairs and never visits sentinel entries.
    """

    @abstractmethod
    def __iter__(self) -> Iterator[tuple[Any, Any]]:
        """Walk every stored entry in ascending key order."""
        pass

    @abstractmethod
    def iterator(
        self, start: Any | None = None, end: Any | None = None
    ) -> Iterator[tuple[Any, Any]]:
        """
        Walk the entries whose key lies in [start, end).

        Args:
            start: Lowest key to include. None walks from the smallest entry.
            end: First key to exclude. None walks to the largest entry.

        Returns:
            Iterator yielding (key, value) tuples in ascending order.
        """
        pass

    @abstractmethod
    def __aiter__(self) -> AsyncIterator[tuple[Any, Any]]:
        """Async counterpart of __iter__."""
        pass

    @abstractmethod
    def async_iterator(
        self, start: Any | None = None, end: Any | None = None
    ) -> AsyncIterator[tuple[Any, Any]]:
        """Async counterpart of iterator(start, end)."""
        pass
