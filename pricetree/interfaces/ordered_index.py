"""
OrderStatisticContainer abstract base class for handle-based sorted indexes.
"""

from abc import abstractmethod
from typing import Any

from pricetree.interfaces.range_iterable import RangeIterable
from pricetree.models.sortedcontainers.arena import NodeHandle


class OrderStatisticContainer(RangeIterable):
    """
    Abstract base class for sorted containers with rank queries.

    Entries are addressed through NodeHandle objects returned by search and
    insert. A handle stays valid until its entry is deleted.

    Implementations:
    - TwoThreeTree: 2-3 tree with a linked list over its leaves
    """

    @abstractmethod
    def search(self, key: Any) -> NodeHandle | None:
        """
        Find the entry stored under key.

        Args:
            key: The key to look up.

        Returns:
            Handle of the entry, or None if the key is absent.

        Time complexity: O(log N)
        """
        pass

    @abstractmethod
    def insert(self, key: Any, value: Any) -> NodeHandle:
        """
        Insert a new key-value pair.

        Args:
            key: The key to insert. Must not be stored already.
            value: The value to associate with the key.

        Returns:
            Handle of the new entry.

        Time complexity: O(log N)
        """
        pass

    @abstractmethod
    def delete(self, handle: NodeHandle) -> None:
        """
        Remove the entry addressed by handle.

        Args:
            handle: A live handle obtained from this container.

        Time complexity: O(log N)
        """
        pass

    @abstractmethod
    def rank(self, handle: NodeHandle) -> int:
        """
        Return the 1-based ascending position of the entry.

        Time complexity: O(log N)
        """
        pass

    @abstractmethod
    def rank_of_key(self, key: Any) -> int:
        """
        Return the 1-based position key has or would have if inserted.

        Time complexity: O(log N)
        """
        pass

    @abstractmethod
    def successor(self, handle: NodeHandle) -> NodeHandle | None:
        """
        Return the entry following handle in key order.

        Time complexity: O(1)
        """
        pass

    @abstractmethod
    def get(self, key: Any, default: Any = None) -> Any:
        """Return the value stored under key, or default."""
        pass

    @abstractmethod
    def has(self, key: Any) -> bool:
        """Check if a key exists."""
        pass

    @abstractmethod
    def size(self) -> int:
        """
        Return the number of stored key-value pairs.

        Time complexity: O(1)
        """
        pass
