"""
Custom exceptions for the order-statistics tree and the stock ledger.
"""

from typing import Any


class TreeError(Exception):
    """Base class for errors raised by TwoThreeTree."""


class UnsupportedKeyTypeError(TreeError, TypeError):
    """
    Raised when no sentinel bounds exist for a key type.

    Fatal to the construction attempt that triggered it.
    """

    def __init__(self, key_type: type):
        """
        Initialize unsupported type error.

        Args:
            key_type: The key type that has no minimum/maximum bounds.
        """
        self.key_type = key_type
        super().__init__(
            f"No sentinel bounds defined for key type {key_type.__qualname__}"
        )


class KeyOutOfBoundsError(TreeError, ValueError):
    """Raised when a key is not strictly between the tree's sentinels."""

    def __init__(self, key: Any, bounds: Any):
        self.key = key
        self.bounds = bounds
        super().__init__(
            f"Key {key!r} must lie strictly between "
            f"{bounds.minimum!r} and {bounds.maximum!r}"
        )


class DuplicateKeyError(TreeError, ValueError):
    """Raised when inserting a key that is already stored."""

    def __init__(self, key: Any):
        self.key = key
        super().__init__(f"Key {key!r} already exists")


class PreconditionError(TreeError):
    """
    Raised when a caller breaks an operation's contract.

    This is a programming error, raised before the tree is mutated.
    """


class StaleHandleError(PreconditionError):
    """Raised for handles whose node was freed or that belong to another tree."""


class SentinelError(PreconditionError):
    """Raised when a sentinel leaf is the target of a delete."""


class StockError(Exception):
    """Raised by the stock ledger for missing or conflicting stocks and events."""


class InvalidPriceRangeError(StockError, ValueError):
    """Raised when a price range is malformed."""

    def __init__(self, price1: float, price2: float):
        self.price1 = price1
        self.price2 = price2
        super().__init__(
            f"Invalid price range [{price1}, {price2}]: "
            f"bounds must be finite and price1 must not exceed price2"
        )
