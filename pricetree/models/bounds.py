"""
Sentinel bounds for tree keys.

Every TwoThreeTree brackets its data between a minimum and a maximum
sentinel leaf. A key type supplies those values either by implementing
BoundedKey, or, for built-in types that cannot, through the defaults below.
"""

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pricetree.models.exceptions import UnsupportedKeyTypeError

K = TypeVar("K")

# Largest code point; no valid identifier sorts above it.
MAX_CHAR = chr(sys.maxunicode)


class BoundedKey(ABC):
    """Key type that knows its own minimum and maximum sentinel values."""

    @classmethod
    @abstractmethod
    def min_key(cls) -> "BoundedKey":
        """Return a value smaller than every real key of this type."""
        pass

    @classmethod
    @abstractmethod
    def max_key(cls) -> "BoundedKey":
        """Return a value greater than every real key of this type."""
        pass


@dataclass(frozen=True)
class Bounds(Generic[K]):
    """Minimum and maximum sentinel keys of a tree."""

    minimum: K
    maximum: K

    def __post_init__(self) -> None:
        if not self.minimum < self.maximum:
            raise ValueError(
                f"Bounds minimum {self.minimum!r} must be below maximum {self.maximum!r}"
            )

    def contains(self, key: Any) -> bool:
        """True if key lies strictly between the sentinels."""
        try:
            return self.minimum < key < self.maximum
        except TypeError:
            return False


INT32 = Bounds(-(2**31), 2**31 - 1)
INT64 = Bounds(-(2**63), 2**63 - 1)
FLOAT = Bounds(float("-inf"), float("inf"))
STRING = Bounds("", MAX_CHAR)

_DEFAULT_BOUNDS: dict[type, Bounds] = {
    int: INT64,
    float: FLOAT,
    str: STRING,
}


def bounds_for(example_key: Any) -> Bounds:
    """
    Return the sentinel bounds for the type of example_key.

    Args:
        example_key: Any value of the intended key type.

    Returns:
        The key type's Bounds.

    Raises:
        UnsupportedKeyTypeError: If the type defines no bounds.
    """
    if isinstance(example_key, BoundedKey):
        key_type = type(example_key)
        return Bounds(key_type.min_key(), key_type.max_key())

    bounds = _DEFAULT_BOUNDS.get(type(example_key))
    if bounds is None:
        raise UnsupportedKeyTypeError(type(example_key))
    return bounds
