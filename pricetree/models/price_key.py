"""
Composite (price, stock id) key for the price index.
"""

from dataclasses import dataclass

from pricetree.models.bounds import MAX_CHAR, BoundedKey


@dataclass(frozen=True, order=True)
class PriceKey(BoundedKey):
    """
    Orders stocks by price, breaking ties by stock id.

    Attributes:
        price: The stock's current price.
        stock_id: The stock identifier.
    """

    price: float
    stock_id: str

    @classmethod
    def min_key(cls) -> "PriceKey":
        return cls(float("-inf"), "")

    @classmethod
    def max_key(cls) -> "PriceKey":
        return cls(float("inf"), MAX_CHAR)

    @classmethod
    def lowest_at(cls, price: float) -> "PriceKey":
        """Key sorting before every stock priced at price."""
        return cls(price, "")

    @classmethod
    def highest_at(cls, price: float) -> "PriceKey":
        """Key sorting after every stock priced at price."""
        return cls(price, MAX_CHAR)
