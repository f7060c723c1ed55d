"""
Data models for the stock ledger.
"""

from pricetree.models.bounds import FLOAT, INT32, INT64, STRING, Bounds, BoundedKey, bounds_for
from pricetree.models.price_key import PriceKey
from pricetree.models.stock import Stock

__all__ = [
    "Bounds",
    "BoundedKey",
    "bounds_for",
    "INT32",
    "INT64",
    "FLOAT",
    "STRING",
    "PriceKey",
    "Stock",
]
