"""
Order-statistics 2-3 tree and a stock price index built on it.

This package provides:
- TwoThreeTree: search/insert/delete/rank in O(log N), ordered walks in O(K)
- StockLedger: stocks indexed by id and by price, with price-range queries
- Bounds/BoundedKey: the sentinel keys bracketing every tree
"""

from pricetree.ledger import StockLedger
from pricetree.models.bounds import Bounds, BoundedKey, bounds_for
from pricetree.models.price_key import PriceKey
from pricetree.models.sortedcontainers import NodeHandle, TwoThreeTree

__all__ = [
    "Bounds",
    "BoundedKey",
    "bounds_for",
    "NodeHandle",
    "PriceKey",
    "StockLedger",
    "TwoThreeTree",
]
