"""
Abstract base classes and protocols for the sorted indexes.
"""

from pricetree.interfaces.ordered_index import OrderStatisticContainer
from pricetree.interfaces.range_iterable import RangeIterable

__all__ = ["OrderStatisticContainer", "RangeIterable"]
