"""
Sorted container implementations for the stock indexes.
"""

from pricetree.models.sortedcontainers.arena import NodeArena, NodeHandle
from pricetree.models.sortedcontainers.two_three_tree import TwoThreeTree

__all__ = ["NodeArena", "NodeHandle", "TwoThreeTree"]
