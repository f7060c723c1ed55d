"""
Stock ledger built on two 2-3 tree indexes.
"""

from pricetree.ledger.ledger import StockLedger

__all__ = ["StockLedger"]
