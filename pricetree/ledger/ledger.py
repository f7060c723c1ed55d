"""
StockLedger - stock index API over two 2-3 trees.
"""

import logging
import math

from pricetree.models.bounds import STRING, Bounds
from pricetree.models.exceptions import InvalidPriceRangeError, StockError
from pricetree.models.price_key import PriceKey
from pricetree.models.sortedcontainers import NodeHandle, TwoThreeTree
from pricetree.models.stock import Stock

logger = logging.getLogger(__name__)


class StockLedger:
    """
    Tracks stocks by id and by price.

    Provides:
    - add_stock / remove_stock: Create and drop stocks
    - update_stock: Record a price change event
    - remove_stock_timestamp: Revert a price change event
    - get_stock_price: Current price lookup
    - get_amount_stocks_in_price_range / get_stocks_in_price_range: Range queries

    Architecture:
    - by_id maps stock id -> Stock
    - by_price maps PriceKey(price, id) -> the same Stock
    - Every mutating call validates its input before touching either tree,
      so a failed call leaves both indexes unchanged
    """

    # Sentinel bounds of the stock id index
    ID_BOUNDS: Bounds = STRING

    def __init__(self, id_bounds: Bounds | None = None) -> None:
        """
        Initialize an empty ledger.

        Args:
            id_bounds: Sentinel bounds for stock ids (default: STRING).
        """
        self._id_bounds = id_bounds if id_bounds is not None else self.ID_BOUNDS
        self._by_id: TwoThreeTree = TwoThreeTree(bounds=self._id_bounds)
        self._by_price: TwoThreeTree = TwoThreeTree(PriceKey.min_key())

    def add_stock(self, stock_id: str, timestamp: int, price: float) -> None:
        """
        Add a new stock.

        Args:
            stock_id: Unique identifier of the stock.
            timestamp: Creation time of the stock.
            price: Initial price. Must be finite and positive.

        Raises:
            ValueError: If the price or the id is invalid.
            StockError: If the stock already exists.

        Time complexity: O(log N)
        """
        if not math.isfinite(price) or price <= 0:
            raise ValueError("Price must be greater than zero")
        if not isinstance(stock_id, str) or not stock_id:
            raise ValueError("Stock id must be a non-empty string")
        self._by_id.validate_key(stock_id)
        if self._by_id.has(stock_id):
            raise StockError(f"Stock with id {stock_id} already exists")

        stock = Stock(stock_id, price, timestamp)
        self._by_id.insert(stock_id, stock)
        self._by_price.insert(PriceKey(price, stock_id), stock)
        logger.debug(f"Added stock {stock_id} at price {price}")

    def remove_stock(self, stock_id: str) -> None:
        """
        Remove a stock.

        Raises:
            StockError: If the stock is not found.

        Time complexity: O(log N)
        """
        id_handle, stock = self._find(stock_id)
        price_handle = self._price_handle(stock)

        self._by_id.delete(id_handle)
        self._by_price.delete(price_handle)
        logger.debug(f"Removed stock {stock_id}")

    def update_stock(self, stock_id: str, timestamp: int, price_difference: float) -> None:
        """
        Record a price change for a stock.

        Args:
            stock_id: Identifier of the stock.
            timestamp: Time of the update; one event per timestamp.
            price_difference: Change in price. Must be finite and non-zero.

        Raises:
            StockError: If the stock is not found or the timestamp is taken.
            ValueError: If the price difference is zero or not finite.

        Time complexity: O(log N)
        """
        _, stock = self._find(stock_id)
        if price_difference == 0:
            raise ValueError("Price difference must be different than zero")
        if not math.isfinite(price_difference):
            raise ValueError(f"Price difference must be finite, got {price_difference}")
        stock.check_new_event(timestamp)
        price_handle = self._price_handle(stock)

        self._by_price.delete(price_handle)
        stock.add_update_event(timestamp, price_difference)
        self._by_price.insert(PriceKey(stock.current_price, stock_id), stock)
        logger.debug(f"Stock {stock_id} repriced to {stock.current_price}")

    def get_stock_price(self, stock_id: str) -> float:
        """
        Return the current price of a stock.

        Raises:
            StockError: If the stock is not found.

        Time complexity: O(log N)
        """
        _, stock = self._find(stock_id)
        return stock.current_price

    def get_stock(self, stock_id: str) -> Stock:
        _, stock = self._find(stock_id)
        return stock

    def remove_stock_timestamp(self, stock_id: str, timestamp: int) -> None:
        """
        Remove one price change event of a stock.

        Raises:
            StockError: If the stock or the event is not found.
            ValueError: If timestamp is the stock's initialization event.

        Time complexity: O(log N)
        """
        _, stock = self._find(stock_id)
        stock.check_removable_event(timestamp)
        price_handle = self._price_handle(stock)

        self._by_price.delete(price_handle)
        stock.delete_update_event(timestamp)
        self._by_price.insert(PriceKey(stock.current_price, stock_id), stock)
        logger.debug(f"Stock {stock_id} event {timestamp} removed, price {stock.current_price}")

    def get_amount_stocks_in_price_range(self, price1: float, price2: float) -> int:
        """
        Count stocks priced within [price1, price2].

        Raises:
            InvalidPriceRangeError: If price1 > price2 or a bound is not finite.

        Time complexity: O(log N)
        """
        lower, upper = self._range_keys(price1, price2)
        return self._by_price.rank_of_key(upper) - self._by_price.rank_of_key(lower)

    def get_stocks_in_price_range(self, price1: float, price2: float) -> list[str]:
        """
        List the ids of stocks priced within [price1, price2].

        Returns:
            Stock ids ordered by price, then by id.

        Raises:
            InvalidPriceRangeError: If price1 > price2 or a bound is not finite.

        Time complexity: O(log N + K) for K results
        """
        lower, upper = self._range_keys(price1, price2)
        return [key.stock_id for key, _ in self._by_price.iterator(lower, upper)]

    def __len__(self) -> int:
        return self._by_id.size()

    def __contains__(self, stock_id: str) -> bool:
        return self._by_id.has(stock_id)

    def _find(self, stock_id: str) -> tuple[NodeHandle, Stock]:
        """Locate a stock in the id index."""
        handle = self._by_id.search(stock_id)
        if handle is None:
            logger.warning(f"Stock {stock_id} not found")
            raise StockError(f"stock {stock_id} not found")
        return handle, self._by_id.value_of(handle)

    def _price_handle(self, stock: Stock) -> NodeHandle:
        """Locate a stock's leaf in the price index."""
        handle = self._by_price.search(PriceKey(stock.current_price, stock.stock_id))
        if handle is None:
            raise StockError(f"stock {stock.stock_id} not found")
        return handle

    @staticmethod
    def _range_keys(price1: float, price2: float) -> tuple[PriceKey, PriceKey]:
        """Keys bracketing every stock priced within [price1, price2]."""
        if not (math.isfinite(price1) and math.isfinite(price2)) or price1 > price2:
            logger.warning(f"Rejected price range [{price1}, {price2}]")
            raise InvalidPriceRangeError(price1, price2)
        return PriceKey.lowest_at(price1), PriceKey.highest_at(price2)
