"""
Stock - a priced entity with its history of price-change events.
"""

from pricetree.models.bounds import INT64
from pricetree.models.exceptions import StockError
from pricetree.models.sortedcontainers.two_three_tree import TwoThreeTree


class Stock:
    """
    A stock and its price events.

    The events live in a small 2-3 tree keyed by timestamp. The first event
    records the initial price; every later one records a price change.
    The current price is the sum of all recorded events.
    """

    def __init__(self, stock_id: str, initial_price: float, timestamp: int) -> None:
        """
        Initialize a stock.

        Args:
            stock_id: Unique stock identifier.
            initial_price: Price at creation.
            timestamp: Creation time, also the key of the initial event.
        """
        self._stock_id = stock_id
        self._events: TwoThreeTree = TwoThreeTree(bounds=INT64)
        self._events.insert(timestamp, initial_price)
        self._initial_timestamp = timestamp
        self._current_price = initial_price

    @property
    def stock_id(self) -> str:
        return self._stock_id

    @property
    def current_price(self) -> float:
        return self._current_price

    @property
    def initial_timestamp(self) -> int:
        return self._initial_timestamp

    def has_event(self, timestamp: int) -> bool:
        return self._events.has(timestamp)

    def events(self) -> list[tuple[int, float]]:
        """Return (timestamp, change) pairs in timestamp order, initial event first."""
        return list(self._events)

    def check_new_event(self, timestamp: int) -> None:
        """
        Check that an event can be recorded at timestamp.

        Raises:
            KeyOutOfBoundsError: If timestamp is not a 64-bit integer.
            StockError: If an event already exists at timestamp.
        """
        self._events.validate_key(timestamp)
        if self._events.has(timestamp):
            raise StockError(
                f"Stock {self._stock_id} already has an event at timestamp {timestamp}"
            )

    def add_update_event(self, timestamp: int, price_change: float) -> None:
        """Record a price change and apply it to the current price."""
        self.check_new_event(timestamp)
        self._events.insert(timestamp, price_change)
        self._current_price += price_change

    def check_removable_event(self, timestamp: int) -> None:
        """
        Check that the event at timestamp can be removed.

        Raises:
            ValueError: If timestamp is the initialization event.
            StockError: If no event exists at timestamp.
        """
        if timestamp == self._initial_timestamp:
            raise ValueError(
                f"Cannot delete initialization event for stock: {self._stock_id}"
            )
        if not self._events.has(timestamp):
            raise StockError(f"No price update event found for timestamp: {timestamp}")

    def delete_update_event(self, timestamp: int) -> None:
        """Remove a price change event and revert its effect on the price."""
        self.check_removable_event(timestamp)
        handle = self._events.search(timestamp)
        self._current_price -= self._events.value_of(handle)
        self._events.delete(handle)

    def __repr__(self) -> str:
        return f"Stock(stock_id={self._stock_id!r}, current_price={self._current_price})"
