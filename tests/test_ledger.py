"""
Tests for the StockLedger API.
"""

import logging

import pytest

from pricetree.models.exceptions import InvalidPriceRangeError, KeyOutOfBoundsError, StockError
from pricetree.models.price_key import PriceKey


def assert_indexes_consistent(ledger) -> None:
    """Both indexes hold the same stocks under matching keys."""
    by_id = list(ledger._by_id)
    by_price = list(ledger._by_price)

    assert len(by_id) == len(by_price) == len(ledger)
    assert {id(stock) for _, stock in by_id} == {id(stock) for _, stock in by_price}
    for key, stock in by_price:
        assert key == PriceKey(stock.current_price, stock.stock_id)
    for stock_id, stock in by_id:
        assert stock.stock_id == stock_id


class TestStockLifecycle:
    """Tests for adding, repricing and removing stocks."""

    def test_add_and_get_price(self, ledger):
        """Test a new stock reports its initial price."""
        ledger.add_stock("AAPL", 1, 150.0)

        assert ledger.get_stock_price("AAPL") == 150.0
        assert "AAPL" in ledger
        assert len(ledger) == 1
        assert_indexes_consistent(ledger)

    def test_add_duplicate(self, sample_ledger):
        """Test stock ids are unique."""
        with pytest.raises(StockError):
            sample_ledger.add_stock("AAPL", 10, 99.0)
        assert sample_ledger.get_stock_price("AAPL") == 150.0
        assert_indexes_consistent(sample_ledger)

    @pytest.mark.parametrize("price", [0.0, -5.0, float("inf"), float("nan")])
    def test_add_invalid_price(self, ledger, price):
        """Test prices must be positive and finite."""
        with pytest.raises(ValueError):
            ledger.add_stock("AAPL", 1, price)
        assert len(ledger) == 0

    def test_add_invalid_id(self, ledger):
        """Test empty and out-of-range ids are rejected."""
        with pytest.raises(ValueError):
            ledger.add_stock("", 1, 10.0)
        with pytest.raises(ValueError):
            ledger.add_stock(chr(0x10FFFF), 1, 10.0)
        assert len(ledger) == 0

    def test_add_invalid_timestamp(self, ledger):
        """Test a bad creation timestamp leaves both indexes empty."""
        with pytest.raises(KeyOutOfBoundsError):
            ledger.add_stock("AAPL", 2**64, 10.0)
        assert len(ledger) == 0
        assert list(ledger._by_price) == []

    def test_remove_stock(self, sample_ledger):
        """Test removed stocks disappear from both indexes."""
        sample_ledger.remove_stock("GOOG")

        assert "GOOG" not in sample_ledger
        with pytest.raises(StockError):
            sample_ledger.get_stock_price("GOOG")
        assert sample_ledger.get_stocks_in_price_range(100.0, 130.0) == ["AMZN"]
        assert_indexes_consistent(sample_ledger)

    def test_remove_missing(self, sample_ledger):
        """Test removing an unknown stock fails."""
        with pytest.raises(StockError):
            sample_ledger.remove_stock("NOPE")
        assert len(sample_ledger) == 5

    def test_update_stock(self, sample_ledger):
        """Test a price update moves the stock in the price index."""
        sample_ledger.update_stock("GOOG", 10, 100.0)

        assert sample_ledger.get_stock_price("GOOG") == 220.0
        assert sample_ledger.get_stocks_in_price_range(200.0, 250.0) == ["TSLA", "GOOG"]
        assert_indexes_consistent(sample_ledger)

    def test_update_invalid(self, sample_ledger):
        """Test invalid updates change nothing."""
        with pytest.raises(StockError):
            sample_ledger.update_stock("NOPE", 10, 1.0)
        with pytest.raises(ValueError):
            sample_ledger.update_stock("GOOG", 10, 0)
        with pytest.raises(ValueError):
            sample_ledger.update_stock("GOOG", 10, float("inf"))

        assert sample_ledger.get_stock_price("GOOG") == 120.0
        assert_indexes_consistent(sample_ledger)

    def test_update_duplicate_timestamp(self, sample_ledger):
        """Test an update reusing a timestamp fails before any mutation."""
        sample_ledger.update_stock("GOOG", 10, 5.0)
        with pytest.raises(StockError):
            sample_ledger.update_stock("GOOG", 10, 7.0)

        assert sample_ledger.get_stock_price("GOOG") == 125.0
        assert_indexes_consistent(sample_ledger)

    def test_remove_stock_timestamp(self, sample_ledger):
        """Test reverting an update restores the previous price."""
        sample_ledger.update_stock("MSFT", 10, -50.0)
        sample_ledger.update_stock("MSFT", 11, 20.0)
        sample_ledger.remove_stock_timestamp("MSFT", 10)

        assert sample_ledger.get_stock_price("MSFT") == 320.0
        assert sample_ledger.get_stock("MSFT").events() == [(3, 300.0), (11, 20.0)]
        assert_indexes_consistent(sample_ledger)

    def test_remove_stock_timestamp_invalid(self, sample_ledger):
        """Test failing event removals leave the indexes untouched."""
        with pytest.raises(ValueError):
            sample_ledger.remove_stock_timestamp("MSFT", 3)
        with pytest.raises(StockError):
            sample_ledger.remove_stock_timestamp("MSFT", 999)
        with pytest.raises(StockError):
            sample_ledger.remove_stock_timestamp("NOPE", 3)

        assert sample_ledger.get_stock_price("MSFT") == 300.0
        assert_indexes_consistent(sample_ledger)

    def test_missing_stock_logged(self, sample_ledger, caplog):
        """Test lookups of unknown stocks are logged as warnings."""
        with caplog.at_level(logging.WARNING):
            with pytest.raises(StockError):
                sample_ledger.get_stock_price("NOPE")
        assert "NOPE" in caplog.text


class TestPriceRanges:
    """Tests for price range queries."""

    def test_count_in_range(self, sample_ledger):
        """Test inclusive range counts."""
        assert sample_ledger.get_amount_stocks_in_price_range(120.0, 200.0) == 4
        assert sample_ledger.get_amount_stocks_in_price_range(120.0, 120.0) == 2
        assert sample_ledger.get_amount_stocks_in_price_range(0.0, 1000.0) == 5
        assert sample_ledger.get_amount_stocks_in_price_range(151.0, 199.0) == 0

    def test_list_in_range(self, sample_ledger):
        """Test ids come back ordered by price, then id."""
        assert sample_ledger.get_stocks_in_price_range(120.0, 200.0) == [
            "AMZN",
            "GOOG",
            "AAPL",
            "TSLA",
        ]
        assert sample_ledger.get_stocks_in_price_range(151.0, 199.0) == []

    def test_queries_do_not_mutate(self, sample_ledger):
        """Test range queries leave the price index unchanged."""
        before = list(sample_ledger._by_price)
        sample_ledger.get_amount_stocks_in_price_range(100.0, 250.0)
        sample_ledger.get_stocks_in_price_range(100.0, 250.0)

        assert list(sample_ledger._by_price) == before

    @pytest.mark.parametrize(
        "price1,price2",
        [(200.0, 100.0), (float("-inf"), 10.0), (1.0, float("inf")), (float("nan"), 1.0)],
    )
    def test_invalid_range(self, sample_ledger, price1, price2):
        """Test malformed ranges are rejected."""
        with pytest.raises(InvalidPriceRangeError):
            sample_ledger.get_amount_stocks_in_price_range(price1, price2)
        with pytest.raises(ValueError):
            sample_ledger.get_stocks_in_price_range(price1, price2)

    def test_count_matches_list_under_churn(self, ledger):
        """Test count and list agree while stocks are added, repriced and removed."""
        for i in range(60):
            ledger.add_stock(f"S{i:03d}", i, float(10 + i % 25))
        for i in range(0, 60, 3):
            ledger.update_stock(f"S{i:03d}", 100 + i, 7.5)
        for i in range(0, 60, 4):
            ledger.remove_stock(f"S{i:03d}")

        for low, high in [(10.0, 20.0), (15.5, 30.0), (0.0, 100.0), (33.0, 33.0)]:
            ids = ledger.get_stocks_in_price_range(low, high)
            assert len(ids) == ledger.get_amount_stocks_in_price_range(low, high)
            assert all(low <= ledger.get_stock_price(s) <= high for s in ids)
        assert_indexes_consistent(ledger)
