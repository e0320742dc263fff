"""Tests for transaction statistics."""

import pytest

from cobuy.mining.statistics import TransactionStatistics


class TestTransactionStatistics:

    def test_counts(self, grocery_conn):
        stats = TransactionStatistics(grocery_conn)
        assert stats.transaction_count() == 10
        assert stats.unique_items() == 6

    def test_average_basket_size(self, grocery_conn):
        # 4*3 + 2*2 + 2*2 + 2 + 2 = 24 lines over 10 baskets
        assert TransactionStatistics(grocery_conn).average_basket_size() == 2.4

    def test_item_frequency(self, grocery_conn):
        freq = TransactionStatistics(grocery_conn).item_frequency(n=3)
        assert freq == {"bread": 7, "milk": 7, "butter": 4}

    def test_sample(self, loaded_conn):
        sample = TransactionStatistics(loaded_conn).sample(n=2)
        assert sample == [["A", "B"], ["A", "B"]]

    def test_from_transactions(self, conn, scenario_transactions):
        stats = TransactionStatistics.from_transactions(conn, scenario_transactions)
        summary = stats.summary()
        assert summary["valid_transactions"] == 5
        assert summary["unique_items"] == 3
        assert summary["average_items_per_transaction"] == 2.2
        assert summary["item_frequency"] == {"A": 4, "B": 4, "C": 3}
        assert len(summary["sample_transactions"]) == 5

    def test_empty(self, conn):
        stats = TransactionStatistics.from_transactions(conn, [])
        assert stats.transaction_count() == 0
        assert stats.average_basket_size() == 0.0
        assert stats.sample() == []
