"""Tests for the synthetic order generators."""

import pandas as pd

from cobuy.core.ingestion import extract_from_frame, extract_transactions
from cobuy.core.types import Order
from cobuy.datasets import generate_retail_frame, generate_retail_orders


class TestRetailOrders:

    def test_orders(self):
        orders = generate_retail_orders()
        assert len(orders) == 13
        assert all(isinstance(o, Order) for o in orders)

    def test_ten_transactions(self):
        assert len(extract_transactions(generate_retail_orders())) == 10

    def test_repeat_and_unique_ids(self):
        orders = generate_retail_orders(repeat=3)
        assert len(orders) == 39
        assert len({o.order_id for o in orders}) == 39

    def test_seed_is_reproducible(self):
        a = [o.order_id for o in generate_retail_orders(seed=7)]
        b = [o.order_id for o in generate_retail_orders(seed=7)]
        assert a == b
        assert sorted(a) == sorted(o.order_id for o in generate_retail_orders())

    def test_frame(self):
        df = generate_retail_frame()
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ["order_id", "item_id", "status"]

    def test_frame_matches_records(self):
        from_frame = extract_from_frame(generate_retail_frame(), status_col="status")
        from_records = extract_transactions(generate_retail_orders())
        assert sorted(map(sorted, from_frame)) == sorted(map(sorted, from_records))
