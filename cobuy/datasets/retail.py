"""
cobuy.datasets.retail: synthetic e-commerce order histories.

Orders carry fulfillment statuses so the transaction filter has something
to discard, and the baskets contain deliberate co-purchase signals.
"""
from __future__ import annotations
import random
from typing import List, Optional
import pandas as pd
from cobuy.core.types import Order, OrderLine

_BASKETS = [
    # Electronics
    ("O1", "delivered", ["iPhone 15", "Silicone Case"]),
    ("O2", "delivered", ["iPhone 15", "Silicone Case", "Screen Protector"]),
    ("O3", "shipped", ["iPhone 15", "Screen Protector"]),
    ("O4", "delivered", ["iPhone 15", "Silicone Case"]),
    # Grocery
    ("O5", "processing", ["Pasta", "Tomato Sauce"]),
    ("O6", "delivered", ["Pasta", "Tomato Sauce", "Parmesan"]),
    ("O7", "delivered", ["Pasta", "Tomato Sauce"]),
    # Breakfast
    ("O8", "delivered", ["Whole Milk", "Oat Cereal"]),
    ("O9", "shipped", ["Whole Milk", "Oat Cereal", "Banana"]),
    ("O10", "delivered", ["Oat Cereal", "Banana"]),
    # never counted
    ("O11", "cancelled", ["iPhone 15", "Banana"]),
    ("O12", "pending", ["Pasta", "Silicone Case"]),
    ("O13", "delivered", ["Parmesan"]),
]


def generate_retail_orders(seed: Optional[int] = None, repeat: int = 1) -> List[Order]:
    """
    Generate synthetic orders with known co-purchase patterns.

    - **Electronics**: iPhone 15 → Silicone Case / Screen Protector
    - **Grocery**: Pasta → Tomato Sauce
    - **Breakfast**: Whole Milk → Oat Cereal

    Two orders are ``cancelled``/``pending`` and one is a single-item order;
    none of them should become a transaction.

    Parameters
    ----------
    seed : int, optional
        Shuffles the order sequence reproducibly. ``None`` keeps the fixed order.
    repeat : int
        Number of copies of the base history, for larger inputs.

    Returns
    -------
    list[Order]
        ``13 * repeat`` orders.
    """
    orders = [
        Order(
            order_id=f"{order_id}_{i}" if repeat > 1 else order_id,
            lines=tuple(OrderLine(product_id=name, name=name) for name in items),
            status=status,
            user_id=f"U{n % 4}",
        )
        for i in range(repeat)
        for n, (order_id, status, items) in enumerate(_BASKETS)
    ]
    if seed is not None:
        random.Random(seed).shuffle(orders)
    return orders


def generate_retail_frame(seed: Optional[int] = None, repeat: int = 1) -> pd.DataFrame:
    """
    Same history as :func:`generate_retail_orders`, one row per order line.

    Columns: ``order_id``, ``item_id``, ``status``
    """
    rows = [
        (order.order_id, line.token, order.status)
        for order in generate_retail_orders(seed=seed, repeat=repeat)
        for line in order.lines
    ]
    return pd.DataFrame(rows, columns=["order_id", "item_id", "status"])
