# ---------------------------------------------------------------------------
# Tests configuration
# ---------------------------------------------------------------------------

import pytest
import pandas as pd

from cobuy.core.connection import DuckDBConnection
from cobuy.core.types import Order, OrderLine


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_order(order_id, items, status="delivered", user_id=None):
    return Order(
        order_id=order_id,
        lines=tuple(OrderLine(product_id=i) for i in items),
        status=status,
        user_id=user_id,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def conn():
    """In-memory DuckDB connection for each test."""
    db = DuckDBConnection()
    yield db
    db.close()


@pytest.fixture
def scenario_transactions():
    """Five baskets over A, B, C.

    counts: A=4, B=4, C=3, AB=3, AC=2, BC=2, ABC=1
    """
    return [
        frozenset({"A", "B"}),
        frozenset({"A", "B"}),
        frozenset({"A", "B", "C"}),
        frozenset({"A", "C"}),
        frozenset({"B", "C"}),
    ]


@pytest.fixture
def scenario_orders(scenario_transactions):
    return [make_order(f"T{i + 1}", sorted(t)) for i, t in enumerate(scenario_transactions)]


@pytest.fixture
def grocery_transactions():
    """Larger history with a frequent triple.

    T1..T4: milk, bread, butter
    T5..T6: milk, bread
    T7..T8: beer, diapers
    T9:     bread, beer
    T10:    milk, eggs
    """
    return (
        [frozenset({"milk", "bread", "butter"})] * 4
        + [frozenset({"milk", "bread"})] * 2
        + [frozenset({"beer", "diapers"})] * 2
        + [frozenset({"bread", "beer"}), frozenset({"milk", "eggs"})]
    )


@pytest.fixture
def loaded_conn(conn, scenario_transactions):
    """Connection with the scenario transactions already loaded."""
    from cobuy.core.ingestion import load_transactions
    load_transactions(conn, scenario_transactions)
    return conn


@pytest.fixture
def grocery_conn(conn, grocery_transactions):
    from cobuy.core.ingestion import load_transactions
    load_transactions(conn, grocery_transactions)
    return conn


@pytest.fixture
def order_lines_df():
    """Long order-line frame with statuses."""
    data = [
        ("O1", "milk", "delivered"), ("O1", "bread", "delivered"),
        ("O2", "milk", "shipped"), ("O2", "bread", "shipped"), ("O2", "milk", "shipped"),
        ("O3", "milk", "cancelled"), ("O3", "beer", "cancelled"),
        ("O4", "eggs", "processing"),
        ("O5", "beer", "pending"), ("O5", "diapers", "pending"),
        ("O6", " beer ", "processing"), ("O6", "diapers", "processing"),
    ]
    return pd.DataFrame(data, columns=["order_id", "item_id", "status"])


@pytest.fixture
def order_factory():
    return make_order
