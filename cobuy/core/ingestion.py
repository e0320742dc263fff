from __future__ import annotations
import logging
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Union
import narwhals as nw
import pyarrow as pa
from cobuy.config import ELIGIBLE_STATUSES, as_statuses
from cobuy.core.connection import DuckDBConnection
from cobuy.core.types import Order, normalize_token

logger = logging.getLogger(__name__)

Transaction = FrozenSet[str]
OrderLike = Union[Order, Mapping[str, Any]]

TRANSACTION_SCHEMA = pa.schema([("set_id", pa.int64()), ("node_id", pa.string())])


def as_order(order: OrderLike) -> Order:
    if isinstance(order, Order): return order
    if isinstance(order, Mapping): return Order.from_mapping(dict(order))
    raise TypeError(f"Unsupported order record: {type(order).__name__}")


def _statuses(statuses: Optional[Iterable[str]]) -> FrozenSet[str]:
    if statuses is None: return ELIGIBLE_STATUSES
    return as_statuses(statuses)


def is_eligible(order: Order, statuses: Optional[Iterable[str]] = None) -> bool:
    return order.status.strip().lower() in _statuses(statuses)


def order_tokens(order: Order) -> Transaction:
    return frozenset(t for t in (line.token for line in order.lines) if t)


def extract_transactions(orders: Iterable[OrderLike], statuses: Optional[Iterable[str]] = None) -> List[Transaction]:
    """Turn qualifying orders into transactions of at least two distinct tokens."""
    allowed = _statuses(statuses)
    transactions, seen, skipped = [], 0, 0
    for raw in orders:
        order = as_order(raw)
        seen += 1
        if order.status.strip().lower() not in allowed:
            continue
        tokens = order_tokens(order)
        if len(tokens) < 2:
            skipped += 1
            continue
        transactions.append(tokens)
    logger.info("Extracted %d transactions from %d orders (%d single-item orders skipped)", len(transactions), seen, skipped)
    return transactions


def history_tokens(orders: Iterable[OrderLike], statuses: Optional[Iterable[str]] = None) -> FrozenSet[str]:
    """Distinct tokens a customer has bought across their qualifying orders."""
    allowed = _statuses(statuses)
    tokens = set()
    for raw in orders:
        order = as_order(raw)
        if order.status.strip().lower() in allowed:
            tokens |= order_tokens(order)
    return frozenset(tokens)


def _collect(df):
    if isinstance(df, nw.LazyFrame): return df.collect()
    return df


def _frame_rows(source: Any, columns: Sequence[str]) -> List[tuple]:
    try: df = nw.from_native(source)
    except TypeError as e: raise ValueError("Input must be a pandas, polars or pyarrow DataFrame") from e
    schema = df.collect_schema().names()
    missing = [c for c in columns if c not in schema]
    if missing: raise ValueError(f"Missing columns: {missing}")
    df = df.select(list(columns)).drop_nulls(subset=list(columns[:2]))
    return _collect(df).rows()


def extract_from_frame(
    df: Any,
    order_col: str = "order_id",
    item_col: str = "item_id",
    status_col: Optional[str] = None,
    statuses: Optional[Iterable[str]] = None,
) -> List[Transaction]:
    """Same as :func:`extract_transactions` for a long order-line dataframe.

    One row per line; rows of an order share ``order_col``. Without
    ``status_col`` every order is treated as eligible.
    """
    columns = [order_col, item_col] + ([status_col] if status_col else [])
    allowed = _statuses(statuses)
    baskets: Dict[Any, set] = {}
    for row in _frame_rows(df, columns):
        order_id, token = row[0], normalize_token(row[1])
        if order_id is None or token is None: continue
        if status_col and str(row[2]).strip().lower() not in allowed: continue
        baskets.setdefault(order_id, set()).add(token)
    transactions = [frozenset(b) for b in baskets.values() if len(b) >= 2]
    logger.info("Extracted %d transactions from %d orders in frame", len(transactions), len(baskets))
    return transactions


def transactions_to_table(transactions: Sequence[Iterable[str]]) -> pa.Table:
    set_ids, node_ids = [], []
    for i, transaction in enumerate(transactions):
        for token in sorted(set(transaction)):
            set_ids.append(i)
            node_ids.append(token)
    return pa.Table.from_pydict({"set_id": set_ids, "node_id": node_ids}, schema=TRANSACTION_SCHEMA)


def load_transactions(conn: DuckDBConnection, transactions: Sequence[Iterable[str]], table_name: str = "transactions") -> int:
    """Write transactions to ``table_name`` as (set_id, node_id) rows; returns the transaction count."""
    conn.register("_tmp_transactions", transactions_to_table(transactions))
    try:
        conn.execute(f"CREATE OR REPLACE TABLE {table_name} AS SELECT set_id, node_id FROM _tmp_transactions")
    finally:
        conn.unregister("_tmp_transactions")
    return len(transactions)
