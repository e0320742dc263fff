from __future__ import annotations
from typing import Any, Dict, List, Sequence
from cobuy.core.connection import DuckDBConnection
from cobuy.core.ingestion import Transaction, load_transactions


class TransactionStatistics:
    """Descriptive numbers about the transactions a mining pass would see."""

    def __init__(self, conn: DuckDBConnection, table_name: str = "transactions"):
        self.conn, self.table_name = conn, table_name

    @classmethod
    def from_transactions(cls, conn: DuckDBConnection, transactions: Sequence[Transaction]) -> TransactionStatistics:
        load_transactions(conn, transactions, table_name="transactions")
        return cls(conn, "transactions")

    def transaction_count(self) -> int:
        return self.conn.scalar(f"SELECT COUNT(DISTINCT set_id) FROM {self.table_name}") or 0

    def unique_items(self) -> int:
        return self.conn.scalar(f"SELECT COUNT(DISTINCT node_id) FROM {self.table_name}") or 0

    def average_basket_size(self) -> float:
        value = self.conn.scalar(f"SELECT AVG(n) FROM (SELECT COUNT(*) AS n FROM {self.table_name} GROUP BY set_id)")
        return round(float(value), 2) if value is not None else 0.0

    def item_frequency(self, n: int = 10) -> Dict[str, int]:
        table = self.conn.query(f"""
            SELECT node_id, COUNT(DISTINCT set_id) AS cnt
            FROM {self.table_name}
            GROUP BY 1
            ORDER BY cnt DESC, node_id
            LIMIT {int(n)}
        """)
        return dict(zip(table.column("node_id").to_pylist(), table.column("cnt").to_pylist()))

    def sample(self, n: int = 5) -> List[List[str]]:
        table = self.conn.query(f"""
            SELECT set_id, list(node_id ORDER BY node_id) AS items
            FROM {self.table_name}
            GROUP BY 1
            ORDER BY 1
            LIMIT {int(n)}
        """)
        return table.column("items").to_pylist()

    def summary(self) -> Dict[str, Any]:
        return {
            "valid_transactions": self.transaction_count(),
            "unique_items": self.unique_items(),
            "average_items_per_transaction": self.average_basket_size(),
            "item_frequency": self.item_frequency(),
            "sample_transactions": self.sample(),
        }
