"""Tests for the DuckDB connection wrapper."""

import duckdb
import pytest
import pyarrow as pa

from cobuy.core.connection import DuckDBConnection


class TestDuckDBConnection:

    def test_query_returns_arrow(self, conn):
        result = conn.query("SELECT 1 AS n")
        assert isinstance(result, pa.Table)
        assert result.column("n").to_pylist() == [1]

    def test_query_with_params(self, conn):
        result = conn.query("SELECT ? AS token, ? AS n", ["milk", 3])
        assert result.to_pylist() == [{"token": "milk", "n": 3}]

    def test_scalar(self, conn):
        assert conn.scalar("SELECT 40 + 2") == 42

    def test_scalar_with_params(self, conn):
        assert conn.scalar("SELECT ? * 2", [21]) == 42

    def test_register_and_unregister(self, conn):
        conn.register("_t", pa.Table.from_pydict({"x": [1, 2, 3]}))
        assert conn.scalar("SELECT SUM(x) FROM _t") == 6
        conn.unregister("_t")
        with pytest.raises(duckdb.Error):
            conn.execute("SELECT * FROM _t")

    def test_context_manager_closes(self):
        with DuckDBConnection() as db:
            assert not db.closed
        assert db.closed

    def test_close_is_idempotent(self):
        db = DuckDBConnection()
        db.close()
        db.close()
        assert db.closed

    def test_repr(self, conn):
        assert repr(conn) == "DuckDBConnection(closed=False)"
