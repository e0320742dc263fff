from __future__ import annotations
import duckdb
from typing import Union, Optional, Any
import pyarrow as pa

Params = Optional[Union[list, dict]]


class DuckDBConnection:
    """In-memory DuckDB database a single mining pass counts support against."""

    def __init__(self):
        self.conn = duckdb.connect(":memory:")
        self._closed = False

    def execute(self, sql: str, params: Params = None) -> duckdb.DuckDBPyConnection:
        return self.conn.execute(sql, params)

    def query(self, sql: str, params: Params = None) -> pa.Table:
        result = self.execute(sql, params).arrow()
        # newer duckdb releases hand back a RecordBatchReader here
        return result.read_all() if hasattr(result, "read_all") else result

    def scalar(self, sql: str, params: Params = None) -> Any:
        row = self.execute(sql, params).fetchone()
        return row[0] if row else None

    def register(self, name: str, data: pa.Table):
        self.conn.register(name, data)

    def unregister(self, name: str):
        self.conn.unregister(name)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        if self._closed: return
        self.conn.close()
        self._closed = True

    def __enter__(self): return self
    def __exit__(self, *_): self.close()
    def __repr__(self) -> str: return f"DuckDBConnection(closed={self._closed})"
