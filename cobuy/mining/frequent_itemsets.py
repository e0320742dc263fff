from __future__ import annotations
import logging
import math
from itertools import combinations
from typing import Dict, Iterable, List, Optional
import pyarrow as pa
from cobuy.core.connection import DuckDBConnection
from cobuy.core.types import ItemsetKey
from cobuy.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

Level = Dict[ItemsetKey, int]

ITEMSET_SCHEMA = pa.schema([("itemset", pa.string()), ("support", pa.float64()), ("count", pa.int64()), ("length", pa.int32())])
CANDIDATE_SCHEMA = pa.schema([("candidate_id", pa.int64()), ("node_id", pa.string())])


def transaction_count(conn: DuckDBConnection, table_name: str = "transactions") -> int:
    return conn.scalar(f"SELECT COUNT(DISTINCT set_id) FROM {table_name}") or 0


def support_threshold(min_support: float, total: int) -> int:
    # rounding first keeps 0.15 * 20 from landing on 3.0000000000000004
    return max(1, math.ceil(round(min_support * total, 9)))


def count_support(conn: DuckDBConnection, keys: Iterable[ItemsetKey], table_name: str = "transactions") -> Dict[ItemsetKey, int]:
    """Number of transactions containing every token of each key (full containment)."""
    keys = list(dict.fromkeys(ItemsetKey(k) for k in keys))
    if not keys: return {}
    ids, nodes = [], []
    for i, key in enumerate(keys):
        ids.extend([i] * len(key))
        nodes.extend(key)
    conn.register("_candidates", pa.Table.from_pydict({"candidate_id": ids, "node_id": nodes}, schema=CANDIDATE_SCHEMA))
    try:
        rows = conn.execute(f"""
            WITH sizes AS (
                SELECT candidate_id, COUNT(*) AS k FROM _candidates GROUP BY 1
            ),
            hits AS (
                SELECT c.candidate_id, t.set_id, COUNT(*) AS matched
                FROM _candidates c
                JOIN {table_name} t ON t.node_id = c.node_id
                GROUP BY 1, 2
            )
            SELECT h.candidate_id, COUNT(*) AS support_count
            FROM hits h JOIN sizes s ON h.candidate_id = s.candidate_id
            WHERE h.matched = s.k
            GROUP BY 1
        """).fetchall()
    finally:
        conn.unregister("_candidates")
    counts = {key: 0 for key in keys}
    for candidate_id, support_count in rows:
        counts[keys[candidate_id]] = support_count
    return counts


def generate_candidates(previous: Iterable[ItemsetKey], k: int) -> List[ItemsetKey]:
    """Self-join of frequent (k-1)-itemsets, keeping unions of exactly k tokens.

    Candidates with an infrequent (k-1)-subset are dropped since they cannot be frequent.
    """
    prev = sorted(previous)
    known = set(prev)
    candidates = {}
    for i, a in enumerate(prev):
        for b in prev[i + 1:]:
            union = a.union(b)
            if len(union) != k or union in candidates: continue
            if all(ItemsetKey(sub) in known for sub in combinations(union, k - 1)):
                candidates[union] = None
    return list(candidates)


class FrequentItemsets:
    """Level-wise Apriori search over a transaction table."""

    def __init__(
        self,
        conn: DuckDBConnection,
        table_name: str = "transactions",
        min_support: float = 0.15,
        max_len: Optional[int] = 10,
    ):
        if min_support <= 0 or min_support > 1: raise ConfigurationError("min_support must be in (0, 1]")
        if max_len is not None and max_len < 1: raise ConfigurationError("max_len must be at least 1")
        self.conn = conn
        self.table_name = table_name
        self.min_support = min_support
        self.max_len = max_len
        self.levels_: List[Level] = []
        self.total_: int = 0
        self.threshold_: int = 0

    def _frequent_singles(self) -> Level:
        rows = self.conn.execute(f"""
            SELECT node_id, COUNT(DISTINCT set_id) AS support_count
            FROM {self.table_name}
            GROUP BY 1
            HAVING COUNT(DISTINCT set_id) >= ?
            ORDER BY 1
        """, [self.threshold_]).fetchall()
        return {ItemsetKey((node,)): count for node, count in rows}

    def fit(self) -> List[Level]:
        self.levels_ = []
        self.total_ = transaction_count(self.conn, self.table_name)
        if self.total_ == 0:
            logger.info("No transactions to mine")
            return self.levels_

        self.threshold_ = support_threshold(self.min_support, self.total_)
        logger.info("Mining %d transactions (min_support=%s, min count=%d)", self.total_, self.min_support, self.threshold_)

        current = self._frequent_singles()
        if not current:
            logger.info("No frequent 1-itemsets found")
            return self.levels_
        self.levels_.append(current)

        k = 2
        while current and (self.max_len is None or k <= self.max_len):
            candidates = generate_candidates(current, k)
            counted = count_support(self.conn, candidates, self.table_name)
            current = {key: n for key, n in counted.items() if n >= self.threshold_}
            logger.debug("Level %d: %d candidates, %d frequent", k, len(candidates), len(current))
            if not current: break
            self.levels_.append(current)
            k += 1

        logger.info("Found %d levels of frequent itemsets", len(self.levels_))
        return self.levels_

    def to_table(self) -> pa.Table:
        rows = [
            {"itemset": key.label(), "support": count / self.total_, "count": count, "length": len(key)}
            for level in self.levels_ for key, count in sorted(level.items(), key=lambda kv: (-kv[1], kv[0]))
        ]
        return pa.Table.from_pylist(rows, schema=ITEMSET_SCHEMA)
