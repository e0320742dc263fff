from __future__ import annotations
import logging
from itertools import combinations
from typing import Dict, Iterator, List, Optional, Sequence
import pyarrow as pa
from cobuy.core.connection import DuckDBConnection
from cobuy.core.types import AssociationRule, ItemsetKey
from cobuy.exceptions import ConfigurationError
from cobuy.mining.frequent_itemsets import Level, count_support, transaction_count

logger = logging.getLogger(__name__)

RULE_SCHEMA = pa.schema([
    ("antecedents", pa.string()), ("consequents", pa.string()),
    ("support", pa.float64()), ("confidence", pa.float64()), ("lift", pa.float64()),
])


def antecedent_splits(itemset: ItemsetKey) -> Iterator[tuple]:
    """Every non-empty proper subset of ``itemset`` paired with its complement."""
    for size in range(1, len(itemset)):
        for subset in combinations(itemset, size):
            antecedent = ItemsetKey(subset)
            yield antecedent, itemset.difference(antecedent)


class AssociationRules:
    def __init__(
        self,
        conn: DuckDBConnection,
        table_name: str = "transactions",
        min_confidence: float = 0.5,
    ):
        if not (0 < min_confidence <= 1): raise ConfigurationError("min_confidence must be in (0, 1]")
        self.conn, self.table_name = conn, table_name
        self.min_confidence = min_confidence
        self.rules_: List[AssociationRule] = []
        self._support: Dict[ItemsetKey, int] = {}
        self.fallback_scans_ = 0

    def _scan_support(self, key: ItemsetKey) -> int:
        """Count ``key`` straight from the transactions when no mined level holds it."""
        self.fallback_scans_ += 1
        count = count_support(self.conn, [key], self.table_name)[key]
        self._support[key] = count
        return count

    def support_count(self, key: ItemsetKey) -> int:
        if key in self._support: return self._support[key]
        return self._scan_support(key)

    def _rules_for(self, itemset: ItemsetKey, count: int, total: int) -> Iterator[AssociationRule]:
        for antecedent, consequent in antecedent_splits(itemset):
            antecedent_count = self.support_count(antecedent)
            confidence = count / antecedent_count if antecedent_count > 0 else 0.0
            if confidence < self.min_confidence:
                logger.debug("Rejected %s -> %s (confidence %.3f)", antecedent.label(), consequent.label(), confidence)
                continue
            consequent_support = self.support_count(consequent) / total
            lift = confidence / consequent_support if consequent_support > 0 else 0.0
            yield AssociationRule(antecedent, consequent, count / total, confidence, lift)

    def fit(self, levels: Sequence[Level], total: Optional[int] = None) -> List[AssociationRule]:
        total = total if total is not None else transaction_count(self.conn, self.table_name)
        self._support = {key: n for level in levels for key, n in level.items()}
        self.fallback_scans_ = 0
        rules = []
        if total > 0:
            for level in levels[1:]:
                for itemset, count in level.items():
                    if len(itemset) >= 2:
                        rules.extend(self._rules_for(itemset, count, total))
        rules.sort(key=lambda r: r.confidence, reverse=True)
        self.rules_ = rules
        logger.info("Generated %d association rules (min_confidence=%s)", len(rules), self.min_confidence)
        return rules

    def to_table(self) -> pa.Table:
        return pa.Table.from_pylist([r.to_dict() for r in self.rules_], schema=RULE_SCHEMA)
