from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence
from cobuy.core.connection import DuckDBConnection
from cobuy.core.ingestion import Transaction, load_transactions
from cobuy.core.types import AssociationRule
from cobuy.mining.association_rules import AssociationRules
from cobuy.mining.frequent_itemsets import FrequentItemsets, Level

logger = logging.getLogger(__name__)


@dataclass
class MiningResult:
    levels: List[Level] = field(default_factory=list)
    rules: List[AssociationRule] = field(default_factory=list)
    transaction_count: int = 0


def mine_rules(
    transactions: Sequence[Transaction],
    min_support: float = 0.15,
    min_confidence: float = 0.5,
    max_len: Optional[int] = 10,
) -> MiningResult:
    """Frequent itemsets and rules for ``transactions`` on a throwaway in-memory connection."""
    with DuckDBConnection() as conn:
        total = load_transactions(conn, transactions)
        levels = FrequentItemsets(conn, min_support=min_support, max_len=max_len).fit()
        rules = AssociationRules(conn, min_confidence=min_confidence).fit(levels, total=total)
    for rule in rules[:5]:
        logger.debug("%s (support %.3f, confidence %.3f, lift %.2f)", rule, rule.support, rule.confidence, rule.lift)
    return MiningResult(levels=levels, rules=rules, transaction_count=total)
