from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Union
from cobuy.cache import RuleCache
from cobuy.config import EngineConfig
from cobuy.core.connection import DuckDBConnection
from cobuy.core.ingestion import OrderLike, extract_transactions, history_tokens, is_eligible, as_order
from cobuy.core.types import AssociationRule, RuleSet, utcnow
from cobuy.exceptions import MiningError
from cobuy.mining.pipeline import mine_rules
from cobuy.mining.statistics import TransactionStatistics
from cobuy.recommenders.rules import INSUFFICIENT_DATA, RecommendationResult, Resolver, RuleRecommender

logger = logging.getLogger(__name__)

OrderSource = Union[Callable[[], Iterable[OrderLike]], Iterable[OrderLike]]


@dataclass(frozen=True)
class RefreshReport:
    rule_count: int
    computed_at: Optional[datetime]
    success: bool
    message: str


class Cobuy:
    """Association-rule recommendations over an order history.

    ``orders`` is either a callable returning the current orders or a
    re-iterable collection of them. It is read again on every mining pass.
    """

    def __init__(
        self,
        orders: OrderSource,
        resolver: Optional[Resolver] = None,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], datetime] = utcnow,
        **overrides: Any,
    ) -> None:
        config = config or EngineConfig()
        self.config = config.replace(**overrides) if overrides else config
        self._orders = orders
        self._clock = clock
        self.recommender = RuleRecommender(resolver)
        self.cache = RuleCache(self._compute, ttl=self.config.ttl, clock=clock)

    def _load_orders(self) -> List[OrderLike]:
        source = self._orders() if callable(self._orders) else self._orders
        return list(source)

    def _compute(self) -> RuleSet:
        transactions = extract_transactions(self._load_orders(), self.config.eligible_statuses)
        now = self._clock()
        if len(transactions) < self.config.min_transactions:
            return RuleSet.insufficient(
                f"Insufficient transaction data (need at least {self.config.min_transactions}, got {len(transactions)})",
                transaction_count=len(transactions), computed_at=now,
            )
        result = mine_rules(transactions, self.config.min_support, self.config.min_confidence, self.config.max_len)
        message = f"Generated {len(result.rules)} association rules" if result.rules else INSUFFICIENT_DATA
        return RuleSet(tuple(result.rules), now, result.transaction_count, message)

    def _rules(self) -> RuleSet:
        try:
            return self.cache.get_rules()
        except MiningError:
            logger.warning("Serving the last known rule set after a failed refresh")
            previous = self.cache.peek()
            if previous is not None: return previous
            return RuleSet.insufficient("Rules are unavailable until a mining pass succeeds", computed_at=self._clock())

    def warm(self) -> Cobuy:
        self.refresh_rules()
        return self

    def refresh_rules(self, force: bool = False) -> RefreshReport:
        try:
            entry = self.cache.get_rules(force_refresh=force)
        except MiningError as e:
            previous = self.cache.peek()
            return RefreshReport(
                rule_count=len(previous) if previous is not None else 0,
                computed_at=previous.computed_at if previous is not None else None,
                success=False, message=f"{e}: {e.__cause__}",
            )
        return RefreshReport(len(entry), entry.computed_at, True, entry.message)

    def _with_status(self, result: RecommendationResult, rules: RuleSet) -> RecommendationResult:
        if len(rules) > 0: return result
        logger.info("No rules to recommend from: %s", rules.message)
        return replace(result, message=rules.message or result.message)

    def cart_recommendations(self, context_tokens: Iterable[str], limit: int = 6) -> RecommendationResult:
        rules = self._rules()
        return self._with_status(self.recommender.recommend(rules, context_tokens, limit, label="recommendations based on your cart"), rules)

    def personalized_recommendations(self, history: Iterable[OrderLike], limit: int = 8) -> RecommendationResult:
        context = history_tokens(history, self.config.eligible_statuses)
        rules = self._rules()
        return self._with_status(self.recommender.recommend(rules, context, limit, label="personalized recommendations"), rules)

    def frequently_bought_together(self, focal_token: str, limit: int = 4, aliases: Iterable[str] = ()) -> RecommendationResult:
        rules = self._rules()
        return self._with_status(self.recommender.frequently_bought_together(rules, focal_token, limit, aliases), rules)

    def trending_combinations(self, limit: int = 10, min_confidence: float = 0.3, min_lift: float = 1.0) -> RecommendationResult:
        rules = self._rules()
        return self._with_status(self.recommender.trending_combinations(rules, limit, min_confidence, min_lift), rules)

    def debug_ruleset(self) -> List[AssociationRule]:
        return list(self._rules().rules)

    def analytics(self) -> Dict[str, Any]:
        orders = [as_order(o) for o in self._load_orders()]
        transactions = extract_transactions(orders, self.config.eligible_statuses)
        with DuckDBConnection() as conn:
            stats = TransactionStatistics.from_transactions(conn, transactions).summary()
        entry = self.cache.peek()
        age = self.cache.age()
        return {
            "total_orders": len(orders),
            "completed_orders": sum(1 for o in orders if is_eligible(o, self.config.eligible_statuses)),
            **stats,
            "association_rules": len(entry) if entry is not None else 0,
            "last_processed": entry.computed_at if entry is not None else None,
            "cache_age": age.total_seconds() if isinstance(age, timedelta) else None,
            "settings": {"min_support": self.config.min_support, "min_confidence": self.config.min_confidence},
        }

    def close(self):
        self.cache.invalidate()

    def __enter__(self): return self
    def __exit__(self, *_): self.close()
    def __repr__(self) -> str: return f"Cobuy(min_support={self.config.min_support}, min_confidence={self.config.min_confidence})"
