from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Tuple, Union
import pyarrow as pa
from cobuy.core.types import AssociationRule, normalize_token

logger = logging.getLogger(__name__)

INSUFFICIENT_DATA = "Insufficient data for recommendations. More order history is needed."

SCORE_SCHEMA = pa.schema([("token", pa.string()), ("score", pa.float64())])
PAIR_SCHEMA = pa.schema([("token", pa.string()), ("confidence", pa.float64()), ("lift", pa.float64())])
COMBINATION_SCHEMA = pa.schema([
    ("antecedent", pa.list_(pa.string())), ("consequent", pa.list_(pa.string())),
    ("support", pa.float64()), ("confidence", pa.float64()), ("lift", pa.float64()),
])


class IdentifierResolver(Protocol):
    def resolve(self, token: str) -> Optional[Any]: ...


Resolver = Union[IdentifierResolver, Callable[[str], Optional[Any]]]


@dataclass(frozen=True)
class RecommendationResult:
    table: pa.Table
    message: str
    entities: Tuple[Any, ...] = ()

    @property
    def tokens(self) -> List[str]:
        if "token" not in self.table.column_names: return []
        return self.table.column("token").to_pylist()

    def to_pylist(self) -> List[Dict[str, Any]]:
        return self.table.to_pylist()

    def __len__(self) -> int:
        return self.table.num_rows


def _empty(schema: pa.Schema, message: str) -> RecommendationResult:
    return RecommendationResult(pa.Table.from_pylist([], schema=schema), message)


class RuleRecommender:
    """Ranks tokens from a rule set for a cart, a purchase history or a single item.

    ``resolver`` maps a token to its catalog entity; tokens it cannot
    resolve are left out of every result.
    """

    def __init__(self, resolver: Optional[Resolver] = None):
        self.resolver = resolver

    def _resolve(self, token: str) -> Optional[Any]:
        if self.resolver is None: return token
        lookup = getattr(self.resolver, "resolve", self.resolver)
        try:
            return lookup(token)
        except (LookupError, ValueError):
            return None

    def _resolved(self, tokens: Iterable[str], limit: Optional[int] = None) -> List[Tuple[str, Any]]:
        out = []
        for token in tokens:
            if limit is not None and len(out) >= limit: break
            entity = self._resolve(token)
            if entity is None:
                logger.debug("Dropping unresolvable token %r", token)
                continue
            out.append((token, entity))
        return out

    def score(self, rules: Iterable[AssociationRule], context: Iterable[str]) -> List[Tuple[str, float]]:
        """Accumulated ``confidence * lift`` per token, best first, context excluded."""
        seen = {t for t in (normalize_token(c) for c in context) if t}
        scores: Dict[str, float] = {}
        for rule in rules:
            if not rule.antecedent.issubset(seen): continue
            for token in rule.consequent:
                if token in seen: continue
                scores[token] = scores.get(token, 0.0) + rule.confidence * rule.lift
        # dict order is first-contribution order, so the stable sort keeps rule order on ties
        return sorted(scores.items(), key=lambda kv: kv[1], reverse=True)

    def recommend(self, rules: Iterable[AssociationRule], context: Iterable[str], limit: int = 6, label: str = "recommendations") -> RecommendationResult:
        rules = list(rules)
        context = list(context)
        if not rules: return _empty(SCORE_SCHEMA, INSUFFICIENT_DATA)
        if not context: return _empty(SCORE_SCHEMA, "Nothing to recommend from: the context is empty")

        ranked = self.score(rules, context)
        scores = dict(ranked)
        kept = self._resolved((t for t, _ in ranked), max(limit, 0))
        table = pa.Table.from_pylist([{"token": t, "score": scores[t]} for t, _ in kept], schema=SCORE_SCHEMA)
        logger.info("Matched %d candidate tokens, returning %d %s", len(ranked), len(kept), label)
        return RecommendationResult(table, f"Found {len(kept)} {label}", tuple(e for _, e in kept))

    def frequently_bought_together(self, rules: Iterable[AssociationRule], focal: str, limit: int = 4, aliases: Iterable[str] = ()) -> RecommendationResult:
        rules = list(rules)
        if not rules: return _empty(PAIR_SCHEMA, INSUFFICIENT_DATA)
        names = {t for t in (normalize_token(x) for x in (focal, *aliases)) if t}

        best: Dict[str, Tuple[float, float]] = {}
        for rule in rules:
            related: Tuple[str, ...] = ()
            if any(t in names for t in rule.antecedent): related += tuple(rule.consequent)
            if any(t in names for t in rule.consequent): related += tuple(rule.antecedent)
            for token in related:
                if token in names: continue
                if token not in best or best[token][0] < rule.confidence:
                    best[token] = (rule.confidence, rule.lift)

        ranked = sorted(best.items(), key=lambda kv: kv[1][0], reverse=True)
        kept = self._resolved((t for t, _ in ranked), max(limit, 0))
        table = pa.Table.from_pylist(
            [{"token": t, "confidence": best[t][0], "lift": best[t][1]} for t, _ in kept], schema=PAIR_SCHEMA
        )
        return RecommendationResult(table, f"Found {len(kept)} items frequently bought together", tuple(e for _, e in kept))

    def trending_combinations(self, rules: Iterable[AssociationRule], limit: int = 10, min_confidence: float = 0.3, min_lift: float = 1.0) -> RecommendationResult:
        rules = list(rules)
        if not rules: return _empty(COMBINATION_SCHEMA, INSUFFICIENT_DATA)

        rows, entities = [], []
        for rule in rules:
            if len(rows) >= limit: break
            if not (rule.confidence > min_confidence and rule.lift > min_lift): continue
            antecedent = self._resolved(rule.antecedent)
            consequent = self._resolved(rule.consequent)
            if not antecedent or not consequent: continue
            rows.append({
                "antecedent": [t for t, _ in antecedent], "consequent": [t for t, _ in consequent],
                "support": rule.support, "confidence": rule.confidence, "lift": rule.lift,
            })
            entities.append(([e for _, e in antecedent], [e for _, e in consequent]))
        table = pa.Table.from_pylist(rows, schema=COMBINATION_SCHEMA)
        return RecommendationResult(table, f"Found {len(rows)} trending combinations", tuple(entities))
