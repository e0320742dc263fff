from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

SEPARATOR = "|"


def normalize_token(token: Any) -> Optional[str]:
    """Trimmed string form of a token, or ``None`` when nothing is left."""
    if token is None: return None
    text = str(token).strip()
    return text or None


class ItemsetKey(tuple):
    """Canonical itemset identity: distinct tokens sorted ascending."""
    __slots__ = ()

    def __new__(cls, tokens: Iterable[str] = ()):
        if isinstance(tokens, str): tokens = (tokens,)
        return super().__new__(cls, sorted(set(tokens)))

    def label(self) -> str:
        return SEPARATOR.join(self)

    def union(self, other: Iterable[str]) -> ItemsetKey:
        return ItemsetKey((*self, *other))

    def difference(self, other: Iterable[str]) -> ItemsetKey:
        drop = set(other)
        return ItemsetKey(t for t in self if t not in drop)

    def issubset(self, tokens) -> bool:
        return all(t in tokens for t in self)

    def __repr__(self) -> str:
        return f"ItemsetKey({list(self)!r})"


@dataclass(frozen=True)
class OrderLine:
    product_id: Optional[str] = None
    name: Optional[str] = None
    quantity: int = 1

    @property
    def token(self) -> Optional[str]:
        return normalize_token(self.product_id) or normalize_token(self.name)

    @classmethod
    def coerce(cls, line: Any) -> OrderLine:
        """Accepts an ``OrderLine``, a mapping, a bare token or a ``(token, quantity)`` pair."""
        if isinstance(line, OrderLine): return line
        if isinstance(line, Mapping):
            return cls(
                product_id=line.get("product_id", line.get("productId")),
                name=line.get("name"),
                quantity=line.get("quantity", 1),
            )
        if isinstance(line, str): return cls(product_id=line)
        if isinstance(line, (tuple, list)) and 1 <= len(line) <= 2:
            return cls(product_id=line[0], quantity=line[1] if len(line) == 2 else 1)
        raise TypeError(f"Unsupported order line: {line!r}")


@dataclass(frozen=True)
class Order:
    order_id: str
    lines: Tuple[OrderLine, ...] = ()
    status: str = "pending"
    user_id: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> Order:
        raw_lines = data.get("lines", data.get("items", ())) or ()
        lines = tuple(OrderLine.coerce(line) for line in raw_lines)
        return cls(
            order_id=str(data.get("order_id", data.get("id", ""))),
            lines=lines,
            status=str(data.get("status", "pending")),
            user_id=data.get("user_id"),
        )


@dataclass(frozen=True)
class AssociationRule:
    antecedent: ItemsetKey
    consequent: ItemsetKey
    support: float
    confidence: float
    lift: float

    @property
    def itemset(self) -> ItemsetKey:
        return self.antecedent.union(self.consequent)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "antecedents": self.antecedent.label(), "consequents": self.consequent.label(),
            "support": self.support, "confidence": self.confidence, "lift": self.lift,
        }

    def __str__(self) -> str:
        return f"{self.antecedent.label()} -> {self.consequent.label()}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RuleSet:
    """Immutable snapshot of one mining pass."""
    rules: Tuple[AssociationRule, ...] = ()
    computed_at: datetime = field(default_factory=utcnow)
    transaction_count: int = 0
    message: str = ""
    sufficient: bool = True

    @classmethod
    def insufficient(cls, message: str, transaction_count: int = 0, computed_at: Optional[datetime] = None) -> RuleSet:
        return cls(
            rules=(), computed_at=computed_at or utcnow(),
            transaction_count=transaction_count, message=message, sufficient=False,
        )

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)
