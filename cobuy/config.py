from __future__ import annotations
from dataclasses import dataclass, field, fields
from datetime import timedelta
from typing import Any, FrozenSet, Iterable, Mapping, Union
from cobuy.exceptions import ConfigurationError

ELIGIBLE_STATUSES = frozenset({"processing", "shipped", "delivered"})


def _as_timedelta(value: Union[timedelta, int, float]) -> timedelta:
    if isinstance(value, timedelta): return value
    return timedelta(seconds=float(value))


def _number(name: str, value: Any, kind: type = float):
    if isinstance(value, bool): raise ConfigurationError(f"{name} must be a number, got {value!r}")
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e


def as_statuses(statuses: Union[str, Iterable[str]]) -> FrozenSet[str]:
    """Lowercased status set; a bare string names a single status."""
    if isinstance(statuses, str): statuses = (statuses,)
    return frozenset(str(s).strip().lower() for s in statuses)


@dataclass(frozen=True)
class EngineConfig:
    """Settings for mining, caching and transaction selection.

    ``ttl`` accepts a ``timedelta`` or a number of seconds.
    """
    min_support: float = 0.15
    min_confidence: float = 0.5
    ttl: timedelta = timedelta(hours=24)
    min_transactions: int = 5
    max_len: int = 10
    eligible_statuses: FrozenSet[str] = field(default=ELIGIBLE_STATUSES)

    def __post_init__(self):
        for name in ("min_support", "min_confidence"):
            object.__setattr__(self, name, _number(name, getattr(self, name)))
        for name in ("min_transactions", "max_len"):
            object.__setattr__(self, name, _number(name, getattr(self, name), int))
        if not isinstance(self.ttl, timedelta):
            object.__setattr__(self, "ttl", _as_timedelta(_number("ttl", self.ttl)))

        if not (0 < self.min_support <= 1): raise ConfigurationError("min_support must be in (0, 1]")
        if not (0 < self.min_confidence <= 1): raise ConfigurationError("min_confidence must be in (0, 1]")
        if self.ttl.total_seconds() < 0: raise ConfigurationError("ttl must be non-negative")
        if self.min_transactions < 0: raise ConfigurationError("min_transactions must be non-negative")
        if self.max_len < 1: raise ConfigurationError("max_len must be at least 1")
        statuses = as_statuses(self.eligible_statuses)
        if not statuses: raise ConfigurationError("eligible_statuses must not be empty")
        object.__setattr__(self, "eligible_statuses", statuses)

    @classmethod
    def from_mapping(cls, settings: Mapping[str, Any]) -> EngineConfig:
        known = {f.name for f in fields(cls)}
        unknown = set(settings) - known
        if unknown: raise ConfigurationError(f"Unknown settings: {sorted(unknown)}")
        return cls(**dict(settings))

    def replace(self, **overrides) -> EngineConfig:
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return EngineConfig.from_mapping(values)
