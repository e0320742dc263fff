from __future__ import annotations
import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional
from cobuy.core.types import RuleSet, utcnow
from cobuy.exceptions import MiningError

logger = logging.getLogger(__name__)


class RuleCache:
    """Process-wide holder of the current :class:`RuleSet`.

    Readers get the current snapshot without locking. Recomputation is
    single-flight: one mining pass at a time, and a caller that waited on
    an in-flight pass takes its outcome instead of starting another one.
    A failed pass leaves the previous snapshot in place and raises
    :class:`MiningError`.
    """

    def __init__(
        self,
        compute: Callable[[], RuleSet],
        ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = utcnow,
    ):
        self._compute = compute
        self.ttl = ttl
        self._clock = clock
        self._entry: Optional[RuleSet] = None
        self._lock = threading.Lock()
        self._generation = 0
        self._last_error: Optional[BaseException] = None
        self.runs = 0

    def peek(self) -> Optional[RuleSet]:
        return self._entry

    @property
    def last_error(self) -> Optional[BaseException]:
        return self._last_error

    def age(self) -> Optional[timedelta]:
        entry = self._entry
        return None if entry is None else self._clock() - entry.computed_at

    def is_fresh(self, entry: Optional[RuleSet] = None) -> bool:
        entry = entry if entry is not None else self._entry
        if entry is None: return False
        return self._clock() - entry.computed_at <= self.ttl

    def invalidate(self):
        with self._lock:
            self._entry, self._last_error = None, None
            self._generation += 1

    def get_rules(self, force_refresh: bool = False) -> RuleSet:
        generation = self._generation
        entry = self._entry
        if not force_refresh and self.is_fresh(entry):
            return entry

        with self._lock:
            if self._generation != generation:
                # a pass finished while we waited for the lock
                if self._last_error is not None:
                    raise MiningError("Rule mining failed") from self._last_error
                if self._entry is not None:
                    return self._entry
            return self._refresh()

    def _refresh(self) -> RuleSet:
        self.runs += 1
        logger.info("Mining association rules (pass %d)", self.runs)
        try:
            entry = self._compute()
        except Exception as e:
            self._last_error = e
            self._generation += 1
            logger.exception("Rule mining failed; keeping the previous rule set")
            raise MiningError("Rule mining failed") from e
        self._entry, self._last_error = entry, None
        self._generation += 1
        if entry.sufficient:
            logger.info("Cached %d association rules from %d transactions", len(entry), entry.transaction_count)
        else:
            logger.info(entry.message)
        return entry
