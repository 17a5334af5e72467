"""Time-bounded membership set.

Used for authorization codes that were already exchanged and for OAuth
``state`` values that were handed out.  Entries expire after *ttl* seconds;
expired entries are purged lazily on access, so there is no background timer.
When *capacity* is reached the oldest entry is evicted first.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable

__all__ = ["ExpiringSet"]


class ExpiringSet:
    """Set of strings whose members disappear *ttl* seconds after insertion.

    Parameters
    ----------
    ttl : float
        Lifetime of each member in seconds.
    capacity : int
        Maximum number of live members kept.
    clock : callable
        Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        ttl: float,
        capacity: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.ttl = ttl
        self.capacity = capacity
        self._clock = clock
        self._expiry: OrderedDict[str, float] = OrderedDict()

    def add(self, key: str) -> bool:
        """Insert *key*. Returns False if it was already a live member."""
        self.purge()
        if key in self._expiry:
            return False

        while len(self._expiry) >= self.capacity:
            self._expiry.popitem(last=False)

        self._expiry[key] = self._clock() + self.ttl
        return True

    def discard(self, key: str) -> None:
        self._expiry.pop(key, None)

    def purge(self) -> int:
        """Drop expired members. Returns count removed."""
        now = self._clock()
        removed = 0
        # Insertion order == expiry order since ttl is constant
        while self._expiry:
            key, expires = next(iter(self._expiry.items()))
            if expires > now:
                break
            del self._expiry[key]
            removed += 1
        return removed

    def __contains__(self, key: object) -> bool:
        self.purge()
        return key in self._expiry

    def __len__(self) -> int:
        self.purge()
        return len(self._expiry)
