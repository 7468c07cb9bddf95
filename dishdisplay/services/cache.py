"""
In-memory TTL cache for read-through results (leaderboard payloads).

An item is fresh while `clock() - stored_at < ttl`. The clock is injectable
so expiry can be tested without sleeping. One instance per process; the
FastAPI dependency `get_leaderboard_cache` hands it to the routers.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from dishdisplay.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class CacheItem:
    value: Any
    stored_at: float
    ttl: float


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    sets: int = 0
    invalidations: int = 0
    evictions: int = 0


class TTLCache:
    def __init__(
        self,
        default_ttl: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self._clock = clock
        self._items: dict[str, CacheItem] = {}
        self._lock = threading.Lock()
        self.stats = CacheStats()

    def _is_fresh(self, item: CacheItem) -> bool:
        return self._clock() - item.stored_at < item.ttl

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            item = self._items.get(key)
            if item is None:
                self.stats.misses += 1
                return None
            if not self._is_fresh(item):
                del self._items[key]
                self.stats.evictions += 1
                self.stats.misses += 1
                return None
            self.stats.hits += 1
            return item.value

    def _sweep(self) -> None:
        expired = [k for k, item in self._items.items() if not self._is_fresh(item)]
        for k in expired:
            del self._items[k]
        self.stats.evictions += len(expired)

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store `value`, dropping every expired item first."""
        with self._lock:
            self._sweep()
            self._items[key] = CacheItem(
                value=value,
                stored_at=self._clock(),
                ttl=self.default_ttl if ttl is None else ttl,
            )
            self.stats.sets += 1

    def invalidate(self, key: str) -> bool:
        with self._lock:
            removed = self._items.pop(key, None) is not None
            if removed:
                self.stats.invalidations += 1
            return removed

    def invalidate_prefix(self, prefix: str) -> int:
        with self._lock:
            keys = [k for k in self._items if k.startswith(prefix)]
            for k in keys:
                del self._items[k]
            self.stats.invalidations += len(keys)
        if keys:
            logger.debug("Invalidated %d cache entries under %r", len(keys), prefix)
        return len(keys)

    def clear(self) -> None:
        with self._lock:
            self.stats.invalidations += len(self._items)
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for item in self._items.values() if self._is_fresh(item))


leaderboard_cache = TTLCache(default_ttl=settings.LEADERBOARD_CACHE_TTL_SECONDS)


def get_leaderboard_cache() -> TTLCache:
    return leaderboard_cache
