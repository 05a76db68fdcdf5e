# backend/portfolio_tracker/services/market_data/cache.py
"""
Time-to-live cache for market data.

Entries expire a fixed number of seconds after they were written; an
expired entry is dropped on read and reported as a miss. There is no
size-based eviction: the key space (symbols, sectors) is small.

The clock is injectable so tests can move time forward without sleeping.

Usage:
    cache: TTLCache[str, MarketQuote] = TTLCache(ttl_seconds=300)
    cache.set("AAPL", quote)
    cache.get("AAPL")  # quote, or None once 300s have passed
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """A cached value and the clock reading at which it was stored."""
    value: V
    stored_at: float


class TTLCache(Generic[K, V]):
    """
    Thread-safe key -> (value, stored_at) map with TTL expiry.

    Args:
        ttl_seconds: Lifetime of an entry; 0 disables caching entirely
        clock: Monotonic time source returning seconds
    """

    def __init__(
            self,
            ttl_seconds: float,
            clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds cannot be negative")
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[K, CacheEntry[V]] = {}
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get_entry(self, key: K) -> CacheEntry[V] | None:
        """Return the live entry for key, evicting it if it has expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.stored_at >= self._ttl:
                del self._entries[key]
                return None
            return entry

    def get(self, key: K) -> V | None:
        entry = self.get_entry(key)
        return entry.value if entry is not None else None

    def set(self, key: K, value: V) -> None:
        if self._ttl == 0:
            return
        with self._lock:
            self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

    def invalidate(self, key: K) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return self.get_entry(key) is not None  # type: ignore[arg-type]
