"""Thread-safe time-to-live cache shared by the device directory caches."""

from __future__ import annotations

import threading
import time
from datetime import timedelta
from typing import Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class TTLCache(Generic[K, V]):
    """
    Associative cache whose entries expire a fixed time after being stored.

    Reads and writes hold a single lock for the duration of a dictionary
    operation only; loading a missing value is the caller's job and happens
    outside the lock, so concurrent misses on the same key may both load.
    """

    def __init__(
        self,
        ttl: timedelta,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl.total_seconds() <= 0:
            raise ValueError("TTL must be positive")
        self._ttl_seconds = ttl.total_seconds()
        self._clock = clock
        self._entries: Dict[K, Tuple[V, float]] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=self._ttl_seconds)

    def get(self, key: K) -> Optional[V]:
        """Return the cached value, or None when absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, stored_at = entry
            if self._clock() - stored_at > self._ttl_seconds:
                del self._entries[key]
                return None
            return value

    def set(self, key: K, value: V) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]
