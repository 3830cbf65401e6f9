"""Thread-safe TTL cache for price and metadata lookups."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Hashable

_MISSING = object()


class TTLCache:
    """Key -> (value, expiry_ts). Safe under concurrent aggregation calls."""

    def __init__(self, ttl_sec: float, *, max_entries: int = 10_000, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl_sec < 0:
            raise ValueError("ttl_sec must be non-negative")
        self._ttl = ttl_sec
        self._max_entries = max_entries
        self._clock = clock
        self._store: dict[Hashable, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return default
            value, expiry = entry
            if self._clock() > expiry:
                del self._store[key]
                return default
            return value

    def contains(self, key: Hashable) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            if len(self._store) >= self._max_entries and key not in self._store:
                self._evict_locked()
            self._store[key] = (value, self._clock() + self._ttl)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def _evict_locked(self) -> None:
        now = self._clock()
        expired = [k for k, (_, exp) in self._store.items() if now > exp]
        for k in expired:
            del self._store[k]
        if len(self._store) >= self._max_entries:
            # Oldest insertion first (dicts keep insertion order)
            del self._store[next(iter(self._store))]
