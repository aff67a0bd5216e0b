# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Definition Cache
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
Two-tier definition cache: a thread-safe in-memory LRU in front of the
persisted JSON snapshot (see ``store.PersistentStore``).
"""

from __future__ import annotations

import threading
from collections import OrderedDict

from .metrics import metrics
from .store import PersistentStore
from .types import CacheEntry


class DefinitionCache:
    """Thread-safe LRU cache of resolved definitions.

    Parameters
    ----------
    max_size : int — maximum entries (default 2500).
    ttl_seconds : float — lifetime measured from the entry's resolution
        timestamp (default 30 days).
    """

    def __init__(
        self, max_size: int = 2500, ttl_seconds: float = 30 * 24 * 3600.0
    ) -> None:
        self._max_size = max_size
        self._ttl = ttl_seconds
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self.misses += 1
                return None
            if entry.age_seconds() > self._ttl:
                self._store.pop(key, None)
                self.misses += 1
                return None
            self._store.move_to_end(key)
            self.hits += 1
            return entry

    def put(self, entry: CacheEntry) -> None:
        with self._lock:
            self._store[entry.key] = entry
            self._store.move_to_end(entry.key)
            while len(self._store) > self._max_size:
                self._store.popitem(last=False)

    @property
    def size(self) -> int:
        return len(self._store)

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self.hits = 0
            self.misses = 0


class TwoTierCache:
    """Memory tier first, persisted tier second; writes go to both.

    The persisted tier is only marked dirty on ``put``. Its flusher
    thread writes the snapshot, so callers never wait on disk I/O.
    """

    def __init__(self, memory: DefinitionCache, store: PersistentStore) -> None:
        self.memory = memory
        self.store = store

    def get(self, key: str) -> CacheEntry | None:
        entry = self.memory.get(key)
        if entry is not None:
            metrics.inc("cache_hits_total", label="memory")
            return entry

        entry = self.store.get_fresh(key)
        if entry is None:
            metrics.inc("cache_misses_total")
            return None
        self.memory.put(entry)
        metrics.inc("cache_hits_total", label="disk")
        metrics.gauge_set("memory_cache_size", self.memory.size)
        return entry

    def put(self, entry: CacheEntry) -> None:
        self.memory.put(entry)
        self.store.put(entry)
        metrics.gauge_set("memory_cache_size", self.memory.size)
