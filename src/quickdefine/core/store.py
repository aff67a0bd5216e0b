# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Persisted Cache Store
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
JSON snapshot of every resolved definition, shared by all processes
that use the same cache directory.

The file is a single object mapping word to
``{title, body, full, ts, source}``. Writes go to a temporary file in
the same directory and are renamed into place, so a crash mid-flush
leaves the previous snapshot intact.

Usage::

    store = PersistentStore(cfg.cache_file, flush_interval=2.0)
    store.start()              # background flusher
    store.put(entry)           # marks dirty, never blocks on disk
    store.stop()               # final flush
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path

from .exceptions import PersistenceError
from .metrics import metrics
from .types import CacheEntry, SourceKind

logger = logging.getLogger("QuickDefine.Store")


def write_private_file(path: Path, data: str) -> None:
    """Atomically replace *path* with *data*, readable by the owner only."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


class PersistentStore:
    """Disk-backed ``key -> CacheEntry`` map with dirty-flag flushing.

    Parameters
    ----------
    path : str | Path — snapshot file location.
    ttl_seconds : float — freshness window for online and ``none`` entries.
    offline_refresh_seconds : float — shorter window for offline entries,
        since offline coverage may improve.
    flush_interval : float — seconds between background flush ticks.
    """

    def __init__(
        self,
        path: str | Path,
        ttl_seconds: float = 30 * 24 * 3600.0,
        offline_refresh_seconds: float = 12 * 3600.0,
        flush_interval: float = 2.0,
    ) -> None:
        self.path = Path(path)
        self._ttl = ttl_seconds
        self._offline_refresh = offline_refresh_seconds
        self._flush_interval = flush_interval
        self._lock = threading.Lock()
        self._dirty = False
        self._generation = 0
        self._flush_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._entries: dict[str, CacheEntry] = self._load()

    # ── Loading ───────────────────────────────────────────────────────

    def _load(self) -> dict[str, CacheEntry]:
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Unreadable cache %s, starting empty: %s", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Cache %s is not a JSON object, starting empty", self.path)
            return {}

        loaded: dict[str, CacheEntry] = {}
        for key, raw in payload.items():
            if not isinstance(key, str) or not isinstance(raw, dict):
                continue
            try:
                loaded[key] = CacheEntry.from_dict(key, raw)
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed cache entry %r", key)
        logger.info("Loaded %d cached definitions from %s", len(loaded), self.path)
        return loaded

    # ── Access ────────────────────────────────────────────────────────

    def is_fresh(self, entry: CacheEntry) -> bool:
        age = entry.age_seconds()
        if entry.source is SourceKind.OFFLINE:
            return age <= self._offline_refresh
        return age <= self._ttl

    def get_fresh(self, key: str) -> CacheEntry | None:
        """Return the entry only if it passes its source's freshness rule."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or not self.is_fresh(entry):
            return None
        return entry

    def put(self, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[entry.key] = entry
            self._dirty = True
            self._generation += 1

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._dirty = True
            self._generation += 1

    def entries(self) -> list[CacheEntry]:
        with self._lock:
            return list(self._entries.values())

    @property
    def dirty(self) -> bool:
        with self._lock:
            return self._dirty

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ── Flushing ──────────────────────────────────────────────────────

    def flush(self, raise_errors: bool = False) -> bool:
        """Write the snapshot if dirty. Returns True when a file was written.

        A failed write leaves the dirty flag set so the next tick retries.
        The snapshot is taken under ``_lock`` but written outside it, so
        ``put`` never waits on disk I/O. A ``put`` that lands mid-write
        keeps the store dirty for the next tick.
        """
        with self._flush_lock:
            with self._lock:
                if not self._dirty:
                    return False
                data = json.dumps(
                    {k: e.to_dict() for k, e in self._entries.items()},
                    ensure_ascii=False,
                )
                generation = self._generation
            try:
                write_private_file(self.path, data)
            except OSError as exc:
                metrics.inc("flush_failures_total")
                logger.warning("Cache flush to %s failed: %s", self.path, exc)
                if raise_errors:
                    raise PersistenceError(
                        f"could not write {self.path}: {exc}"
                    ) from exc
                return False
            with self._lock:
                if self._generation == generation:
                    self._dirty = False
        metrics.inc("flushes_total")
        logger.debug("Flushed cache snapshot to %s", self.path)
        return True

    def start(self) -> None:
        """Start the background flusher thread (idempotent)."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="define-cache-flusher", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the flusher and write any pending changes."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        self.flush()

    def _run(self) -> None:
        while not self._stop.wait(self._flush_interval):
            self.flush()
