# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Lookup Daemon
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
Long-lived Unix socket server that keeps both cache tiers warm.

The wire protocol is one raw write of the word per connection: no
framing and no reply. Clients fire and forget; the daemon shows the
result through its notifier.

Usage::

    # Daemon
    quickdefine daemon

    # Client (falls back to an in-process lookup when no daemon runs)
    if not send_word("legends", cfg.resolved_socket_path):
        lookup_local("legends", cfg, ConsoleNotifier())
"""

from __future__ import annotations

import logging
import os
import signal
import socket
import socketserver
import threading
from pathlib import Path

from .core.config import DefineConfig
from .core.dedupe import DedupeGuard
from .core.exceptions import ServerBindError
from .core.metrics import metrics
from .core.resolver import Resolver
from .core.store import write_private_file
from .core.types import CacheEntry
from .core.words import is_valid_word, pick_word
from .notify import Notifier, default_notifier

logger = logging.getLogger("QuickDefine.Daemon")

LOCAL_MEM_CACHE_MAX = 64
LOCAL_MEM_TTL_SECONDS = 600.0


class _WordRequestHandler(socketserver.BaseRequestHandler):
    """Reads one bounded payload under a deadline and dispatches it."""

    server: DefineServer

    def handle(self) -> None:
        metrics.gauge_inc("active_connections")
        try:
            self.request.settimeout(self.server.read_timeout)
            try:
                data = self.request.recv(self.server.max_request_bytes)
            except OSError as e:
                logger.debug("read failed: %s", e)
                metrics.inc("requests_dropped_total", label="read_error")
                return
            self.server.dispatch(data)
        finally:
            metrics.gauge_dec("active_connections")


class DefineServer(socketserver.ThreadingMixIn, socketserver.UnixStreamServer):
    """One thread per connection over a shared ``Resolver``.

    Shared state lives in the resolver's cache tiers, which lock
    internally; handlers do not serialize on each other.
    """

    daemon_threads = True

    def __init__(
        self,
        socket_path: str | Path,
        resolver: Resolver,
        dedupe: DedupeGuard,
        notifier: Notifier,
        read_timeout: float = 0.9,
        max_request_bytes: int = 4096,
    ) -> None:
        self.socket_path = Path(socket_path)
        self.resolver = resolver
        self.dedupe = dedupe
        self.notifier = notifier
        self.read_timeout = read_timeout
        self.max_request_bytes = max_request_bytes

        if _socket_in_use(self.socket_path):
            raise ServerBindError(f"another daemon is listening on {self.socket_path}")
        try:
            self.socket_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise ServerBindError(f"cannot remove stale {self.socket_path}: {e}") from e
        try:
            super().__init__(str(self.socket_path), _WordRequestHandler)
        except OSError as e:
            raise ServerBindError(f"cannot listen on {self.socket_path}: {e}") from e
        os.chmod(self.socket_path, 0o600)

    def dispatch(self, data: bytes) -> CacheEntry | None:
        """Decode, validate, dedupe, resolve and notify. Drops bad input silently."""
        word = pick_word(data.decode("utf-8", errors="replace"))
        if not is_valid_word(word):
            metrics.inc("requests_dropped_total", label="invalid")
            return None
        if not self.dedupe.allow(word.lower()):
            metrics.inc("requests_dropped_total", label="duplicate")
            logger.debug("duplicate trigger dropped", extra={"word": word.lower()})
            return None

        entry = self.resolver.resolve(word)
        self.notifier.notify(entry.title, entry.body, entry.full)
        return entry

    def handle_error(self, request, client_address) -> None:
        logger.exception("Unhandled error while serving a lookup")

    def server_close(self) -> None:
        super().server_close()
        try:
            self.socket_path.unlink()
        except OSError:
            pass


def _socket_in_use(path: Path) -> bool:
    if not path.exists():
        return False
    with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as probe:
        probe.settimeout(0.1)
        try:
            probe.connect(str(path))
        except OSError:
            return False
    return True


class DefineDaemon:
    """Owns the resolver context, flusher thread and socket server."""

    def __init__(
        self,
        config: DefineConfig,
        resolver: Resolver | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.config = config
        self.resolver = resolver or Resolver.from_config(config)
        self.notifier = notifier or default_notifier()
        self.dedupe = DedupeGuard(config.dedupe_window_seconds)
        self.server: DefineServer | None = None

    def bind(self) -> DefineServer:
        self.server = DefineServer(
            self.config.resolved_socket_path,
            self.resolver,
            self.dedupe,
            self.notifier,
            read_timeout=self.config.read_timeout_seconds,
            max_request_bytes=self.config.max_request_bytes,
        )
        return self.server

    def run(self) -> None:
        """Serve until SIGINT/SIGTERM. Raises ``ServerBindError`` on bind failure."""
        server = self.server or self.bind()
        self.resolver.store.start()

        def _shutdown(signum, frame) -> None:
            logger.info("Received signal %d, shutting down", signum)
            threading.Thread(target=server.shutdown, daemon=True).start()

        if threading.current_thread() is threading.main_thread():
            signal.signal(signal.SIGTERM, _shutdown)

        logger.info("Listening on %s", server.socket_path)
        try:
            server.serve_forever(poll_interval=0.5)
        except KeyboardInterrupt:
            pass
        finally:
            server.server_close()
            self.resolver.store.stop()
            self.export_metrics()
            logger.info("Stopped. %s", metrics.summary())

    def export_metrics(self) -> bool:
        """Write the Prometheus text snapshot next to the cache."""
        path = self.config.metrics_file
        try:
            write_private_file(path, metrics.prometheus_format())
        except OSError as e:
            logger.warning("Could not write metrics to %s: %s", path, e)
            return False
        return True

    def stop(self) -> None:
        if self.server is not None:
            self.server.shutdown()


def send_word(word: str, socket_path: str | Path, timeout: float = 0.08) -> bool:
    """Deliver *word* to a running daemon. Returns False if none answered."""
    path = Path(socket_path)
    if not path.exists():
        return False
    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as conn:
            conn.settimeout(timeout)
            conn.connect(str(path))
            conn.sendall(word.encode("utf-8"))
    except OSError as e:
        logger.debug("daemon unreachable at %s: %s", path, e)
        return False
    return True


def lookup_local(word: str, config: DefineConfig, notifier: Notifier) -> CacheEntry:
    """Resolve in-process when no daemon is running, then flush and notify."""
    resolver = Resolver.from_config(
        config,
        mem_cache_max=LOCAL_MEM_CACHE_MAX,
        mem_ttl_seconds=LOCAL_MEM_TTL_SECONDS,
    )
    entry = resolver.resolve(word)
    resolver.store.flush()
    notifier.notify(entry.title, entry.body, entry.full)
    return entry
