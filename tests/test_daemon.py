# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Lookup Daemon Tests
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────

import socket
import stat
import threading
import time
from unittest.mock import patch

import pytest

from quickdefine.core import metrics
from quickdefine.core.chain import ProviderChain
from quickdefine.core.dedupe import DedupeGuard
from quickdefine.core.exceptions import ServerBindError
from quickdefine.core.types import SourceKind
from quickdefine.daemon import DefineDaemon, DefineServer, lookup_local, send_word

from conftest import RecordingNotifier


def _wait_for(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def server(short_dir, make_resolver, primary, notifier):
    srv = DefineServer(
        short_dir / "define.sock",
        make_resolver(primary),
        DedupeGuard(0.25),
        notifier,
        read_timeout=0.5,
    )
    yield srv
    srv.server_close()


@pytest.fixture
def serving(server):
    thread = threading.Thread(
        target=server.serve_forever, kwargs={"poll_interval": 0.05}, daemon=True
    )
    thread.start()
    yield server
    server.shutdown()
    thread.join(5)


class TestDispatch:
    def test_resolves_and_notifies(self, server, notifier):
        entry = server.dispatch(b"legends\n")
        assert entry.title == "📘 Legends → Legend ☁️"
        assert notifier.sent == [(entry.title, entry.body, entry.full)]

    def test_picks_first_word(self, server, notifier):
        entry = server.dispatch(b'  "legend"\nsecond line')
        assert entry.key == "legend"

    def test_duplicate_dropped(self, server, notifier):
        server.dispatch(b"legend")
        assert server.dispatch(b"Legend") is None
        assert len(notifier.sent) == 1
        dropped = metrics.get_metrics()["counters"]["requests_dropped_total"]
        assert dropped["labels"] == {"duplicate": 1.0}

    @pytest.mark.parametrize("payload", [b"", b"   ", b"two; words", b"\xff\xfe"])
    def test_invalid_dropped(self, server, notifier, payload):
        assert server.dispatch(payload) is None
        assert notifier.sent == []
        dropped = metrics.get_metrics()["counters"]["requests_dropped_total"]
        assert dropped["labels"] == {"invalid": 1.0}

    def test_unknown_word_still_notifies(self, server, notifier):
        entry = server.dispatch(b"zzqx")
        assert entry.source is SourceKind.NONE
        assert notifier.sent[0][1] == "No definition found."


class TestSocketLifecycle:
    def test_socket_is_private(self, server):
        mode = stat.S_IMODE(server.socket_path.stat().st_mode)
        assert mode == 0o600

    def test_close_removes_socket(self, short_dir, make_resolver, primary, notifier):
        path = short_dir / "other.sock"
        srv = DefineServer(path, make_resolver(primary), DedupeGuard(), notifier)
        assert path.exists()
        srv.server_close()
        assert not path.exists()

    def test_live_socket_refused(self, server, make_resolver, primary, notifier):
        with pytest.raises(ServerBindError, match="another daemon"):
            DefineServer(
                server.socket_path, make_resolver(primary), DedupeGuard(), notifier
            )
        assert server.socket_path.exists()

    def test_stale_socket_replaced(self, short_dir, make_resolver, primary, notifier):
        path = short_dir / "stale.sock"
        stale = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        stale.bind(str(path))
        stale.close()
        assert path.exists()

        srv = DefineServer(path, make_resolver(primary), DedupeGuard(), notifier)
        try:
            assert send_word("legend", path, timeout=0.5)
        finally:
            srv.server_close()


class TestRoundTrip:
    def test_send_word_reaches_notifier(self, serving, notifier):
        assert send_word("legends", serving.socket_path, timeout=0.5)
        assert _wait_for(lambda: notifier.sent)
        assert notifier.sent[0][0] == "📘 Legends → Legend ☁️"

    def test_oversized_payload_dropped(self, serving, notifier):
        assert send_word("a" * 10_000, serving.socket_path, timeout=0.5)

        def dropped():
            counters = metrics.get_metrics()["counters"]
            return counters["requests_dropped_total"]["labels"].get("invalid")

        assert _wait_for(dropped)
        assert notifier.sent == []

    def test_silent_client_times_out(self, serving, notifier):
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as conn:
            conn.connect(str(serving.socket_path))

            def dropped():
                counters = metrics.get_metrics()["counters"]
                return counters["requests_dropped_total"]["labels"].get("read_error")

            assert _wait_for(dropped)
        assert notifier.sent == []

    def test_concurrent_clients(self, serving, notifier):
        words = ["legend", "myth", "saga", "fable"]
        threads = [
            threading.Thread(target=send_word, args=(w, serving.socket_path, 0.5))
            for w in words
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert _wait_for(lambda: len(notifier.sent) == len(words))


class TestSendWord:
    def test_no_socket(self, short_dir):
        assert send_word("legend", short_dir / "absent.sock") is False

    def test_stale_socket(self, short_dir):
        path = short_dir / "stale.sock"
        stale = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        stale.bind(str(path))
        stale.close()
        assert send_word("legend", path) is False


class TestDefineDaemon:
    def test_run_and_stop(self, config, make_resolver, primary, notifier):
        resolver = make_resolver(primary)
        daemon = DefineDaemon(config, resolver=resolver, notifier=notifier)
        daemon.bind()
        thread = threading.Thread(target=daemon.run, daemon=True)
        thread.start()
        try:
            assert send_word("legends", config.resolved_socket_path, timeout=0.5)
            assert _wait_for(lambda: notifier.sent)
        finally:
            daemon.stop()
            thread.join(5)

        assert not thread.is_alive()
        assert not config.resolved_socket_path.exists()
        assert resolver.store.path.exists()
        assert not resolver.store.dirty
        snapshot = config.metrics_file.read_text(encoding="utf-8")
        assert "quickdefine_lookups_total 1.0" in snapshot
        assert stat.S_IMODE(config.metrics_file.stat().st_mode) == 0o600

    def test_dedupe_window_from_config(self, config, make_resolver, primary):
        config.dedupe_window_seconds = 1.5
        daemon = DefineDaemon(
            config, resolver=make_resolver(primary), notifier=RecordingNotifier()
        )
        assert daemon.dedupe.window == 1.5

    def test_second_daemon_cannot_bind(self, config, make_resolver, primary, notifier):
        first = DefineDaemon(config, resolver=make_resolver(primary), notifier=notifier)
        first.bind()
        try:
            second = DefineDaemon(
                config, resolver=make_resolver(primary), notifier=notifier
            )
            with pytest.raises(ServerBindError):
                second.bind()
        finally:
            first.server.server_close()

    def test_metrics_export_failure_is_reported(self, config, make_resolver, primary):
        daemon = DefineDaemon(
            config, resolver=make_resolver(primary), notifier=RecordingNotifier()
        )
        with patch("quickdefine.core.store.os.replace", side_effect=OSError("ro")):
            assert daemon.export_metrics() is False
        assert not config.metrics_file.exists()


class TestLookupLocal:
    def test_resolves_flushes_and_notifies(self, config, primary, notifier):
        with patch(
            "quickdefine.core.resolver.build_chain",
            return_value=ProviderChain([primary]),
        ):
            entry = lookup_local("legends", config, notifier)

        assert entry.source is SourceKind.ONLINE
        assert notifier.sent == [(entry.title, entry.body, entry.full)]
        assert config.cache_file.exists()
        assert config.last_file.read_text(encoding="utf-8") == entry.full

    def test_reuses_persisted_entry(self, config, primary, notifier):
        chain = ProviderChain([primary])
        with patch("quickdefine.core.resolver.build_chain", return_value=chain):
            lookup_local("legend", config, notifier)
            lookup_local("legend", config, notifier)
        assert primary.calls == ["legend"]
        assert len(notifier.sent) == 2
