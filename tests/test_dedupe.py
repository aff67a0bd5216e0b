# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Duplicate Trigger Guard Tests
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────

import threading

from quickdefine.core.dedupe import DedupeGuard


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now


class TestDedupeGuard:
    def test_second_call_in_window_dropped(self):
        clock = FakeClock()
        guard = DedupeGuard(0.25, clock=clock)
        assert guard.allow("legend") is True
        clock.now += 0.1
        assert guard.allow("legend") is False

    def test_allowed_after_window(self):
        clock = FakeClock()
        guard = DedupeGuard(0.25, clock=clock)
        guard.allow("legend")
        clock.now += 0.3
        assert guard.allow("legend") is True

    def test_window_measured_from_last_allowed(self):
        clock = FakeClock()
        guard = DedupeGuard(0.25, clock=clock)
        guard.allow("legend")
        clock.now += 0.2
        assert guard.allow("legend") is False
        clock.now += 0.1
        assert guard.allow("legend") is True

    def test_keys_independent(self):
        guard = DedupeGuard(0.25, clock=FakeClock())
        assert guard.allow("legend")
        assert guard.allow("myth")
        assert len(guard) == 2

    def test_zero_window_allows_everything(self):
        guard = DedupeGuard(0.0, clock=FakeClock())
        assert guard.allow("legend")
        assert guard.allow("legend")

    def test_concurrent_exactly_one_wins(self):
        guard = DedupeGuard(60.0)
        barrier = threading.Barrier(16)
        results = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            allowed = guard.allow("legend")
            with lock:
                results.append(allowed)

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert results.count(True) == 1
        assert len(results) == 16
