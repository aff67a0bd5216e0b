# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Duplicate Trigger Guard
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
Suppress repeated requests for the same word inside a short window.

Keyboard shortcuts and input methods often fire twice for one press;
this guard lets the first through and drops the echo.
"""

from __future__ import annotations

import threading
import time
from typing import Callable


class DedupeGuard:
    """Sliding-window, per-key suppression.

    Parameters
    ----------
    window_seconds : float — span measured from the last *allowed* call.
    clock : callable — monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        window_seconds: float = 0.25,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window = window_seconds
        self._clock = clock
        self._last: dict[str, float] = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        """True at most once per key per window."""
        with self._lock:
            now = self._clock()
            last = self._last.get(key)
            if last is not None and now - last < self.window:
                return False
            self._last[key] = now
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._last)
