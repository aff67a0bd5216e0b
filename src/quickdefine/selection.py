# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Selection Capture
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""Read the Wayland primary selection, falling back to the clipboard."""

from __future__ import annotations

import os
import shutil
import subprocess

SELECTION_TIMEOUT = 0.18
_COMMON_BIN_DIRS = ("/usr/local/bin", "/usr/bin", "/bin")


def ensure_common_path() -> None:
    """Prepend standard bin dirs missing from PATH (shortcut launchers strip it)."""
    path = os.environ.get("PATH", "")
    parts = path.split(os.pathsep) if path else []
    for d in _COMMON_BIN_DIRS:
        if d not in parts:
            parts.insert(0, d)
    os.environ["PATH"] = os.pathsep.join(parts)


def _capture(cmd: list[str], timeout: float) -> str:
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except (subprocess.TimeoutExpired, OSError):
        return ""
    return result.stdout.strip()


def read_selection(wl_paste: str | None = None, timeout: float = SELECTION_TIMEOUT) -> str:
    """Primary selection text, else clipboard text, else ``""``."""
    wl_paste = wl_paste or shutil.which("wl-paste")
    if not wl_paste:
        return ""
    return _capture([wl_paste, "-p", "--no-newline"], timeout) or _capture(
        [wl_paste, "--no-newline"], timeout
    )
