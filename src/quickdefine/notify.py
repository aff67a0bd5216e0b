# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Notification Surface
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
Hand a resolved definition to the desktop, with an "Open full" action
that shows the untruncated text.

``DesktopNotifier`` shells out to ``notify-send`` and ``zenity``;
``ConsoleNotifier`` prints, for terminals and tests.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TextIO

logger = logging.getLogger("QuickDefine.Notify")

APP_NAME = "define"
ACTION_WAIT_SECONDS = 600.0


def show_full_text(full: str, zenity: str | None = None) -> None:
    """Show *full* in a zenity text window, or print it without one."""
    zenity = zenity if zenity is not None else shutil.which("zenity")
    if not zenity:
        print(full)
        return
    try:
        subprocess.run(
            [
                zenity,
                "--text-info",
                "--width=760",
                "--height=560",
                f"--title={APP_NAME}",
                "--no-markup",
            ],
            input=full,
            text=True,
            check=False,
        )
    except OSError as e:
        logger.warning("zenity failed: %s", e)
        print(full)


def open_last(path: str | Path, zenity: str | None = None) -> bool:
    """Show the last resolved full text. Returns False if there is none."""
    try:
        full = Path(path).read_text(encoding="utf-8")
    except OSError:
        return False
    show_full_text(full, zenity)
    return True


class Notifier(ABC):
    """Outbound display collaborator."""

    @abstractmethod
    def notify(self, title: str, body: str, full: str) -> None:
        """Display a definition. Must not block the caller for long."""
        ...


class ConsoleNotifier(Notifier):
    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream

    def notify(self, title: str, body: str, full: str) -> None:
        out = self.stream or sys.stdout
        out.write(f"{title}\n{body}\n")
        out.flush()


class DesktopNotifier(Notifier):
    """``notify-send --wait`` in a background thread per notification.

    When the user clicks "Open full", the full text opens in zenity.
    """

    def __init__(
        self,
        notify_send: str | None = None,
        zenity: str | None = None,
        wait_seconds: float = ACTION_WAIT_SECONDS,
    ) -> None:
        self.notify_send = notify_send or shutil.which("notify-send")
        self.zenity = zenity if zenity is not None else shutil.which("zenity")
        self.wait_seconds = wait_seconds

    def notify(self, title: str, body: str, full: str) -> None:
        threading.Thread(
            target=self._notify_and_wait,
            args=(title, body, full),
            name="define-notify",
            daemon=True,
        ).start()

    def _notify_and_wait(self, title: str, body: str, full: str) -> None:
        cmd = [
            self.notify_send,
            f"--app-name={APP_NAME}",
            "--action=full=Open full",
            "--hint=boolean:resident:true",
            "--wait",
            title,
            body,
        ]
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, timeout=self.wait_seconds
            )
        except subprocess.TimeoutExpired:
            return
        except OSError as e:
            logger.warning("notify-send failed: %s", e)
            return
        if result.returncode != 0:
            logger.debug("notify-send exited %d: %s", result.returncode, result.stderr)
            return
        if result.stdout.strip() == "full":
            show_full_text(full, self.zenity)


def default_notifier() -> Notifier:
    if shutil.which("notify-send"):
        return DesktopNotifier()
    logger.info("notify-send not found; printing definitions to stdout")
    return ConsoleNotifier()
