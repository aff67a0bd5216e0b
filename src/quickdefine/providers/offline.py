# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Offline dictd Provider
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
Local fallback through the ``dict`` client against a dictd database
(GCIDE by default), with a match-mode retry when the first call fails.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess

from ..core.exceptions import ProviderError
from ..core.types import SourceKind
from .base import DefinitionProvider

logger = logging.getLogger("QuickDefine.Providers")

MAX_LINES = 48

_NO_DEFINITION_MARKERS = ("No definitions found for", "perhaps you mean")
_SKIP_PREFIXES = ("From ", "Database", "Copyright", "dictd", "----")
_PROSE_STARTS = ("1.", "2.", "The ", "A ", "An ")
_WS_RE = re.compile(r"\s+")
_BRACKET_TAG_RE = re.compile(r"\s*\[[^\]]+\]")  # [PJC], [1913 Webster]
_DB_HEADER_RE = re.compile(r"^[A-Za-z0-9_-]+:\s+.+$")  # "gcide: Legend"


def _normalize_line(line: str) -> str:
    line = _WS_RE.sub(" ", line.strip())
    return _BRACKET_TAG_RE.sub("", line).strip()


def clean_dictd_output(raw: str) -> str:
    """Keep the definition prose of a ``dict`` reply, dropping banners.

    Output starts at the first numbered sense or article-led sentence
    and keeps single blank lines between paragraphs.
    """
    clean: list[str] = []
    started = False
    prev_blank = False

    for line in raw.splitlines():
        trim = line.strip()
        if line.startswith(_SKIP_PREFIXES) or "definition found" in line:
            continue
        if trim == ".":
            continue
        if not clean and _DB_HEADER_RE.match(trim):
            continue
        if not trim:
            if started and not prev_blank and clean:
                clean.append("")
                prev_blank = True
            continue

        norm = _normalize_line(line)
        if not norm:
            continue
        if not started:
            if not norm.startswith(_PROSE_STARTS):
                continue
            started = True

        clean.append(norm)
        prev_blank = False
        if len(clean) >= MAX_LINES:
            break

    return "\n".join(clean).strip()


class DictdProvider(DefinitionProvider):
    """Runs ``dict -d <database> <word>``, then ``dict -m <word>``.

    Parameters
    ----------
    database : str — dictd database name.
    timeout : float — per-invocation deadline in seconds.
    binary : str | None — path to ``dict``; looked up on PATH when None.
    """

    def __init__(
        self,
        database: str = "gcide",
        timeout: float = 0.9,
        binary: str | None = None,
    ) -> None:
        self.database = database
        self.timeout = timeout
        self.binary = binary if binary is not None else shutil.which("dict")

    @property
    def name(self) -> str:
        return f"dictd/{self.database}"

    @property
    def source(self) -> SourceKind:
        return SourceKind.OFFLINE

    def available(self) -> bool:
        return bool(self.binary)

    def _run(self, args: list[str]) -> str | None:
        try:
            result = subprocess.run(
                [self.binary, *args],
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.debug("dict %s timed out after %.2fs", args, self.timeout)
            return None
        except OSError as e:
            logger.debug("dict %s failed to start: %s", args, e)
            return None
        if result.returncode != 0:
            return None
        return result.stdout

    def fetch(self, word: str) -> str:
        if not self.binary:
            raise ProviderError(self.name, "dict not installed")

        out = self._run(["-d", self.database, word])
        if out is None:
            out = self._run(["-m", word])
        if out is None:
            raise ProviderError(self.name, "dict invocation failed")

        raw = out.strip()
        if not raw:
            raise ProviderError(self.name, "empty output")
        if any(marker in raw for marker in _NO_DEFINITION_MARKERS):
            raise ProviderError(self.name, "no definitions")

        text = clean_dictd_output(raw)
        if not text:
            raise ProviderError(self.name, "no usable offline content")
        return text
