# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Definition Provider Protocol
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
Abstract base shared by every dictionary source.

A provider either returns trimmed, non-empty plain text or raises
``ProviderError``; callers never need to tell failure causes apart.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

from ..core.exceptions import ProviderError
from ..core.types import SourceKind

_INLINE_WS_RE = re.compile(r"[ \t\f\v]+")
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def normalize_text(text: str) -> str:
    """Collapse inline whitespace and blank-line runs, then trim."""
    lines = [_INLINE_WS_RE.sub(" ", ln).strip() for ln in text.splitlines()]
    return _BLANK_RUN_RE.sub("\n\n", "\n".join(lines)).strip()


class DefinitionProvider(ABC):
    """Abstract base for dictionary lookup sources."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging and metrics."""
        ...

    @property
    @abstractmethod
    def source(self) -> SourceKind:
        """Source kind recorded on entries this provider resolves."""
        ...

    @abstractmethod
    def fetch(self, word: str) -> str:
        """Return raw definition text for *word*, or raise ``ProviderError``."""
        ...

    def available(self) -> bool:
        """Whether the provider can run at all on this machine."""
        return True

    def lookup(self, word: str) -> str:
        """Fetch and normalize; empty results count as failures."""
        text = normalize_text(self.fetch(word))
        if not text:
            raise ProviderError(self.name, "empty definition")
        return text
