# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Dictionary Providers
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
Dictionary sources queried by the provider chain, in priority order:
Free Dictionary API, Wiktionary, then the local dictd client.
"""

from .base import DefinitionProvider, normalize_text
from .offline import DictdProvider, clean_dictd_output
from .online import (
    DictionaryApiProvider,
    WiktionaryProvider,
    make_session,
)

__all__ = [
    "DefinitionProvider",
    "normalize_text",
    "DictionaryApiProvider",
    "WiktionaryProvider",
    "DictdProvider",
    "clean_dictd_output",
    "make_session",
]
