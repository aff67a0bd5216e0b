# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Word Picking & Lemma Candidates
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
Turn raw selected text into a lookup word and derive the base forms
worth trying when the surface form has no entry.

Usage::

    word = pick_word("  (Legends)  ")          # "Legends"
    is_valid_word(word)                        # True
    lemma_candidates(word)                     # ["legends", "legend"]
"""

from __future__ import annotations

import re

MAX_WORD_LEN = 64

_WORD_RE = re.compile(r"[\w\-']+")
_EDGE_CHARS = " \t\r\n\"“”‘’.,;:!?()[]{}"


def pick_word(text: str) -> str:
    """Return the first token of the first line, with edge punctuation stripped."""
    text = text.strip()
    if not text:
        return ""
    text = text.split("\n", 1)[0]
    text = text.strip(_EDGE_CHARS)
    parts = text.split()
    return parts[0] if parts else ""


def is_valid_word(word: str) -> bool:
    if not word or len(word) > MAX_WORD_LEN:
        return False
    return _WORD_RE.fullmatch(word) is not None


def lemma_candidates(word: str) -> list[str]:
    """Ordered, de-duplicated lookup forms, the surface form first.

    ``-ies`` words only get their ``-y`` singular; otherwise ``-es`` and
    ``-s`` are stripped. Words ending in ``ss`` keep their final ``s``.

    The ``-ies`` rule is exclusive, so nouns whose singular ends in
    ``-ie`` miss it: "movies" yields ``movy`` and never ``movie``.
    """
    w = word.lower()
    cands = [w]
    if w.endswith("ies") and len(w) > 4:
        cands.append(w[:-3] + "y")
    else:
        if w.endswith("es") and len(w) > 4:
            cands.append(w[:-2])
        if w.endswith("s") and len(w) > 3 and not w.endswith("ss"):
            cands.append(w[:-1])
    return list(dict.fromkeys(cands))


def capitalize(word: str) -> str:
    """Upper-case the first character only ("o'neill" -> "O'neill")."""
    return word[:1].upper() + word[1:]
