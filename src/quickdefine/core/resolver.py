# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Definition Resolver
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
Cache lookup, provider fallback, result shaping and cache population
for a single word.

Usage::

    resolver = Resolver.from_config(DefineConfig.from_env())
    resolver.store.start()
    entry = resolver.resolve("legends")
    print(entry.title)   # "📘 Legends → Legend ☁️"
"""

from __future__ import annotations

import logging
from pathlib import Path

import requests

from .cache import DefinitionCache, TwoTierCache
from .chain import ProviderChain, build_chain
from .config import DefineConfig
from .exceptions import ValidationError
from .metrics import metrics
from .store import PersistentStore, write_private_file
from .types import CacheEntry, SourceKind, utcnow
from .words import capitalize, is_valid_word

logger = logging.getLogger("QuickDefine.Resolver")

TRUNCATION_MARKER = "… (click to open full)"

_SOURCE_ICONS = {
    SourceKind.ONLINE: "☁️",
    SourceKind.SECONDARY_ONLINE: "🧾",
    SourceKind.OFFLINE: "🗄️",
    SourceKind.NONE: "❓",
}


def clamp_body(text: str, max_chars: int = 1400) -> str:
    """Length-bounded prefix of *text*, with a marker when cut."""
    text = text.strip()
    if len(text) <= max_chars:
        return text
    head = text[: max_chars - 80].strip()
    return f"{head}\n\n{TRUNCATION_MARKER}"


def make_title(word: str, used_lemma: str, source: SourceKind) -> str:
    shown = capitalize(word)
    if used_lemma and used_lemma != word.lower():
        shown = f"{shown} → {capitalize(used_lemma)}"
    return f"📘 {shown} {_SOURCE_ICONS[source]}"


class Resolver:
    """Resolves words to cached definitions.

    Owns the shared mutable state of a daemon (both cache tiers); every
    connection handler goes through the same instance.

    Parameters
    ----------
    cache : TwoTierCache — memory tier in front of the persisted store.
    chain : ProviderChain — ordered providers.
    last_path : Path | None — file holding the most recent full text.
    body_max_chars : int — notification body clamp.
    force_online : bool — skip cache reads and always query providers.
    """

    def __init__(
        self,
        cache: TwoTierCache,
        chain: ProviderChain,
        last_path: str | Path | None = None,
        body_max_chars: int = 1400,
        force_online: bool = False,
    ) -> None:
        self.cache = cache
        self.chain = chain
        self.last_path = Path(last_path) if last_path else None
        self.body_max_chars = body_max_chars
        self.force_online = force_online

    @classmethod
    def from_config(
        cls,
        config: DefineConfig,
        session: requests.Session | None = None,
        chain: ProviderChain | None = None,
        mem_cache_max: int | None = None,
        mem_ttl_seconds: float | None = None,
    ) -> Resolver:
        """Wire memory tier, persisted store and provider chain from *config*."""
        memory = DefinitionCache(
            max_size=mem_cache_max or config.mem_cache_max,
            ttl_seconds=mem_ttl_seconds or config.cache_ttl_seconds,
        )
        store = PersistentStore(
            config.cache_file,
            ttl_seconds=config.cache_ttl_seconds,
            offline_refresh_seconds=config.offline_refresh_seconds,
            flush_interval=config.flush_interval_seconds,
        )
        return cls(
            cache=TwoTierCache(memory, store),
            chain=chain or build_chain(config, session=session),
            last_path=config.last_file,
            body_max_chars=config.body_max_chars,
            force_online=config.force_online,
        )

    @property
    def store(self) -> PersistentStore:
        return self.cache.store

    def resolve(self, word: str) -> CacheEntry:
        """Return the definition entry for *word*.

        Never raises for lookup failure: exhausting every provider yields
        a cached ``none`` entry. Raises ``ValidationError`` for input that
        is not a single word.
        """
        if not is_valid_word(word):
            raise ValidationError(f"not a lookup word: {word[:80]!r}")
        key = word.lower()
        metrics.inc("lookups_total")

        with metrics.timer("resolve_duration_seconds"):
            if not self.force_online:
                cached = self.cache.get(key)
                if cached is not None:
                    logger.debug("cache hit", extra={"word": key})
                    self._write_last(cached.full)
                    return cached

            outcome = self.chain.lookup(word)
            full = outcome.text.strip()
            entry = CacheEntry(
                key=key,
                title=make_title(word, outcome.used_lemma, outcome.source),
                body=clamp_body(full, self.body_max_chars),
                full=full,
                timestamp=utcnow(),
                source=outcome.source,
            )
            self.cache.put(entry)
            self._write_last(full)

        logger.info(
            "resolved via %s (lemma %s)",
            outcome.source.value,
            outcome.used_lemma,
            extra={"word": key},
        )
        return entry

    def _write_last(self, full: str) -> None:
        if self.last_path is None:
            return
        try:
            write_private_file(self.last_path, full)
        except OSError as e:
            logger.warning("Could not write %s: %s", self.last_path, e)
