# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Core Package (Resolution Engine)
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
Resolution engine: lemma candidates, provider fallback, two-tier cache
and duplicate-trigger suppression.

Quick start::

    from quickdefine.core import DefineConfig, Resolver

    resolver = Resolver.from_config(DefineConfig())
    entry = resolver.resolve("legends")
    print(entry.title, entry.body)
"""

from .cache import DefinitionCache, TwoTierCache
from .chain import NO_DEFINITION, ProviderChain, build_chain
from .config import DefineConfig
from .dedupe import DedupeGuard
from .exceptions import (
    DefineError,
    PersistenceError,
    ProviderError,
    ServerBindError,
    ValidationError,
)
from .metrics import MetricsCollector, metrics
from .resolver import Resolver, clamp_body, make_title
from .store import PersistentStore
from .types import CacheEntry, LookupOutcome, SourceKind
from .words import capitalize, is_valid_word, lemma_candidates, pick_word

__all__ = [
    "CacheEntry",
    "LookupOutcome",
    "SourceKind",
    "DefineConfig",
    "DefinitionCache",
    "PersistentStore",
    "TwoTierCache",
    "ProviderChain",
    "build_chain",
    "NO_DEFINITION",
    "DedupeGuard",
    "Resolver",
    "clamp_body",
    "make_title",
    "MetricsCollector",
    "metrics",
    "DefineError",
    "ValidationError",
    "ProviderError",
    "PersistenceError",
    "ServerBindError",
    "pick_word",
    "is_valid_word",
    "lemma_candidates",
    "capitalize",
]
