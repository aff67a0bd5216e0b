# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Package Initialisation
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
QuickDefine: instant word definitions from the current selection.

Consumer API::

    from quickdefine import DefineConfig, Resolver

    resolver = Resolver.from_config(DefineConfig.from_env())
    entry = resolver.resolve("serendipity")

Daemon::

    quickdefine daemon          # long-lived, keeps caches warm
    quickdefine lookup          # defines the primary selection
"""

__version__ = "1.0.0"

from .core import (
    CacheEntry,
    DedupeGuard,
    DefineConfig,
    DefineError,
    DefinitionCache,
    LookupOutcome,
    PersistentStore,
    ProviderChain,
    Resolver,
    SourceKind,
    TwoTierCache,
    ValidationError,
    lemma_candidates,
    pick_word,
)

__all__ = [
    "CacheEntry",
    "DedupeGuard",
    "DefineConfig",
    "DefineError",
    "DefinitionCache",
    "LookupOutcome",
    "PersistentStore",
    "ProviderChain",
    "Resolver",
    "SourceKind",
    "TwoTierCache",
    "ValidationError",
    "lemma_candidates",
    "pick_word",
]
