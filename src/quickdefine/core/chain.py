# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Provider Fallback Chain
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
Ordered provider fallback with lemma normalization.

Every lemma candidate is tried against a provider before the chain
falls through to the next one, so a remote hit on a base form beats an
offline hit on the surface form.

Usage::

    chain = build_chain(DefineConfig())
    outcome = chain.lookup("legends")
    outcome.text, outcome.used_lemma, outcome.source
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

import requests

from ..providers import (
    DefinitionProvider,
    DictdProvider,
    DictionaryApiProvider,
    WiktionaryProvider,
    make_session,
)
from .config import DefineConfig
from .exceptions import ProviderError
from .metrics import metrics
from .types import LookupOutcome, SourceKind
from .words import lemma_candidates

logger = logging.getLogger("QuickDefine.Chain")

NO_DEFINITION = "No definition found."


class ProviderChain:
    """Try providers in priority order, each across all lemma candidates.

    Parameters
    ----------
    providers : sequence of DefinitionProvider, highest priority first.
    lemmatizer : callable — word -> ordered candidate list.
    """

    def __init__(
        self,
        providers: Sequence[DefinitionProvider],
        lemmatizer: Callable[[str], list[str]] = lemma_candidates,
    ) -> None:
        self.providers = list(providers)
        self._lemmatizer = lemmatizer

    def lookup(self, word: str) -> LookupOutcome:
        candidates = self._lemmatizer(word)
        for provider in self.providers:
            for cand in candidates:
                try:
                    with metrics.timer("provider_duration_seconds"):
                        text = provider.lookup(cand)
                except ProviderError as e:
                    metrics.inc("provider_failures_total", label=provider.name)
                    logger.debug("%s missed %r: %s", provider.name, cand, e.reason)
                    continue
                except Exception as e:
                    metrics.inc("provider_failures_total", label=provider.name)
                    logger.warning("%s failed on %r: %s", provider.name, cand, e)
                    continue
                logger.debug("%s resolved %r", provider.name, cand)
                return LookupOutcome(text=text, used_lemma=cand, source=provider.source)

        metrics.inc("definitions_not_found_total")
        return LookupOutcome(
            text=NO_DEFINITION, used_lemma=word.lower(), source=SourceKind.NONE
        )


def build_chain(
    config: DefineConfig, session: requests.Session | None = None
) -> ProviderChain:
    """Assemble the default chain from configuration flags."""
    providers: list[DefinitionProvider] = []
    if not config.no_online:
        session = session or make_session()
        providers.append(
            DictionaryApiProvider(
                config.primary_url, session=session, timeout=config.api_timeout_seconds
            )
        )
        providers.append(
            WiktionaryProvider(
                config.secondary_url,
                session=session,
                timeout=config.api_timeout_seconds,
            )
        )
    if not config.no_offline:
        dictd = DictdProvider(
            database=config.dict_database, timeout=config.offline_timeout_seconds
        )
        if dictd.available():
            providers.append(dictd)
        else:
            logger.info("dict binary not found; offline lookups disabled")
    return ProviderChain(providers)
