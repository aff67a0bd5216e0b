#!/usr/bin/env python3
"""
QuickDefine quickstart: resolve a few words in-process.

    pip install -e .
    python examples/quickstart.py

Definitions come from dictionaryapi.dev, then Wiktionary, then a local
``dict`` client if one is installed. A second run is served from the
persisted cache under ``$XDG_CACHE_HOME/define``.
"""

from quickdefine.core import DefineConfig, Resolver
from quickdefine.notify import ConsoleNotifier

# 1. Load configuration (DEFINE_* env vars override defaults)
config = DefineConfig.from_env()

# 2. Build the resolver: memory tier, persisted store, provider chain
resolver = Resolver.from_config(config)

# 3. Look words up and show them the way the daemon would
notifier = ConsoleNotifier()
for word in ("legends", "puppies", "serendipity", "zzqx"):
    entry = resolver.resolve(word)
    notifier.notify(entry.title, entry.body, entry.full)
    print(f"  source={entry.source.value}  cached_at={entry.timestamp:%H:%M:%S}")
    print()

# 4. Persist for the next run
resolver.store.flush()
