# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Shared Test Fixtures
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────

import shutil
import tempfile
from pathlib import Path

import pytest

from quickdefine.core import (
    DefineConfig,
    DefinitionCache,
    PersistentStore,
    ProviderChain,
    ProviderError,
    Resolver,
    SourceKind,
    TwoTierCache,
    metrics,
)
from quickdefine.providers import DefinitionProvider


class StubProvider(DefinitionProvider):
    """Provider answering from a fixed word -> text map and recording calls."""

    def __init__(self, name="stub", source=SourceKind.ONLINE, answers=None):
        self._name = name
        self._source = source
        self.answers = dict(answers or {})
        self.calls: list[str] = []

    @property
    def name(self):
        return self._name

    @property
    def source(self):
        return self._source

    def fetch(self, word):
        self.calls.append(word)
        if word not in self.answers:
            raise ProviderError(self._name, "not found")
        return self.answers[word]


class RecordingNotifier:
    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []

    def notify(self, title, body, full):
        self.sent.append((title, body, full))


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def short_dir():
    """Short temp dir; Unix socket paths are limited to ~100 bytes."""
    d = Path(tempfile.mkdtemp(prefix="qd-"))
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def config(tmp_path, short_dir):
    """Config rooted in temp dirs, no real providers touched."""
    return DefineConfig(
        cache_dir=str(tmp_path / "cache"),
        socket_path=str(short_dir / "define.sock"),
    )


@pytest.fixture
def store(tmp_path):
    return PersistentStore(tmp_path / "cache" / "cache.json", flush_interval=0.05)


@pytest.fixture
def primary():
    return StubProvider(
        name="primary",
        source=SourceKind.ONLINE,
        answers={"legend": "noun\nA traditional story."},
    )


@pytest.fixture
def make_resolver(tmp_path):
    """Factory: Resolver over stub providers with temp-dir persistence."""

    def _make(*providers, mem_size=16, force_online=False):
        store = PersistentStore(tmp_path / "cache" / "cache.json")
        cache = TwoTierCache(DefinitionCache(max_size=mem_size), store)
        return Resolver(
            cache=cache,
            chain=ProviderChain(list(providers)),
            last_path=tmp_path / "cache" / "last.txt",
            force_online=force_online,
        )

    return _make


@pytest.fixture
def fake_tool(tmp_path):
    """Factory: executable shell script that prints *output* via printf."""

    def _make(name, output):
        script = tmp_path / "bin" / name
        script.parent.mkdir(exist_ok=True)
        script.write_text(f"#!/bin/sh\nprintf '{output}'\n", encoding="utf-8")
        script.chmod(0o755)
        return str(script)

    return _make
