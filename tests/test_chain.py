# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Provider Fallback Chain Tests
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────

from unittest.mock import MagicMock, patch

from quickdefine.core import metrics
from quickdefine.core.chain import NO_DEFINITION, ProviderChain, build_chain
from quickdefine.core.config import DefineConfig
from quickdefine.core.types import SourceKind
from quickdefine.providers import DictdProvider, DictionaryApiProvider, WiktionaryProvider

from conftest import StubProvider


class TestProviderChain:
    def test_surface_form_preferred(self):
        p = StubProvider(answers={"legends": "plural", "legend": "singular"})
        outcome = ProviderChain([p]).lookup("legends")
        assert outcome.text == "plural"
        assert outcome.used_lemma == "legends"
        assert p.calls == ["legends"]

    def test_lemma_fallback_within_provider(self):
        p = StubProvider(answers={"legend": "A traditional story."})
        outcome = ProviderChain([p]).lookup("Legends")
        assert outcome.used_lemma == "legend"
        assert p.calls == ["legends", "legend"]
        assert outcome.found

    def test_provider_major_order(self):
        first = StubProvider("first", SourceKind.ONLINE, {"legend": "remote"})
        second = StubProvider("second", SourceKind.OFFLINE, {"legends": "local"})
        outcome = ProviderChain([first, second]).lookup("legends")
        assert outcome.text == "remote"
        assert outcome.source is SourceKind.ONLINE
        assert second.calls == []

    def test_falls_through_to_next_provider(self):
        first = StubProvider("first", SourceKind.ONLINE)
        second = StubProvider("second", SourceKind.SECONDARY_ONLINE, {"legend": "w"})
        outcome = ProviderChain([first, second]).lookup("legends")
        assert outcome.source is SourceKind.SECONDARY_ONLINE
        assert first.calls == ["legends", "legend"]
        failures = metrics.get_metrics()["counters"]["provider_failures_total"]
        assert failures["labels"] == {"first": 2.0, "second": 1.0}

    def test_exhaustion_yields_placeholder(self):
        p = StubProvider()
        outcome = ProviderChain([p]).lookup("Zzqx")
        assert outcome.text == NO_DEFINITION
        assert outcome.used_lemma == "zzqx"
        assert outcome.source is SourceKind.NONE
        assert not outcome.found
        counters = metrics.get_metrics()["counters"]
        assert counters["definitions_not_found_total"]["total"] == 1.0

    def test_unexpected_error_falls_through(self):
        broken = StubProvider("broken", SourceKind.ONLINE)
        bad_bytes = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        broken.fetch = MagicMock(side_effect=bad_bytes)
        second = StubProvider("second", SourceKind.OFFLINE, {"legend": "local"})
        outcome = ProviderChain([broken, second]).lookup("legend")
        assert outcome.text == "local"
        assert outcome.source is SourceKind.OFFLINE
        failures = metrics.get_metrics()["counters"]["provider_failures_total"]
        assert failures["labels"] == {"broken": 1.0}

    def test_empty_chain(self):
        assert ProviderChain([]).lookup("legend").source is SourceKind.NONE

    def test_custom_lemmatizer(self):
        p = StubProvider(answers={"run": "to move fast"})
        chain = ProviderChain([p], lemmatizer=lambda w: [w.lower(), "run"])
        assert chain.lookup("ran").used_lemma == "run"

    def test_records_provider_latency(self):
        p = StubProvider(answers={"legend": "story"})
        ProviderChain([p]).lookup("legend")
        hist = metrics.get_metrics()["histograms"]["provider_duration_seconds"]
        assert hist["count"] == 1


@patch("quickdefine.providers.offline.shutil.which", return_value="/usr/bin/dict")
class TestBuildChain:
    def test_default_order(self, _which):
        chain = build_chain(DefineConfig(), session=MagicMock())
        kinds = [type(p) for p in chain.providers]
        assert kinds == [DictionaryApiProvider, WiktionaryProvider, DictdProvider]

    def test_shared_session_and_timeouts(self, _which):
        session = MagicMock()
        cfg = DefineConfig(api_timeout_seconds=0.5, offline_timeout_seconds=0.3)
        primary, secondary, dictd = build_chain(cfg, session=session).providers
        assert primary.session is session
        assert secondary.session is session
        assert primary.timeout == 0.5
        assert dictd.timeout == 0.3

    def test_no_offline(self, _which):
        chain = build_chain(DefineConfig(no_offline=True), session=MagicMock())
        assert [p.name for p in chain.providers] == ["dictionaryapi", "wiktionary"]

    def test_no_online(self, _which):
        chain = build_chain(DefineConfig(no_online=True, dict_database="wn"))
        assert [p.name for p in chain.providers] == ["dictd/wn"]

    def test_dictd_missing(self, _which):
        _which.return_value = None
        chain = build_chain(DefineConfig(), session=MagicMock())
        assert len(chain.providers) == 2
