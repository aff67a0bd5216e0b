# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Remote Dictionary Providers
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
HTTP adapters for the Free Dictionary API (primary) and the Wiktionary
REST definition endpoint (secondary).

Both share one ``requests.Session`` so connections are pooled across
lookups, and every call carries a sub-second timeout.
"""

from __future__ import annotations

import logging
import re
from abc import abstractmethod
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter

from .. import __version__
from ..core.config import PRIMARY_API, SECONDARY_API
from ..core.exceptions import ProviderError
from ..core.types import SourceKind
from .base import DefinitionProvider

logger = logging.getLogger("QuickDefine.Providers")

USER_AGENT = f"quickdefine/{__version__} (python-requests)"
PRIMARY_MAX_SENSES = 3
SECONDARY_MAX_DEFINITIONS = 7

_HTML_TAG_RE = re.compile(r"<[^>]+>")


def make_session(pool_size: int = 32) -> requests.Session:
    """Session with JSON/User-Agent headers and a pooled adapter."""
    session = requests.Session()
    session.headers.update({"Accept": "application/json", "User-Agent": USER_AGENT})
    adapter = HTTPAdapter(pool_connections=4, pool_maxsize=pool_size)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class _JsonHttpProvider(DefinitionProvider):
    """GET ``url_template.format(word=...)`` and hand the JSON to ``extract``."""

    def __init__(
        self,
        url_template: str,
        session: requests.Session | None = None,
        timeout: float = 0.9,
    ) -> None:
        self.url_template = url_template
        self.session = session or make_session()
        self.timeout = timeout

    @abstractmethod
    def extract(self, payload: object) -> str:
        """Pull the definition text out of a decoded JSON payload."""

    def fetch(self, word: str) -> str:
        url = self.url_template.format(word=quote(word, safe=""))
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise ProviderError(self.name, "timeout") from e
        except requests.exceptions.RequestException as e:
            raise ProviderError(self.name, f"transport error: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise ProviderError(self.name, f"HTTP {resp.status_code}")
        try:
            payload = resp.json()
        except ValueError as e:
            raise ProviderError(self.name, "unparseable payload") from e
        try:
            return self.extract(payload)
        except (AttributeError, KeyError, TypeError) as e:
            raise ProviderError(self.name, "unexpected payload shape") from e


class DictionaryApiProvider(_JsonHttpProvider):
    """dictionaryapi.dev: first definition of up to three parts of speech."""

    def __init__(
        self,
        url_template: str = PRIMARY_API,
        session: requests.Session | None = None,
        timeout: float = 0.9,
    ) -> None:
        super().__init__(url_template, session, timeout)

    @property
    def name(self) -> str:
        return "dictionaryapi"

    @property
    def source(self) -> SourceKind:
        return SourceKind.ONLINE

    def extract(self, payload: object) -> str:
        if not isinstance(payload, list) or not payload:
            raise ProviderError(self.name, "no entries")
        meanings = payload[0].get("meanings") if isinstance(payload[0], dict) else None
        if not meanings:
            raise ProviderError(self.name, "no meanings")

        blocks: list[str] = []
        for meaning in meanings:
            defs = meaning.get("definitions") or []
            if not defs:
                continue
            first = defs[0]
            lines = []
            if meaning.get("partOfSpeech"):
                lines.append(meaning["partOfSpeech"])
            if first.get("definition"):
                lines.append(first["definition"])
            if first.get("example"):
                lines.append(f"Example: {first['example']}")
            blocks.append("\n".join(lines))
            if len(blocks) >= PRIMARY_MAX_SENSES:
                break
        return "\n\n".join(blocks)


class WiktionaryProvider(_JsonHttpProvider):
    """Wiktionary REST: up to seven English definitions as bullets."""

    def __init__(
        self,
        url_template: str = SECONDARY_API,
        session: requests.Session | None = None,
        timeout: float = 0.9,
    ) -> None:
        super().__init__(url_template, session, timeout)

    @property
    def name(self) -> str:
        return "wiktionary"

    @property
    def source(self) -> SourceKind:
        return SourceKind.SECONDARY_ONLINE

    def extract(self, payload: object) -> str:
        buckets = payload.get("en") if isinstance(payload, dict) else None
        if not buckets:
            raise ProviderError(self.name, "no English definitions")

        bullets: list[str] = []
        for bucket in buckets:
            for item in bucket.get("definitions") or []:
                text = item.get("definition", "") if isinstance(item, dict) else item
                if not isinstance(text, str):
                    continue
                text = _HTML_TAG_RE.sub("", text).replace("[", "").replace("]", "")
                text = text.strip()
                if not text:
                    continue
                bullets.append(f"• {text}")
                if len(bullets) >= SECONDARY_MAX_DEFINITIONS:
                    return "\n".join(bullets)
        return "\n".join(bullets)
