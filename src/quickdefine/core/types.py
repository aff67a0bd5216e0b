# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Shared Types (Resolution Engine)
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class SourceKind(str, Enum):
    """Which provider produced a definition. Governs cache freshness."""

    ONLINE = "online"
    SECONDARY_ONLINE = "wiktionary"
    OFFLINE = "offline"
    NONE = "none"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CacheEntry:
    """One resolved definition, as held by both cache tiers."""

    key: str  # lowercased word
    title: str
    body: str  # clamped for display
    full: str  # never truncated
    timestamp: datetime  # resolution time (UTC)
    source: SourceKind

    def age_seconds(self, now: datetime | None = None) -> float:
        now = now or utcnow()
        return (now - self.timestamp).total_seconds()

    def to_dict(self) -> dict:
        """Serialize to the persisted-cache JSON shape (key excluded)."""
        return {
            "title": self.title,
            "body": self.body,
            "full": self.full,
            "ts": self.timestamp.isoformat(),
            "source": self.source.value,
        }

    @classmethod
    def from_dict(cls, key: str, raw: dict) -> CacheEntry:
        """Rebuild an entry from its persisted form.

        Raises ``KeyError``, ``TypeError`` or ``ValueError`` on malformed data.
        """
        ts = datetime.fromisoformat(raw["ts"])
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return cls(
            key=key,
            title=str(raw["title"]),
            body=str(raw["body"]),
            full=str(raw["full"]),
            timestamp=ts,
            source=SourceKind(raw.get("source", SourceKind.NONE.value)),
        )


@dataclass(frozen=True)
class LookupOutcome:
    """Result of running the provider chain for one surface word."""

    text: str
    used_lemma: str
    source: SourceKind

    @property
    def found(self) -> bool:
        return self.source is not SourceKind.NONE
