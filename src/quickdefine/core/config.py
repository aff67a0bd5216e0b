# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Configuration Manager
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
Dataclass-based configuration with env var, YAML, and profile support.

Usage::

    config = DefineConfig.from_env()
    config = DefineConfig.from_yaml("define.yaml")
    config = DefineConfig.from_profile("offline")
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path

import yaml

APP_NAME = "define"
SOCKET_NAME = "define.sock"

PRIMARY_API = "https://api.dictionaryapi.dev/api/v2/entries/en/{word}"
SECONDARY_API = "https://en.wiktionary.org/api/rest_v1/page/definition/{word}"

DAY = 24 * 60 * 60


@dataclass
class DefineConfig:
    """Central configuration for QuickDefine.

    Parameters
    ----------
    debug : bool — verbose logging to stderr.
    no_offline : bool — skip the local dictd provider.
    no_online : bool — skip both remote dictionary services.
    force_online : bool — bypass cache reads; always run the provider chain.
    mem_cache_max : int — in-memory LRU capacity.
    cache_ttl_seconds : float — entry lifetime for both tiers.
    offline_refresh_seconds : float — shorter lifetime for offline entries
        in the persisted tier.
    dedupe_window_seconds : float — duplicate-trigger suppression window.
    body_max_chars : int — notification body clamp.
    api_timeout_seconds : float — per-request deadline for remote providers.
    offline_timeout_seconds : float — per-invocation deadline for ``dict``.
    dict_database : str — dictd database queried first.
    primary_url / secondary_url : str — URL templates with ``{word}``.
    flush_interval_seconds : float — persisted-tier flush tick.
    read_timeout_seconds : float — per-connection read deadline.
    max_request_bytes : int — largest accepted socket payload.
    client_connect_timeout_seconds : float — client dial deadline.
    socket_path : str — override for the daemon socket ("" = XDG default).
    cache_dir : str — override for the cache directory ("" = XDG default).
    log_level : str — logging level.
    log_json : bool — structured JSON logging.
    """

    # Behaviour
    debug: bool = False
    no_offline: bool = False
    no_online: bool = False
    force_online: bool = False

    # Cache
    mem_cache_max: int = 2500
    cache_ttl_seconds: float = 30 * DAY
    offline_refresh_seconds: float = 12 * 60 * 60
    dedupe_window_seconds: float = 0.25
    body_max_chars: int = 1400

    # Providers
    api_timeout_seconds: float = 0.9
    offline_timeout_seconds: float = 0.9
    dict_database: str = "gcide"
    primary_url: str = PRIMARY_API
    secondary_url: str = SECONDARY_API

    # Daemon
    flush_interval_seconds: float = 2.0
    read_timeout_seconds: float = 0.9
    max_request_bytes: int = 4096
    client_connect_timeout_seconds: float = 0.08

    # Paths
    socket_path: str = ""
    cache_dir: str = ""

    # Observability
    log_level: str = "WARNING"
    log_json: bool = False

    # Profile name (informational)
    profile: str = "default"

    def __post_init__(self) -> None:
        if self.mem_cache_max < 1:
            raise ValueError(f"mem_cache_max must be >= 1, got {self.mem_cache_max}")
        if self.cache_ttl_seconds <= 0:
            raise ValueError(
                f"cache_ttl_seconds must be > 0, got {self.cache_ttl_seconds}"
            )
        if self.offline_refresh_seconds <= 0:
            raise ValueError(
                "offline_refresh_seconds must be > 0, "
                f"got {self.offline_refresh_seconds}"
            )
        if self.dedupe_window_seconds < 0:
            raise ValueError(
                f"dedupe_window_seconds must be >= 0, got {self.dedupe_window_seconds}"
            )
        if self.body_max_chars < 160:
            raise ValueError(
                f"body_max_chars must be >= 160, got {self.body_max_chars}"
            )
        if not (0.0 < self.api_timeout_seconds < 1.0):
            raise ValueError(
                f"api_timeout_seconds must be in (0, 1), got {self.api_timeout_seconds}"
            )
        if not (0.0 < self.offline_timeout_seconds < 1.0):
            raise ValueError(
                "offline_timeout_seconds must be in (0, 1), "
                f"got {self.offline_timeout_seconds}"
            )
        if self.flush_interval_seconds <= 0:
            raise ValueError(
                f"flush_interval_seconds must be > 0, got {self.flush_interval_seconds}"
            )
        if not (0.0 < self.read_timeout_seconds < 1.0):
            raise ValueError(
                f"read_timeout_seconds must be in (0, 1), got {self.read_timeout_seconds}"
            )
        if self.max_request_bytes < 1:
            raise ValueError(
                f"max_request_bytes must be >= 1, got {self.max_request_bytes}"
            )
        if self.no_offline and self.no_online:
            raise ValueError("no_offline and no_online cannot both be set")

    # ── Derived paths ─────────────────────────────────────────────────

    @property
    def resolved_socket_path(self) -> Path:
        if self.socket_path:
            return Path(self.socket_path)
        runtime = os.environ.get("XDG_RUNTIME_DIR") or "/tmp"
        return Path(runtime) / SOCKET_NAME

    @property
    def resolved_cache_dir(self) -> Path:
        if self.cache_dir:
            return Path(self.cache_dir)
        base = os.environ.get("XDG_CACHE_HOME") or os.path.expanduser("~/.cache")
        return Path(base) / APP_NAME

    @property
    def cache_file(self) -> Path:
        return self.resolved_cache_dir / "cache.json"

    @property
    def last_file(self) -> Path:
        return self.resolved_cache_dir / "last.txt"

    @property
    def metrics_file(self) -> Path:
        return self.resolved_cache_dir / "metrics.prom"

    # ── Loaders ───────────────────────────────────────────────────────

    @classmethod
    def from_env(cls, prefix: str = "DEFINE_") -> DefineConfig:
        """Load configuration from environment variables.

        Reads ``DEFINE_<FIELD>`` env vars (case-insensitive field matching).
        Example: ``DEFINE_NO_OFFLINE=1``
        """
        kwargs: dict = {}
        field_map = {f.name.upper(): f for f in cls.__dataclass_fields__.values()}

        for key, value in os.environ.items():
            if not key.startswith(prefix):
                continue
            field_name = key[len(prefix) :]
            if field_name in field_map:
                fld = field_map[field_name]
                try:
                    kwargs[fld.name] = _coerce(value, fld.type)  # type: ignore[arg-type]
                except (ValueError, TypeError) as exc:
                    raise ValueError(
                        f"Invalid value for env var {key}={value!r}: {exc}"
                    ) from exc

        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, path: str) -> DefineConfig:
        """Load configuration from a YAML (or JSON) file."""
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            return cls()
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    @classmethod
    def from_profile(cls, name: str) -> DefineConfig:
        """Load a predefined profile.

        Profiles
        --------
        - ``"default"`` — remote providers first, dictd as fallback.
        - ``"offline"`` — dictd only, never touches the network.
        - ``"online"`` — remote providers only.
        - ``"fresh"`` — ignore cached entries and re-resolve every word.
        """
        profiles: dict[str, dict] = {
            "default": {"profile": "default"},
            "offline": {"no_online": True, "profile": "offline"},
            "online": {"no_offline": True, "profile": "online"},
            "fresh": {"force_online": True, "profile": "fresh"},
        }
        if name not in profiles:
            raise ValueError(
                f"Unknown profile '{name}'. Choose from: {list(profiles.keys())}"
            )
        return cls(**profiles[name])

    def configure_logging(self) -> None:
        """Apply log_level and log_json settings to the QuickDefine logger hierarchy."""
        root = logging.getLogger("QuickDefine")
        level = "DEBUG" if self.debug else self.log_level
        root.setLevel(getattr(logging, level.upper(), logging.WARNING))

        if self.log_json:
            handler = logging.StreamHandler()
            handler.setFormatter(_JsonFormatter())
            root.handlers = [handler]
        elif not root.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            )
            root.handlers = [handler]

    def to_dict(self) -> dict:
        """Serialize to a plain dict (safe for JSON output)."""
        return {fld: getattr(self, fld) for fld in self.__dataclass_fields__}


class _JsonFormatter(logging.Formatter):
    """Structured JSON log formatter for production use."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        word = getattr(record, "word", None)
        if word:
            entry["word"] = word
        return json.dumps(entry, ensure_ascii=False)


def _coerce(value: str, type_hint: str) -> object:
    """Coerce a string env var to the target type."""
    if type_hint == "bool":
        low = value.lower()
        if low in ("true", "1", "yes"):
            return True
        if low in ("false", "0", "no"):
            return False
        raise ValueError(
            f"invalid bool value: {value!r} (expected true/false/1/0/yes/no)"
        )
    if type_hint == "int":
        return int(value)
    if type_hint == "float":
        return float(value)
    return value
