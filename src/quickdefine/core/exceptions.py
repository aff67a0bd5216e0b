# ─────────────────────────────────────────────────────────────────────
# QuickDefine — Exception Hierarchy
# (C) 1998-2026 Miroslav Sotek. All rights reserved.
# License: GNU AGPL v3 | Commercial licensing available
# ─────────────────────────────────────────────────────────────────────
"""
Structured exception hierarchy for QuickDefine.

All library-specific exceptions descend from ``DefineError`` so
callers can catch the entire family with a single except clause.
Lookup exhaustion is not an error: it resolves to a ``none`` entry.
"""


class DefineError(Exception):
    """Base exception for all QuickDefine errors."""


class ValidationError(DefineError, ValueError):
    """Raised for invalid inputs (empty, oversized or malformed words)."""


class ProviderError(DefineError):
    """Raised by a provider that could not produce a definition.

    The provider chain catches this and moves on to the next candidate.
    """

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider}: {reason}")


class PersistenceError(DefineError):
    """Raised when the persisted cache snapshot cannot be written."""


class ServerBindError(DefineError):
    """Raised when the daemon cannot bind its local socket."""
