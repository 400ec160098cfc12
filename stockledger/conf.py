"""
Stockledger configuration.

Usage in settings.py:
    STOCKLEDGER = {
        "EVENT_PUBLISHER": "myproject.realtime.ChannelsPublisher",
        "ACTOR_RESOLVER": "stockledger.adapters.auth.UserActorResolver",
        "CONNECT_RETRIES": 3,
        "MAX_BATCH_SIZE": 100,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class LedgerSettings:
    """Stockledger configuration settings."""

    # Event publisher backend (dotted path)
    EVENT_PUBLISHER: str = "stockledger.adapters.noop.NoopPublisher"

    # Maps an authenticated user to an Actor (dotted path)
    ACTOR_RESOLVER: str = "stockledger.adapters.auth.UserActorResolver"

    # Connection acquisition retry (never applied inside a transaction)
    CONNECT_RETRIES: int = 3
    CONNECT_BACKOFF_SECONDS: float = 0.5
    CONNECT_BACKOFF_MAX_SECONDS: float = 8.0

    # Input limits
    MAX_BATCH_SIZE: int = 100
    REASON_MAX_LENGTH: int = 500
    REFERENCE_MAX_LENGTH: int = 100

    # Ledger listing pagination
    ENTRIES_DEFAULT_LIMIT: int = 100
    ENTRIES_MAX_LIMIT: int = 500


def get_ledger_settings() -> LedgerSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "STOCKLEDGER", {})
    return LedgerSettings(**{
        k: v for k, v in user_settings.items()
        if k in LedgerSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_ledger_settings(), name)


ledger_settings = _LazySettings()
