"""
Adapter loading — resolve configured backends from settings.

Usage:
    from stockledger.adapters import get_event_publisher

    publisher = get_event_publisher()
    publisher.publish(event)

Settings:
    STOCKLEDGER = {
        "EVENT_PUBLISHER": "myproject.realtime.ChannelsPublisher",
        "ACTOR_RESOLVER": "stockledger.adapters.auth.UserActorResolver",
    }
"""

from __future__ import annotations

import logging
import threading

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from stockledger.conf import ledger_settings
from stockledger.protocols.actor import ActorResolver
from stockledger.protocols.events import EventPublisher

logger = logging.getLogger(__name__)


# Cached instances
_lock = threading.Lock()
_event_publisher: EventPublisher | None = None
_actor_resolver: ActorResolver | None = None


def _load(setting_name: str):
    path = getattr(ledger_settings, setting_name)
    if not path:
        raise ImproperlyConfigured(f"STOCKLEDGER['{setting_name}'] must be configured.")

    try:
        backend_class = import_string(path)
    except ImportError as e:
        raise ImproperlyConfigured(
            f"Failed to import {setting_name} '{path}': {e}"
        ) from e

    logger.debug("Loaded %s: %s", setting_name, path)
    return backend_class()


def get_event_publisher() -> EventPublisher:
    """
    Return the configured event publisher.

    Raises:
        ImproperlyConfigured: If EVENT_PUBLISHER is empty or import fails
    """
    global _event_publisher

    if _event_publisher is None:
        with _lock:
            if _event_publisher is None:  # double-checked
                _event_publisher = _load('EVENT_PUBLISHER')

    return _event_publisher


def get_actor_resolver() -> ActorResolver:
    """
    Return the configured actor resolver.

    Raises:
        ImproperlyConfigured: If ACTOR_RESOLVER is empty or import fails
    """
    global _actor_resolver

    if _actor_resolver is None:
        with _lock:
            if _actor_resolver is None:
                _actor_resolver = _load('ACTOR_RESOLVER')

    return _actor_resolver


def reset_adapters() -> None:
    """Reset the cached backends. Useful for testing."""
    global _event_publisher, _actor_resolver
    _event_publisher = None
    _actor_resolver = None
