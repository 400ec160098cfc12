"""
Stockledger Adapters.

Implementations of protocols for external systems.
"""

from stockledger.adapters.loading import (
    get_actor_resolver,
    get_event_publisher,
    reset_adapters,
)

__all__ = [
    "get_actor_resolver",
    "get_event_publisher",
    "reset_adapters",
]
