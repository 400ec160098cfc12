"""
Stockledger Protocols.

Defines interfaces for external system integration.
"""

from stockledger.protocols.actor import Actor, ActorResolver
from stockledger.protocols.events import EventKind, EventPublisher, StockEvent

__all__ = [
    "Actor",
    "ActorResolver",
    "EventKind",
    "EventPublisher",
    "StockEvent",
]
