"""
In-memory Publisher — keeps published events in a list.

Useful in tests and in single-process development servers that poll for
recent events.
"""

from __future__ import annotations

import threading

from stockledger.protocols.events import StockEvent


class InMemoryPublisher:
    """Thread-safe recorder of published events."""

    def __init__(self):
        self._lock = threading.Lock()
        self._events: list[StockEvent] = []

    def publish(self, event: StockEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> list[StockEvent]:
        with self._lock:
            return list(self._events)

    def kinds(self) -> list[str]:
        return [event.kind for event in self.events]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
