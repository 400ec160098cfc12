"""
Noop Publisher — default adapter when no delivery channel is configured.

Usage in settings.py:
    STOCKLEDGER = {
        "EVENT_PUBLISHER": "stockledger.adapters.noop.NoopPublisher",
    }
"""

from __future__ import annotations

import logging

from stockledger.protocols.events import StockEvent

logger = logging.getLogger('stockledger')


class NoopPublisher:
    """
    Publisher that drops every event.

    Events are logged at DEBUG level so they remain visible while
    developing without a realtime channel.
    """

    def publish(self, event: StockEvent) -> None:
        logger.debug(
            "ledger.event.dropped",
            extra={"kind": event.kind, "product_id": event.product_id},
        )
