"""
Event publishing helpers.

Events are handed to the publisher only after the surrounding transaction
commits. A rolled-back change (or savepoint) publishes nothing.
"""

import logging

from django.db import transaction

from stockledger.adapters import get_event_publisher
from stockledger.protocols.events import EventPublisher, StockEvent

logger = logging.getLogger('stockledger')


def publish_on_commit(event: StockEvent, publisher: EventPublisher | None = None) -> None:
    """Schedule event delivery for after the current transaction commits."""
    target = publisher or get_event_publisher()

    def _deliver():
        try:
            target.publish(event)
        except Exception:
            # Change is already committed.
            logger.exception(
                "ledger.event.publish_failed",
                extra={"kind": event.kind, "product_id": event.product_id},
            )

    transaction.on_commit(_deliver)
