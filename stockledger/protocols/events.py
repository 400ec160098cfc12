"""
Event Protocol — notifications emitted after ledger changes.

Stockledger calls publish(event) after each committed mutation and after
each alert state change. Delivery (websockets, queues, email) belongs to
the calling layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class EventKind(models.TextChoices):
    """Kinds of events handed to the publisher."""
    INVENTORY_UPDATE = 'inventory_update', _('Inventory update')
    LOW_STOCK_ALERT = 'low_stock_alert', _('Low stock alert')
    ALERT_CLEARED = 'alert_cleared', _('Alert cleared')
    ALERT_ACKNOWLEDGED = 'alert_acknowledged', _('Alert acknowledged')


@dataclass(frozen=True)
class StockEvent:
    """Event delivered to the publisher."""

    kind: str
    product_id: int
    data: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=timezone.now)

    def as_dict(self) -> dict[str, Any]:
        return {
            'type': str(self.kind),
            'product_id': self.product_id,
            'data': self.data,
            'occurred_at': self.occurred_at.isoformat(),
        }


@runtime_checkable
class EventPublisher(Protocol):
    """Protocol for event delivery."""

    def publish(self, event: StockEvent) -> None:
        """
        Deliver an event to subscribed observers.

        Called after the transaction commits. Must not raise for
        delivery problems it can handle itself.
        """
        ...
