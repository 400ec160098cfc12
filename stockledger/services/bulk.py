"""
Bulk coordinator — apply a list of changes with per-item isolation.

Commit policy: if at least one item succeeds, the successful subset is
committed and failed items are reported. If every item fails, nothing is
committed. This is NOT all-or-nothing across the batch.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from django.db import DatabaseError, IntegrityError, transaction

from stockledger.conf import ledger_settings
from stockledger.exceptions import ConflictError, InfrastructureError, LedgerError, ValidationError
from stockledger.models.entry import LedgerEntry
from stockledger.protocols.actor import Actor
from stockledger.protocols.events import EventPublisher
from stockledger.retry import ensure_connection
from stockledger.services.alerts import AlertEngine
from stockledger.services.ledger import StockChange, StockLedger

logger = logging.getLogger('stockledger')


@dataclass(frozen=True)
class RejectedItem:
    """A batch item that had no effect, with its own classification."""

    index: int
    error: LedgerError
    product_id: Any = None

    def as_dict(self) -> dict[str, Any]:
        return {
            'index': self.index,
            'product_id': self.product_id,
            'status': str(self.error.status),
            **self.error.as_dict(),
        }


@dataclass
class BatchResult:
    applied: list[LedgerEntry] = field(default_factory=list)
    rejected: list[RejectedItem] = field(default_factory=list)
    applied_indexes: list[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """At least one item was committed."""
        return bool(self.applied)

    @property
    def partial(self) -> bool:
        return bool(self.applied) and bool(self.rejected)


class BulkCoordinator:
    """Sequential per-item application inside one outer transaction."""

    @classmethod
    def apply_batch(cls, updates, actor: Actor,
                    publisher: EventPublisher | None = None) -> BatchResult:
        """
        Apply every update independently.

        Each item runs StockLedger.apply_delta in its own savepoint, so a
        failed item leaves no trace. Alerts are evaluated once per touched
        product after all items.

        Raises:
            ValidationError('EMPTY_BATCH' | 'BATCH_TOO_LARGE'): Batch shape
            ConflictError / InfrastructureError: Outer transaction failed

        Concurrency:
            - Items are applied in order; row locks are held until commit
            - May wait on products locked by concurrent single updates
        """
        updates = list(updates or [])
        if not updates:
            raise ValidationError('EMPTY_BATCH')
        if len(updates) > ledger_settings.MAX_BATCH_SIZE:
            raise ValidationError(
                'BATCH_TOO_LARGE',
                size=len(updates),
                max_size=ledger_settings.MAX_BATCH_SIZE,
            )

        result = BatchResult()

        ensure_connection()
        try:
            with transaction.atomic():
                for index, item in enumerate(updates):
                    product_id = item.get('product_id') if isinstance(item, dict) else getattr(item, 'product_id', None)
                    try:
                        change = StockChange.coerce(item)
                        entry = StockLedger.apply_delta(
                            change.product_id,
                            change.change_kind,
                            change.quantity,
                            actor,
                            change.reason,
                            change.reference,
                            publisher=publisher,
                            evaluate_alerts=False,
                        )
                    except LedgerError as exc:
                        result.rejected.append(RejectedItem(index, exc, product_id))
                        continue
                    result.applied.append(entry)
                    result.applied_indexes.append(index)

                if not result.applied:
                    transaction.set_rollback(True)
                else:
                    for touched_id in dict.fromkeys(e.product_id for e in result.applied):
                        AlertEngine.evaluate(touched_id, publisher=publisher)
        except IntegrityError as exc:
            raise ConflictError('CONCURRENT_MODIFICATION', error=str(exc)) from exc
        except DatabaseError as exc:
            raise InfrastructureError('TRANSACTION_FAILED', error=str(exc)) from exc

        logger.info(
            "ledger.batch",
            extra={
                "actor_id": actor.id,
                "applied": len(result.applied),
                "rejected": len(result.rejected),
                "committed": result.ok,
            },
        )
        return result
