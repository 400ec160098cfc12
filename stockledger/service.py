"""
Ledger Service — The single public interface for stock ledger operations.

Usage:
    from stockledger import ledger

    result = ledger.update(product.pk, 'sale', 6, request.user, reason='POS #123')
    if result.ok:
        result.data['quantity_after']

    ledger.bulk_update([{'product_id': 1, 'change_kind': 'restock', 'quantity': 20}], actor)
    ledger.list_alerts(unacknowledged_only=True)
"""

import logging

from django.db import DatabaseError

from stockledger.adapters import get_actor_resolver
from stockledger.exceptions import InfrastructureError, LedgerError
from stockledger.models.alert import StockAlert
from stockledger.models.entry import LedgerEntry
from stockledger.models.product import Product
from stockledger.protocols.actor import Actor
from stockledger.results import Result, ResultStatus
from stockledger.services.alerts import AlertEngine
from stockledger.services.bulk import BulkCoordinator
from stockledger.services.gate import AuthorizationGate
from stockledger.services.ledger import StockLedger
from stockledger.services.queries import LedgerQueries

logger = logging.getLogger('stockledger')


class Ledger:
    """
    Single interface for all stock ledger operations.

    Mutating entry points (update, bulk_update, acknowledge) and
    inventory_summary never raise LedgerError: they return a Result whose
    status classifies the outcome. Other reads return model instances.

    `actor` may be an Actor or any user object understood by the
    configured ACTOR_RESOLVER.
    """

    # ══════════════════════════════════════════════════════════════
    # CORE: MUTATIONS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def update(cls, product_id, change_kind, quantity, actor,
               reason=None, reference=None, publisher=None) -> Result:
        """
        Apply one change to one product.

        Returns:
            Result with data {entry_id, product_id, change_kind,
            quantity_before, quantity_after, change_applied}
        """
        try:
            entry = StockLedger.apply_delta(
                product_id, change_kind, quantity, cls._as_actor(actor),
                reason, reference, publisher=publisher,
            )
        except LedgerError as exc:
            logger.info(
                "ledger.update.rejected",
                extra={"product_id": product_id, "code": exc.code},
            )
            return Result.failure(exc)

        return Result.success(cls._entry_summary(entry))

    @classmethod
    def bulk_update(cls, updates, actor, publisher=None) -> Result:
        """
        Apply many changes with per-item isolation.

        Returns:
            Result with data {applied: [...], rejected: [...]}.
            SUCCESS when every item applied, PARTIAL when some were
            rejected; when all were rejected nothing is committed and the
            status is the shared classification of the items (or
            VALIDATION_ERROR when they differ), with items in `details`.
        """
        try:
            batch = BulkCoordinator.apply_batch(updates, cls._as_actor(actor), publisher=publisher)
        except LedgerError as exc:
            return Result.failure(exc)

        rejected = [item.as_dict() for item in batch.rejected]

        if not batch.ok:
            statuses = {item.error.status for item in batch.rejected}
            status = statuses.pop() if len(statuses) == 1 else ResultStatus.VALIDATION_ERROR
            return Result(
                status=status,
                error={
                    'code': 'ALL_UPDATES_FAILED',
                    'message': 'All updates failed',
                    'data': {'rejected': len(rejected)},
                },
                details=rejected,
            )

        applied = [
            {'index': index, **cls._entry_summary(entry)}
            for index, entry in zip(batch.applied_indexes, batch.applied)
        ]
        return Result.success(
            {'applied': applied, 'rejected': rejected},
            partial=batch.partial,
        )

    @classmethod
    def acknowledge(cls, alert_id, actor=None, publisher=None) -> Result:
        """Acknowledge an alert. Result data is the alert as a dict."""
        try:
            alert = AlertEngine.acknowledge(
                alert_id,
                actor=cls._as_actor(actor) if actor is not None else None,
                publisher=publisher,
            )
        except LedgerError as exc:
            return Result.failure(exc)
        return Result.success(alert.as_dict())

    @classmethod
    def evaluate(cls, product_id, publisher=None) -> StockAlert | None:
        """Re-evaluate a product's alert. Idempotent."""
        return AlertEngine.evaluate(product_id, publisher=publisher)

    # ══════════════════════════════════════════════════════════════
    # CORE: QUERIES
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def can_modify(cls, actor, product: Product) -> bool:
        return AuthorizationGate.can_modify(cls._as_actor(actor), product)

    @classmethod
    def list_alerts(cls, unacknowledged_only: bool = False, product_id=None,
                    limit: int | None = None, offset: int = 0) -> list[StockAlert]:
        return AlertEngine.list_alerts(unacknowledged_only, product_id, limit, offset)

    @classmethod
    def list_entries(cls, **filters) -> list[LedgerEntry]:
        """See LedgerQueries.list_entries for filters."""
        return LedgerQueries.list_entries(**filters)

    @classmethod
    def get_entry(cls, entry_id) -> LedgerEntry:
        return LedgerQueries.get_entry(entry_id)

    @classmethod
    def movement_summary(cls, days: int = 30, department_id=None, actor=None) -> list[dict]:
        return LedgerQueries.movement_summary(days, department_id, cls._as_actor_or_none(actor))

    @classmethod
    def low_stock_products(cls, department_id=None, actor=None) -> list[Product]:
        return LedgerQueries.low_stock_products(department_id, cls._as_actor_or_none(actor))

    @classmethod
    def inventory_summary(cls, actor, department_id=None) -> Result:
        """
        Department-scoped dashboard figures.

        Staff see their own department only; managers may pass
        department_id or see everything.

        Returns:
            Result with data {department_id, stats, recent_movements,
            low_stock_products, top_selling_products}
        """
        try:
            summary = LedgerQueries.inventory_summary(cls._as_actor(actor), department_id)
        except LedgerError as exc:
            return Result.failure(exc)
        except DatabaseError as exc:
            return Result.failure(InfrastructureError('TRANSACTION_FAILED', error=str(exc)))

        return Result.success({
            **summary,
            'recent_movements': [
                {**entry.as_dict(), 'product_name': entry.product.name, 'sku': entry.product.sku}
                for entry in summary['recent_movements']
            ],
            'low_stock_products': [
                cls._product_summary(product) for product in summary['low_stock_products']
            ],
        })

    # ══════════════════════════════════════════════════════════════
    # INTERNALS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _as_actor(cls, actor) -> Actor:
        if isinstance(actor, Actor):
            return actor
        return get_actor_resolver().resolve(actor)

    @classmethod
    def _as_actor_or_none(cls, actor) -> Actor | None:
        return None if actor is None else cls._as_actor(actor)

    @classmethod
    def _product_summary(cls, product: Product) -> dict:
        return {
            'id': product.pk,
            'name': product.name,
            'sku': product.sku,
            'quantity_in_stock': product.quantity_in_stock,
            'minimum_stock_level': product.minimum_stock_level,
            'department_id': product.department_id,
        }

    @classmethod
    def _entry_summary(cls, entry: LedgerEntry) -> dict:
        return {
            'entry_id': entry.pk,
            'product_id': entry.product_id,
            'change_kind': entry.change_kind,
            'quantity_before': entry.quantity_before,
            'quantity_after': entry.quantity_after,
            'change_applied': entry.quantity_delta,
        }
