"""
Stock ledger — the only code path that changes Product.quantity_in_stock.

apply_delta() validates, authorizes, then in ONE transaction:
locks the product row, computes the new quantity, rejects negatives,
stores the quantity, appends a LedgerEntry and re-evaluates the alert.
"""

import logging
from dataclasses import dataclass
from typing import Any

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction

from stockledger.conf import ledger_settings
from stockledger.exceptions import (
    AuthorizationError,
    ConflictError,
    InfrastructureError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from stockledger.models.entry import LedgerEntry
from stockledger.models.enums import ChangeKind
from stockledger.models.product import Product
from stockledger.protocols.actor import Actor
from stockledger.protocols.events import EventKind, EventPublisher, StockEvent
from stockledger.retry import ensure_connection
from stockledger.services.alerts import AlertEngine
from stockledger.services.events import publish_on_commit
from stockledger.services.gate import AuthorizationGate

logger = logging.getLogger('stockledger')


def _is_integer(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _user_exists(user_id) -> bool:
    if user_id is None:
        return False
    try:
        return get_user_model().objects.filter(pk=user_id).exists()
    except (TypeError, ValueError):
        return False


def compute_new_quantity(change_kind: str, current: int, magnitude: int) -> int:
    """
    Quantity after applying magnitude with change_kind semantics.

    restock/return add |magnitude|, sale subtracts |magnitude|,
    adjustment adds the signed magnitude. May return a negative number;
    callers decide whether that is acceptable.
    """
    if change_kind in (ChangeKind.RESTOCK, ChangeKind.RETURN):
        return current + abs(magnitude)
    if change_kind == ChangeKind.SALE:
        return current - abs(magnitude)
    if change_kind == ChangeKind.ADJUSTMENT:
        return current + magnitude
    raise ValidationError('INVALID_CHANGE_KIND', change_kind=change_kind)


@dataclass(frozen=True)
class StockChange:
    """One requested change, validated before any transaction opens."""

    product_id: Any
    change_kind: str
    quantity: Any
    reason: str | None = None
    reference: str | None = None

    @classmethod
    def coerce(cls, item) -> 'StockChange':
        """Build from a StockChange or a mapping with the same keys."""
        if isinstance(item, cls):
            return item
        if not isinstance(item, dict):
            raise ValidationError('INVALID_UPDATE', item_type=type(item).__name__)
        missing = [k for k in ('product_id', 'change_kind', 'quantity') if k not in item]
        if missing:
            raise ValidationError('INVALID_UPDATE', missing=', '.join(missing))
        return cls(
            product_id=item['product_id'],
            change_kind=item['change_kind'],
            quantity=item['quantity'],
            reason=item.get('reason'),
            reference=item.get('reference'),
        )

    def validate(self) -> 'StockChange':
        """
        Check shape and limits.

        Raises:
            ValidationError: Bad product id, change kind, quantity or text length
        """
        if not _is_integer(self.product_id):
            raise ValidationError('INVALID_PRODUCT_ID', product_id=self.product_id)

        if self.change_kind not in ChangeKind.values:
            raise ValidationError('INVALID_CHANGE_KIND', change_kind=self.change_kind)

        if not _is_integer(self.quantity):
            raise ValidationError('INVALID_QUANTITY', quantity=self.quantity)

        if self.reason and len(self.reason) > ledger_settings.REASON_MAX_LENGTH:
            raise ValidationError(
                'REASON_TOO_LONG', max_length=ledger_settings.REASON_MAX_LENGTH
            )

        if self.reference and len(self.reference) > ledger_settings.REFERENCE_MAX_LENGTH:
            raise ValidationError(
                'REFERENCE_TOO_LONG', max_length=ledger_settings.REFERENCE_MAX_LENGTH
            )

        return self


class StockLedger:
    """Guarded, audited quantity transitions."""

    @classmethod
    def apply_delta(cls, product_id, change_kind, magnitude, actor: Actor,
                    reason=None, reference=None, *,
                    publisher: EventPublisher | None = None,
                    evaluate_alerts: bool = True) -> LedgerEntry:
        """
        Apply one change to one product.

        Returns:
            The LedgerEntry written for the change

        Raises:
            ValidationError: Malformed input (before any transaction)
            NotFoundError('PRODUCT_NOT_FOUND'): Product missing or inactive
            AuthorizationError: Actor unknown or may not modify the product (before any transaction)
            InsufficientStockError: Resulting quantity would be negative
            ConflictError: Product ownership changed or constraint violated mid-flight
            InfrastructureError: Connection or transaction failure

        Concurrency:
            - Runs under transaction.atomic() (a savepoint when nested)
            - select_for_update() on the product row
            - Alert evaluation is the last statement of the same transaction
            - Nothing is retried once the transaction has begun
        """
        change = StockChange(product_id, change_kind, magnitude, reason, reference).validate()

        ensure_connection()
        try:
            product = Product.objects.filter(pk=change.product_id, is_active=True).first()
            actor_known = _user_exists(actor.id)
        except DatabaseError as exc:
            raise InfrastructureError(
                'TRANSACTION_FAILED', product_id=change.product_id, error=str(exc)
            ) from exc

        if product is None:
            raise NotFoundError('PRODUCT_NOT_FOUND', product_id=change.product_id)

        AuthorizationGate.check(actor, product)

        # Entries reference AUTH_USER_MODEL; reject ids with no user row
        if not actor_known:
            raise AuthorizationError('UNKNOWN_ACTOR', actor_id=actor.id)

        try:
            with transaction.atomic():
                entry = cls._apply_locked(change, actor, product.department_id, publisher)
                if evaluate_alerts:
                    AlertEngine.evaluate(entry.product_id, publisher=publisher)
        except IntegrityError as exc:
            raise ConflictError(
                'CONCURRENT_MODIFICATION', product_id=change.product_id, error=str(exc)
            ) from exc
        except DatabaseError as exc:
            raise InfrastructureError(
                'TRANSACTION_FAILED', product_id=change.product_id, error=str(exc)
            ) from exc

        return entry

    @classmethod
    def _apply_locked(cls, change: StockChange, actor: Actor,
                      authorized_department_id, publisher) -> LedgerEntry:
        """Locked read-compute-write. Must run inside transaction.atomic()."""
        product = Product.objects.select_for_update().filter(pk=change.product_id).first()

        if product is None or not product.is_active:
            raise NotFoundError('PRODUCT_NOT_FOUND', product_id=change.product_id)

        # Ownership moved between the gate check and the lock
        if product.department_id != authorized_department_id and not AuthorizationGate.can_modify(actor, product):
            raise ConflictError(
                'CONCURRENT_MODIFICATION',
                product_id=product.pk,
                department_id=product.department_id,
            )

        before = product.quantity_in_stock
        after = compute_new_quantity(change.change_kind, before, change.quantity)

        if after < 0:
            raise InsufficientStockError(
                'INSUFFICIENT_STOCK',
                f"Insufficient stock. Current quantity: {before}, requested change: {change.quantity}",
                product_id=product.pk,
                available=before,
                requested=change.quantity,
            )

        product.quantity_in_stock = after
        product.save(update_fields=['quantity_in_stock', 'updated_at'])

        entry = LedgerEntry.objects.create(
            product=product,
            actor_id=actor.id,
            change_kind=change.change_kind,
            quantity_delta=after - before,
            quantity_before=before,
            quantity_after=after,
            reason=change.reason or '',
            reference=change.reference or '',
        )

        publish_on_commit(
            StockEvent(
                kind=EventKind.INVENTORY_UPDATE,
                product_id=product.pk,
                data={
                    'product_name': product.name,
                    'sku': product.sku,
                    'change_kind': change.change_kind,
                    'quantity_before': before,
                    'quantity_after': after,
                    'quantity_changed': after - before,
                    'actor_id': actor.id,
                    'entry_id': entry.pk,
                },
            ),
            publisher,
        )

        logger.info(
            "ledger.apply",
            extra={
                "product_id": product.pk,
                "change_kind": change.change_kind,
                "before": before,
                "after": after,
                "actor_id": actor.id,
                "entry_id": entry.pk,
            },
        )
        return entry
