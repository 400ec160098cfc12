"""
Stock alerts — derive alert state from the product's current quantity.

Usage:
    from stockledger.services.alerts import AlertEngine

    # Called by the ledger after every change; safe to call any time
    AlertEngine.evaluate(product.pk)

    AlertEngine.acknowledge(alert.pk)
"""

import logging

from django.db import DatabaseError, transaction
from django.utils import timezone

from stockledger.exceptions import InfrastructureError, NotFoundError
from stockledger.models.alert import StockAlert
from stockledger.models.product import Product
from stockledger.protocols.events import EventKind, EventPublisher, StockEvent
from stockledger.retry import ensure_connection
from stockledger.services.events import publish_on_commit

logger = logging.getLogger('stockledger')


def low_stock_message(product: Product) -> str:
    return (
        f"Low stock alert: {product.name} (SKU: {product.sku}) has "
        f"{product.quantity_in_stock} units remaining "
        f"(threshold: {product.minimum_stock_level})"
    )


class AlertEngine:
    """Open/close low-stock alerts."""

    @classmethod
    def evaluate(cls, product_id, publisher: EventPublisher | None = None) -> StockAlert | None:
        """
        Bring the product's open alert in line with its quantity.

        Low (active, threshold > 0, quantity <= threshold): ensure exactly
        one unacknowledged alert. Otherwise: delete unacknowledged alerts.

        Returns:
            The open alert, or None when the product is not low

        Raises:
            NotFoundError('PRODUCT_NOT_FOUND'): Product does not exist

        Concurrency:
            - Runs under transaction.atomic()
            - select_for_update() on the product serializes evaluations
            - Partial unique constraint guards against duplicate open alerts
        """
        ensure_connection()
        with transaction.atomic():
            product = Product.objects.select_for_update().filter(pk=product_id).first()
            if product is None:
                raise NotFoundError('PRODUCT_NOT_FOUND', product_id=product_id)

            if product.is_low_stock:
                alert, created = StockAlert.objects.get_or_create(
                    product=product,
                    acknowledged=False,
                    defaults={'message': low_stock_message(product)},
                )
                if created:
                    logger.warning(
                        "ledger.alert.raised",
                        extra={
                            "alert_id": alert.pk,
                            "product_id": product.pk,
                            "quantity": product.quantity_in_stock,
                            "threshold": product.minimum_stock_level,
                        },
                    )
                    publish_on_commit(
                        StockEvent(
                            kind=EventKind.LOW_STOCK_ALERT,
                            product_id=product.pk,
                            data={
                                'alert_id': alert.pk,
                                'product_name': product.name,
                                'sku': product.sku,
                                'current_quantity': product.quantity_in_stock,
                                'threshold': product.minimum_stock_level,
                                'department_id': product.department_id,
                                'message': alert.message,
                            },
                        ),
                        publisher,
                    )
                return alert

            cleared, _ = StockAlert.objects.open().filter(product=product).delete()
            if cleared:
                logger.info(
                    "ledger.alert.cleared",
                    extra={"product_id": product.pk, "quantity": product.quantity_in_stock},
                )
                publish_on_commit(
                    StockEvent(
                        kind=EventKind.ALERT_CLEARED,
                        product_id=product.pk,
                        data={'current_quantity': product.quantity_in_stock},
                    ),
                    publisher,
                )
            return None

    @classmethod
    def would_change(cls, product: Product) -> bool:
        """Whether evaluate() would open or clear an alert (no writes)."""
        has_open = StockAlert.objects.open().filter(product=product).exists()
        return has_open != product.is_low_stock

    @classmethod
    def acknowledge(cls, alert_id, actor=None, publisher: EventPublisher | None = None) -> StockAlert:
        """
        Mark an alert as acknowledged. Idempotent.

        Raises:
            NotFoundError('ALERT_NOT_FOUND'): If alert doesn't exist
            InfrastructureError: Connection or transaction failure
        """
        ensure_connection()
        try:
            return cls._acknowledge(alert_id, actor, publisher)
        except DatabaseError as exc:
            raise InfrastructureError('TRANSACTION_FAILED', alert_id=alert_id, error=str(exc)) from exc

    @classmethod
    def _acknowledge(cls, alert_id, actor, publisher) -> StockAlert:
        product_id = StockAlert.objects.filter(pk=alert_id).values_list('product_id', flat=True).first()
        if product_id is None:
            raise NotFoundError('ALERT_NOT_FOUND', alert_id=alert_id)

        with transaction.atomic():
            # Same lock order as evaluate(): product, then alert
            Product.objects.select_for_update().filter(pk=product_id).first()
            alert = StockAlert.objects.select_for_update().filter(pk=alert_id).first()
            if alert is None:
                raise NotFoundError('ALERT_NOT_FOUND', alert_id=alert_id)

            if alert.acknowledged:
                return alert

            alert.acknowledged = True
            alert.acknowledged_at = timezone.now()
            alert.save(update_fields=['acknowledged', 'acknowledged_at'])

            publish_on_commit(
                StockEvent(
                    kind=EventKind.ALERT_ACKNOWLEDGED,
                    product_id=alert.product_id,
                    data={
                        'alert_id': alert.pk,
                        'actor_id': getattr(actor, 'id', None),
                    },
                ),
                publisher,
            )
            logger.info(
                "ledger.alert.acknowledged",
                extra={"alert_id": alert.pk, "product_id": alert.product_id},
            )
            return alert

    @classmethod
    def list_alerts(cls, unacknowledged_only: bool = False, product_id=None,
                    limit: int | None = None, offset: int = 0) -> list[StockAlert]:
        """Alerts newest first. Takes no locks."""
        qs = StockAlert.objects.select_related('product')
        if unacknowledged_only:
            qs = qs.open()
        if product_id is not None:
            qs = qs.for_product(product_id)
        qs = qs.order_by('-created_at', '-id')
        if limit is not None:
            return list(qs[offset:offset + limit])
        return list(qs[offset:])
