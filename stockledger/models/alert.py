"""
StockAlert model — open/closed low-stock signal per product.

Alerts are never created by clients. AlertEngine.evaluate() opens one when
a product drops to its minimum_stock_level and removes it when stock
recovers. Clients only acknowledge them.

Usage:
    from stockledger.services.alerts import AlertEngine

    AlertEngine.evaluate(product.pk)
    StockAlert.objects.open()          # unacknowledged alerts
"""

from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class StockAlertQuerySet(models.QuerySet):

    def open(self):
        """Unacknowledged alerts."""
        return self.filter(acknowledged=False)

    def for_product(self, product_id):
        return self.filter(product_id=product_id)


class StockAlert(models.Model):
    """
    Low-stock alert for a product.

    At most one unacknowledged alert per product, enforced by a partial
    unique constraint. Acknowledged alerts are kept as history.
    """

    product = models.ForeignKey(
        'stockledger.Product',
        on_delete=models.CASCADE,
        related_name='alerts',
        verbose_name=_('Product'),
    )
    message = models.TextField(verbose_name=_('Message'))
    acknowledged = models.BooleanField(default=False, verbose_name=_('Acknowledged'))
    acknowledged_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Acknowledged at'))
    created_at = models.DateTimeField(default=timezone.now, verbose_name=_('Created at'))

    objects = StockAlertQuerySet.as_manager()

    class Meta:
        db_table = 'stock_alerts'
        verbose_name = _('Stock alert')
        verbose_name_plural = _('Stock alerts')
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['product'],
                condition=Q(acknowledged=False),
                name='unique_open_alert_per_product',
            ),
        ]
        indexes = [
            models.Index(fields=['acknowledged', 'created_at'], name='stock_alert_open_idx'),
        ]

    def __str__(self) -> str:
        state = 'ack' if self.acknowledged else 'open'
        return f"Alert [{state}]: {self.product}"

    def as_dict(self) -> dict:
        return {
            'id': self.pk,
            'product_id': self.product_id,
            'message': self.message,
            'acknowledged': self.acknowledged,
            'acknowledged_at': self.acknowledged_at.isoformat() if self.acknowledged_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
