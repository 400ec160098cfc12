"""
Product model — on-hand quantity owned by the ledger.
"""

from django.db import models
from django.db.models import F, Q
from django.utils.translation import gettext_lazy as _

# Active, alerting enabled, at or below threshold
LOW_STOCK = Q(
    is_active=True,
    minimum_stock_level__gt=0,
    quantity_in_stock__lte=F('minimum_stock_level'),
)


class ProductQuerySet(models.QuerySet):
    """QuerySet with stock-level filters."""

    def active(self):
        return self.filter(is_active=True)

    def low_stock(self):
        """Active products at or below a non-zero threshold."""
        return self.filter(LOW_STOCK)

    def for_department(self, department_id):
        if department_id is None:
            return self.filter(department__isnull=True)
        return self.filter(department_id=department_id)


class Product(models.Model):
    """
    Sellable product with an on-hand quantity.

    quantity_in_stock is changed ONLY by StockLedger.apply_delta, which
    locks the row, writes a LedgerEntry and re-evaluates the alert in a
    single transaction. Other code must treat it as read-only.

    minimum_stock_level = 0 disables low-stock alerting.
    """

    name = models.CharField(max_length=200, verbose_name=_('Name'))
    sku = models.CharField(max_length=64, unique=True, verbose_name=_('SKU'))
    quantity_in_stock = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Quantity in stock'),
    )
    minimum_stock_level = models.PositiveIntegerField(
        default=0,
        verbose_name=_('Minimum stock level'),
        help_text=_('Alert when stock is at or below this level. 0 disables alerts.'),
    )
    department = models.ForeignKey(
        'stockledger.Department',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products',
        verbose_name=_('Department'),
        help_text=_('Empty = only managers may change stock'),
    )
    is_active = models.BooleanField(default=True, verbose_name=_('Active'))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProductQuerySet.as_manager()

    class Meta:
        db_table = 'products'
        verbose_name = _('Product')
        verbose_name_plural = _('Products')
        ordering = ['name']
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_in_stock__gte=0),
                name='product_quantity_non_negative',
            ),
            models.CheckConstraint(
                condition=Q(minimum_stock_level__gte=0),
                name='product_minimum_non_negative',
            ),
        ]

    @property
    def alerting_enabled(self) -> bool:
        return self.minimum_stock_level > 0

    @property
    def is_low_stock(self) -> bool:
        """Whether an open alert should exist for this product."""
        return (
            self.is_active
            and self.alerting_enabled
            and self.quantity_in_stock <= self.minimum_stock_level
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.sku})"
