"""
LedgerEntry model — Immutable audit trail of quantity changes.
"""

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import ChangeKind


class LedgerEntryQuerySet(models.QuerySet):
    """QuerySet with the filters used by the read side."""

    def for_product(self, product_id):
        return self.filter(product_id=product_id)

    def of_kind(self, change_kind):
        return self.filter(change_kind=change_kind)

    def between(self, start=None, end=None):
        qs = self
        if start is not None:
            qs = qs.filter(created_at__gte=start)
        if end is not None:
            qs = qs.filter(created_at__lte=end)
        return qs


class LedgerEntry(models.Model):
    """
    Immutable record of one applied quantity change.

    Rules:
    - NEVER update() or delete()
    - Corrections are new entries (usually an ADJUSTMENT)
    - quantity_after = quantity_before + quantity_delta, always
    - quantity_delta is the net change applied, not the caller's raw input

    Entries are written only by StockLedger, inside the same transaction
    that changes Product.quantity_in_stock.
    """

    product = models.ForeignKey(
        'stockledger.Product',
        on_delete=models.PROTECT,
        related_name='ledger_entries',
        verbose_name=_('Product'),
    )
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Actor'),
    )
    change_kind = models.CharField(
        max_length=20,
        choices=ChangeKind.choices,
        verbose_name=_('Change kind'),
    )
    quantity_delta = models.IntegerField(
        verbose_name=_('Delta'),
        help_text=_('Positive = stock in, negative = stock out'),
    )
    quantity_before = models.PositiveIntegerField(verbose_name=_('Before'))
    quantity_after = models.PositiveIntegerField(verbose_name=_('After'))
    reason = models.CharField(max_length=500, blank=True, default='', verbose_name=_('Reason'))
    reference = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Reference'))
    created_at = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Created at'))

    objects = LedgerEntryQuerySet.as_manager()

    class Meta:
        db_table = 'inventory_logs'
        verbose_name = _('Ledger entry')
        verbose_name_plural = _('Ledger entries')
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['product', 'created_at'], name='inventory_log_product_idx'),
            models.Index(fields=['change_kind', 'created_at'], name='inventory_log_kind_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_after=F('quantity_before') + F('quantity_delta')),
                name='ledger_entry_balanced',
            ),
        ]

    def save(self, *args, **kwargs):
        """Insert-only save with balance check."""
        if self.pk:
            raise ValueError(
                "Ledger entries are immutable. "
                "To correct stock, record a new adjustment."
            )

        if self.quantity_after != self.quantity_before + self.quantity_delta:
            raise ValueError(
                f"Unbalanced entry: {self.quantity_before} + {self.quantity_delta} "
                f"!= {self.quantity_after}"
            )

        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Entries are immutable."""
        raise ValueError(
            "Ledger entries are immutable. "
            "To reverse a change, record a new adjustment."
        )

    def __str__(self) -> str:
        sign = '+' if self.quantity_delta > 0 else ''
        return f"{self.change_kind} {sign}{self.quantity_delta} | {self.quantity_before} → {self.quantity_after}"

    def as_dict(self) -> dict:
        return {
            'id': self.pk,
            'product_id': self.product_id,
            'actor_id': self.actor_id,
            'change_kind': self.change_kind,
            'quantity_delta': self.quantity_delta,
            'quantity_before': self.quantity_before,
            'quantity_after': self.quantity_after,
            'reason': self.reason,
            'reference': self.reference,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
