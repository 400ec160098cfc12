"""
Ledger queries — read-only operations.

All methods take no locks. Under concurrent mutation they observe either
the pre- or post-update committed state.
"""

from datetime import timedelta

from django.db.models import Count, F, FloatField, Q, Sum
from django.db.models.functions import Abs, Cast, Coalesce
from django.utils import timezone

from stockledger.conf import ledger_settings
from stockledger.exceptions import NotFoundError, ValidationError
from stockledger.models.entry import LedgerEntry
from stockledger.models.enums import ChangeKind
from stockledger.models.product import LOW_STOCK, Product
from stockledger.retry import ensure_connection
from stockledger.services.gate import AuthorizationGate


class LedgerQueries:
    """Read-only ledger query methods."""

    @classmethod
    def list_entries(cls, product_id=None, actor_id=None, change_kind=None,
                     start=None, end=None, limit: int | None = None,
                     offset: int = 0) -> list[LedgerEntry]:
        """
        Ledger entries, newest first.

        Args:
            product_id: Only entries for this product
            actor_id: Only entries written by this actor
            change_kind: Only this kind (must be a ChangeKind value)
            start/end: Inclusive created_at window
            limit: Page size (default ENTRIES_DEFAULT_LIMIT, capped at ENTRIES_MAX_LIMIT)
            offset: Rows to skip

        Raises:
            ValidationError: Unknown change_kind or negative offset
        """
        if change_kind is not None and change_kind not in ChangeKind.values:
            raise ValidationError('INVALID_CHANGE_KIND', change_kind=change_kind)
        if offset < 0:
            raise ValidationError('INVALID_PAGINATION', offset=offset)

        if limit is None:
            limit = ledger_settings.ENTRIES_DEFAULT_LIMIT
        limit = max(1, min(limit, ledger_settings.ENTRIES_MAX_LIMIT))

        qs = LedgerEntry.objects.select_related('product').between(start, end)
        if product_id is not None:
            qs = qs.for_product(product_id)
        if actor_id is not None:
            qs = qs.filter(actor_id=actor_id)
        if change_kind is not None:
            qs = qs.of_kind(change_kind)

        return list(qs.order_by('-created_at', '-id')[offset:offset + limit])

    @classmethod
    def get_entry(cls, entry_id) -> LedgerEntry:
        """
        Raises:
            NotFoundError('ENTRY_NOT_FOUND'): If entry doesn't exist
        """
        entry = LedgerEntry.objects.select_related('product').filter(pk=entry_id).first()
        if entry is None:
            raise NotFoundError('ENTRY_NOT_FOUND', entry_id=entry_id)
        return entry

    @classmethod
    def movement_summary(cls, days: int = 30, department_id=None, actor=None) -> list[dict]:
        """
        Per-product movement totals over the last `days` days.

        Args:
            days: Window size
            department_id: Only products of this department (managers)
            actor: When given, staff are scoped to their own department

        Returns:
            List of dicts (product_id, name, sku, total_restocked,
            total_sold, total_transactions), busiest first

        Raises:
            ValidationError('INVALID_PERIOD'): days < 1
            AuthorizationError('DEPARTMENT_REQUIRED'): Staff without a department
        """
        if days < 1:
            raise ValidationError('INVALID_PERIOD', days=days)
        department_id = AuthorizationGate.visible_department(actor, department_id)

        since = timezone.now() - timedelta(days=days)
        rows = (
            _entries_in(department_id)
            .filter(created_at__gte=since)
            .values('product_id', 'product__name', 'product__sku')
            .annotate(
                restocked=Coalesce(Sum('quantity_delta', filter=Q(change_kind=ChangeKind.RESTOCK)), 0),
                sold=Coalesce(Sum('quantity_delta', filter=Q(change_kind=ChangeKind.SALE)), 0),
                transactions=Count('id'),
            )
            .order_by('-transactions', 'product_id')
        )

        return [
            {
                'product_id': row['product_id'],
                'name': row['product__name'],
                'sku': row['product__sku'],
                'total_restocked': row['restocked'],
                'total_sold': abs(row['sold']),
                'total_transactions': row['transactions'],
            }
            for row in rows
        ]

    @classmethod
    def top_sellers(cls, days: int = 30, department_id=None, actor=None,
                    limit: int = 10) -> list[dict]:
        """Products with the most units sold in the window, best first."""
        if days < 1:
            raise ValidationError('INVALID_PERIOD', days=days)
        department_id = AuthorizationGate.visible_department(actor, department_id)

        since = timezone.now() - timedelta(days=days)
        rows = (
            _entries_in(department_id)
            .filter(created_at__gte=since, change_kind=ChangeKind.SALE)
            .values('product_id', 'product__name', 'product__sku', 'product__department__name')
            .annotate(sold=Sum(Abs('quantity_delta')))
            .order_by('-sold', 'product_id')
        )[:limit]

        return [
            {
                'product_id': row['product_id'],
                'name': row['product__name'],
                'sku': row['product__sku'],
                'department_name': row['product__department__name'],
                'total_sold': row['sold'],
            }
            for row in rows
        ]

    @classmethod
    def recent_movements(cls, department_id=None, actor=None, limit: int = 10) -> list[LedgerEntry]:
        """Latest ledger entries, newest first."""
        department_id = AuthorizationGate.visible_department(actor, department_id)
        qs = _entries_in(department_id).select_related('product', 'product__department', 'actor')
        return list(qs.order_by('-created_at', '-id')[:limit])

    @classmethod
    def low_stock_products(cls, department_id=None, actor=None,
                           limit: int | None = None) -> list[Product]:
        """Active products at or below threshold, most depleted first."""
        department_id = AuthorizationGate.visible_department(actor, department_id)
        qs = Product.objects.low_stock().select_related('department')
        if department_id is not None:
            qs = qs.for_department(department_id)

        qs = qs.annotate(
            stock_ratio=Cast('quantity_in_stock', FloatField()) / F('minimum_stock_level'),
        ).order_by('stock_ratio', 'name')
        return list(qs if limit is None else qs[:limit])

    @classmethod
    def stock_stats(cls, department_id=None, actor=None) -> dict[str, int]:
        """
        Product counts: total, active, low stock and out of stock.

        Low stock uses the alerting rule (threshold > 0); out of stock
        counts active products with zero on hand.
        """
        department_id = AuthorizationGate.visible_department(actor, department_id)
        qs = Product.objects.all()
        if department_id is not None:
            qs = qs.for_department(department_id)

        return qs.aggregate(
            total_products=Count('id'),
            active_products=Count('id', filter=Q(is_active=True)),
            low_stock_products=Count('id', filter=LOW_STOCK),
            out_of_stock_products=Count('id', filter=Q(is_active=True, quantity_in_stock=0)),
        )

    @classmethod
    def inventory_summary(cls, actor=None, department_id=None, days: int = 30,
                          limit: int = 10) -> dict:
        """
        Dashboard view: stats, recent movements, low stock and top sellers.

        Every figure uses the same department scope.

        Raises:
            AuthorizationError('DEPARTMENT_REQUIRED'): Staff without a department
            InfrastructureError('DATABASE_UNAVAILABLE'): No connection after retries
        """
        department_id = AuthorizationGate.visible_department(actor, department_id)
        ensure_connection()
        return {
            'department_id': department_id,
            'stats': cls.stock_stats(department_id),
            'recent_movements': cls.recent_movements(department_id, limit=limit),
            'low_stock_products': cls.low_stock_products(department_id, limit=limit),
            'top_selling_products': cls.top_sellers(days, department_id, limit=limit),
        }


def _entries_in(department_id):
    qs = LedgerEntry.objects.all()
    if department_id is not None:
        qs = qs.filter(product__department_id=department_id)
    return qs
