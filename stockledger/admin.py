"""
Stockledger Admin.

Provides views for operations and production debugging:
- Department: list + edit
- Product: edit catalog fields; quantity is read-only (changes go through the ledger)
- LedgerEntry: read-only audit trail
- StockAlert: read-only with "acknowledge" action
"""

import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from stockledger.exceptions import LedgerError
from stockledger.models import Department, LedgerEntry, Product, StockAlert
from stockledger.services.alerts import AlertEngine

logger = logging.getLogger(__name__)


# =========================================================================
# DEPARTMENT ADMIN
# =========================================================================

@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'created_at']
    search_fields = ['code', 'name']
    readonly_fields = ['created_at']


# =========================================================================
# PRODUCT ADMIN
# =========================================================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Quantity is read-only; it only changes through the ledger."""

    list_display = ['name', 'sku', 'department', 'quantity_in_stock',
                    'minimum_stock_level', 'is_low_stock_display', 'is_active']
    list_filter = ['is_active', 'department']
    search_fields = ['name', 'sku']
    readonly_fields = ['quantity_in_stock', 'created_at', 'updated_at']

    @admin.display(description=_('Low stock?'), boolean=True)
    def is_low_stock_display(self, obj):
        return obj.is_low_stock


# =========================================================================
# LEDGER ENTRY ADMIN (read-only audit trail)
# =========================================================================

@admin.register(LedgerEntry)
class LedgerEntryAdmin(admin.ModelAdmin):
    """Read-only audit trail."""

    list_display = ['created_at', 'product', 'change_kind', 'quantity_delta',
                    'quantity_before', 'quantity_after', 'actor', 'reference']
    list_filter = ['change_kind', 'created_at']
    search_fields = ['product__name', 'product__sku', 'reason', 'reference']
    readonly_fields = ['product', 'actor', 'change_kind', 'quantity_delta',
                       'quantity_before', 'quantity_after', 'reason',
                       'reference', 'created_at']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =========================================================================
# STOCK ALERT ADMIN (read-only with acknowledge action)
# =========================================================================

@admin.register(StockAlert)
class StockAlertAdmin(admin.ModelAdmin):
    """Alerts are raised and cleared by the ledger; admins only acknowledge."""

    list_display = ['id', 'product', 'message', 'acknowledged', 'created_at', 'acknowledged_at']
    list_filter = ['acknowledged', 'created_at']
    search_fields = ['product__name', 'product__sku']
    readonly_fields = ['product', 'message', 'acknowledged', 'acknowledged_at', 'created_at']
    actions = ['acknowledge_alerts']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description=_('Acknowledge selected alerts'))
    def acknowledge_alerts(self, request, queryset):
        count = 0
        for alert in queryset.filter(acknowledged=False):
            try:
                AlertEngine.acknowledge(alert.pk)
                count += 1
            except LedgerError as exc:
                logger.warning("acknowledge_alerts: failed to acknowledge %s: %s", alert.pk, exc)

        self.message_user(request, _('{count} alert(s) acknowledged.').format(count=count))
