"""
Stockledger Models.

Core models for the stock ledger:
- Department: Owning group for staff scoping
- Product: On-hand quantity, changed only by the ledger
- LedgerEntry: Immutable audit trail
- StockAlert: Open/acknowledged low-stock alert
"""

from stockledger.models.alert import StockAlert
from stockledger.models.department import Department
from stockledger.models.entry import LedgerEntry
from stockledger.models.enums import ActorRole, ChangeKind
from stockledger.models.product import Product

__all__ = [
    'ActorRole',
    'ChangeKind',
    'Department',
    'Product',
    'LedgerEntry',
    'StockAlert',
]
