"""
Ledger services — modular organization of stock ledger operations.

    from stockledger.services import AuthorizationGate, StockLedger, AlertEngine, BulkCoordinator, LedgerQueries
"""

from stockledger.services.alerts import AlertEngine
from stockledger.services.bulk import BatchResult, BulkCoordinator, RejectedItem
from stockledger.services.gate import AuthorizationGate
from stockledger.services.ledger import StockChange, StockLedger
from stockledger.services.queries import LedgerQueries

__all__ = [
    'AuthorizationGate',
    'StockLedger',
    'StockChange',
    'AlertEngine',
    'BulkCoordinator',
    'BatchResult',
    'RejectedItem',
    'LedgerQueries',
]
