"""
Django Stockledger — Auditable inventory ledger.

Every change to a product's on-hand quantity goes through one locked,
audited path and is recorded as an immutable ledger entry.

Usage:
    from stockledger import ledger, InsufficientStockError

    result = ledger.update(product.pk, 'sale', 6, request.user)
    result.status  # 'success' | 'insufficient_stock' | ...
    ledger.bulk_update(updates, request.user)
    ledger.list_alerts(unacknowledged_only=True)
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'ledger':
        from stockledger.service import Ledger
        return Ledger
    elif name == 'Result':
        from stockledger.results import Result
        return Result
    elif name == 'ResultStatus':
        from stockledger.results import ResultStatus
        return ResultStatus
    elif name in _EXCEPTIONS:
        from stockledger import exceptions
        return getattr(exceptions, name)
    elif name in _MODELS:
        from stockledger import models
        return getattr(models, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


_EXCEPTIONS = (
    'LedgerError',
    'ValidationError',
    'AuthorizationError',
    'NotFoundError',
    'InsufficientStockError',
    'ConflictError',
    'InfrastructureError',
)

_MODELS = (
    'Department',
    'Product',
    'LedgerEntry',
    'StockAlert',
    'ChangeKind',
    'ActorRole',
)

__all__ = ['ledger', 'Result', 'ResultStatus', *_EXCEPTIONS, *_MODELS]

__version__ = '0.1.0'
