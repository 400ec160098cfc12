"""
Exceptions for Stockledger.

All errors are LedgerError subclasses with a structured code for
programmatic handling and a ResultStatus used by the canonical Result.
"""

from typing import Any

from stockledger.results import ResultStatus


class LedgerError(Exception):
    """
    Structured exception for ledger operations.

    Usage:
        try:
            ledger.apply_delta(product.pk, 'sale', 6, actor)
        except InsufficientStockError as e:
            print(f"Only {e.available} on hand")

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    status = ResultStatus.INFRASTRUCTURE_ERROR
    default_code = 'LEDGER_ERROR'

    _default_messages = {
        'LEDGER_ERROR': 'Stock ledger error',
        'INVALID_UPDATE': 'Malformed update',
        'INVALID_PRODUCT_ID': 'Product id must be an integer',
        'INVALID_CHANGE_KIND': 'Invalid change kind',
        'INVALID_QUANTITY': 'Quantity must be an integer',
        'REASON_TOO_LONG': 'Reason is too long',
        'REFERENCE_TOO_LONG': 'Reference is too long',
        'INVALID_PAGINATION': 'Invalid pagination parameters',
        'INVALID_PERIOD': 'Period must be at least one day',
        'EMPTY_BATCH': 'Batch must contain at least one update',
        'BATCH_TOO_LARGE': 'Batch contains too many updates',
        'DEPARTMENT_MISMATCH': 'You can only modify products from your own department',
        'MANAGER_REQUIRED': 'Only managers can modify products without a department',
        'DEPARTMENT_REQUIRED': 'Staff must be assigned to a department to view inventory',
        'UNKNOWN_ACTOR': 'Actor is not a known user',
        'PRODUCT_NOT_FOUND': 'Product not found or inactive',
        'ALERT_NOT_FOUND': 'Alert not found',
        'ENTRY_NOT_FOUND': 'Ledger entry not found',
        'INSUFFICIENT_STOCK': 'Insufficient stock',
        'CONCURRENT_MODIFICATION': 'Concurrent modification detected',
        'DATABASE_UNAVAILABLE': 'Database connection could not be established',
        'TRANSACTION_FAILED': 'Database transaction failed',
    }

    def __init__(self, code: str | None = None, message: str | None = None, **data: Any):
        self.code = code or self.default_code
        self.message = message or self._default_messages.get(self.code, self.code)
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, data={self.data!r})"

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {k: v if isinstance(v, (int, str, bool, type(None))) else str(v)
                     for k, v in self.data.items()},
        }


class ValidationError(LedgerError):
    """Malformed change kind, quantity or free-text field."""

    status = ResultStatus.VALIDATION_ERROR
    default_code = 'INVALID_QUANTITY'


class AuthorizationError(LedgerError):
    """Actor outside the permitted department or role."""

    status = ResultStatus.AUTHORIZATION_ERROR
    default_code = 'DEPARTMENT_MISMATCH'


class NotFoundError(LedgerError):
    """Product (or alert, or entry) missing or inactive."""

    status = ResultStatus.NOT_FOUND
    default_code = 'PRODUCT_NOT_FOUND'


class InsufficientStockError(LedgerError):
    """Resulting quantity would be negative."""

    status = ResultStatus.INSUFFICIENT_STOCK
    default_code = 'INSUFFICIENT_STOCK'

    @property
    def available(self) -> int:
        """Shortcut for data['available']."""
        return self.data.get('available', 0)

    @property
    def requested(self) -> int:
        """Shortcut for data['requested']."""
        return self.data.get('requested', 0)


class ConflictError(LedgerError):
    """Concurrent structural change detected."""

    status = ResultStatus.CONFLICT
    default_code = 'CONCURRENT_MODIFICATION'


class InfrastructureError(LedgerError):
    """Connection or transaction failure."""

    status = ResultStatus.INFRASTRUCTURE_ERROR
    default_code = 'TRANSACTION_FAILED'
