"""
Canonical result envelope returned by every facade entry point.

Usage:
    result = ledger.update(product.pk, 'sale', 3, actor)
    if result.ok:
        result.data['quantity_after']
    else:
        result.status      # ResultStatus.INSUFFICIENT_STOCK
        result.error       # {'code': ..., 'message': ..., 'data': {...}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from django.db import models
from django.utils.translation import gettext_lazy as _

if TYPE_CHECKING:
    from stockledger.exceptions import LedgerError


class ResultStatus(models.TextChoices):
    """Outcome classification shared by single and bulk operations."""
    SUCCESS = 'success', _('Success')
    PARTIAL = 'partial', _('Partial success')
    VALIDATION_ERROR = 'validation_error', _('Validation error')
    AUTHORIZATION_ERROR = 'authorization_error', _('Authorization error')
    NOT_FOUND = 'not_found', _('Not found')
    INSUFFICIENT_STOCK = 'insufficient_stock', _('Insufficient stock')
    CONFLICT = 'conflict', _('Conflict')
    INFRASTRUCTURE_ERROR = 'infrastructure_error', _('Infrastructure error')


@dataclass(frozen=True)
class Result:
    """Success or classified failure, never both."""

    status: ResultStatus
    data: Any = None
    error: dict[str, Any] | None = None
    details: list[dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status in (ResultStatus.SUCCESS, ResultStatus.PARTIAL)

    @classmethod
    def success(cls, data: Any = None, partial: bool = False,
                details: list[dict[str, Any]] | None = None) -> Result:
        status = ResultStatus.PARTIAL if partial else ResultStatus.SUCCESS
        return cls(status=status, data=data, details=details or [])

    @classmethod
    def failure(cls, exc: LedgerError, details: list[dict[str, Any]] | None = None) -> Result:
        return cls(status=exc.status, error=exc.as_dict(), details=details or [])

    def as_dict(self) -> dict[str, Any]:
        payload = {'status': str(self.status), 'data': self.data, 'error': self.error}
        if self.details:
            payload['details'] = self.details
        return payload
