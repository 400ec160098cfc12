"""
Connection retry policy.

Transient connection failures are retried with exponential backoff, but
ONLY while acquiring a connection. Once a mutating transaction has begun,
failures are surfaced to the caller and never retried here.

Usage:
    from stockledger.retry import ensure_connection

    ensure_connection()          # before transaction.atomic()
"""

import logging
import time
from dataclasses import dataclass

from django.db import DEFAULT_DB_ALIAS, InterfaceError, OperationalError, connections

from stockledger.conf import ledger_settings
from stockledger.exceptions import InfrastructureError

logger = logging.getLogger('stockledger')

TRANSIENT_ERRORS = (OperationalError, InterfaceError)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for idempotent operations."""

    attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 8.0

    @classmethod
    def from_settings(cls) -> 'RetryPolicy':
        return cls(
            attempts=ledger_settings.CONNECT_RETRIES,
            base_delay=ledger_settings.CONNECT_BACKOFF_SECONDS,
            max_delay=ledger_settings.CONNECT_BACKOFF_MAX_SECONDS,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay before retry number `attempt` (1-based)."""
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)

    def call(self, func, *args, sleep=time.sleep, **kwargs):
        """
        Call func, retrying transient database errors.

        Raises:
            InfrastructureError('DATABASE_UNAVAILABLE'): When all attempts fail
        """
        last_error = None
        for attempt in range(1, self.attempts + 2):
            try:
                return func(*args, **kwargs)
            except TRANSIENT_ERRORS as exc:
                last_error = exc
                if attempt > self.attempts:
                    break
                delay = self.delay_for(attempt)
                logger.warning(
                    "ledger.retry",
                    extra={"attempt": attempt, "delay": delay, "error": str(exc)},
                )
                sleep(delay)

        raise InfrastructureError(
            'DATABASE_UNAVAILABLE',
            attempts=self.attempts + 1,
            error=str(last_error),
        ) from last_error


def ensure_connection(using: str = DEFAULT_DB_ALIAS, policy: RetryPolicy | None = None) -> None:
    """
    Make sure a usable connection exists before a transaction opens.

    No-op inside an atomic block: the connection is already in use by a
    transaction and must not be replaced.
    """
    connection = connections[using]
    if connection.in_atomic_block:
        return

    def _connect():
        if connection.connection is not None and not connection.is_usable():
            connection.close()
        connection.ensure_connection()

    (policy or RetryPolicy.from_settings()).call(_connect)
