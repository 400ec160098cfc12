"""
Concurrency tests for StockLedger.

These run against the file-backed SQLite test database in real
transactions, one connection per thread.
"""

import threading

import pytest
from django.db import connection, transaction

from stockledger.exceptions import ConflictError, InsufficientStockError
from stockledger.models import LedgerEntry, Product
from stockledger.services.ledger import StockChange, StockLedger


def _run_concurrently(target, count):
    barrier = threading.Barrier(count)
    outcomes = []
    lock = threading.Lock()

    def worker():
        try:
            barrier.wait()
            outcome = target()
        except Exception as exc:
            outcome = exc
        finally:
            connection.close()
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=worker) for _ in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return outcomes


@pytest.mark.django_db(transaction=True)
class TestConcurrentSales:
    """Two concurrent sales of 6 against quantity 10."""

    @pytest.fixture(autouse=True)
    def _needs_shared_database(self):
        if connection.vendor == 'sqlite' and connection.is_in_memory_db():
            pytest.skip('threads need a shared database')

    def test_exactly_one_succeeds(self, make_product, manager):
        product = make_product(quantity=10, minimum=0)

        outcomes = _run_concurrently(
            lambda: StockLedger.apply_delta(product.pk, 'sale', 6, manager),
            count=2,
        )

        successes = [o for o in outcomes if isinstance(o, LedgerEntry)]
        rejections = [o for o in outcomes if isinstance(o, InsufficientStockError)]
        assert len(successes) == 1, outcomes
        assert len(rejections) == 1, outcomes
        assert rejections[0].available == 4

        product.refresh_from_db()
        assert product.quantity_in_stock == 4
        assert LedgerEntry.objects.filter(product=product).count() == 1

    def test_never_negative_under_contention(self, make_product, manager):
        product = make_product(quantity=5, minimum=2)

        outcomes = _run_concurrently(
            lambda: StockLedger.apply_delta(product.pk, 'sale', 1, manager),
            count=8,
        )

        successes = [o for o in outcomes if isinstance(o, LedgerEntry)]
        assert len(successes) == 5
        product.refresh_from_db()
        assert product.quantity_in_stock == 0
        assert product.alerts.filter(acknowledged=False).count() == 1


@pytest.mark.django_db
class TestOwnershipChange:
    """Department changes between the gate check and the row lock."""

    def test_moved_out_of_scope_is_conflict(self, milk, bakery, grocery, grocery_staff):
        Product.objects.filter(pk=milk.pk).update(department=bakery)
        change = StockChange(milk.pk, 'sale', 1)

        with pytest.raises(ConflictError):
            with transaction.atomic():
                StockLedger._apply_locked(change, grocery_staff, grocery.pk, None)

        milk.refresh_from_db()
        assert milk.quantity_in_stock == 10

    def test_moved_within_scope_is_allowed(self, milk, bakery, grocery, manager):
        """Managers stay authorized wherever the product moves."""
        Product.objects.filter(pk=milk.pk).update(department=bakery)
        change = StockChange(milk.pk, 'sale', 1)

        with transaction.atomic():
            entry = StockLedger._apply_locked(change, manager, grocery.pk, None)

        assert entry.quantity_after == 9
