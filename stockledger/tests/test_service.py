"""
Tests for the Ledger facade and its Result envelope.
"""

import pytest

from stockledger import Result, ResultStatus, ledger
from stockledger.exceptions import InsufficientStockError, NotFoundError
from stockledger.models import ActorRole, StockAlert
from stockledger.protocols.actor import Actor


pytestmark = pytest.mark.django_db


class TestLedgerUpdate:
    """Tests for ledger.update()."""

    def test_success_payload(self, milk, grocery_staff):
        result = ledger.update(milk.pk, 'sale', 6, grocery_staff, reason='POS #9')

        assert result.ok
        assert result.status == ResultStatus.SUCCESS
        assert result.error is None
        assert result.data['product_id'] == milk.pk
        assert result.data['quantity_before'] == 10
        assert result.data['quantity_after'] == 4
        assert result.data['change_applied'] == -6
        assert result.data['change_kind'] == 'sale'

    def test_accepts_user_objects(self, milk, manager_user):
        """Superusers resolve to managers."""
        result = ledger.update(milk.pk, 'restock', 1, manager_user)
        assert result.ok

    def test_plain_user_is_staff_without_department(self, milk, staff_user):
        result = ledger.update(milk.pk, 'restock', 1, staff_user)
        assert result.status == ResultStatus.AUTHORIZATION_ERROR

    @pytest.mark.parametrize('args, status', [
        ((999_999, 'sale', 1), ResultStatus.NOT_FOUND),
        (('milk', 'sale', 15), ResultStatus.INSUFFICIENT_STOCK),
        (('milk', 'theft', 1), ResultStatus.VALIDATION_ERROR),
        (('flour', 'sale', 1), ResultStatus.AUTHORIZATION_ERROR),
    ])
    def test_failures_are_classified(self, request, grocery_staff, args, status):
        product_ref, kind, quantity = args
        if isinstance(product_ref, str):
            product_ref = request.getfixturevalue(product_ref).pk

        result = ledger.update(product_ref, kind, quantity, grocery_staff)

        assert not result.ok
        assert result.status == status
        assert result.data is None
        assert result.error['code']

    def test_unknown_actor_is_authorization_error(self, milk):
        result = ledger.update(milk.pk, 'sale', 1, Actor(id=999_999, role=ActorRole.MANAGER))
        assert result.status == ResultStatus.AUTHORIZATION_ERROR
        assert result.error['code'] == 'UNKNOWN_ACTOR'

    def test_insufficient_stock_error_data(self, milk, manager):
        result = ledger.update(milk.pk, 'sale', 15, manager)
        assert result.error['data']['available'] == 10
        assert result.error['data']['requested'] == 15


class TestLedgerBulkUpdate:
    """Tests for ledger.bulk_update()."""

    def test_partial(self, make_product, manager):
        a, b, c = make_product(), make_product(), make_product()

        result = ledger.bulk_update([
            {'product_id': a.pk, 'change_kind': 'sale', 'quantity': 1},
            {'product_id': b.pk, 'change_kind': 'sale', 'quantity': 1},
            {'product_id': 999_999, 'change_kind': 'sale', 'quantity': 1},
            {'product_id': c.pk, 'change_kind': 'sale', 'quantity': 1},
        ], manager)

        assert result.ok
        assert result.status == ResultStatus.PARTIAL
        assert [item['index'] for item in result.data['applied']] == [0, 1, 3]
        rejected = result.data['rejected']
        assert len(rejected) == 1
        assert rejected[0]['index'] == 2
        assert rejected[0]['status'] == ResultStatus.NOT_FOUND
        assert rejected[0]['code'] == 'PRODUCT_NOT_FOUND'

    def test_full_success(self, milk, manager):
        result = ledger.bulk_update(
            [{'product_id': milk.pk, 'change_kind': 'restock', 'quantity': 1}], manager,
        )
        assert result.status == ResultStatus.SUCCESS
        assert result.data['rejected'] == []

    def test_all_failed_same_kind(self, milk, manager):
        result = ledger.bulk_update([
            {'product_id': milk.pk, 'change_kind': 'sale', 'quantity': 50},
            {'product_id': milk.pk, 'change_kind': 'sale', 'quantity': 60},
        ], manager)

        assert not result.ok
        assert result.status == ResultStatus.INSUFFICIENT_STOCK
        assert result.error['code'] == 'ALL_UPDATES_FAILED'
        assert len(result.details) == 2

    def test_all_failed_mixed(self, milk, manager):
        result = ledger.bulk_update([
            {'product_id': milk.pk, 'change_kind': 'sale', 'quantity': 50},
            {'product_id': 999_999, 'change_kind': 'sale', 'quantity': 1},
        ], manager)

        assert result.status == ResultStatus.VALIDATION_ERROR

    def test_empty_batch(self, manager):
        result = ledger.bulk_update([], manager)
        assert result.status == ResultStatus.VALIDATION_ERROR
        assert result.error['code'] == 'EMPTY_BATCH'


class TestLedgerAlerts:
    """Tests for ledger.acknowledge() and alert reads."""

    def test_acknowledge(self, milk, manager):
        ledger.update(milk.pk, 'sale', 6, manager)
        alert = StockAlert.objects.get(product=milk)

        result = ledger.acknowledge(alert.pk, manager)

        assert result.ok
        assert result.data['acknowledged'] is True
        assert ledger.list_alerts(unacknowledged_only=True) == []

    def test_acknowledge_missing(self):
        result = ledger.acknowledge(999_999)
        assert result.status == ResultStatus.NOT_FOUND

    def test_low_stock_products(self, milk, manager):
        ledger.update(milk.pk, 'sale', 6, manager)
        assert [p.pk for p in ledger.low_stock_products()] == [milk.pk]

    def test_can_modify(self, milk, flour, grocery_staff):
        assert ledger.can_modify(grocery_staff, milk)
        assert not ledger.can_modify(grocery_staff, flour)


class TestResult:
    """Tests for the Result envelope."""

    def test_success_as_dict(self):
        assert Result.success({'x': 1}).as_dict() == {
            'status': 'success',
            'data': {'x': 1},
            'error': None,
        }

    def test_failure_from_exception(self):
        exc = InsufficientStockError('INSUFFICIENT_STOCK', available=3, requested=5)
        result = Result.failure(exc)

        assert not result.ok
        assert result.status == ResultStatus.INSUFFICIENT_STOCK
        assert result.as_dict()['error'] == {
            'code': 'INSUFFICIENT_STOCK',
            'message': 'Insufficient stock',
            'data': {'available': 3, 'requested': 5},
        }

    def test_partial_is_ok(self):
        assert Result.success(partial=True).ok


class TestExceptions:
    """Tests for LedgerError formatting."""

    def test_default_message(self):
        exc = NotFoundError(product_id=7)
        assert exc.code == 'PRODUCT_NOT_FOUND'
        assert str(exc) == '[PRODUCT_NOT_FOUND] Product not found or inactive'
        assert exc.data == {'product_id': 7}

    def test_non_scalar_data_is_stringified(self):
        exc = NotFoundError(when=object)
        assert isinstance(exc.as_dict()['data']['when'], str)
