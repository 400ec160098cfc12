"""
Tests for admin registrations.
"""

import pytest
from django.contrib import admin

from stockledger.admin import LedgerEntryAdmin, StockAlertAdmin
from stockledger.models import LedgerEntry, StockAlert
from stockledger.services.alerts import AlertEngine


pytestmark = pytest.mark.django_db


class TestLedgerEntryAdmin:

    def test_read_only(self, rf, admin_user):
        model_admin = LedgerEntryAdmin(LedgerEntry, admin.site)
        request = rf.get('/')
        request.user = admin_user

        assert not model_admin.has_add_permission(request)
        assert not model_admin.has_change_permission(request)
        assert not model_admin.has_delete_permission(request)


class TestStockAlertAdmin:

    def test_acknowledge_action(self, rf, admin_user, make_product, monkeypatch):
        model_admin = StockAlertAdmin(StockAlert, admin.site)
        messages = []
        monkeypatch.setattr(model_admin, 'message_user', lambda request, msg: messages.append(str(msg)))
        alerts = [AlertEngine.evaluate(make_product(quantity=0, minimum=2).pk) for _ in range(2)]
        request = rf.post('/')
        request.user = admin_user

        model_admin.acknowledge_alerts(request, StockAlert.objects.all())

        assert not StockAlert.objects.open().exists()
        assert StockAlert.objects.filter(pk__in=[a.pk for a in alerts], acknowledged=True).count() == 2
        assert messages == ['2 alert(s) acknowledged.']
