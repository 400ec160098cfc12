"""
Enums for Stockledger models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class ChangeKind(models.TextChoices):
    """
    Kind of stock change recorded in the ledger.

    RESTOCK, RETURN: always additive, sign of the magnitude is ignored.
    SALE:            always subtractive, sign of the magnitude is ignored.
    ADJUSTMENT:      signed, may increase or decrease stock.
    """
    RESTOCK = 'restock', _('Restock')
    SALE = 'sale', _('Sale')
    ADJUSTMENT = 'adjustment', _('Adjustment')
    RETURN = 'return', _('Return')


class ActorRole(models.TextChoices):
    """Roles known to the authorization gate."""
    MANAGER = 'manager', _('Manager')  # May modify any product
    STAFF = 'staff', _('Staff')        # Scoped to own department
