"""
Department model — owning group for products.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Department(models.Model):
    """
    Group that owns products for staff scoping.

    Departments are managed by external CRUD; the ledger only reads
    Product.department to decide who may change stock.
    """

    code = models.SlugField(
        unique=True,
        max_length=50,
        verbose_name=_('Code'),
    )
    name = models.CharField(
        max_length=100,
        verbose_name=_('Name'),
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'departments'
        verbose_name = _('Department')
        verbose_name_plural = _('Departments')
        ordering = ['name']

    def __str__(self) -> str:
        return self.name
