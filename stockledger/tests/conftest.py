"""
Pytest fixtures for Stockledger tests.
"""

import pytest
from django.contrib.auth import get_user_model

from stockledger.adapters import get_event_publisher, reset_adapters
from stockledger.models import ActorRole, Department, Product
from stockledger.protocols.actor import Actor


User = get_user_model()


@pytest.fixture(autouse=True)
def _fresh_adapters():
    """Drop cached adapters so settings overrides take effect."""
    reset_adapters()
    yield
    reset_adapters()


@pytest.fixture
def publisher():
    """The configured in-memory publisher, emptied."""
    pub = get_event_publisher()
    pub.clear()
    return pub


# =========================================================================
# DEPARTMENTS
# =========================================================================

@pytest.fixture
def grocery(db):
    return Department.objects.create(code='grocery', name='Grocery')


@pytest.fixture
def bakery(db):
    return Department.objects.create(code='bakery', name='Bakery')


# =========================================================================
# USERS / ACTORS
# =========================================================================

@pytest.fixture
def manager_user(db):
    """Superuser: resolved as manager."""
    return User.objects.create_superuser(
        username='manager',
        email='manager@example.com',
        password='testpass123',
    )


@pytest.fixture
def staff_user(db):
    """Regular user: resolved as staff."""
    return User.objects.create_user(
        username='staff',
        password='testpass123',
    )


@pytest.fixture
def manager(manager_user):
    return Actor(id=manager_user.pk, role=ActorRole.MANAGER)


@pytest.fixture
def grocery_staff(staff_user, grocery):
    return Actor(id=staff_user.pk, role=ActorRole.STAFF, department_id=grocery.pk)


@pytest.fixture
def bakery_staff(staff_user, bakery):
    return Actor(id=staff_user.pk, role=ActorRole.STAFF, department_id=bakery.pk)


# =========================================================================
# PRODUCTS
# =========================================================================

@pytest.fixture
def make_product(db):
    """Factory for products with unique SKUs."""
    counter = iter(range(1, 10_000))

    def _make(name='Widget', quantity=10, minimum=0, department=None, **kwargs):
        return Product.objects.create(
            name=name,
            sku=f'SKU-{next(counter):04d}',
            quantity_in_stock=quantity,
            minimum_stock_level=minimum,
            department=department,
            **kwargs,
        )

    return _make


@pytest.fixture
def milk(make_product, grocery):
    """Grocery product: 10 on hand, alert at 5."""
    return make_product(name='Milk', quantity=10, minimum=5, department=grocery)


@pytest.fixture
def flour(make_product, bakery):
    """Bakery product: 50 on hand, alerting disabled."""
    return make_product(name='Flour', quantity=50, minimum=0, department=bakery)


@pytest.fixture
def unassigned(make_product):
    """Product without department: manager-only."""
    return make_product(name='Loose item', quantity=10)
