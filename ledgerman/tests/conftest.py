"""
Pytest fixtures for Ledgerman tests.
"""

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from ledgerman.adapters.pricing import reset_price_resolver
from ledgerman.models import (
    Brand,
    CustomerType,
    Party,
    PartyKind,
    Product,
)


User = get_user_model()


@pytest.fixture(autouse=True)
def _reset_price_resolver():
    """Each test resolves PRICE_RESOLVER from its own settings."""
    reset_price_resolver()
    yield
    reset_price_resolver()


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='testuser',
        password='testpass123'
    )


@pytest.fixture
def supplier(db):
    return Party.objects.create(
        kind=PartyKind.SUPPLIER,
        name='Shenzhen Mobile Ltd',
    )


@pytest.fixture
def phone(db, supplier):
    """Feature phone with dealer and retail prices."""
    return Product.objects.create(
        model_name='GT-100',
        brand=Brand.GREEN_TEL,
        purchase_price=Decimal('800.00'),
        sales_price=Decimal('1200.00'),
        dealer_price=Decimal('1000.00'),
        supplier=supplier,
    )


@pytest.fixture
def charger(db):
    return Product.objects.create(
        model_name='GT-Charger',
        brand=Brand.GREEN_TEL,
        purchase_price=Decimal('80.00'),
        sales_price=Decimal('150.00'),
    )


@pytest.fixture
def dealer(db):
    """Customer of type dealer (can file replacement claims)."""
    return Party.objects.create(
        kind=PartyKind.CUSTOMER,
        customer_type=CustomerType.DEALER,
        name='Rahim Telecom',
        district='Dhaka',
    )


@pytest.fixture
def retail(db):
    return Party.objects.create(
        kind=PartyKind.CUSTOMER,
        customer_type=CustomerType.RETAIL,
        name='Walk-in Customer',
    )


@pytest.fixture
def employee(db):
    return Party.objects.create(
        kind=PartyKind.EMPLOYEE,
        name='Karim',
    )


@pytest.fixture
def stocked_phone(phone):
    """Phone with 10 units in good stock."""
    from ledgerman import books

    return books.increase(phone, 'good', 10, reason='Opening stock')
