import pytest
from datetime import date
from decimal import Decimal

from apps.accounts.models import User
from apps.catalog.models import Category, Product
from apps.credit.models import CreditProfile, CreditSettings
from apps.credit.services import create_installment_plan


@pytest.fixture
def customer(db):
    """Create and return an active customer with declared income."""
    return User.objects.create(
        full_name='Awa Marie Ndiaye',
        email='awa.ndiaye@example.com',
        phone_number='+221 77 000 00 01',
        keycloak_id='kc-awa-ndiaye',
        monthly_income=Decimal('2000.00'),
        roles=['CUSTOMER'],
    )


@pytest.fixture
def other_customer(db):
    """Create and return another customer."""
    return User.objects.create(
        full_name='Moussa Fall',
        email='moussa.fall@example.com',
        phone_number='+221 77 000 00 02',
        keycloak_id='kc-moussa-fall',
        roles=['CUSTOMER'],
    )


@pytest.fixture
def category(db):
    """Create and return a root category."""
    return Category.objects.create(name='Phones', slug='phones')


@pytest.fixture
def product(category):
    """Create and return a cash-only product with 10 units in stock."""
    return Product.objects.create(
        name='USB Charger',
        sku='CHG-001',
        slug='usb-charger-chg-001',
        price=Decimal('100.00'),
        stock=10,
        min_stock=2,
        category=category,
    )


@pytest.fixture
def credit_product(category):
    """Create and return a credit-eligible product (min 100.00, up to 12 months)."""
    return Product.objects.create(
        name='Smartphone X',
        sku='PHN-X',
        slug='smartphone-x-phn-x',
        price=Decimal('1000.00'),
        stock=5,
        min_stock=1,
        category=category,
        credit_eligible=True,
        min_credit_amount=Decimal('100.00'),
        max_credit_duration=12,
    )


@pytest.fixture
def credit_settings(db):
    """Create active offers for 3, 6 and 12 months."""
    return [
        CreditSettings.objects.create(duration_months=3, commission_rate=Decimal('0.0500')),
        CreditSettings.objects.create(duration_months=6, commission_rate=Decimal('0.0800')),
        CreditSettings.objects.create(duration_months=12, commission_rate=Decimal('0.1200')),
    ]


@pytest.fixture
def credit_profile(customer):
    """Create and return the customer's credit line of 5000.00."""
    return CreditProfile.objects.create(
        user=customer,
        credit_score=750,
        credit_limit=Decimal('5000.00'),
        available_credit=Decimal('5000.00'),
    )


@pytest.fixture
def plan(customer, credit_product, credit_settings, credit_profile):
    """
    Create a 3-month plan on 1000.00 at 5% starting 2024-01-15.

    Total 1050.00 in three installments of 350.00 due on the 15th of
    February, March and April.
    """
    return create_installment_plan(
        user=customer,
        product_id=credit_product.id,
        principal_amount=Decimal('1000.00'),
        duration_months=3,
        start_date=date(2024, 1, 15),
    )
