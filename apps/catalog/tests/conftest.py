import pytest
from decimal import Decimal

from apps.catalog.models import Category, ItemType, WarehouseItem, ItemKind


@pytest.fixture
def category(db):
    return Category.objects.create(name='POS Terminals', position=0)


@pytest.fixture
def other_category(db):
    return Category.objects.create(name='Software', position=1)


@pytest.fixture
def item_type(db):
    return ItemType.objects.create(name='Mobile')


@pytest.fixture
def terminal(db, category, item_type):
    """Tracked-stock device."""
    return WarehouseItem.objects.create(
        name='PAX A920',
        kind=ItemKind.DEVICE,
        category=category,
        item_type=item_type,
        monthly_fee=Decimal('29.00'),
        company_cost=Decimal('12.50'),
        min_stock=5,
        current_stock=10,
    )


@pytest.fixture
def stand(db, category):
    return WarehouseItem.objects.create(
        name='Terminal Stand',
        kind=ItemKind.DEVICE,
        category=category,
        monthly_fee=Decimal('2.00'),
        company_cost=Decimal('0.50'),
    )


@pytest.fixture
def service_item(db):
    """Service without stock tracking."""
    return WarehouseItem.objects.create(
        name='Cloud POS',
        kind=ItemKind.SERVICE,
        monthly_fee=Decimal('15.00'),
        company_cost=Decimal('3.00'),
    )
