"""Shared pytest fixtures and configuration for all tests."""

import os
from decimal import Decimal

import pytest

# Must be set before src.main is imported so collection never builds the real app
os.environ["ENVIRONMENT"] = "test"

from pos_ordering_client.models.catalog_models import Category, Product  # noqa: E402
from pos_ordering_client.models.table_models import Table, TableStatus  # noqa: E402


@pytest.fixture
def coffee() -> Product:
    """Fixture providing a product tagged with its category id."""
    return Product(id="p1", name="Kopi Susu", price=Decimal("10"), category="c1")


@pytest.fixture
def tea() -> Product:
    """Fixture providing a product tagged with its category name."""
    return Product(id="p2", name="Es Teh", price=Decimal("20"), category="Drinks")


@pytest.fixture
def fried_rice() -> Product:
    """Fixture providing a product in another category."""
    return Product(id="p3", name="Nasi Goreng", price=Decimal("25"), category="c2")


@pytest.fixture
def mock_products(coffee: Product, tea: Product, fried_rice: Product) -> list[Product]:
    """Fixture providing a small product list."""
    return [coffee, tea, fried_rice]


@pytest.fixture
def mock_categories() -> list[Category]:
    """Fixture providing categories as returned by the backend."""
    return [
        Category(id="c1", name="Drinks", icon="Coffee"),
        Category(id="c2", name="Food", icon="Utensils"),
    ]


@pytest.fixture
def mock_tables() -> list[Table]:
    """Fixture providing tables in every status."""
    return [
        Table(id="t1", table_number="1", capacity=4, area="Indoor"),
        Table(
            id="t2",
            table_number="2",
            capacity=2,
            area="Outdoor",
            status=TableStatus.OCCUPIED,
            current_order_id="ord_9",
        ),
        Table(id="t3", table_number="3", capacity=6, area="Indoor", status=TableStatus.RESERVED),
    ]


@pytest.fixture
def mock_payment_method_records() -> list[dict]:
    """Fixture providing payment method records in backend wire format."""
    return [
        {
            "id": "cash",
            "name": "Cash",
            "category": "offline",
            "subCategory": "cash",
            "enabled": True,
            "isDefault": True,
            "fee": 0,
            "feeType": "flat",
        },
        {
            "id": "qris-static",
            "name": "QRIS Statis",
            "category": "online",
            "subCategory": "qris",
            "enabled": False,
            "isDefault": True,
            "fee": 0.7,
            "feeType": "percentage",
            "config": {"qrImage": "https://example.com/qr.png"},
        },
        {
            "id": "42",
            "name": "OVO Merchant",
            "category": "online",
            "enabled": True,
            "isDefault": False,
            "fee": 1,
            "feeType": "percentage",
        },
    ]
