"""Shared fixtures for the ShopSense test suite."""

from datetime import datetime, timedelta

import pytest

from src.personalization.behavior import BehaviorStore
from src.personalization.catalog import SAMPLE_PRODUCTS, StaticCatalog
from src.personalization.models import Product
from src.personalization.storage import InMemoryStore


def make_product(product_id, **overrides) -> Product:
    """Build a product with neutral defaults."""
    fields = {
        "id": str(product_id),
        "name": f"Product {product_id}",
        "category": "Misc",
        "brand": "Generic",
        "price": 10.0,
        "rating": 3.0,
        "reviews": 10,
    }
    fields.update(overrides)
    return Product(**fields)


class StepClock:
    """Deterministic clock advancing by a fixed step on each call."""

    def __init__(self, start=datetime(2024, 5, 1, 12, 0, 0), step=timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture
def catalog():
    """Fixture providing the demo catalog."""
    return StaticCatalog(SAMPLE_PRODUCTS)


@pytest.fixture
def behavior():
    return BehaviorStore()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def product_factory():
    """Fixture providing ``make_product``."""
    return make_product
