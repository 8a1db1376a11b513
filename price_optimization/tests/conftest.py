from datetime import datetime, timezone

import pytest

from price_optimization.catalog import InMemoryProductCatalog
from price_optimization.core.models import PricingContext, Product
from price_optimization.history import InMemoryHistoryStore


@pytest.fixture
def make_product():
    def _make(**overrides):
        params = {
            'id': 'prod-001',
            'name': 'Premium Flight Ticket - NYC to LAX',
            'base_price': 300.0,
            'current_price': 300.0,
            'price_floor': 200.0,
            'price_ceiling': 500.0,
            'inventory': 50,
            'max_inventory': 100,
            'demand_level': 'medium',
            'category': 'travel'
        }
        params.update(overrides)
        return Product(**params)
    return _make


@pytest.fixture
def make_context():
    """Context whose seven adjustments are all zero unless overridden"""
    def _make(**overrides):
        params = {
            'demand_elasticity': 0.5,
            'inventory_ratio': 0.5,
            'time_of_day': 8,
            'day_of_week': 3,
            'seasonality_index': 1.0,
            'user_segment': 'returning_customer',
            'historical_performance': 0.5
        }
        params.update(overrides)
        return PricingContext(**params)
    return _make


@pytest.fixture
def product(make_product):
    return make_product()


@pytest.fixture
def neutral_context(make_context):
    return make_context()


@pytest.fixture
def fixed_time():
    # Wednesday 08:00 UTC in June
    return datetime(2024, 6, 5, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def catalog(product, make_product):
    return InMemoryProductCatalog([
        product,
        make_product(id='prod-002', name='Luxury Hotel Room - Manhattan', base_price=250.0,
                     current_price=250.0, price_floor=150.0, price_ceiling=400.0,
                     inventory=25, max_inventory=50, demand_level='high', category='accommodation')
    ])


@pytest.fixture
def history():
    return InMemoryHistoryStore()
