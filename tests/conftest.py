"""
Pytest configuration and fixtures for cartline tests.
"""

import os
import sys
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

import pytest

# Add src to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from cartline.pricing import CartItem, ModelRepository  # noqa: E402
from cartline.utils.config import Config  # noqa: E402


class FakeModelRepository(ModelRepository):
    """In-memory catalog keyed by model type and id."""

    def __init__(self, records=None):
        self.records = records or {}
        self.calls = []

    def has_type(self, descriptor):
        return descriptor in self.records

    def resolve(self, descriptor, item_id, relations=()):
        self.calls.append((descriptor, item_id, list(relations)))
        return self.records.get(descriptor, {}).get(item_id)


@pytest.fixture
def mock_env():
    """Isolate environment variables touched by Config."""
    with patch.dict(os.environ, {}):
        for key in (
            "LOG_LEVEL", "PRICES_IN_CENTS", "CART_TAX", "CURRENCY_CODE", "LOCALE",
            "EXCLUDE_FROM_HASH", "ITEM_MODEL", "ITEM_MODEL_RELATIONS",
            "DB_CONNECTION_URL", "DB_NAME", "MODEL_COLLECTIONS",
        ):
            os.environ.pop(key, None)
        yield


@pytest.fixture
def config():
    """Decimal prices with an 8.25% default tax."""
    return Config(overrides={"tax": Decimal("0.0825")})


@pytest.fixture
def cents_config():
    return Config(overrides={"tax": Decimal("0.0825"), "prices_in_cents": True})


@pytest.fixture
def catalog():
    return FakeModelRepository({
        "product": {
            1: {"_id": 1, "name": "Widget", "variants": [{"sku": "W-RED"}]},
        },
    })


@pytest.fixture
def make_item(config):
    """Factory building items with the default test configuration."""
    def _make(id=1, name="Widget", qty=1, price="10.00", options=None, **kwargs):
        kwargs.setdefault("config", config)
        return CartItem(id, name, qty, price, options, **kwargs)
    return _make
