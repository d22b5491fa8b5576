"""Tests for MongoDB model resolution."""

from unittest.mock import MagicMock, patch

import pytest

from cartline.pricing import MongoModelRepository
from cartline.utils.config import Config

COLLECTIONS = {"product": "PRODUCTS", "variants": "VARIANTS"}


@pytest.fixture
def mongo_client():
    with patch("cartline.pricing.repository.MongoClient") as client_cls:
        client = MagicMock()
        client_cls.return_value = client
        yield client_cls, client


class TestMongoModelRepository:
    """Test cases for MongoModelRepository."""

    def test_requires_url(self):
        with pytest.raises(ValueError):
            MongoModelRepository(config=Config())

    def test_has_type(self):
        repo = MongoModelRepository(url="mongodb://localhost", collections=COLLECTIONS, config=Config())
        assert repo.has_type("product")
        assert not repo.has_type("warehouse")

    def test_resolve_with_relations(self, mongo_client):
        client_cls, client = mongo_client
        products, variants = MagicMock(), MagicMock()
        client.__getitem__.return_value.__getitem__.side_effect = {"PRODUCTS": products, "VARIANTS": variants}.get
        products.find_one.return_value = {"_id": 1, "name": "Widget"}
        variants.find.return_value = iter([{"sku": "W-RED", "productId": 1}])

        with MongoModelRepository(url="mongodb://localhost", db_name="CATALOG", collections=COLLECTIONS) as repo:
            document = repo.resolve("product", 1, ["variants", "unknown"])

        client_cls.assert_called_once_with("mongodb://localhost", serverSelectionTimeoutMS=5000)
        client.__getitem__.assert_called_with("CATALOG")
        products.find_one.assert_called_once_with({"_id": 1})
        variants.find.assert_called_once_with({"productId": 1})
        assert document == {"_id": 1, "name": "Widget", "variants": [{"sku": "W-RED", "productId": 1}]}
        client.close.assert_called_once_with()

    def test_resolve_missing(self, mongo_client):
        _, client = mongo_client
        client.__getitem__.return_value.__getitem__.return_value.find_one.return_value = None

        repo = MongoModelRepository(url="mongodb://localhost", collections=COLLECTIONS, config=Config())
        assert repo.resolve("product", 42) is None
        assert repo.resolve("warehouse", 42) is None
