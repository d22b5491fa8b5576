"""Cart line pricing module entry point."""

from .errors import (
    CartlineError,
    InvalidDiscount,
    InvalidPrice,
    InvalidQuantity,
    InvalidTaxableValue,
    ModelLookup,
    ModelNotFound,
)
from .hashing import IdentityHasher
from .item import CartItem
from .repository import ModelRepository, MongoModelRepository
from .sub_items import CartSubItem
from .tax import Reconciliation, TaxEngine

__all__ = [
    "CartItem",
    "CartSubItem",
    "IdentityHasher",
    "TaxEngine",
    "Reconciliation",
    "ModelRepository",
    "MongoModelRepository",
    "ModelLookup",
    "CartlineError",
    "InvalidQuantity",
    "InvalidPrice",
    "InvalidTaxableValue",
    "InvalidDiscount",
    "ModelNotFound",
]
