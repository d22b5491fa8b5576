"""Errors raised by cart line items."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class CartlineError(Exception):
    """Base class for every cartline error."""


class InvalidQuantity(CartlineError, ValueError):
    """Quantity is not an integral number of at least one."""


class InvalidPrice(CartlineError, ValueError):
    """Price is not numeric."""


class InvalidTaxableValue(CartlineError, ValueError):
    """Tax rate or taxable flag has an unusable value."""


class InvalidDiscount(CartlineError, ValueError):
    """Discount recorded for a unit the item does not have."""


class ModelNotFound(CartlineError, LookupError):
    """Linked business object type or record could not be resolved."""


@dataclass(frozen=True)
class ModelLookup:
    """Outcome of resolving an item's linked model.

    Exactly one of ``value`` and ``error`` is set.
    """

    value: Any = None
    error: Optional[ModelNotFound] = None

    @property
    def found(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.value
