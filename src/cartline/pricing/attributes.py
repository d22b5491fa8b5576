"""Attribute storage and strict attribute matching for cart items."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from decimal import Decimal
from typing import Any, Dict, Iterator, Optional

from ..utils.money import is_numeric, normalize_price, to_decimal
from .errors import InvalidPrice, InvalidQuantity, InvalidTaxableValue

ITEM_ID = "id"
ITEM_QTY = "qty"
ITEM_TAX = "tax"
ITEM_NAME = "name"
ITEM_PRICE = "price"
ITEM_TAXABLE = "taxable"

DECLARED_FIELDS = (ITEM_ID, ITEM_NAME, ITEM_QTY, ITEM_PRICE, ITEM_TAX, ITEM_TAXABLE)


def normalize_quantity(value: Any) -> int:
    if not is_numeric(value):
        raise InvalidQuantity("The quantity must be a valid number")
    number = to_decimal(value)
    if number != number.to_integral_value() or number < 1:
        raise InvalidQuantity(f"The quantity must be a whole number of at least 1, got {value!r}")
    return int(number)


def normalize_tax(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if not is_numeric(value):
        raise InvalidTaxableValue("The tax must be a number")
    rate = to_decimal(value)
    if rate < 0 or rate > 1:
        raise InvalidTaxableValue(f"The tax must be a fraction between 0 and 1, got {value!r}")
    return rate


def normalize_taxable(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value in (0, 1) and not isinstance(value, str):
        return bool(value)
    raise InvalidTaxableValue("The taxable option must be a boolean")


def normalize_attribute(key: str, value: Any, prices_in_cents: bool = False) -> Any:
    """Validate a declared field and convert it to its stored form.

    Extension attributes are stored untouched.
    """
    if key == ITEM_QTY:
        return normalize_quantity(value)
    if key == ITEM_PRICE:
        if not is_numeric(value):
            raise InvalidPrice("The price must be a valid number")
        return normalize_price(value, in_cents=prices_in_cents)
    if key == ITEM_TAX:
        return normalize_tax(value)
    if key == ITEM_TAXABLE:
        return normalize_taxable(value)
    return value


def strict_equals(left: Any, right: Any) -> bool:
    """Equality that also requires both values to share a type ("1" != 1, True != 1)."""
    return type(left) is type(right) and left == right


def matches(attributes: Mapping, query: Any) -> bool:
    """True when every key of ``query`` is present in ``attributes`` with a strictly equal value."""
    if not isinstance(query, Mapping):
        return False
    for key, value in query.items():
        try:
            if key not in attributes:
                return False
        except TypeError:
            # unhashable key can never name an attribute
            return False
        if not strict_equals(attributes[key], value):
            return False
    return True


class AttributeStore(MutableMapping):
    """Ordered, key-unique mapping of an item's declared and extension fields."""

    def __init__(self, data: Optional[Mapping] = None) -> None:
        self._data: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            self[key] = value

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if not isinstance(key, str):
            raise TypeError(f"Attribute names must be strings, got {key!r}")
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"AttributeStore({self._data!r})"

    def extensions(self) -> Dict[str, Any]:
        """Attributes that are not declared item fields."""
        return {key: value for key, value in self._data.items() if key not in DECLARED_FIELDS}

    def canonical(self, excluded=()) -> Dict[str, Any]:
        """Copy with ``excluded`` keys removed and keys sorted."""
        return {key: self._data[key] for key in sorted(self._data, key=str) if key not in excluded}

    def matches(self, query: Any) -> bool:
        return matches(self, query)
