"""Nested priced components of a cart line."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Mapping, Optional

from ..utils.money import Amount, normalize_price
from .attributes import ITEM_PRICE, ITEM_TAX, AttributeStore, normalize_attribute
from .hashing import IdentityHasher

ITEM_ITEMS = "items"


class CartSubItem:
    """A priced option attached to a cart item (e.g. "extra cheese").

    A sub-item has no quantity of its own: its subtotal is added once per
    unit of the parent. Nested ``items`` may be plain dicts, which become
    sub-items themselves, or full cart items, which contribute their
    quantity-aware subtotal.
    """

    def __init__(
        self,
        data: Mapping[str, Any],
        prices_in_cents: bool = False,
        hasher: Optional[IdentityHasher] = None,
    ) -> None:
        self.prices_in_cents = prices_in_cents
        self._hasher = hasher or IdentityHasher()
        self.attributes = AttributeStore()

        for key, value in data.items():
            if key in (ITEM_PRICE, ITEM_TAX):
                value = normalize_attribute(key, value, prices_in_cents)
            elif key == ITEM_ITEMS:
                value = [self._nested(entry) for entry in value or []]
            self.attributes[key] = value

        self._hash = self._hasher.hash_data(self.attributes.canonical())

    def _nested(self, entry: Any) -> Any:
        if isinstance(entry, Mapping):
            return CartSubItem(entry, prices_in_cents=self.prices_in_cents, hasher=self._hasher)
        if not hasattr(entry, "sub_total"):
            raise TypeError(f"Nested sub-item entries must be mappings or priced items, got {entry!r}")
        return entry

    def get_hash(self) -> str:
        return self._hash

    @property
    def price(self) -> Amount:
        return self.attributes.get(ITEM_PRICE, normalize_price(0, in_cents=self.prices_in_cents))

    @property
    def items(self) -> List[Any]:
        return list(self.attributes.get(ITEM_ITEMS, []))

    def sub_total(self) -> Amount:
        """Own price plus every nested item's subtotal."""
        total = self.price
        for item in self.items:
            total += item.sub_total()
        return total

    def find(self, query: Any) -> Optional["CartSubItem"]:
        return self if self.attributes.matches(query) else None

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.attributes[key]

    def __contains__(self, key: str) -> bool:
        return key in self.attributes

    def __repr__(self) -> str:
        return f"CartSubItem(hash={self._hash[:12]}, price={self.price})"


class SubItemAggregator:
    """Sub-items of one cart item keyed by their content hash."""

    def __init__(self) -> None:
        self._sub_items: Dict[str, CartSubItem] = {}

    def add(self, sub_item: CartSubItem) -> CartSubItem:
        # same content means same key: a repeated add replaces, never duplicates
        self._sub_items[sub_item.get_hash()] = sub_item
        return sub_item

    def remove(self, sub_item_hash: str) -> bool:
        return self._sub_items.pop(sub_item_hash, None) is not None

    def find(self, sub_item_hash: str) -> Optional[CartSubItem]:
        return self._sub_items.get(sub_item_hash)

    def search(self, query: Any) -> List[CartSubItem]:
        return [sub_item for sub_item in self._sub_items.values() if sub_item.find(query) is not None]

    def total(self) -> Amount:
        return sum((sub_item.sub_total() for sub_item in self._sub_items.values()), 0)

    def keys(self):
        return self._sub_items.keys()

    def values(self):
        return self._sub_items.values()

    def items(self):
        return self._sub_items.items()

    def __iter__(self) -> Iterator[str]:
        return iter(self._sub_items)

    def __len__(self) -> int:
        return len(self._sub_items)

    def __contains__(self, sub_item_hash: object) -> bool:
        return sub_item_hash in self._sub_items

    def __getitem__(self, sub_item_hash: str) -> CartSubItem:
        return self._sub_items[sub_item_hash]
