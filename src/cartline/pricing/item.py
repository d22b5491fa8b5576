"""Cart line item: identity, sub-items, discounts and tax-aware totals.

Items are not thread-safe. Hash, tax and discount state are updated with
plain read-modify-write; callers sharing an item between threads must
serialize mutations on the item and its owning cart.
"""

from __future__ import annotations

from collections import ChainMap
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..utils.config import Config
from ..utils.logging import get_logger
from ..utils.money import Amount, MoneyFormatter, normalize_price
from .attributes import (
    ITEM_ID,
    ITEM_NAME,
    ITEM_PRICE,
    ITEM_QTY,
    ITEM_TAX,
    ITEM_TAXABLE,
    AttributeStore,
    matches,
    normalize_attribute,
)
from .discounts import DiscountTracker
from .errors import ModelLookup, ModelNotFound
from .events import ItemObservers, Observer
from .hashing import IdentityHasher
from .repository import ModelRepository
from .sub_items import CartSubItem, SubItemAggregator
from .tax import TaxEngine

logger = get_logger(__name__)


class CartItem:
    """A single line of a shopping cart.

    Declared fields (id, name, qty, price, tax, taxable) and free-form options
    share one attribute store; the declared ones are validated on write and
    have typed properties. Items with equal content share a hash so the cart
    can merge them; ``line_item=True`` opts out of merging.
    """

    def __init__(
        self,
        id: Any,
        name: str,
        qty: int,
        price: Union[int, float, str, Decimal],
        options: Optional[Mapping[str, Any]] = None,
        taxable: bool = True,
        line_item: bool = False,
        config: Optional[Config] = None,
        hasher: Optional[IdentityHasher] = None,
        formatter: Optional[MoneyFormatter] = None,
        repository: Optional[ModelRepository] = None,
        owner: Any = None,
    ) -> None:
        self.config = config or Config()
        self.prices_in_cents = bool(self.config.get("prices_in_cents", False))
        self.line_item = line_item
        self.currency_code = self.config.get("currency_code")
        self.locale = self.config.get("locale")
        self.item_model = self.config.get("item_model")
        self.item_model_relations: List[str] = list(self.config.get("item_model_relations") or [])
        self.excluded_hash_fields = frozenset(self.config.get("exclude_from_hash") or ())
        self.repository = repository
        self.owner = owner

        self._active = True
        self._item_hash: Optional[str] = None
        self._hasher = hasher or IdentityHasher()
        self._formatter = formatter or MoneyFormatter.from_config(self.config)
        self._tax_engine = TaxEngine(precision=0 if self.prices_in_cents else 2)
        self._observers = ItemObservers()

        self.attributes = AttributeStore()
        self.sub_items = SubItemAggregator()
        self.discounted = DiscountTracker(
            lambda: self.quantity, prices_in_cents=self.prices_in_cents, on_change=self.update
        )

        self._assign(ITEM_ID, id)
        self._assign(ITEM_NAME, name)
        self._assign(ITEM_QTY, qty)
        self._assign(ITEM_PRICE, price)
        self._assign(ITEM_TAXABLE, taxable)
        for option, value in (options or {}).items():
            self._assign(option, value)
        if ITEM_TAX not in self.attributes:
            self._assign(ITEM_TAX, self.config.get("tax"))

        self.generate_hash()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], **kwargs) -> "CartItem":
        """Build an item (with sub-items and discounts) from plain data."""
        item = cls(
            data["id"],
            data["name"],
            data.get("qty", 1),
            data.get("price", 0),
            options=data.get("options"),
            taxable=data.get("taxable", True),
            line_item=data.get("line_item", False),
            **kwargs,
        )
        for sub_item in data.get("sub_items", []):
            item.add_sub_item(sub_item)
        for index, amount in (data.get("discounted") or {}).items():
            item.discounted[int(index)] = amount
        if not data.get("active", True):
            item.disable()
        return item

    # Attributes

    def _assign(self, key: str, value: Any) -> None:
        self.attributes[key] = normalize_attribute(key, value, self.prices_in_cents)
        if key == ITEM_QTY:
            self.discounted.truncate(self.attributes[ITEM_QTY])

    def set(self, key: str, value: Any) -> None:
        """Set a declared field or option, rehashing an already hashed item."""
        self._assign(key, value)
        if self._item_hash is not None:
            self.generate_hash()

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.attributes[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __contains__(self, key: str) -> bool:
        return key in self.attributes

    @property
    def options(self) -> Dict[str, Any]:
        """Extension attributes that are not declared fields."""
        return self.attributes.extensions()

    @property
    def id(self) -> Any:
        return self.attributes[ITEM_ID]

    @property
    def name(self) -> str:
        return self.attributes[ITEM_NAME]

    @name.setter
    def name(self, value: str) -> None:
        self.set(ITEM_NAME, value)

    @property
    def quantity(self) -> int:
        return self.attributes[ITEM_QTY]

    @quantity.setter
    def quantity(self, value: int) -> None:
        self.set(ITEM_QTY, value)

    @property
    def price(self) -> Amount:
        return self.attributes[ITEM_PRICE]

    @price.setter
    def price(self, value: Union[int, float, str, Decimal]) -> None:
        self.set(ITEM_PRICE, value)

    @property
    def tax_rate(self) -> Decimal:
        return self.attributes[ITEM_TAX]

    @tax_rate.setter
    def tax_rate(self, value: Union[float, str, Decimal]) -> None:
        self.set(ITEM_TAX, value)

    @property
    def taxable(self) -> bool:
        return self.attributes[ITEM_TAXABLE]

    @taxable.setter
    def taxable(self, value: bool) -> None:
        self.set(ITEM_TAXABLE, value)

    @property
    def active(self) -> bool:
        return self._active

    @active.setter
    def active(self, value: bool) -> None:
        self._active = bool(value)
        self.update()

    def enable(self) -> None:
        self.active = True

    def disable(self) -> None:
        self.active = False

    # Identity

    def generate_hash(self, force: bool = False) -> str:
        """Recompute the item hash and notify observers of the result."""
        self._item_hash = self._hasher.compute(self, force=force)
        self._observers.notify(self, self._item_hash)
        return self._item_hash

    def get_hash(self) -> Optional[str]:
        return self._item_hash

    def subscribe(self, observer: Observer) -> None:
        self._observers.subscribe(observer)

    def unsubscribe(self, observer: Observer) -> None:
        self._observers.unsubscribe(observer)

    def attach(self, owner: Any) -> None:
        """Attach the collection that must be told when this item changes."""
        self.owner = owner

    def detach(self) -> None:
        self.owner = None

    def update(self) -> None:
        self.generate_hash()
        if self.owner is not None:
            self.owner.update()

    def find(self, query: Any) -> Optional["CartItem"]:
        """Return this item when every queried attribute is strictly equal, else None."""
        flags = {
            "active": self.active,
            "line_item": self.line_item,
            "currency_code": self.currency_code,
            "locale": self.locale,
        }
        return self if matches(ChainMap(dict(self.attributes), flags), query) else None

    # Sub-items

    def add_sub_item(self, data: Mapping[str, Any]) -> CartSubItem:
        sub_item = self.sub_items.add(CartSubItem(data, prices_in_cents=self.prices_in_cents, hasher=self._hasher))
        self.update()
        return sub_item

    def remove_sub_item(self, sub_item_hash: str) -> None:
        self.sub_items.remove(sub_item_hash)
        self.update()

    def find_sub_item(self, sub_item_hash: str) -> Optional[CartSubItem]:
        return self.sub_items.find(sub_item_hash)

    def search_for_sub_item(self, query: Any) -> List[CartSubItem]:
        return self.sub_items.search(query)

    def sub_items_total(self) -> Amount:
        return self.sub_items.total()

    # Pricing

    def _zero(self) -> Amount:
        return normalize_price(0, in_cents=self.prices_in_cents)

    def format_amount(self, amount: Amount, format: bool = False) -> Union[Amount, str]:
        raw = self._formatter.format(amount, self.currency_code, self.locale, enabled=False)
        if format:
            return self._formatter.format(raw, self.currency_code, self.locale, enabled=True)
        return raw

    def get_price(self) -> Amount:
        return self.price

    def get_discount(self) -> Amount:
        return self.discounted.total()

    def sub_total_per_item(self) -> Amount:
        if not self.active:
            return self._zero()
        return self.price + self.sub_items_total()

    def sub_total(self) -> Amount:
        return self.sub_total_per_item() * self.quantity

    def tax_summary(self) -> Amount:
        """Tax for the whole line after per-unit discounts."""
        price = self.price if self.taxable else self._zero()
        tax = self._tax_engine.tax_amount(price, self.quantity, self.tax_rate, self.discounted)
        return self.format_amount(tax)

    def tax_total(self) -> Amount:
        if not self.active:
            return self._zero()
        return self.tax_summary()

    def total(self, format: bool = False) -> Union[Amount, str]:
        """Subtotal plus tax minus discounts, never below zero."""
        total = self._zero()
        if self.active:
            sub_total = self._zero()
            for _ in range(self.quantity):
                sub_total += self.sub_total_per_item()
            total = self.format_amount(sub_total + self.tax_summary()) - self.get_discount()
            if total < 0:
                total = self._zero()
        return self.format_amount(total, format)

    def final_total(self, format: bool = False) -> Union[Amount, str]:
        """Tax-inclusive total of all units before discounts; zero when not taxable."""
        total = self._zero()
        if self.active:
            price = self.price if self.taxable else self._zero()
            total = self._tax_engine.gross_total(price, self.quantity, self.tax_rate)
        return self.format_amount(total, format)

    def reconciliation(self):
        """Both rounding paths behind ``tax_summary`` (for reporting)."""
        price = self.price if self.taxable else self._zero()
        unit_net = self._tax_engine.taxable_base_per_unit(price, self.quantity, self.discounted)
        return self._tax_engine.reconcile(unit_net, self.quantity, self.tax_rate)

    # Linked model

    def set_model(self, item_model: str, relations: Optional[Iterable[str]] = None) -> None:
        if self.repository is None or not self.repository.has_type(item_model):
            raise ModelNotFound(f"Could not find relation model {item_model!r}")
        self.item_model = item_model
        self.item_model_relations = list(relations or [])
        self.generate_hash()

    def get_item_model(self) -> Optional[str]:
        return self.item_model

    def lookup_model(self) -> ModelLookup:
        """Resolve the linked model, reporting failure as a value."""
        if self.repository is None or not self.item_model:
            return ModelLookup(error=ModelNotFound(f"No item model configured for {self.id!r}"))

        model = self.repository.resolve(self.item_model, self.id, self.item_model_relations)
        if not model:
            logger.info(f"{self.item_model} {self.id!r} could not be resolved")
            return ModelLookup(error=ModelNotFound(f"Could not find the item model for {self.id!r}"))
        return ModelLookup(value=model)

    def get_model(self) -> Any:
        return self.lookup_model().unwrap()

    def __repr__(self) -> str:
        return (
            f"CartItem(id={self.id!r}, name={self.name!r}, qty={self.quantity}, "
            f"price={self.price}, hash={(self._item_hash or '')[:12]})"
        )
