"""Per-unit discount bookkeeping for a cart line."""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Callable, Dict, Iterator, Optional, Union

from ..utils.money import Amount, is_numeric, normalize_price
from .errors import InvalidDiscount


class DiscountTracker(MutableMapping):
    """Maps a quantity unit index to the discount applied to that unit.

    Coupon logic lives outside the item and writes amounts straight into the
    tracker; the item only sums them and removes them from the taxable base.
    Indices are kept within ``0 .. quantity - 1``. Writes and deletes call
    ``on_change`` so the owning item can rehash.
    """

    def __init__(
        self,
        quantity: Callable[[], int],
        prices_in_cents: bool = False,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        self._quantity = quantity
        self._prices_in_cents = prices_in_cents
        self._on_change = on_change
        self._amounts: Dict[int, Amount] = {}

    def __getitem__(self, index: int) -> Amount:
        return self._amounts[index]

    def __setitem__(self, index: int, amount: Union[str, int, float, Amount]) -> None:
        quantity = self._quantity()
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < quantity:
            raise InvalidDiscount(f"Discount index {index!r} is outside units 0..{quantity - 1}")
        if not is_numeric(amount):
            raise InvalidDiscount(f"Discount amount must be a number, got {amount!r}")
        self._amounts[index] = normalize_price(amount, in_cents=self._prices_in_cents)
        self._changed()

    def __delitem__(self, index: int) -> None:
        del self._amounts[index]
        self._changed()

    def __iter__(self) -> Iterator[int]:
        return iter(self._amounts)

    def __len__(self) -> int:
        return len(self._amounts)

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def __repr__(self) -> str:
        return f"DiscountTracker({self._amounts!r})"

    def total(self) -> Amount:
        return sum(self._amounts.values(), 0)

    def truncate(self, quantity: int) -> None:
        """Forget discounts recorded for units beyond ``quantity``.

        Quantity writes rehash on their own, so this does not call ``on_change``.
        """
        for index in [i for i in self._amounts if i >= quantity]:
            del self._amounts[index]
