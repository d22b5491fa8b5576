"""Line tax calculation with per-unit / aggregate rounding reconciliation."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Optional, Union

from ..utils.logging import get_logger
from ..utils.money import round_money, to_decimal
from .errors import InvalidQuantity

logger = get_logger(__name__)

Number = Union[int, float, str, Decimal]


@dataclass(frozen=True)
class Reconciliation:
    """Both gross figures for a line and the one that was kept.

    ``net`` is always the aggregate-rounded figure; ``gross`` equals
    ``check_gross`` whenever the two rounding paths disagree.
    """

    net: Decimal
    gross: Decimal
    check_gross: Decimal
    aggregate_gross: Decimal

    @property
    def mismatch(self) -> bool:
        return self.aggregate_gross != self.check_gross

    @property
    def tax(self) -> Decimal:
        return self.gross - self.net


class TaxEngine:
    """Computes the authoritative tax of a cart line.

    Invoices list a per-unit gross price and bill ``unit gross * quantity``,
    while a naive calculation rounds the line once. The two disagree by a
    cent now and then; when they do, the per-unit path wins:

        check_gross = round(unit_net * (1 + R)) * qty
        net         = round(unit_net * qty)
        gross       = round(net * (1 + R))   unless it differs from check_gross
        tax         = round(gross - net)

    ``precision`` is 2 for decimal prices and 0 for prices kept in minor units.
    Prices kept in minor units therefore round to whole units rather than two places.
    """

    def __init__(self, precision: int = 2) -> None:
        self.precision = precision

    def _round(self, value: Decimal) -> Decimal:
        return round_money(value, precision=self.precision)

    @staticmethod
    def _check_quantity(quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidQuantity(f"Cannot compute tax for quantity {quantity!r}")

    def taxable_base_per_unit(
        self,
        price: Number,
        quantity: int,
        discounted: Optional[Mapping[int, Number]] = None,
    ) -> Decimal:
        """
        Average taxable amount of one unit after per-unit discounts.

        Args:
            price: Unit price (pass 0 for non-taxable items)
            quantity: Number of units, at least 1
            discounted: Discount per unit index; negative amounts are ignored

        Returns:
            Sum of (price - discount) over all units divided by quantity
        """
        self._check_quantity(quantity)
        discounted = discounted or {}
        unit_price = to_decimal(price)

        to_tax = Decimal("0")
        for index in range(quantity):
            discountable = to_decimal(discounted.get(index, 0))
            to_tax += unit_price - max(discountable, Decimal("0"))

        return to_tax / quantity

    def reconcile(self, unit_net: Number, quantity: int, rate: Number) -> Reconciliation:
        """Run both rounding paths for ``quantity`` units of ``unit_net``."""
        self._check_quantity(quantity)
        unit_net = to_decimal(unit_net)
        multiplier = 1 + to_decimal(rate)

        check_gross = self._round(unit_net * multiplier) * quantity
        net = self._round(unit_net * quantity)
        aggregate_gross = self._round(net * multiplier)

        gross = aggregate_gross
        if aggregate_gross != check_gross:
            logger.debug(
                f"Rounding paths disagree for {quantity} x {unit_net} at {rate}: "
                f"aggregate {aggregate_gross}, per-unit {check_gross}; using per-unit"
            )
            gross = check_gross

        return Reconciliation(net=net, gross=gross, check_gross=check_gross, aggregate_gross=aggregate_gross)

    def tax_amount(
        self,
        price: Number,
        quantity: int,
        rate: Number,
        discounted: Optional[Mapping[int, Number]] = None,
    ) -> Decimal:
        """Tax owed for the whole line (all units)."""
        unit_net = self.taxable_base_per_unit(price, quantity, discounted)
        return self._round(self.reconcile(unit_net, quantity, rate).tax)

    def gross_total(self, price: Number, quantity: int, rate: Number) -> Decimal:
        """Tax-inclusive total of the line, ignoring discounts."""
        return self.reconcile(price, quantity, rate).gross
