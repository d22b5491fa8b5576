"""
Money utilities - Decimal operations and display formatting for amounts.

Amounts never go through float arithmetic: floats are converted via their
string form and every rounding step is ROUND_HALF_UP, the convention used on
printed invoices.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Optional, Union

Amount = Union[int, Decimal]

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")

# Precision for amounts stored in minor units
INTEGER_PRECISION = Decimal("1")

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "RUB": "₽",
    "UAH": "₴",
    "TRY": "₺",
    "INR": "₹",
    "AED": "AED",
}

# Symbol goes before the number for these currencies
PREFIX_CURRENCIES = {"USD", "GBP", "JPY", "INR"}

# Currencies without minor units
INTEGER_CURRENCIES = {"JPY"}

# (thousands separator, decimal separator) by language
LOCALE_SEPARATORS = {
    "en": (",", "."),
    "de": (".", ","),
    "es": (".", ","),
    "it": (".", ","),
    "nl": (".", ","),
    "fr": ("\u00a0", ","),
    "ru": ("\u00a0", ","),
    "uk": ("\u00a0", ","),
}


def is_numeric(value: Any) -> bool:
    """Return True when value can be read as a number (bools excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float, Decimal)):
        return True
    if isinstance(value, str):
        try:
            return Decimal(value.strip()).is_finite()
        except InvalidOperation:
            return False
    return False


def to_decimal(value: Union[str, int, float, Decimal, None]) -> Decimal:
    """
    Convert any value to Decimal safely.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        # Convert via string to avoid float precision issues
        if isinstance(value, float):
            return Decimal(str(value))
        if isinstance(value, str):
            return Decimal(value.strip())
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def round_money(value: Union[str, int, float, Decimal], precision: int = 2) -> Decimal:
    """
    Round monetary value half-up to the given number of decimal places.

    Args:
        value: Value to round
        precision: Decimal places to keep (0 for minor-unit amounts)

    Returns:
        Rounded Decimal value
    """
    quantum = INTEGER_PRECISION if precision == 0 else Decimal(1).scaleb(-precision)
    return to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)


def normalize_price(value: Union[str, int, float, Decimal], in_cents: bool = False) -> Amount:
    """Normalize a price to the configured storage mode."""
    if in_cents:
        return int(to_decimal(value))
    return to_decimal(value)


class MoneyFormatter:
    """Turns raw amounts into display strings for a currency and locale.

    With formatting disabled the amount is only rounded: to two decimal
    places, or to whole minor units when prices are stored in cents.
    """

    def __init__(self, prices_in_cents: bool = False, currency_code: str = "USD", locale: str = "en_US"):
        self.prices_in_cents = prices_in_cents
        self.currency_code = currency_code
        self.locale = locale

    @classmethod
    def from_config(cls, config) -> "MoneyFormatter":
        return cls(
            prices_in_cents=bool(config.get("prices_in_cents", False)),
            currency_code=config.get("currency_code") or "USD",
            locale=config.get("locale") or "en_US",
        )

    def format(
        self,
        amount: Union[str, int, float, Decimal],
        currency_code: Optional[str] = None,
        locale: Optional[str] = None,
        enabled: bool = True,
    ) -> Union[Amount, str]:
        if not enabled:
            if self.prices_in_cents:
                return int(round_money(amount, precision=0))
            return round_money(amount)

        value = to_decimal(amount)
        if self.prices_in_cents:
            value = value / 100

        currency = (currency_code or self.currency_code).upper()
        symbol = CURRENCY_SYMBOLS.get(currency, currency)
        language = (locale or self.locale).replace("-", "_").split("_")[0].lower()
        thousands, decimal_point = LOCALE_SEPARATORS.get(language, LOCALE_SEPARATORS["en"])

        if currency in INTEGER_CURRENCIES:
            formatted = f"{int(round_money(value, precision=0)):,}"
        else:
            formatted = f"{round_money(value):,.2f}"
        formatted = formatted.replace(",", "\x00").replace(".", decimal_point).replace("\x00", thousands)

        sign = ""
        if formatted.startswith("-"):
            sign, formatted = "-", formatted[1:]

        if currency in PREFIX_CURRENCIES and language == "en":
            return f"{sign}{symbol}{formatted}"
        return f"{sign}{formatted} {symbol}"
