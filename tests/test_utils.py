"""Essential tests for utility modules - Config, Logging and Money."""

import os
from decimal import Decimal

from cartline.utils.config import Config
from cartline.utils.logging import get_logger, setup_logging
from cartline.utils.money import MoneyFormatter, is_numeric, round_money, to_decimal


def test_config_default_values():
    """Test config provides reasonable defaults."""
    config = Config()  # No .env file

    assert config.get("tax") == Decimal("0")
    assert config.get("prices_in_cents") is False
    assert config.get("exclude_from_hash") == []
    assert config.get("item_model") is None
    assert config.get("mongo_db") == "CARTLINE_CATALOG"
    assert config.get("log_level") == "INFO"
    assert "currency_code" in config
    assert config["locale"] == "en_US"


def test_config_overrides():
    """Explicit overrides replace defaults."""
    config = Config(overrides={"tax": Decimal("0.2")})
    assert config["tax"] == Decimal("0.2")


def test_config_loads_env_file(tmp_path, mock_env):
    """Test that config reads pricing settings from a .env file."""
    env_file = tmp_path / ".env"
    env_file.write_text(
        "CART_TAX=0.0825\n"
        "PRICES_IN_CENTS=true\n"
        "EXCLUDE_FROM_HASH=note, gift_wrap\n"
        "ITEM_MODEL_RELATIONS=variants\n"
        "MODEL_COLLECTIONS=product=PRODUCTS,variants=VARIANTS\n"
        "DB_CONNECTION_URL=mongodb://localhost:27017\n"
    )

    config = Config(str(env_file))

    assert config.get("tax") == Decimal("0.0825")
    assert config.get("prices_in_cents") is True
    assert config.get("exclude_from_hash") == ["note", "gift_wrap"]
    assert config.get("item_model_relations") == ["variants"]
    assert config.get("model_collections") == {"product": "PRODUCTS", "variants": "VARIANTS"}
    assert config.get("mongo_url") == "mongodb://localhost:27017"


def test_config_bad_tax_falls_back(tmp_path, mock_env):
    """Unparseable numbers fall back to the default."""
    os.environ["CART_TAX"] = "eight percent"
    config = Config(str(tmp_path / "missing.env"))
    assert config.get("tax") == Decimal("0")


def test_logging_setup():
    """Test that logging can be set up for CLI usage."""
    logger = setup_logging(level="INFO")

    assert logger.name == "cartline"
    assert logger.level == 20  # INFO level


def test_logging_setup_debug():
    logger = setup_logging("DEBUG")
    assert logger.level == 10  # DEBUG level


def test_get_logger_namespace():
    assert get_logger("tax").name == "cartline.tax"
    assert get_logger("cartline.pricing.tax").name == "cartline.pricing.tax"


class TestMoney:
    """Test cases for money helpers."""

    def test_to_decimal(self):
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("abc") == Decimal("0")

    def test_is_numeric(self):
        assert is_numeric("10.5")
        assert is_numeric(3)
        assert not is_numeric(True)
        assert not is_numeric("nan")
        assert not is_numeric([1])

    def test_round_money_half_up(self):
        assert round_money("10.825") == Decimal("10.83")
        assert round_money("32.475") == Decimal("32.48")
        assert round_money("1082.5", precision=0) == Decimal("1083")

    def test_format_disabled_passes_raw_amount(self):
        formatter = MoneyFormatter()
        assert formatter.format(Decimal("12.345"), enabled=False) == Decimal("12.35")
        assert MoneyFormatter(prices_in_cents=True).format(Decimal("1249.6"), enabled=False) == 1250

    def test_format_currency_and_locale(self):
        formatter = MoneyFormatter()
        assert formatter.format(Decimal("1234.5")) == "$1,234.50"
        assert formatter.format(Decimal("1234.5"), "EUR", "de_DE") == "1.234,50 €"
        assert formatter.format(Decimal("1234.5"), "EUR", "fr_FR") == "1\u00a0234,50 €"
        assert formatter.format(Decimal("-5")) == "-$5.00"

    def test_format_minor_units(self):
        formatter = MoneyFormatter(prices_in_cents=True)
        assert formatter.format(3249) == "$32.49"
