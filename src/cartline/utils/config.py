"""
Configuration utilities for the cartline package.
"""

import os
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv


class Config:
    """Configuration manager for cart line items."""

    def __init__(self, env_file: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> None:
        """Initialize configuration.

        If an env_file path is provided, load environment variables from it.
        Otherwise, do not auto-load a .env file to keep defaults predictable.
        Explicit overrides win over both environment and defaults.
        """
        self.env_file = env_file
        self._load_environment()
        self._config = self._load_config()
        if overrides:
            self._config.update(overrides)

    def _load_environment(self) -> None:
        """Load environment variables from explicit .env file if provided."""
        if not self.env_file:
            return
        env_path = Path(self.env_file)
        if env_path.exists():
            load_dotenv(env_path)

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        return {
            # Core settings
            "log_level": self._get_str("LOG_LEVEL", default="INFO"),
            # Pricing settings
            "prices_in_cents": self._get_bool("PRICES_IN_CENTS", default=False),
            "tax": self._get_decimal("CART_TAX", default=Decimal("0")),
            "currency_code": self._get_str("CURRENCY_CODE", default="USD"),
            "locale": self._get_str("LOCALE", default="en_US"),
            # Item identity settings
            "exclude_from_hash": self._get_list("EXCLUDE_FROM_HASH"),
            # Linked model settings
            "item_model": self._get_str("ITEM_MODEL", default="") or None,
            "item_model_relations": self._get_list("ITEM_MODEL_RELATIONS"),
            # MongoDB settings for model resolution
            "mongo_url": self._get_str("DB_CONNECTION_URL", default=""),
            "mongo_db": self._get_str("DB_NAME", default="CARTLINE_CATALOG"),
            "model_collections": self._get_mapping("MODEL_COLLECTIONS"),
        }

    def _get_str(self, key: str, default: str = "") -> str:
        """Get string configuration value."""
        if self.env_file is None:
            return default
        return os.getenv(key, default)

    def _get_bool(self, key: str, default: bool = False) -> bool:
        """Get boolean configuration value."""
        if self.env_file is None:
            return default
        value = os.getenv(key, str(default)).lower()
        return value in ("true", "1", "yes", "on")

    def _get_decimal(self, key: str, default: Decimal = Decimal("0")) -> Decimal:
        """Get decimal configuration value."""
        if self.env_file is None:
            return default
        try:
            return Decimal(os.getenv(key, str(default)))
        except InvalidOperation:
            return default

    def _get_list(self, key: str) -> List[str]:
        """Get comma separated configuration value as a list."""
        raw = self._get_str(key, default="")
        return [part.strip() for part in raw.split(",") if part.strip()]

    def _get_mapping(self, key: str) -> Dict[str, str]:
        """Get `name=value` comma separated pairs as a dict."""
        mapping = {}
        for pair in self._get_list(key):
            name, _, value = pair.partition("=")
            if name and value:
                mapping[name.strip()] = value.strip()
        return mapping

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Get configuration value using bracket notation."""
        return self._config[key]

    def __contains__(self, key: str) -> bool:
        """Check if configuration key exists."""
        return key in self._config
