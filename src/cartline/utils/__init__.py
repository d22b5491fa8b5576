"""
Utilities Module

This module contains shared configuration, logging and money helpers.
"""

from .config import Config
from .logging import setup_logging, get_logger
from .money import MoneyFormatter, round_money, to_decimal

__all__ = ["Config", "setup_logging", "get_logger", "MoneyFormatter", "round_money", "to_decimal"]
