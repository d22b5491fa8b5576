"""
cartline - Cart line item identity and tax-aware pricing

Models a single shopping cart line: content-hash identity for merging
equivalent lines, nested sub-items, per-unit discounts and tax totals that
match per-unit invoice rounding.
"""

__version__ = "0.1.0"

from . import pricing
from . import utils

__all__ = ["pricing", "utils"]
