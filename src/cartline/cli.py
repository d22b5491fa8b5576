"""
Command-line interface for cartline.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from . import __version__
from .pricing import CartItem, MongoModelRepository
from .utils.config import Config
from .utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="cartline - cart line identity and tax calculation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cartline --version
  cartline price --item item.json
  cartline price --item item.json --view full --format
  cartline hash --item item.json
  cartline model --item item.json --type product --relation variant
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"cartline {__version__}",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    parser.add_argument(
        "--log-file",
        help="Log file path",
    )

    parser.add_argument(
        "--env-file",
        help="Load settings (tax rate, price mode, database) from this .env file",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
    )

    price_parser = subparsers.add_parser(
        "price",
        help="Print subtotal, tax and totals for a cart item",
    )
    price_parser.add_argument(
        "--item",
        required=True,
        help="JSON file describing the item",
    )
    price_parser.add_argument(
        "--view",
        choices=["basic", "full"],
        default="basic",
        help="basic (totals only) or full (include both tax rounding paths)",
    )
    price_parser.add_argument(
        "--format",
        action="store_true",
        help="Format amounts with currency symbol",
    )

    hash_parser = subparsers.add_parser(
        "hash",
        help="Print the identity hash of a cart item",
    )
    hash_parser.add_argument(
        "--item",
        required=True,
        help="JSON file describing the item",
    )
    hash_parser.add_argument(
        "--force",
        action="store_true",
        help="Force a fresh identity for line items",
    )

    model_parser = subparsers.add_parser(
        "model",
        help="Resolve the catalog record a cart item stands for",
    )
    model_parser.add_argument(
        "--item",
        required=True,
        help="JSON file describing the item",
    )
    model_parser.add_argument(
        "--type",
        dest="model_type",
        help="Model type (defaults to ITEM_MODEL)",
    )
    model_parser.add_argument(
        "--relation",
        action="append",
        default=None,
        help="Related data to load with the record (repeatable)",
    )

    return parser


def load_item_data(path: str) -> Dict[str, Any]:
    """Read an item description from a JSON file."""
    with Path(path).open(encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict) or "id" not in data or "name" not in data:
        raise ValueError(f"{path} must contain a JSON object with at least 'id' and 'name'")
    return data


def print_box(lines: List[Tuple[str, Any]]) -> None:
    """Print label/value pairs inside a box."""
    label_width = max(len(lbl) for lbl, _ in lines)
    inner_width = max(len(f" {lbl.ljust(label_width)} : {val} ") for lbl, val in lines)
    print("┌" + "─" * inner_width + "┐")
    for lbl, val in lines:
        line = f" {lbl.ljust(label_width)} : {val}"
        print(f"│{line.ljust(inner_width)}│")
    print("└" + "─" * inner_width + "┘")


def price_item(item_path: str, config: Config, view: str = "basic", formatted: bool = False) -> None:
    """
    Print the pricing summary of an item.

    Args:
        item_path: JSON file describing the item
        config: Settings used to build the item
        view: "basic" or "full"
        formatted: Whether to format amounts for display
    """
    item = CartItem.from_dict(load_item_data(item_path), config=config)
    logger.info(f"Pricing item {item.id!r} ({item.quantity} x {item.price})")

    lines = [
        ("Item", f"{item.id} - {item.name}"),
        ("Hash", item.get_hash()),
        ("Quantity", item.quantity),
        ("Tax Rate", item.tax_rate),
        ("Sub Total", item.format_amount(item.sub_total(), formatted)),
        ("Discount", item.format_amount(item.get_discount(), formatted)),
        ("Tax", item.format_amount(item.tax_total(), formatted)),
        ("Total", item.total(formatted)),
        ("Final Total", item.final_total(formatted)),
    ]
    if not item.active:
        lines.append(("Status", "INACTIVE"))
    print_box(lines)

    if view == "full":
        rec = item.reconciliation()
        print("\nTAX RECONCILIATION:")
        print("=" * 60)
        print(f"Net (aggregate rounded):     {rec.net}")
        print(f"Gross (aggregate rounded):   {rec.aggregate_gross}")
        print(f"Gross (per-unit rounded):    {rec.check_gross}")
        print(f"Gross used:                  {rec.gross}")
        status = "per-unit path applied" if rec.mismatch else "paths agree"
        print(f"Status:                      {status}")


def hash_item(item_path: str, config: Config, force: bool = False) -> None:
    """Print the identity hash of an item."""
    item = CartItem.from_dict(load_item_data(item_path), config=config)
    print(item.generate_hash(force=force))


def show_model(item_path: str, config: Config, model_type: Optional[str] = None, relations: Optional[list] = None) -> int:
    """
    Resolve and print the linked model of an item.

    Returns:
        Exit code (1 when the model cannot be resolved)
    """
    with MongoModelRepository(config=config) as repository:
        item = CartItem.from_dict(load_item_data(item_path), config=config, repository=repository)
        descriptor = model_type or item.get_item_model()
        if descriptor:
            item.set_model(descriptor, relations if relations is not None else item.item_model_relations)

        lookup = item.lookup_model()
        if not lookup.found:
            logger.error(f"Error: {lookup.error}")
            return 1

        print(json.dumps(lookup.value, indent=2, default=str))
    return 0


def main(args: Optional[list] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        args: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    config = Config(parsed_args.env_file)
    log_level = "DEBUG" if parsed_args.verbose else config.get("log_level")
    logger = setup_logging(level=log_level, log_file=parsed_args.log_file)

    try:
        if parsed_args.command == "price":
            price_item(
                parsed_args.item,
                config,
                view=parsed_args.view,
                formatted=parsed_args.format,
            )

        elif parsed_args.command == "hash":
            hash_item(parsed_args.item, config, force=parsed_args.force)

        elif parsed_args.command == "model":
            return show_model(
                parsed_args.item,
                config,
                model_type=parsed_args.model_type,
                relations=parsed_args.relation,
            )

        elif not parsed_args.command:
            parser.print_help()
            return 1

    except Exception as e:
        logger.error(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
