"""
Tests for CLI module.
"""

import json
import re
from unittest.mock import patch

import pytest

from cartline import __version__
from cartline.cli import main
from conftest import FakeModelRepository


@pytest.fixture
def item_file(tmp_path):
    """Write an item description and return its path."""
    def _write(data, name="item.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return str(path)
    return _write


WIDGET = {"id": 1, "name": "Widget", "qty": 3, "price": "10.00", "options": {"tax": 0.0825}}


class TestCLI:
    """Test cases for CLI main function."""

    def test_cli_help(self, capsys):
        """Test CLI help command."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "cartline - cart line identity and tax calculation" in captured.out

    def test_cli_version(self, capsys):
        """Test CLI version command."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert f"cartline {__version__}" in captured.out

    def test_cli_no_command(self, capsys):
        """Test CLI with no command."""
        result = main([])
        assert result == 1
        captured = capsys.readouterr()
        assert "Available commands" in captured.out

    def test_price(self, capsys, item_file):
        """Price command prints reconciled totals."""
        result = main(["price", "--item", item_file(WIDGET)])
        assert result == 0
        captured = capsys.readouterr()
        assert "Widget" in captured.out
        assert "2.49" in captured.out
        assert "32.49" in captured.out

    def test_price_full_view(self, capsys, item_file):
        """Full view shows both rounding paths."""
        result = main(["price", "--item", item_file(WIDGET), "--view", "full", "--format"])
        assert result == 0
        captured = capsys.readouterr()
        assert "TAX RECONCILIATION" in captured.out
        assert "32.48" in captured.out
        assert "per-unit path applied" in captured.out
        assert "$32.49" in captured.out

    def test_price_with_discount_and_sub_items(self, capsys, item_file):
        data = dict(WIDGET, sub_items=[{"name": "cheese", "price": "1.00"}], discounted={"0": "1.00"})
        result = main(["price", "--item", item_file(data)])
        assert result == 0
        captured = capsys.readouterr()
        assert "33.00" in captured.out  # sub total: 3 x 11.00

    def test_price_invalid_quantity(self, item_file):
        """Quantity zero is reported as an error."""
        result = main(["price", "--item", item_file(dict(WIDGET, qty=0))])
        assert result == 1

    def test_price_missing_file(self, tmp_path):
        result = main(["price", "--item", str(tmp_path / "nope.json")])
        assert result == 1

    def test_hash_merges_quantities(self, capsys, item_file):
        """Items differing only in quantity print the same hash."""
        main(["hash", "--item", item_file(WIDGET, "a.json")])
        first = capsys.readouterr().out.strip()
        main(["hash", "--item", item_file(dict(WIDGET, qty=7), "b.json")])
        second = capsys.readouterr().out.strip()

        assert re.fullmatch(r"[0-9a-f]{64}", first)
        assert first == second

    def test_hash_line_item_forced(self, capsys, item_file):
        path = item_file(dict(WIDGET, line_item=True))
        main(["hash", "--item", path, "--force"])
        first = capsys.readouterr().out.strip()
        main(["hash", "--item", path, "--force"])
        second = capsys.readouterr().out.strip()
        assert first != second

    @patch("cartline.cli.MongoModelRepository")
    def test_model(self, mock_repo, capsys, item_file):
        """Model command prints the resolved record."""
        fake = FakeModelRepository({"product": {1: {"_id": 1, "name": "Widget Deluxe"}}})
        mock_repo.return_value.__enter__.return_value = fake

        result = main(["model", "--item", item_file(WIDGET), "--type", "product", "--relation", "variants"])

        assert result == 0
        assert "Widget Deluxe" in capsys.readouterr().out
        assert fake.calls == [("product", 1, ["variants"])]

    @patch("cartline.cli.MongoModelRepository")
    def test_model_not_found(self, mock_repo, item_file):
        """Unknown records and types exit with an error code."""
        fake = FakeModelRepository({"product": {}})
        mock_repo.return_value.__enter__.return_value = fake

        assert main(["model", "--item", item_file(WIDGET), "--type", "product"]) == 1
        assert main(["model", "--item", item_file(WIDGET), "--type", "warehouse"]) == 1
