"""Tests for merging purchases into stock."""

import logging
from datetime import date

import pytest

from pantrysync.config import get_settings
from pantrysync.schemas import (
    MergeAction,
    PurchaseItem,
    Quantity,
    ReceiptLine,
    ShoppingListItem,
    StockItem,
)
from pantrysync.stock.merge import (
    completed_items_to_purchase_items,
    convert_receipt_items_to_purchase_items,
    create_merge_report,
    merge_stock_with_purchases,
)


@pytest.fixture
def purchases():
    """Purchases touching merged, normalized, incompatible and new paths."""
    return [
        PurchaseItem(
            name="red onion",
            quantity=Quantity(amount="2", unit="piece"),
            best_before=date(2026, 11, 1),
        ),
        PurchaseItem(name="牛乳", quantity=Quantity(amount="1", unit="bottle")),
        PurchaseItem(name="onion", quantity=Quantity(amount="1", unit="piece")),
        PurchaseItem(name="banana", quantity=Quantity(amount="3", unit="piece"), price=198),
    ]


# =============================================================================
# Merge Tests
# =============================================================================


class TestMergeStockWithPurchases:
    """Tests for merge_stock_with_purchases function."""

    def test_stats(self, purchases, stock_items, ingredient_master):
        """Test counts for each merge path."""
        result = merge_stock_with_purchases(purchases, stock_items, ingredient_master, "owner-1")
        stats = result.stats

        assert stats.total_purchase_items == 4
        assert stats.merged_count == 2
        assert stats.new_count == 2
        assert stats.normalized_count == 3
        assert stats.incompatible_count == 1

    def test_no_purchase_lost(self, purchases, stock_items, ingredient_master):
        """Test every purchase is either merged or new."""
        result = merge_stock_with_purchases(purchases, stock_items, ingredient_master, "owner-1")
        assert result.stats.merged_count + result.stats.new_count == len(purchases)
        assert len(result.decisions) == len(purchases)

    def test_same_row_accumulates(self, purchases, stock_items, ingredient_master):
        """Test two purchases of one stock row give a single update."""
        result = merge_stock_with_purchases(purchases, stock_items, ingredient_master, "owner-1")

        assert len(result.merged_items) == 1
        onion = result.merged_items[0]
        assert onion.id == "s-onion"
        assert onion.quantity == Quantity(amount="6", unit="piece")
        assert onion.best_before == date(2026, 11, 1)
        assert onion.storage_location == "pantry"

    def test_input_not_mutated(self, purchases, stock_items, ingredient_master):
        """Test the stock snapshot is left untouched."""
        merge_stock_with_purchases(purchases, stock_items, ingredient_master, "owner-1")
        assert stock_items[0].quantity == Quantity(amount="3", unit="piece")

    def test_incompatible_units_create_row(
        self, purchases, stock_items, ingredient_master, caplog
    ):
        """Test a purchase with incompatible units becomes a new row."""
        with caplog.at_level(logging.WARNING):
            result = merge_stock_with_purchases(
                purchases, stock_items, ingredient_master, "owner-1"
            )

        milk = next(item for item in result.new_items if item.name == "milk")
        assert milk.quantity == Quantity(amount="1", unit="bottle")
        assert milk.owner_id == "owner-1"
        assert "staging a new row" in caplog.text

        decision = next(d for d in result.decisions if d.purchase_name == "牛乳")
        assert decision.action is MergeAction.NEW_INCOMPATIBLE
        assert decision.stock_id == "s-milk"
        assert decision.is_normalized

    def test_unmatched_creates_row(self, purchases, stock_items, ingredient_master):
        """Test an unknown purchase becomes a new row under its own name."""
        result = merge_stock_with_purchases(purchases, stock_items, ingredient_master, "owner-1")

        banana = next(item for item in result.new_items if item.name == "banana")
        assert banana.quantity == Quantity(amount="3", unit="piece")
        assert banana.id is None
        assert not banana.is_homemade

        decision = next(d for d in result.decisions if d.purchase_name == "banana")
        assert decision.action is MergeAction.NEW
        assert not decision.is_normalized

    def test_original_name_used_for_normalization(self, ingredient_master):
        """Test the receipt's original name is tried after the captured name."""
        purchase = PurchaseItem(
            name="ｷﾞｭｳﾆｭｳ",
            original_name="おいしい牛乳",
            quantity=Quantity(amount="1", unit="L"),
        )
        stock = [StockItem(id="s-milk", name="milk", quantity=Quantity(amount="500", unit="ml"))]
        result = merge_stock_with_purchases([purchase], stock, ingredient_master, "owner-1")

        assert result.stats.normalized_count == 1
        assert result.merged_items[0].quantity == Quantity(amount="1500", unit="mL")

    def test_homemade_flag(self, ingredient_master):
        """Test the homemade flag is only overwritten when given."""
        stock = [
            StockItem(
                id="s1", name="curry", quantity=Quantity(amount="2", unit="人前"), is_homemade=True
            )
        ]
        unset = PurchaseItem(name="curry", quantity=Quantity(amount="1", unit="人前"))
        result = merge_stock_with_purchases([unset], stock, ingredient_master, "owner-1")
        assert result.merged_items[0].is_homemade

        explicit = PurchaseItem(
            name="curry", quantity=Quantity(amount="1", unit="人前"), is_homemade=False
        )
        result = merge_stock_with_purchases([explicit], stock, ingredient_master, "owner-1")
        assert not result.merged_items[0].is_homemade

    def test_storage_location_from_purchase(self, ingredient_master):
        """Test a supplied storage location replaces the stock's."""
        stock = [StockItem(id="s1", name="rice", quantity=Quantity(amount="1", unit="kg"))]
        purchase = PurchaseItem(
            name="rice", quantity=Quantity(amount="500", unit="g"), storage_location="pantry"
        )
        merged = merge_stock_with_purchases([purchase], stock, ingredient_master, "o")
        assert merged.merged_items[0].storage_location == "pantry"
        assert merged.merged_items[0].quantity == Quantity(amount="1500", unit="g")

    def test_exact_row_beats_earlier_partial_row(self):
        """Test a purchase merges into the exact-name row, not an earlier partial one."""
        stock = [
            StockItem(id="s-green", name="green onion", quantity=Quantity(amount="1", unit="個")),
            StockItem(id="s-onion", name="onion", quantity=Quantity(amount="2", unit="個")),
        ]
        purchase = PurchaseItem(name="onion", quantity=Quantity(amount="1", unit="個"))
        result = merge_stock_with_purchases([purchase], stock, [], "owner-1")

        assert [row.id for row in result.merged_items] == ["s-onion"]
        assert result.merged_items[0].quantity == Quantity(amount="3", unit="個")

    def test_empty_purchases(self, stock_items, ingredient_master):
        """Test no purchases produce an empty result."""
        result = merge_stock_with_purchases([], stock_items, ingredient_master, "owner-1")
        assert result.merged_items == []
        assert result.new_items == []
        assert result.stats.total_purchase_items == 0


# =============================================================================
# Purchase Source Tests
# =============================================================================


class TestConvertReceiptItems:
    """Tests for convert_receipt_items_to_purchase_items function."""

    def test_known_unit(self):
        """Test a quantity with a known unit is kept."""
        items = convert_receipt_items_to_purchase_items(
            [ReceiptLine(name="鶏もも肉", quantity="300g", price=398)]
        )
        assert items[0].quantity == Quantity(amount="300", unit="g")
        assert items[0].price == 398

    def test_default_unit(self):
        """Test bare numbers and unknown units get the default unit."""
        items = convert_receipt_items_to_purchase_items(
            [
                ReceiptLine(name="トマト", quantity="2"),
                ReceiptLine(name="キャベツ", quantity="１玉"),
                ReceiptLine(name="牛乳", quantity=""),
            ]
        )
        assert [item.quantity for item in items] == [
            Quantity(amount="2", unit="個"),
            Quantity(amount="1", unit="個"),
            Quantity(amount="1", unit="個"),
        ]

    def test_fraction_amounts_kept(self):
        """Test fractions keep their value instead of collapsing to digits."""
        items = convert_receipt_items_to_purchase_items(
            [
                ReceiptLine(name="キャベツ", quantity="1/2"),
                ReceiptLine(name="かぼちゃ", quantity="1 1/2"),
            ]
        )
        assert [item.quantity for item in items] == [
            Quantity(amount="1/2", unit="個"),
            Quantity(amount="1 1/2", unit="個"),
        ]

    def test_thousands_separator_dropped(self):
        """Test "1,000" becomes 1000 rather than an unparseable amount."""
        items = convert_receipt_items_to_purchase_items(
            [
                ReceiptLine(name="ティッシュ", quantity="1,000"),
                ReceiptLine(name="小麦粉", quantity="1,000g"),
            ]
        )
        assert [item.quantity for item in items] == [
            Quantity(amount="1000", unit="個"),
            Quantity(amount="1000", unit="g"),
        ]

    def test_converted_fraction_merges_by_value(self):
        """Test half a cabbage adds 0.5 to stock, not 12."""
        purchases = convert_receipt_items_to_purchase_items(
            [ReceiptLine(name="キャベツ", quantity="1/2")]
        )
        stock = [StockItem(id="s-cabbage", name="キャベツ", quantity=Quantity(amount="1", unit="個"))]
        result = merge_stock_with_purchases(purchases, stock, [], "owner-1")

        assert result.merged_items[0].quantity == Quantity(amount="1.5", unit="個")

    def test_unit_without_amount(self):
        """Test a bare unit counts as one."""
        items = convert_receipt_items_to_purchase_items([ReceiptLine(name="米", quantity="kg")])
        assert items[0].quantity == Quantity(amount="1", unit="kg")

    def test_defaults_applied(self):
        """Test best-before and storage defaults are copied onto each item."""
        items = convert_receipt_items_to_purchase_items(
            [ReceiptLine(name="牛乳", original_name="おいしい牛乳", quantity="1本")],
            default_best_before=date(2026, 10, 26),
            default_storage_location="冷蔵庫",
        )
        assert items[0].original_name == "おいしい牛乳"
        assert items[0].best_before == date(2026, 10, 26)
        assert items[0].storage_location == "冷蔵庫"
        assert items[0].is_homemade is False


class TestCompletedItems:
    """Tests for completed_items_to_purchase_items function."""

    def test_checked_items_only(self):
        """Test unchecked items are skipped."""
        items = [
            ShoppingListItem(
                id="1", name="tomato", quantity=Quantity(amount="2", unit="個"), checked=True
            ),
            ShoppingListItem(id="2", name="onion", checked=False),
        ]
        purchases = completed_items_to_purchase_items(items, today=date(2026, 10, 19))

        assert [p.name for p in purchases] == ["tomato"]
        assert purchases[0].quantity == Quantity(amount="2", unit="個")
        assert purchases[0].best_before == date(2026, 10, 26)
        assert purchases[0].storage_location == "冷蔵庫"

    def test_edited_quantity_wins(self):
        """Test a quantity edited at checkout replaces the listed one."""
        items = [
            ShoppingListItem(
                id="1", name="tomato", quantity=Quantity(amount="2", unit="個"), checked=True
            ),
        ]
        purchases = completed_items_to_purchase_items(
            items, {"1": Quantity(amount="3", unit="個")}, today=date(2026, 10, 19)
        )
        assert purchases[0].quantity == Quantity(amount="3", unit="個")

    def test_missing_quantity_defaults(self):
        """Test items without quantity get one of the default unit."""
        items = [ShoppingListItem(name="lettuce", checked=True)]
        purchases = completed_items_to_purchase_items(items, today=date(2026, 10, 19))
        assert purchases[0].quantity == Quantity(amount="1", unit="個")

    def test_settings_override(self, monkeypatch):
        """Test defaults come from settings."""
        monkeypatch.setenv("PANTRYSYNC_DEFAULT_BEST_BEFORE_DAYS", "3")
        monkeypatch.setenv("PANTRYSYNC_DEFAULT_STORAGE_LOCATION", "冷凍庫")
        get_settings.cache_clear()
        items = [ShoppingListItem(name="fish", checked=True)]
        purchases = completed_items_to_purchase_items(items, today=date(2026, 10, 19))

        assert purchases[0].best_before == date(2026, 10, 22)
        assert purchases[0].storage_location == "冷凍庫"


class TestCreateMergeReport:
    """Tests for create_merge_report function."""

    def test_report_lines(self, purchases, stock_items, ingredient_master):
        """Test each non-zero count gets a line."""
        result = merge_stock_with_purchases(purchases, stock_items, ingredient_master, "owner-1")
        report = create_merge_report(result).splitlines()

        assert report == [
            "Processed 4 purchased items",
            "Added quantities to 2 existing stock items",
            "Created 2 new stock items",
            "1 items had units incompatible with stock",
            "Normalized 3 product names",
        ]

    def test_empty_report(self, stock_items, ingredient_master):
        """Test an empty merge only reports the total."""
        result = merge_stock_with_purchases([], stock_items, ingredient_master, "owner-1")
        assert create_merge_report(result) == "Processed 0 purchased items"
