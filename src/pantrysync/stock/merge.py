"""Merge purchased and receipt items into stock."""

import re
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, timedelta

from pantrysync.config import get_settings
from pantrysync.logging_config import LoggingContext, get_logger
from pantrysync.matching.matcher import NameIndex
from pantrysync.normalize.arithmetic import Ok, add, is_valid_quantity
from pantrysync.normalize.names import NameNormalizationResult, normalize_against_master
from pantrysync.normalize.quantities import parse_amount, parse_quantity, to_half_width
from pantrysync.schemas import (
    UNITLESS,
    IngredientMaster,
    MergeAction,
    MergeDecision,
    MergeResult,
    PurchaseItem,
    Quantity,
    ReceiptLine,
    ShoppingListItem,
    StockItem,
)

logger = get_logger(__name__)

_NON_NUMERIC_RE = re.compile(r"[^0-9.]")


def _normalize_purchase_name(
    purchase: PurchaseItem,
    masters: Sequence[IngredientMaster],
) -> NameNormalizationResult:
    """Try the captured name, then the receipt's original name."""
    result = normalize_against_master(purchase.name, masters)
    if result.is_normalized or not purchase.original_name or purchase.original_name == purchase.name:
        return result

    fallback = normalize_against_master(purchase.original_name, masters)
    return fallback if fallback.is_normalized else result


def _new_stock_row(purchase: PurchaseItem, name: str, owner_id: str) -> StockItem:
    return StockItem(
        owner_id=owner_id,
        name=name,
        quantity=purchase.quantity,
        best_before=purchase.best_before,
        storage_location=purchase.storage_location,
        is_homemade=purchase.is_homemade if purchase.is_homemade is not None else False,
    )


def _merge_into(current: StockItem, purchase: PurchaseItem, quantity: Quantity) -> StockItem:
    return current.model_copy(
        update={
            "quantity": quantity,
            "best_before": purchase.best_before or current.best_before,
            "storage_location": purchase.storage_location or current.storage_location,
            "is_homemade": (
                purchase.is_homemade if purchase.is_homemade is not None else current.is_homemade
            ),
        }
    )


def merge_stock_with_purchases(
    purchase_items: Sequence[PurchaseItem],
    existing_stock: Sequence[StockItem],
    ingredient_master: Sequence[IngredientMaster],
    owner_id: str,
) -> MergeResult:
    """
    Reconcile purchases with existing stock.

    Each purchase name is first mapped to its ingredient-master canonical
    name. A purchase matching a stock row with compatible units becomes an
    update of that row (several purchases of the same row accumulate into
    one update); an incompatible or unmatched purchase becomes a new row.
    Nothing is written: the caller applies merged_items as updates and
    new_items as inserts.

    Args:
        purchase_items: Items bought or read from a receipt.
        existing_stock: Stock snapshot for the owner.
        ingredient_master: Master records used for name normalization.
        owner_id: Owner stamped on new rows.

    Returns:
        MergeResult with updates, inserts, stats and per-item decisions.
    """
    with LoggingContext(owner_id=owner_id):
        result = MergeResult()
        stats = result.stats
        stats.total_purchase_items = len(purchase_items)

        stock_index = NameIndex(list(enumerate(existing_stock)), key=lambda pair: pair[1].name)
        staged: dict[int, StockItem] = {}

        for purchase in purchase_items:
            normalization = _normalize_purchase_name(purchase, ingredient_master)
            final_name = normalization.name if normalization.is_normalized else purchase.name
            if normalization.is_normalized:
                stats.normalized_count += 1

            hit, _kind = stock_index.first_match(final_name)
            if hit is None:
                result.new_items.append(_new_stock_row(purchase, final_name, owner_id))
                stats.new_count += 1
                result.decisions.append(
                    MergeDecision(
                        purchase_name=purchase.name,
                        final_name=final_name,
                        action=MergeAction.NEW,
                        is_normalized=normalization.is_normalized,
                    )
                )
                continue

            position, row = hit
            current = staged.get(position, row)
            summed = add(current.quantity, purchase.quantity)

            if isinstance(summed, Ok) and is_valid_quantity(summed.quantity):
                staged[position] = _merge_into(current, purchase, summed.quantity)
                stats.merged_count += 1
                result.decisions.append(
                    MergeDecision(
                        purchase_name=purchase.name,
                        final_name=final_name,
                        action=MergeAction.MERGED,
                        stock_id=row.id,
                        is_normalized=normalization.is_normalized,
                    )
                )
                continue

            logger.warning(
                f"Failed to add quantities for '{final_name}' "
                f"({current.quantity.amount}{current.quantity.unit} + "
                f"{purchase.quantity.amount}{purchase.quantity.unit}), staging a new row"
            )
            result.new_items.append(_new_stock_row(purchase, final_name, owner_id))
            stats.new_count += 1
            stats.incompatible_count += 1
            result.decisions.append(
                MergeDecision(
                    purchase_name=purchase.name,
                    final_name=final_name,
                    action=MergeAction.NEW_INCOMPATIBLE,
                    stock_id=row.id,
                    is_normalized=normalization.is_normalized,
                )
            )

        result.merged_items = list(staged.values())

        logger.info(
            f"Merged {stats.total_purchase_items} purchases: {stats.merged_count} merged, "
            f"{stats.new_count} new, {stats.normalized_count} normalized"
        )
        return result


# =============================================================================
# Purchase item sources
# =============================================================================


def convert_receipt_items_to_purchase_items(
    receipt_lines: Iterable[ReceiptLine],
    default_best_before: date | None = None,
    default_storage_location: str | None = None,
) -> list[PurchaseItem]:
    """
    Turn extracted receipt lines into purchase items.

    A quantity without a known unit gets the default purchase unit. A
    parseable amount is kept as written ("1/2" -> 1/2個); anything else
    keeps only its digits, or 1 ("１玉" -> 1個, "" -> 1個). Thousands
    separators are dropped ("1,000" -> 1000個).
    """
    default_unit = get_settings().default_purchase_unit
    purchases: list[PurchaseItem] = []

    for line in receipt_lines:
        quantity = parse_quantity(line.quantity)
        amount = to_half_width(quantity.amount).replace(",", "").strip()
        if quantity.unit == UNITLESS:
            if not isinstance(parse_amount(amount), float):
                amount = _NON_NUMERIC_RE.sub("", amount) or "1"
            quantity = Quantity(amount=amount, unit=default_unit)
        elif not amount:
            quantity = Quantity(amount="1", unit=quantity.unit)
        elif amount != quantity.amount:
            quantity = Quantity(amount=amount, unit=quantity.unit)

        purchases.append(
            PurchaseItem(
                name=line.name,
                original_name=line.original_name,
                quantity=quantity,
                price=line.price,
                best_before=default_best_before,
                storage_location=default_storage_location,
                is_homemade=False,
            )
        )

    return purchases


def completed_items_to_purchase_items(
    items: Iterable[ShoppingListItem],
    edited_quantities: Mapping[str, Quantity] | None = None,
    today: date | None = None,
) -> list[PurchaseItem]:
    """
    Turn checked shopping-list items into purchase items.

    Unchecked items are skipped. A quantity edited at checkout (keyed by
    item id) wins over the listed one; items without either get 1 of the
    default unit. Best-before and storage location come from settings.
    """
    settings = get_settings()
    edited_quantities = edited_quantities or {}
    today = today or date.today()
    best_before = today + timedelta(days=settings.default_best_before_days)

    purchases: list[PurchaseItem] = []
    for item in items:
        if not item.checked:
            continue

        quantity = (
            (edited_quantities.get(item.id) if item.id else None)
            or item.quantity
            or Quantity(amount="1", unit=settings.default_purchase_unit)
        )
        purchases.append(
            PurchaseItem(
                name=item.name,
                quantity=quantity,
                best_before=best_before,
                storage_location=settings.default_storage_location,
                is_homemade=False,
            )
        )

    return purchases


def create_merge_report(result: MergeResult) -> str:
    """Short human-readable summary of a merge."""
    stats = result.stats
    lines = [f"Processed {stats.total_purchase_items} purchased items"]

    if stats.merged_count > 0:
        lines.append(f"Added quantities to {stats.merged_count} existing stock items")
    if stats.new_count > 0:
        lines.append(f"Created {stats.new_count} new stock items")
    if stats.incompatible_count > 0:
        lines.append(f"{stats.incompatible_count} items had units incompatible with stock")
    if stats.normalized_count > 0:
        lines.append(f"Normalized {stats.normalized_count} product names")

    return "\n".join(lines)
