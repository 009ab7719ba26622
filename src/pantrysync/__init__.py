"""Quantity and ingredient reconciliation for meal plans, shopping lists and stock."""

from pantrysync.matching import batch_match, find_best_match, is_name_match
from pantrysync.normalize import (
    IncompatibleUnits,
    Ok,
    add_quantities,
    compare_quantities,
    format_quantity,
    parse_quantity,
    subtract_quantities,
)
from pantrysync.plan import generate_shopping_list
from pantrysync.schemas import (
    DateRange,
    IngredientLine,
    IngredientMaster,
    MealPlanEntry,
    MergeResult,
    PurchaseItem,
    Quantity,
    ReceiptLine,
    ShoppingListItem,
    ShoppingListResult,
    StockItem,
)
from pantrysync.stock import merge_stock_with_purchases

__version__ = "0.1.0"

__all__ = [
    "DateRange",
    "IncompatibleUnits",
    "IngredientLine",
    "IngredientMaster",
    "MealPlanEntry",
    "MergeResult",
    "Ok",
    "PurchaseItem",
    "Quantity",
    "ReceiptLine",
    "ShoppingListItem",
    "ShoppingListResult",
    "StockItem",
    "add_quantities",
    "batch_match",
    "compare_quantities",
    "find_best_match",
    "format_quantity",
    "generate_shopping_list",
    "is_name_match",
    "merge_stock_with_purchases",
    "parse_quantity",
    "subtract_quantities",
]
