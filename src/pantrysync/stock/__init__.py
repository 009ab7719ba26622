"""Stock reconciliation with purchases."""

from pantrysync.stock.merge import (
    completed_items_to_purchase_items,
    convert_receipt_items_to_purchase_items,
    create_merge_report,
    merge_stock_with_purchases,
)

__all__ = [
    "completed_items_to_purchase_items",
    "convert_receipt_items_to_purchase_items",
    "create_merge_report",
    "merge_stock_with_purchases",
]
