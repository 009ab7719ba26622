"""Record shapes exchanged with the persistence and extraction collaborators."""

from datetime import date
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

UNITLESS = "-"


class Quantity(BaseModel):
    """Amount text plus unit, e.g. ("200", "g") or ("適量", "-")."""

    model_config = ConfigDict(frozen=True)

    amount: str = ""
    unit: str = UNITLESS

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> str:
        """Accept numbers and keep their text form."""
        if v is None:
            return ""
        if isinstance(v, float) and v.is_integer():
            return str(int(v))
        if isinstance(v, (int, float)):
            return str(v)
        return str(v).strip()

    @field_validator("unit", mode="before")
    @classmethod
    def default_unit(cls, v: Any) -> str:
        """Missing units become the unitless token."""
        if v is None or str(v).strip() == "":
            return UNITLESS
        return str(v).strip()


class IngredientMaster(BaseModel):
    """Ingredient-master record used to recognise captured product names."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    canonical_name: str
    category: Literal["vegetables", "meat", "seasoning", "others"] = "others"
    default_unit: str = "個"
    recognition_pattern: str = ""  # literal product name or regex
    infinity: bool = False  # pantry staple, never checked against stock


class StockItem(BaseModel):
    """Snapshot of one stock row."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    owner_id: str | None = None
    name: str
    quantity: Quantity = Field(default_factory=Quantity)
    best_before: date | None = None
    storage_location: str | None = None
    is_homemade: bool = False
    memo: str | None = None


class IngredientLine(BaseModel):
    """One ingredient of a planned meal."""

    model_config = ConfigDict(frozen=True)

    name: str
    quantity: Quantity | None = None


class MealPlanEntry(BaseModel):
    """A planned meal on a given date."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    date: date
    meal_type: str
    ingredients: list[IngredientLine] = Field(default_factory=list)


class ShoppingListItem(BaseModel):
    """Shopping-list row."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    name: str
    quantity: Quantity | None = None
    checked: bool = False
    added_from: Literal["manual", "auto"] = "manual"


class PurchaseItem(BaseModel):
    """Purchased item waiting to be merged into stock."""

    model_config = ConfigDict(frozen=True)

    name: str
    original_name: str | None = None
    quantity: Quantity = Field(default_factory=Quantity)
    best_before: date | None = None
    storage_location: str | None = None
    price: float | None = None
    is_homemade: bool | None = None


class ReceiptLine(BaseModel):
    """Line item produced by the receipt extraction collaborator."""

    name: str
    original_name: str | None = None
    quantity: str = ""
    price: float | None = None

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()


class DateRange(BaseModel):
    """Inclusive date range."""

    start: date
    end: date

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


# =============================================================================
# Engine outputs
# =============================================================================


class IngredientStatus(str, Enum):
    """Outcome of checking one aggregated ingredient."""

    INFINITY = "infinity"
    IN_STOCK = "in_stock"
    ALREADY_QUEUED = "already_queued"
    TO_BUY = "to_buy"


class IngredientDecision(BaseModel):
    """Audit record for one aggregated ingredient."""

    name: str
    normalized_name: str
    status: IngredientStatus
    required: Quantity
    shortfall: Quantity | None = None
    stock_name: str | None = None


class ShoppingListSummary(BaseModel):
    total_ingredients: int = 0
    satisfied: int = 0
    to_buy: int = 0
    already_queued: int = 0


class ShoppingListResult(BaseModel):
    """Items to append to the shopping list, plus counts."""

    items: list[ShoppingListItem] = Field(default_factory=list)
    summary: ShoppingListSummary = Field(default_factory=ShoppingListSummary)
    decisions: list[IngredientDecision] = Field(default_factory=list)


class MergeAction(str, Enum):
    """What happened to one purchase item."""

    MERGED = "merged"
    NEW = "new"
    NEW_INCOMPATIBLE = "new_incompatible"


class MergeDecision(BaseModel):
    purchase_name: str
    final_name: str
    action: MergeAction
    stock_id: str | None = None
    is_normalized: bool = False


class MergeStats(BaseModel):
    total_purchase_items: int = 0
    merged_count: int = 0
    new_count: int = 0
    normalized_count: int = 0
    incompatible_count: int = 0


class MergeResult(BaseModel):
    """Stock updates and inserts proposed for the persistence collaborator."""

    merged_items: list[StockItem] = Field(default_factory=list)
    new_items: list[StockItem] = Field(default_factory=list)
    stats: MergeStats = Field(default_factory=MergeStats)
    decisions: list[MergeDecision] = Field(default_factory=list)
