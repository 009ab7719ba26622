"""Pytest configuration and shared fixtures."""

from datetime import date

import pytest

from pantrysync.config import get_settings
from pantrysync.logging_config import clear_context
from pantrysync.schemas import (
    DateRange,
    IngredientLine,
    IngredientMaster,
    MealPlanEntry,
    Quantity,
    ShoppingListItem,
    StockItem,
)

# =============================================================================
# Pytest Configuration
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings and logging context around every test."""
    get_settings.cache_clear()
    clear_context()
    yield
    get_settings.cache_clear()
    clear_context()


# =============================================================================
# Ingredient Master Fixtures
# =============================================================================


@pytest.fixture
def ingredient_master():
    """Small ingredient master with one pantry staple."""
    return [
        IngredientMaster(
            id="m-onion",
            canonical_name="onion",
            category="vegetables",
            recognition_pattern="onion",
        ),
        IngredientMaster(
            id="m-tomato",
            canonical_name="tomato",
            category="vegetables",
            recognition_pattern="トマト|tomato",
        ),
        IngredientMaster(
            id="m-salt",
            canonical_name="salt",
            category="seasoning",
            recognition_pattern="salt",
            infinity=True,
        ),
        IngredientMaster(
            id="m-milk",
            canonical_name="milk",
            default_unit="bottle",
            recognition_pattern="牛乳|milk",
        ),
        IngredientMaster(
            id="m-chicken",
            canonical_name="chicken thigh",
            category="meat",
            default_unit="g",
            recognition_pattern="chicken.*thigh",
        ),
    ]


# =============================================================================
# Stock Fixtures
# =============================================================================


@pytest.fixture
def stock_items():
    """Stock snapshot for one owner."""
    return [
        StockItem(
            id="s-onion",
            owner_id="owner-1",
            name="onion",
            quantity=Quantity(amount="3", unit="piece"),
            storage_location="pantry",
        ),
        StockItem(
            id="s-tomato",
            owner_id="owner-1",
            name="tomato",
            quantity=Quantity(amount="1", unit="piece"),
            best_before=date(2026, 10, 22),
            storage_location="冷蔵庫",
        ),
        StockItem(
            id="s-milk",
            owner_id="owner-1",
            name="milk",
            quantity=Quantity(amount="1", unit="L"),
            storage_location="冷蔵庫",
        ),
        StockItem(
            id="s-rice",
            owner_id="owner-1",
            name="rice",
            quantity=Quantity(amount="2", unit="kg"),
        ),
    ]


# =============================================================================
# Meal Plan Fixtures
# =============================================================================


@pytest.fixture
def meal_plans():
    """Three planned meals, the last one outside the shopping window."""
    return [
        MealPlanEntry(
            id="p1",
            date=date(2026, 10, 19),
            meal_type="dinner",
            ingredients=[
                IngredientLine(name="onion", quantity=Quantity(amount="1", unit="piece")),
                IngredientLine(name="tomato", quantity=Quantity(amount="2", unit="piece")),
                IngredientLine(name="salt", quantity=Quantity(amount="適量")),
                IngredientLine(name="chicken thigh", quantity=Quantity(amount="300", unit="g")),
            ],
        ),
        MealPlanEntry(
            id="p2",
            date=date(2026, 10, 20),
            meal_type="lunch",
            ingredients=[
                IngredientLine(name="Onion", quantity=Quantity(amount="1", unit="piece")),
                IngredientLine(name="chicken thigh", quantity=Quantity(amount="200", unit="g")),
                IngredientLine(name="carrot", quantity=Quantity(amount="2", unit="本")),
            ],
        ),
        MealPlanEntry(
            id="p3",
            date=date(2026, 10, 25),
            meal_type="dinner",
            ingredients=[
                IngredientLine(name="milk", quantity=Quantity(amount="200", unit="ml")),
            ],
        ),
    ]


@pytest.fixture
def date_range():
    """Shopping window covering the first two meals."""
    return DateRange(start=date(2026, 10, 19), end=date(2026, 10, 21))


@pytest.fixture
def shopping_list():
    """Current shopping list with one manual item."""
    return [
        ShoppingListItem(
            id="l1",
            name="carrot",
            quantity=Quantity(amount="1", unit="本"),
            added_from="manual",
        ),
    ]
