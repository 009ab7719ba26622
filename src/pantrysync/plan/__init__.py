"""Meal-plan aggregation and shopping list generation."""

from pantrysync.plan.aggregator import (
    AggregatedIngredient,
    MealSource,
    aggregate_ingredients,
    filter_meal_plans,
)
from pantrysync.plan.shopping_list import (
    ShoppingListGenerator,
    compute_shortfall,
    generate_shopping_list,
    generate_shopping_list_for_next_days,
    generate_weekly_shopping_list,
)

__all__ = [
    "AggregatedIngredient",
    "MealSource",
    "ShoppingListGenerator",
    "aggregate_ingredients",
    "compute_shortfall",
    "filter_meal_plans",
    "generate_shopping_list",
    "generate_shopping_list_for_next_days",
    "generate_weekly_shopping_list",
]
