"""Shopping list generation from meal plans, stock and the current list."""

from collections.abc import Sequence
from datetime import date, timedelta

from pantrysync.logging_config import get_logger
from pantrysync.matching.matcher import (
    NameIndex,
    build_stock_index,
    count_units_interchangeable,
    find_stock_match,
    stock_covers,
)
from pantrysync.normalize.arithmetic import Ok, normalize_amount, subtract
from pantrysync.normalize.names import match_master_exactly, normalize_for_matching
from pantrysync.normalize.quantities import format_number
from pantrysync.plan.aggregator import AggregatedIngredient, aggregate_ingredients, filter_meal_plans
from pantrysync.schemas import (
    DateRange,
    IngredientDecision,
    IngredientMaster,
    IngredientStatus,
    MealPlanEntry,
    Quantity,
    ShoppingListItem,
    ShoppingListResult,
    StockItem,
)

logger = get_logger(__name__)


def compute_shortfall(required: Quantity, available: Quantity | None) -> Quantity:
    """
    Quantity still needed after using the available stock.

    Compatible units give the difference in the base unit; otherwise the
    full requirement is still needed.
    """
    if available is None:
        return required

    result = subtract(required, available)
    if isinstance(result, Ok):
        if normalize_amount(result.quantity.amount) > 0:
            return result.quantity
        return required

    if count_units_interchangeable(required.unit, available.unit):
        missing = normalize_amount(required.amount) - normalize_amount(available.amount)
        if missing > 0:
            return Quantity(amount=format_number(missing), unit=required.unit)

    return required


class ShoppingListGenerator:
    """
    Generates shopping-list additions from planned meals with:
    - Quantity aggregation across meals
    - Pantry staples ("infinity" ingredients) skipped
    - Stock coverage and shortfall calculation
    - De-duplication against the current shopping list

    The generator holds no state between calls; feeding one run's items
    back in as the current list makes the next run emit nothing.
    """

    def __init__(self, ingredient_master: Sequence[IngredientMaster] = ()):
        self.ingredient_master = list(ingredient_master)
        self._master_index = NameIndex(self.ingredient_master, key=lambda m: m.canonical_name)

    def generate(
        self,
        meal_plans: Sequence[MealPlanEntry],
        stock: Sequence[StockItem],
        existing_list: Sequence[ShoppingListItem],
        date_range: DateRange,
    ) -> ShoppingListResult:
        """
        Build the items to add to the shopping list.

        Args:
            meal_plans: Meal-plan snapshot (any dates).
            stock: Stock snapshot.
            existing_list: Current shopping list, manual and auto items.
            date_range: Inclusive range of meals to shop for.

        Returns:
            ShoppingListResult with new auto items, summary and decisions.
        """
        plans = filter_meal_plans(meal_plans, date_range.start, date_range.end)
        if not plans:
            logger.info(f"No meal plans between {date_range.start} and {date_range.end}")
            return ShoppingListResult()

        aggregated = aggregate_ingredients(plans, date_range.start, date_range.end)
        stock_index = build_stock_index(stock)
        queued = {normalize_for_matching(item.name) for item in existing_list}
        queued.discard("")

        result = ShoppingListResult()
        summary = result.summary

        for ingredient in aggregated.values():
            summary.total_ingredients += 1
            decision = self._decide(ingredient, stock_index, queued)
            result.decisions.append(decision)

            if decision.status in (IngredientStatus.INFINITY, IngredientStatus.IN_STOCK):
                summary.satisfied += 1
                continue

            summary.to_buy += 1
            if decision.status is IngredientStatus.ALREADY_QUEUED:
                summary.already_queued += 1
                continue

            result.items.append(
                ShoppingListItem(
                    name=ingredient.name,
                    quantity=decision.shortfall,
                    checked=False,
                    added_from="auto",
                )
            )

        logger.info(
            f"Generated shopping list: {len(result.items)} new items, "
            f"{summary.satisfied} satisfied, {summary.already_queued} already queued "
            f"of {summary.total_ingredients} ingredients"
        )
        return result

    def _find_master(self, name: str) -> IngredientMaster | None:
        """Master record by canonical name, else by a pattern matching the whole name."""
        master = self._master_index.get_exact(name)
        if master is not None:
            return master
        return match_master_exactly(name, self.ingredient_master)

    def _decide(
        self,
        ingredient: AggregatedIngredient,
        stock_index: NameIndex[StockItem],
        queued: set[str],
    ) -> IngredientDecision:
        master = self._find_master(ingredient.name)
        if master is not None and master.infinity:
            return IngredientDecision(
                name=ingredient.name,
                normalized_name=ingredient.normalized_name,
                status=IngredientStatus.INFINITY,
                required=ingredient.quantity,
            )

        stock_item = find_stock_match(ingredient.name, stock_index)
        if stock_item is not None and stock_covers(stock_item.quantity, ingredient.quantity):
            return IngredientDecision(
                name=ingredient.name,
                normalized_name=ingredient.normalized_name,
                status=IngredientStatus.IN_STOCK,
                required=ingredient.quantity,
                stock_name=stock_item.name,
            )

        shortfall = compute_shortfall(
            ingredient.quantity,
            stock_item.quantity if stock_item is not None else None,
        )
        status = (
            IngredientStatus.ALREADY_QUEUED
            if ingredient.normalized_name in queued
            else IngredientStatus.TO_BUY
        )
        return IngredientDecision(
            name=ingredient.name,
            normalized_name=ingredient.normalized_name,
            status=status,
            required=ingredient.quantity,
            shortfall=shortfall,
            stock_name=stock_item.name if stock_item is not None else None,
        )


def generate_shopping_list(
    meal_plans: Sequence[MealPlanEntry],
    stock: Sequence[StockItem],
    existing_list: Sequence[ShoppingListItem],
    ingredient_master: Sequence[IngredientMaster],
    date_range: DateRange,
) -> ShoppingListResult:
    """Shopping-list additions for the meals in date_range."""
    generator = ShoppingListGenerator(ingredient_master)
    return generator.generate(meal_plans, stock, existing_list, date_range)


def generate_shopping_list_for_next_days(
    days: int,
    today: date,
    meal_plans: Sequence[MealPlanEntry],
    stock: Sequence[StockItem],
    existing_list: Sequence[ShoppingListItem],
    ingredient_master: Sequence[IngredientMaster],
) -> ShoppingListResult:
    """Shopping-list additions for today and the following days - 1 days."""
    date_range = DateRange(start=today, end=today + timedelta(days=max(days, 1) - 1))
    return generate_shopping_list(meal_plans, stock, existing_list, ingredient_master, date_range)


def generate_weekly_shopping_list(
    today: date,
    meal_plans: Sequence[MealPlanEntry],
    stock: Sequence[StockItem],
    existing_list: Sequence[ShoppingListItem],
    ingredient_master: Sequence[IngredientMaster],
) -> ShoppingListResult:
    """Shopping-list additions for the Sunday-to-Saturday week containing today."""
    start = today - timedelta(days=(today.weekday() + 1) % 7)
    date_range = DateRange(start=start, end=start + timedelta(days=6))
    return generate_shopping_list(meal_plans, stock, existing_list, ingredient_master, date_range)
