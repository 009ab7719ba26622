"""Ingredient aggregation across planned meals."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from pantrysync.logging_config import get_logger
from pantrysync.normalize.arithmetic import Ok, add
from pantrysync.normalize.names import normalize_for_matching
from pantrysync.normalize.quantities import split_name_and_quantity
from pantrysync.schemas import UNITLESS, IngredientLine, MealPlanEntry, Quantity

logger = get_logger(__name__)


@dataclass(frozen=True)
class MealSource:
    """The planned meal an ingredient requirement came from."""

    date: date
    meal_type: str

    def __str__(self) -> str:
        return f"{self.date.isoformat()} {self.meal_type}"


@dataclass
class AggregatedIngredient:
    """An ingredient with quantities summed over several meals."""

    name: str
    normalized_name: str
    quantity: Quantity
    sources: list[MealSource] = field(default_factory=list)

    def add_source(self, source: MealSource) -> None:
        if source not in self.sources:
            self.sources.append(source)


def filter_meal_plans(
    meal_plans: Iterable[MealPlanEntry],
    start_date: date,
    end_date: date,
) -> list[MealPlanEntry]:
    """Meal plans dated within [start_date, end_date]."""
    return [plan for plan in meal_plans if start_date <= plan.date <= end_date]


def _resolve_line(line: IngredientLine) -> tuple[str, Quantity]:
    """Display name and quantity, taking the quantity from the name text when absent."""
    if line.quantity is not None and (line.quantity.amount or line.quantity.unit != UNITLESS):
        return line.name.strip(), line.quantity
    return split_name_and_quantity(line.name)


def aggregate_ingredients(
    meal_plans: Iterable[MealPlanEntry],
    start_date: date,
    end_date: date,
) -> dict[str, AggregatedIngredient]:
    """
    Sum the ingredients required by meals in a date range.

    Contributions sharing a normalized name are added when their units are
    compatible. When they are not, the later contribution replaces the
    running total.

    Args:
        meal_plans: Meal-plan snapshot.
        start_date: First day, inclusive.
        end_date: Last day, inclusive.

    Returns:
        Dict mapping normalized names to AggregatedIngredient, in first-seen order.
    """
    aggregated: dict[str, AggregatedIngredient] = {}

    for plan in filter_meal_plans(meal_plans, start_date, end_date):
        source = MealSource(date=plan.date, meal_type=plan.meal_type)

        for line in plan.ingredients:
            name, quantity = _resolve_line(line)
            normalized = normalize_for_matching(name)
            if not normalized:
                continue

            existing = aggregated.get(normalized)
            if existing is None:
                aggregated[normalized] = AggregatedIngredient(
                    name=name,
                    normalized_name=normalized,
                    quantity=quantity,
                    sources=[source],
                )
                continue

            result = add(existing.quantity, quantity)
            if isinstance(result, Ok):
                existing.quantity = result.quantity
            else:
                # TODO: keep incompatible contributions as separate lines once
                # the shopping list can carry more than one quantity per name.
                logger.warning(
                    f"Cannot add {result.left_unit} and {result.right_unit} for "
                    f"'{existing.name}', keeping the later quantity"
                )
                existing.quantity = quantity
            existing.add_source(source)

    logger.debug(f"Aggregated {len(aggregated)} ingredients from {start_date} to {end_date}")
    return aggregated
