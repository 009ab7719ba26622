"""Arithmetic and comparison on Quantity values across compatible units."""

import math
import re
from collections.abc import Callable
from dataclasses import dataclass

from pantrysync.config import get_settings
from pantrysync.normalize.quantities import AMBIGUOUS, format_number, parse_amount
from pantrysync.normalize.units import are_units_compatible, convert_to_base, get_base_unit
from pantrysync.schemas import UNITLESS, Quantity

_NEGATIVE_RE = re.compile(r"^-([0-9]+(?:\.[0-9]+)?)$")


@dataclass(frozen=True)
class Ok:
    """Successful quantity operation."""

    quantity: Quantity


@dataclass(frozen=True)
class IncompatibleUnits:
    """The two operands belong to different (or unknown) unit classes."""

    left_unit: str
    right_unit: str

    def __bool__(self) -> bool:
        return False


QuantityResult = Ok | IncompatibleUnits


@dataclass(frozen=True)
class _ConvertedPair:
    amount1: float
    amount2: float
    base_unit: str


def normalize_amount(amount: str | None) -> float:
    """
    Turn amount text into a number for arithmetic.

    Ambiguous words ("適量") and unparseable text count as 0. A plain
    negative number keeps its sign so deficits survive a round trip.
    """
    parsed = parse_amount(amount)
    if parsed is AMBIGUOUS:
        return 0.0
    if parsed is not None:
        return parsed

    if amount and (match := _NEGATIVE_RE.match(amount.strip())):
        return -float(match.group(1))

    return 0.0


def _convert_pair(q1: Quantity, q2: Quantity) -> _ConvertedPair | None:
    if not are_units_compatible(q1.unit, q2.unit):
        return None

    converted1 = convert_to_base(normalize_amount(q1.amount), q1.unit)
    converted2 = convert_to_base(normalize_amount(q2.amount), q2.unit)
    if converted1 is None or converted2 is None:
        return None

    return _ConvertedPair(
        amount1=converted1.amount,
        amount2=converted2.amount,
        base_unit=converted1.base_unit,
    )


def _combine(q1: Quantity, q2: Quantity, operation: Callable[[float, float], float]) -> QuantityResult:
    pair = _convert_pair(q1, q2)
    if pair is None:
        return IncompatibleUnits(left_unit=q1.unit, right_unit=q2.unit)

    value = operation(pair.amount1, pair.amount2)
    return Ok(Quantity(amount=format_number(value), unit=pair.base_unit))


def add(q1: Quantity, q2: Quantity) -> QuantityResult:
    """
    Add two quantities.

    The result is expressed in the shared base unit, so
    1 大さじ + 1 小さじ comes back as 20 mL.
    """
    return _combine(q1, q2, lambda a, b: a + b)


def subtract(q1: Quantity, q2: Quantity) -> QuantityResult:
    """Subtract q2 from q1 in the base unit. Negative results are kept."""
    return _combine(q1, q2, lambda a, b: a - b)


def add_quantities(q1: Quantity, q2: Quantity) -> Quantity | None:
    """Add two quantities, or None when their units are incompatible."""
    result = add(q1, q2)
    return result.quantity if isinstance(result, Ok) else None


def subtract_quantities(q1: Quantity, q2: Quantity) -> Quantity | None:
    """Subtract q2 from q1, or None when their units are incompatible."""
    result = subtract(q1, q2)
    return result.quantity if isinstance(result, Ok) else None


def compare_quantities(q1: Quantity, q2: Quantity) -> int | None:
    """
    Compare two quantities after conversion.

    Returns:
        1 if q1 > q2, -1 if q1 < q2, 0 if equal within epsilon,
        None if the units cannot be compared.
    """
    pair = _convert_pair(q1, q2)
    if pair is None:
        return None

    diff = pair.amount1 - pair.amount2
    if abs(diff) < get_settings().quantity_epsilon:
        return 0
    return 1 if diff > 0 else -1


def quantities_equal(q1: Quantity, q2: Quantity) -> bool:
    """True if both quantities convert to the same base amount."""
    return compare_quantities(q1, q2) == 0


def is_valid_quantity(quantity: Quantity) -> bool:
    """Amount is a finite number >= 0 and the unit is known."""
    amount = normalize_amount(quantity.amount)
    return math.isfinite(amount) and amount >= 0 and get_base_unit(quantity.unit) is not None


def format_quantity_for_display(quantity: Quantity, precision: int = 2) -> str:
    """
    Format a quantity for people, e.g. "1.5kg" or "3".

    The amount is normalized, so ambiguous words render as "0"; use
    format_quantity to keep the text verbatim.
    """
    amount = normalize_amount(quantity.amount)
    unit = "" if quantity.unit == UNITLESS else quantity.unit
    return f"{format_number(amount, precision)}{unit}"
