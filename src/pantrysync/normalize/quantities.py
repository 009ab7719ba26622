"""Parsing and formatting of free-text quantity expressions."""

import re
from enum import Enum
from fractions import Fraction

from pantrysync.normalize.units import known_units
from pantrysync.schemas import UNITLESS, Quantity


class Ambiguous(Enum):
    """Marker for recognised non-numeric amounts such as "to taste"."""

    TOKEN = "ambiguous"

    def __repr__(self) -> str:
        return "AMBIGUOUS"


AMBIGUOUS = Ambiguous.TOKEN

# Amount words that mean "some, unmeasured"
AMBIGUOUS_TERMS: tuple[str, ...] = (
    "少々",
    "ひとつまみ",
    "お好み",
    "適量",
    "適宜",
    "to taste",
    "a pinch",
    "pinch",
    "as preferred",
    "as needed",
)

DEFAULT_AMBIGUOUS_AMOUNT = "適量"

_HALF_WIDTH = str.maketrans("０１２３４５６７８９．／＋", "0123456789./+")

_INTEGER_RE = re.compile(r"^([0-9]+)$")
_FRACTION_RE = re.compile(r"^([0-9]+)/([0-9]+)$")
_MIXED_RE = re.compile(r"^([0-9]+)\s+([0-9]+)/([0-9]+)$")
_ADDITION_RE = re.compile(r"^([0-9]+(?:\.[0-9]+)?(?:/[0-9]+)?)\s*\+\s*([0-9]+(?:\.[0-9]+)?(?:/[0-9]+)?)$")
_DECIMAL_RE = re.compile(r"^([0-9]+(?:\.[0-9]+)?)$")


def to_half_width(text: str) -> str:
    """Convert full-width digits (and . / +) to their ASCII forms."""
    return text.translate(_HALF_WIDTH)


def _unit_alternation() -> str:
    # Alphabetic units must not run into a following letter ("2 l" in "2 lemons").
    parts = []
    for unit in known_units():
        escaped = re.escape(unit)
        parts.append(f"{escaped}(?![A-Za-z])" if unit[0].isascii() else escaped)
    return "|".join(parts)


EMBEDDED_QUANTITY_RE = re.compile(rf"([0-9]+(?:\.[0-9]+)?)\s*({_unit_alternation()})")


def parse_amount(text: str | None) -> float | Ambiguous | None:
    """
    Parse an amount string into a number.

    Handles formats like:
    - "2"
    - "1/2"
    - "2 1/2" (two and a half)
    - "1 + 1/2"
    - "1.5"

    Returns AMBIGUOUS for words like "適量" or "to taste", and None for
    anything else.
    """
    if not text or not text.strip():
        return None

    trimmed = to_half_width(text.strip())

    lowered = trimmed.lower()
    if any(term in lowered for term in AMBIGUOUS_TERMS):
        return AMBIGUOUS

    if match := _INTEGER_RE.match(trimmed):
        return float(int(match.group(1)))

    if match := _FRACTION_RE.match(trimmed):
        numerator, denominator = int(match.group(1)), int(match.group(2))
        if denominator == 0:
            return None
        return numerator / denominator

    if match := _MIXED_RE.match(trimmed):
        whole, numerator, denominator = (int(g) for g in match.groups())
        if denominator == 0:
            return None
        return whole + numerator / denominator

    if match := _ADDITION_RE.match(trimmed):
        left = parse_amount(match.group(1))
        right = parse_amount(match.group(2))
        if isinstance(left, float) and isinstance(right, float):
            return left + right
        return None

    if match := _DECIMAL_RE.match(trimmed):
        return float(match.group(1))

    return None


def _is_unit_boundary(text: str, unit: str) -> bool:
    """Reject alphabetic units that are only the tail of a word ("bowl")."""
    if not unit[0].isascii() or len(text) == len(unit):
        return True
    preceding = text[-len(unit) - 1]
    return not (preceding.isascii() and preceding.isalpha())


def parse_quantity(raw: str | None) -> Quantity:
    """
    Split a quantity string into amount and unit.

    Examples:
        "200g" -> ("200", "g")
        "1/2 cup" -> ("1/2", "cup")
        "適量" -> ("適量", "-")
    """
    if not raw or not raw.strip():
        return Quantity(amount="", unit=UNITLESS)

    text = raw.strip()
    for unit in known_units():
        if text.endswith(unit) and _is_unit_boundary(text, unit):
            return Quantity(amount=text[: -len(unit)].strip(), unit=unit)

    return Quantity(amount=text, unit=UNITLESS)


def format_quantity(amount: str | Quantity | None, unit: str | None = None) -> str:
    """Join amount and unit for display; either part may be missing."""
    if isinstance(amount, Quantity):
        amount, unit = amount.amount, amount.unit

    amount_text = (amount or "").strip()
    unit_text = (unit or "").strip()
    if unit_text == UNITLESS:
        unit_text = ""

    return f"{amount_text}{unit_text}"


def format_number(value: float, precision: int = 6) -> str:
    """Render a float without trailing zeros or float noise (1500, 1.5)."""
    rounded = round(value, precision)
    if rounded == 0:
        return "0"
    if rounded.is_integer():
        return str(int(rounded))
    return f"{rounded:.{precision}f}".rstrip("0").rstrip(".")


def decimal_to_fraction(value: float, max_denominator: int = 16) -> str:
    """
    Render a number as a kitchen fraction.

    Examples:
        0.5 -> "1/2"
        1.5 -> "1 1/2"
        2.0 -> "2"
    """
    if value < 0:
        return "-" + decimal_to_fraction(-value, max_denominator)

    fraction = Fraction(value).limit_denominator(max_denominator)
    whole, remainder = divmod(fraction.numerator, fraction.denominator)
    if remainder == 0:
        return str(whole)
    if whole:
        return f"{whole} {remainder}/{fraction.denominator}"
    return f"{remainder}/{fraction.denominator}"


def split_name_and_quantity(text: str) -> tuple[str, Quantity]:
    """
    Pull an embedded quantity out of an ingredient text.

    Examples:
        "トマト2個" -> ("トマト", ("2", "個"))
        "milk 500ml" -> ("milk", ("500", "ml"))
        "salt" -> ("salt", ("適量", "-"))
    """
    if not text:
        return "", Quantity(amount=DEFAULT_AMBIGUOUS_AMOUNT, unit=UNITLESS)

    normalized = to_half_width(text)
    match = EMBEDDED_QUANTITY_RE.search(normalized)
    if not match:
        return text.strip(), Quantity(amount=DEFAULT_AMBIGUOUS_AMOUNT, unit=UNITLESS)

    name = (normalized[: match.start()] + normalized[match.end() :]).strip()
    quantity = Quantity(amount=match.group(1), unit=match.group(2))
    return name or text.strip(), quantity
