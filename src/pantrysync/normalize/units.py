"""Unit conversion tables and compatibility classes."""

from dataclasses import dataclass

from pantrysync.schemas import UNITLESS


@dataclass(frozen=True)
class UnitConversion:
    """How a surface unit maps onto its compatibility class."""

    base_unit: str
    factor: float


@dataclass(frozen=True)
class BaseAmount:
    """An amount expressed in a base unit."""

    amount: float
    base_unit: str


# =============================================================================
# Unit Conversion Tables
# =============================================================================

# Weight conversions (base unit: g)
MASS_UNITS: dict[str, float] = {
    "g": 1.0,
    "gram": 1.0,
    "grams": 1.0,
    "kg": 1000.0,
    "kilogram": 1000.0,
    "kilograms": 1000.0,
}

# Volume conversions (base unit: mL)
VOLUME_UNITS: dict[str, float] = {
    "mL": 1.0,
    "ml": 1.0,
    "cc": 1.0,
    "dl": 100.0,
    "L": 1000.0,
    "l": 1000.0,
    # Cooking measures
    "大さじ": 15.0,
    "tbsp": 15.0,
    "小さじ": 5.0,
    "tsp": 5.0,
    "カップ": 200.0,  # Japanese measuring cup
    "cup": 200.0,
    "cups": 200.0,
    "合": 180.0,  # rice measure
}

# Count units. Each one is its own class: "3 sheets" never equals "3 pieces".
# Values are the singular spelling the unit aliases.
COUNT_UNITS: dict[str, str] = {
    "個": "個",
    "本": "本",
    "枚": "枚",
    "袋": "袋",
    "缶": "缶",
    "パック": "パック",
    "箱": "箱",
    "束": "束",
    "片": "片",
    "房": "房",
    "人前": "人前",
    "杯": "杯",
    "piece": "piece",
    "pieces": "piece",
    "pc": "piece",
    "pcs": "piece",
    "bottle": "bottle",
    "bottles": "bottle",
    "sheet": "sheet",
    "sheets": "sheet",
    "bag": "bag",
    "bags": "bag",
    "can": "can",
    "cans": "can",
    "pack": "pack",
    "packs": "pack",
    "box": "box",
    "boxes": "box",
    "bundle": "bundle",
    "bundles": "bundle",
    "clove": "clove",
    "cloves": "clove",
    "serving": "serving",
    "servings": "serving",
}


def _build_conversions() -> dict[str, UnitConversion]:
    conversions: dict[str, UnitConversion] = {}
    for unit, factor in MASS_UNITS.items():
        conversions[unit] = UnitConversion(base_unit="g", factor=factor)
    for unit, factor in VOLUME_UNITS.items():
        conversions[unit] = UnitConversion(base_unit="mL", factor=factor)
    for unit, singular in COUNT_UNITS.items():
        conversions[unit] = UnitConversion(base_unit=singular, factor=1.0)
    conversions[UNITLESS] = UnitConversion(base_unit=UNITLESS, factor=1.0)
    return conversions


UNIT_CONVERSIONS: dict[str, UnitConversion] = _build_conversions()

# Surface units a quantity string may end with, longest first so that "kg"
# is tried before "g".
_UNIT_VOCABULARY: tuple[str, ...] = tuple(
    sorted((u for u in UNIT_CONVERSIONS if u != UNITLESS), key=len, reverse=True)
)


def known_units() -> tuple[str, ...]:
    """Known surface units, longest first."""
    return _UNIT_VOCABULARY


def get_unit_conversion(unit: str | None) -> UnitConversion | None:
    """Look up a unit's conversion, or None for unknown units."""
    if unit is None:
        return None
    return UNIT_CONVERSIONS.get(unit.strip())


def get_base_unit(unit: str | None) -> str | None:
    """Base unit of the unit's compatibility class."""
    conversion = get_unit_conversion(unit)
    return conversion.base_unit if conversion else None


def are_units_compatible(unit1: str | None, unit2: str | None) -> bool:
    """True iff both units are known and share a compatibility class."""
    base1 = get_base_unit(unit1)
    base2 = get_base_unit(unit2)
    return base1 is not None and base2 is not None and base1 == base2


def convert_to_base(amount: float, unit: str | None) -> BaseAmount | None:
    """
    Convert an amount to its class's base unit.

    Unknown units fail closed and return None.
    """
    conversion = get_unit_conversion(unit)
    if conversion is None:
        return None
    return BaseAmount(amount=amount * conversion.factor, base_unit=conversion.base_unit)


def get_unit_groups() -> dict[str, list[str]]:
    """Surface units grouped by base unit."""
    groups: dict[str, list[str]] = {}
    for unit, conversion in UNIT_CONVERSIONS.items():
        groups.setdefault(conversion.base_unit, []).append(unit)
    return groups
