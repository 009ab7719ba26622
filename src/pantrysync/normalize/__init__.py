"""Parse, convert and normalize quantities and names."""

from pantrysync.normalize.arithmetic import (
    IncompatibleUnits,
    Ok,
    QuantityResult,
    add,
    add_quantities,
    compare_quantities,
    format_quantity_for_display,
    is_valid_quantity,
    normalize_amount,
    quantities_equal,
    subtract,
    subtract_quantities,
)
from pantrysync.normalize.names import (
    NameNormalizationResult,
    NormalizationStats,
    get_normalization_stats,
    match_master_exactly,
    normalize_against_master,
    normalize_for_matching,
    normalize_receipt_items,
)
from pantrysync.normalize.quantities import (
    AMBIGUOUS,
    Ambiguous,
    decimal_to_fraction,
    format_number,
    format_quantity,
    parse_amount,
    parse_quantity,
    split_name_and_quantity,
)
from pantrysync.normalize.units import (
    BaseAmount,
    UnitConversion,
    are_units_compatible,
    convert_to_base,
    get_base_unit,
    get_unit_conversion,
    get_unit_groups,
    known_units,
)

__all__ = [
    "AMBIGUOUS",
    "Ambiguous",
    "BaseAmount",
    "IncompatibleUnits",
    "NameNormalizationResult",
    "NormalizationStats",
    "Ok",
    "QuantityResult",
    "UnitConversion",
    "add",
    "add_quantities",
    "are_units_compatible",
    "compare_quantities",
    "convert_to_base",
    "decimal_to_fraction",
    "format_number",
    "format_quantity",
    "format_quantity_for_display",
    "get_base_unit",
    "get_normalization_stats",
    "get_unit_conversion",
    "get_unit_groups",
    "is_valid_quantity",
    "known_units",
    "match_master_exactly",
    "normalize_against_master",
    "normalize_amount",
    "normalize_for_matching",
    "normalize_receipt_items",
    "parse_amount",
    "parse_quantity",
    "quantities_equal",
    "split_name_and_quantity",
    "subtract",
    "subtract_quantities",
]
