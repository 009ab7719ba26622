"""Name matching and stock lookups."""

from pantrysync.matching.matcher import (
    BatchMatchReport,
    MatchingStats,
    MatchKind,
    MatchResult,
    NameIndex,
    batch_match,
    build_stock_index,
    check_stock_availability,
    classify_match,
    count_units_interchangeable,
    deduplicate_names,
    find_best_match,
    find_stock_match,
    is_name_match,
    match_name,
    similarity,
    stock_covers,
)

__all__ = [
    "BatchMatchReport",
    "MatchKind",
    "MatchResult",
    "MatchingStats",
    "NameIndex",
    "batch_match",
    "build_stock_index",
    "check_stock_availability",
    "classify_match",
    "count_units_interchangeable",
    "deduplicate_names",
    "find_best_match",
    "find_stock_match",
    "is_name_match",
    "match_name",
    "similarity",
    "stock_covers",
]
