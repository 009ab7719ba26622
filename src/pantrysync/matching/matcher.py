"""Exact and partial name matching between ingredients, stock and shopping lists."""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from rapidfuzz import fuzz

from pantrysync.config import get_settings
from pantrysync.logging_config import get_logger
from pantrysync.normalize.arithmetic import compare_quantities, normalize_amount
from pantrysync.normalize.names import normalize_for_matching
from pantrysync.schemas import Quantity, StockItem

logger = get_logger(__name__)

T = TypeVar("T")


class MatchKind(str, Enum):
    """How two names matched."""

    EXACT = "exact"
    PARTIAL = "partial"
    NONE = "none"


def _classify_normalized(a: str, b: str, min_length: int) -> MatchKind:
    if not a or not b:
        return MatchKind.NONE
    if a == b:
        return MatchKind.EXACT

    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    if len(shorter) >= min_length and shorter in longer:
        return MatchKind.PARTIAL
    return MatchKind.NONE


def classify_match(name1: str, name2: str) -> MatchKind:
    """Classify two raw names as an exact, partial or non-match."""
    return _classify_normalized(
        normalize_for_matching(name1),
        normalize_for_matching(name2),
        get_settings().min_partial_match_length,
    )


def is_name_match(name1: str, name2: str) -> bool:
    """
    Check whether two names refer to the same ingredient.

    True if the normalized names are equal, or if the shorter one (at
    least two characters) is contained in the longer one, e.g.
    "new onion" / "onion".
    """
    return classify_match(name1, name2) is not MatchKind.NONE


def similarity(name1: str, name2: str) -> float:
    """Similarity of the normalized names in [0, 1]."""
    return fuzz.ratio(normalize_for_matching(name1), normalize_for_matching(name2)) / 100.0


@dataclass
class MatchResult:
    """Result of matching one target name against candidates."""

    target: str
    candidate: str | None
    kind: MatchKind
    score: float = 0.0

    @property
    def matched(self) -> bool:
        return self.kind is not MatchKind.NONE


@dataclass
class MatchingStats:
    total_targets: int = 0
    exact_matches: int = 0
    partial_matches: int = 0
    no_matches: int = 0
    accuracy: float = 0.0


@dataclass
class BatchMatchReport:
    matches: list[MatchResult] = field(default_factory=list)
    stats: MatchingStats = field(default_factory=MatchingStats)


class NameIndex(Generic[T]):
    """
    Normalized-name index over a snapshot of records.

    Built once per call so repeated lookups do exact hits in O(1) and
    only fall back to a linear scan for partial matches.
    """

    def __init__(self, items: Iterable[T], key: Callable[[T], str] = str):
        self._min_length = get_settings().min_partial_match_length
        self._entries: list[tuple[T, str, str]] = []
        self._exact: dict[str, T] = {}

        for item in items:
            raw = key(item) or ""
            normalized = normalize_for_matching(raw)
            self._entries.append((item, raw, normalized))
            if normalized:
                self._exact.setdefault(normalized, item)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_for_matching(name) in self._exact

    def get_exact(self, name: str) -> T | None:
        """Record whose normalized name equals the target's, if any."""
        return self._exact.get(normalize_for_matching(name))

    def best_match(self, target: str) -> tuple[T | None, MatchKind]:
        """
        Exact match wins outright; otherwise the partial match whose raw
        name length is closest to the target's (earliest on ties).
        """
        normalized = normalize_for_matching(target)
        if not normalized:
            return None, MatchKind.NONE

        exact = self._exact.get(normalized)
        if exact is not None:
            return exact, MatchKind.EXACT

        best: T | None = None
        best_diff: int | None = None
        for item, raw, candidate in self._entries:
            if _classify_normalized(normalized, candidate, self._min_length) is MatchKind.PARTIAL:
                diff = abs(len(raw) - len(target))
                if best_diff is None or diff < best_diff:
                    best, best_diff = item, diff

        if best is None:
            return None, MatchKind.NONE
        return best, MatchKind.PARTIAL

    def first_match(self, target: str) -> tuple[T | None, MatchKind]:
        """
        Exact match if present, else the first partial match in record order.

        An exact match anywhere wins over an earlier partial match, unlike a
        plain first-hit scan.
        """
        normalized = normalize_for_matching(target)
        if not normalized:
            return None, MatchKind.NONE

        exact = self._exact.get(normalized)
        if exact is not None:
            return exact, MatchKind.EXACT

        for item, _raw, candidate in self._entries:
            if _classify_normalized(normalized, candidate, self._min_length) is MatchKind.PARTIAL:
                return item, MatchKind.PARTIAL
        return None, MatchKind.NONE


def _match_in_index(target: str, index: NameIndex[str]) -> MatchResult:
    candidate, kind = index.best_match(target)
    if candidate is None:
        return MatchResult(target=target, candidate=None, kind=MatchKind.NONE)
    return MatchResult(
        target=target,
        candidate=candidate,
        kind=kind,
        score=similarity(target, candidate),
    )


def match_name(target: str, candidates: Sequence[str]) -> MatchResult:
    """Match one name against candidates, keeping how it matched."""
    return _match_in_index(target, NameIndex(candidates))


def find_best_match(target: str, candidates: Sequence[str]) -> str | None:
    """
    Find the candidate that best matches the target.

    Returns:
        The exact match if one exists, else the closest partial match by
        raw length, else None.
    """
    return match_name(target, candidates).candidate


def batch_match(targets: Sequence[str], candidates: Sequence[str]) -> BatchMatchReport:
    """
    Match many targets against the same candidates.

    Accuracy is (exact + partial) / total, or 0 for no targets.
    """
    index = NameIndex(candidates)
    report = BatchMatchReport()

    for target in targets:
        result = _match_in_index(target, index)
        report.matches.append(result)
        if result.kind is MatchKind.EXACT:
            report.stats.exact_matches += 1
        elif result.kind is MatchKind.PARTIAL:
            report.stats.partial_matches += 1
        else:
            report.stats.no_matches += 1

    total = len(targets)
    report.stats.total_targets = total
    report.stats.accuracy = (
        (report.stats.exact_matches + report.stats.partial_matches) / total if total else 0.0
    )

    logger.debug(
        f"Batch matched {total} names: {report.stats.exact_matches} exact, "
        f"{report.stats.partial_matches} partial, {report.stats.no_matches} unmatched"
    )
    return report


def deduplicate_names(names: Iterable[str]) -> list[str]:
    """Drop names whose normalized form was already seen, keeping order."""
    seen: set[str] = set()
    result: list[str] = []
    for name in names:
        normalized = normalize_for_matching(name)
        if normalized not in seen:
            seen.add(normalized)
            result.append(name)
    return result


# =============================================================================
# Stock lookups
# =============================================================================


def build_stock_index(stock: Iterable[StockItem]) -> NameIndex[StockItem]:
    return NameIndex(stock, key=lambda item: item.name)


def find_stock_match(
    name: str,
    stock: Sequence[StockItem] | NameIndex[StockItem],
) -> StockItem | None:
    """Stock row matching the name: exact match first, else first partial match."""
    index = stock if isinstance(stock, NameIndex) else build_stock_index(stock)
    item, _kind = index.first_match(name)
    return item


def count_units_interchangeable(unit1: str, unit2: str) -> bool:
    """Legacy rule: the configured pair of count units (個, 本) stand in for each other."""
    settings = get_settings()
    if not settings.legacy_count_interchange or unit1 == unit2:
        return False
    return {unit1, unit2} <= set(settings.interchangeable_count_units)


def stock_covers(available: Quantity, required: Quantity) -> bool:
    """True if the available quantity is at least the required one."""
    comparison = compare_quantities(available, required)
    if comparison is not None:
        return comparison >= 0

    if count_units_interchangeable(available.unit, required.unit):
        diff = normalize_amount(available.amount) - normalize_amount(required.amount)
        return diff > -get_settings().quantity_epsilon

    return False


def check_stock_availability(
    ingredient_name: str,
    required_quantity: Quantity | None,
    stock_items: Sequence[StockItem] | NameIndex[StockItem],
) -> bool:
    """
    Check whether stock satisfies an ingredient requirement.

    Args:
        ingredient_name: Name to look up in stock.
        required_quantity: Amount needed; None checks existence only.
        stock_items: Stock snapshot or a prebuilt stock index.

    Returns:
        True if a matching stock row exists and covers the requirement.
    """
    match = find_stock_match(ingredient_name, stock_items)
    if match is None:
        return False

    if required_quantity is None:
        return True

    return stock_covers(match.quantity, required_quantity)
