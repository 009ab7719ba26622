"""Name normalization for matching and ingredient-master recognition."""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import TypeVar

from pydantic import BaseModel

from pantrysync.logging_config import get_logger
from pantrysync.normalize.quantities import EMBEDDED_QUANTITY_RE, to_half_width
from pantrysync.schemas import IngredientMaster

logger = get_logger(__name__)

ItemT = TypeVar("ItemT", bound=BaseModel)

# "トマト（大）" -> "トマト", "butter (softened)" -> "butter"
_BRACKETED_RE = re.compile(r"[(（\[【「〈][^)）\]】」〉]*[)）\]】」〉]")
_STRAY_BRACKET_RE = re.compile(r"[()（）\[\]【】「」〈〉]")
_SEPARATOR_RE = re.compile(r"[\s、，,。．.・/／:：;；!！?？]+")


def normalize_for_matching(name: str | None) -> str:
    """
    Normalize an ingredient or product name for matching.

    - Casefold
    - Full-width digits to half-width
    - Remove bracketed annotations
    - Remove embedded quantities ("2個", "500ml")
    - Collapse whitespace and punctuation

    The result is a matching key, not a display name.
    """
    if not name:
        return ""

    text = to_half_width(name).casefold()
    text = _BRACKETED_RE.sub(" ", text)
    text = _STRAY_BRACKET_RE.sub(" ", text)
    text = EMBEDDED_QUANTITY_RE.sub(" ", text)
    text = _SEPARATOR_RE.sub(" ", text)

    return text.strip()


# =============================================================================
# Ingredient master recognition
# =============================================================================


@dataclass
class NameNormalizationResult:
    """Outcome of mapping a captured product name to a canonical name."""

    name: str
    original_name: str
    is_normalized: bool
    matched_ingredient: IngredientMaster | None = None


@dataclass
class NormalizationStats:
    total: int
    normalized: int
    unchanged: int
    normalization_rate: float


@lru_cache(maxsize=1024)
def _compile_pattern(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error:
        return None


def _pattern_matches(pattern: str, captured_name: str, reverse: bool = False) -> bool:
    """
    Regex search, or case-insensitive containment for invalid regexes.

    Containment checks that the pattern contains the name; with ``reverse``
    it checks that the name contains the pattern.
    """
    compiled = _compile_pattern(pattern)
    if compiled is not None:
        return compiled.search(captured_name) is not None

    lowered_pattern = pattern.casefold()
    lowered_name = captured_name.casefold()
    if reverse:
        return lowered_pattern in lowered_name
    return lowered_name in lowered_pattern


def match_master_exactly(
    name: str,
    masters: Sequence[IngredientMaster],
) -> IngredientMaster | None:
    """
    Master whose recognition pattern matches the whole name, if any.

    Unlike normalize_against_master this never matches a fragment, so a
    "salt" pattern does not claim "unsalted butter".
    """
    candidate = name.strip()
    if not candidate:
        return None

    for master in masters:
        pattern = master.recognition_pattern
        if not pattern:
            continue
        compiled = _compile_pattern(pattern)
        if compiled is not None:
            if compiled.fullmatch(candidate):
                return master
        elif pattern.casefold() == candidate.casefold():
            return master
    return None


def normalize_against_master(
    captured_name: str,
    masters: Sequence[IngredientMaster],
) -> NameNormalizationResult:
    """
    Map a captured product name (receipt, purchase) to a canonical name.

    Each pass runs over the whole list before the next one starts:
    exact recognition pattern, then pattern match, then (for patterns
    that are not valid regexes) the name containing the pattern.

    Args:
        captured_name: Name as read from the receipt or shopping list.
        masters: Ingredient-master records.

    Returns:
        NameNormalizationResult; the captured name is kept when nothing matches.
    """
    if not captured_name or not captured_name.strip():
        return NameNormalizationResult(name="", original_name="", is_normalized=False)

    candidate = captured_name.strip()

    matched = next(
        (m for m in masters if m.recognition_pattern and m.recognition_pattern == candidate),
        None,
    )
    for reverse in (False, True):
        if matched is not None:
            break
        matched = next(
            (
                m
                for m in masters
                if m.recognition_pattern
                and _pattern_matches(m.recognition_pattern, candidate, reverse=reverse)
            ),
            None,
        )

    if matched is None:
        return NameNormalizationResult(
            name=captured_name,
            original_name=captured_name,
            is_normalized=False,
        )

    logger.debug(f"Normalized '{captured_name}' -> '{matched.canonical_name}'")
    return NameNormalizationResult(
        name=matched.canonical_name,
        original_name=captured_name,
        is_normalized=True,
        matched_ingredient=matched,
    )


def normalize_receipt_items(
    items: Iterable[ItemT],
    masters: Sequence[IngredientMaster],
) -> list[tuple[ItemT, NameNormalizationResult]]:
    """
    Normalize the names of a batch of captured items.

    Returns copies of the items with the canonical name in place, each
    paired with its normalization result.
    """
    normalized: list[tuple[ItemT, NameNormalizationResult]] = []
    for item in items:
        result = normalize_against_master(item.name, masters)
        renamed = item.model_copy(update={"name": result.name}) if result.is_normalized else item
        normalized.append((renamed, result))
    return normalized


def get_normalization_stats(results: Sequence[NameNormalizationResult]) -> NormalizationStats:
    """Summarize how many names were mapped to canonical names."""
    total = len(results)
    normalized = sum(1 for r in results if r.is_normalized)
    return NormalizationStats(
        total=total,
        normalized=normalized,
        unchanged=total - normalized,
        normalization_rate=normalized / total if total else 0.0,
    )
