"""Resolve free-text product names against the catalog.

Three tiers, tried in order, each scanning the catalog in its given order:

1. exact: case-insensitive equality after trimming
2. substring: catalog name contains the text, or the text contains it
3. similarity: best normalised Levenshtein score above the threshold;
   on equal scores the entry seen first is kept

Whatever tier matched, the line is reported as matched; there is no graded
confidence.
"""
from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum

import structlog

from ..models.orders import CatalogEntry, ParsedOrderItem, RawOrderItem

logger = structlog.get_logger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.6


class MatchTier(StrEnum):
    EXACT = "exact"
    SUBSTRING = "substring"
    SIMILARITY = "similarity"


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance (insertions, deletions, substitutions) between two strings."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (ca != cb),
            ))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """``(max_len - distance) / max_len`` in [0, 1]; two empty strings score 1."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(a, b)) / longest


def available_entries(catalog: Sequence[CatalogEntry]) -> list[CatalogEntry]:
    return [entry for entry in catalog if entry.is_available]


def find_match(
    product_name: str,
    catalog: Sequence[CatalogEntry],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> tuple[CatalogEntry, MatchTier] | None:
    """Return the catalog entry for *product_name* and the tier that found it.

    Unavailable entries are skipped. Returns None when no tier matches.
    """
    needle = product_name.strip().lower()
    entries = available_entries(catalog)
    names = [entry.name.strip().lower() for entry in entries]

    for entry, name in zip(entries, names):
        if name == needle:
            return entry, MatchTier.EXACT

    # An empty needle is contained in every name
    if not needle:
        return None

    for entry, name in zip(entries, names):
        if needle in name or name in needle:
            return entry, MatchTier.SUBSTRING

    best: CatalogEntry | None = None
    best_score = 0.0
    for entry, name in zip(entries, names):
        score = similarity(needle, name)
        if score > best_score:
            best, best_score = entry, score
    if best is not None and best_score > threshold:
        return best, MatchTier.SIMILARITY
    return None


def resolve_item(
    item: RawOrderItem,
    catalog: Sequence[CatalogEntry],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> ParsedOrderItem:
    """Resolve one extracted line; quantity defaults to 1, unit passes through."""
    found = find_match(item.product_name, catalog, threshold)
    quantity = item.quantity if item.quantity is not None else 1
    if found is None:
        logger.debug("product_unmatched", product_name=item.product_name)
        return ParsedOrderItem(
            product_name=item.product_name,
            product_id=None,
            quantity=quantity,
            unit=item.unit,
            matched=False,
        )

    entry, tier = found
    logger.debug("product_matched", product_name=item.product_name, product_id=entry.id, tier=tier.value)
    return ParsedOrderItem(
        product_name=item.product_name,
        product_id=entry.id,
        quantity=quantity,
        unit=item.unit,
        matched=True,
    )


def resolve_items(
    items: Sequence[RawOrderItem],
    catalog: Sequence[CatalogEntry],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> list[ParsedOrderItem]:
    """Resolve every line, keeping the extraction order."""
    return [resolve_item(item, catalog, threshold) for item in items]
