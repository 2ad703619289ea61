"""Weighted fuzzy search over registry entries.

Scores are distances: 0.0 is a perfect match, 1.0 no match at all. A field
distance comes from the best of three checks (exact, substring, similarity
against the field or any of its words); heavier keys add less penalty, so a
hit on the name outranks the same hit in the description.
"""

import re
from dataclasses import dataclass
from difflib import SequenceMatcher

from .schema import RegistryEntry

DEFAULT_KEYS: tuple[tuple[str, float], ...] = (
    ("name", 0.4),
    ("slug", 0.3),
    ("domain", 0.2),
    ("description", 0.1),
)
DEFAULT_THRESHOLD = 0.4

# Substring hits further from the start cost this much per character
LOCATION_DISTANCE = 100

_WORD_SPLIT = re.compile(r"[\s\-_./:,()]+")


@dataclass(frozen=True)
class SearchResult:
    entry: RegistryEntry
    score: float


def field_distance(query: str, text: str) -> float:
    """Distance between a lowercase query and a field value."""
    text = text.lower()
    if not text:
        return 1.0
    if query == text:
        return 0.0

    index = text.find(query)
    if index >= 0:
        return min(index / LOCATION_DISTANCE, 1.0)

    candidates = [text, *(w for w in _WORD_SPLIT.split(text) if w)]
    best = max(SequenceMatcher(None, query, c).ratio() for c in candidates)
    return 1.0 - best


class SearchIndex:
    """
    Fuzzy index over a fixed list of entries (built once, queried many times).

    Example:
        >>> index = SearchIndex(entries)
        >>> [r.entry.slug for r in index.search("astr")]
        ['astro']
    """

    def __init__(
        self,
        entries: list[RegistryEntry],
        keys: tuple[tuple[str, float], ...] = DEFAULT_KEYS,
        threshold: float = DEFAULT_THRESHOLD,
    ):
        self.threshold = threshold
        max_weight = max(weight for _, weight in keys)
        self._penalties = [(key, (max_weight - weight) / 4) for key, weight in keys]
        self._rows = [(entry, {key: getattr(entry, key) or "" for key, _ in keys}) for entry in entries]

    def score(self, query: str, entry_fields: dict[str, str]) -> float:
        return min(field_distance(query, entry_fields[key]) + penalty for key, penalty in self._penalties)

    def search(self, query: str, threshold: float | None = None) -> list[SearchResult]:
        """
        Rank entries by score, dropping anything above the threshold.

        Ties keep catalog order.

        Args:
            query: Free-text query
            threshold: Override of the index threshold (e.g. looser for suggestions)
        """
        limit = self.threshold if threshold is None else threshold
        query = query.strip().lower()
        if not query:
            return []

        results = []
        for entry, fields in self._rows:
            score = self.score(query, fields)
            if score <= limit:
                results.append(SearchResult(entry=entry, score=score))

        results.sort(key=lambda r: r.score)
        return results
