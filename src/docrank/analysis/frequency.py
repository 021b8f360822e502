"""Per-document term frequency tables."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable


def term_frequencies(terms: Iterable[str]) -> Dict[str, float]:
    """Count ``terms`` and normalize the counts so they sum to 1.0.

    An empty token stream yields an empty table.
    """
    counts = Counter(terms)
    total = sum(counts.values())
    if total == 0:
        return {}
    return {term: count / total for term, count in counts.items()}
