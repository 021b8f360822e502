"""Query interface over a corpus index."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

from docrank.index.corpus import CorpusIndex


@dataclass(slots=True)
class SearchResult:
    path: str
    name: str
    score: float


class Searcher:
    """High-level API returning the best ranked documents for a query."""

    def __init__(self, corpus: CorpusIndex) -> None:
        self.corpus = corpus

    def search(self, query: str, *, top_k: int = 10) -> List[SearchResult]:
        ranked = self.corpus.score(query)
        return [
            SearchResult(path=doc_id, name=Path(doc_id).name, score=score)
            for doc_id, score in ranked[: max(top_k, 0)]
        ]
