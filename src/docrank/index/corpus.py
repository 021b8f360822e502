"""In-memory corpus index and TF-IDF / cosine ranking."""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Mapping, Tuple

import numpy as np

from docrank.analysis.frequency import term_frequencies
from docrank.analysis.lexer import Lexer, Stemmer, make_stemmer

LOGGER = logging.getLogger(__name__)

ScoredDocument = Tuple[str, float]

# Similarities are compared at this many decimals so parallel vectors tie.
SCORE_PRECISION = 12


class CorpusIndex:
    """Per-document term frequencies plus corpus-wide document frequencies.

    ``documents`` maps a document id to its normalized term frequency table.
    ``document_frequencies`` maps a term to the number of documents whose
    table contains it.
    """

    def __init__(self, *, stemmer: Stemmer | None = None) -> None:
        self.stemmer = stemmer if stemmer is not None else make_stemmer()
        self.documents: Dict[str, Dict[str, float]] = {}
        self.document_frequencies: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self.documents)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self.documents

    @property
    def vocabulary_size(self) -> int:
        return len(self.document_frequencies)

    def tokenize(self, text: str) -> Lexer:
        return Lexer(text, self.stemmer)

    # ------------------------------------------------------------------ #
    # Indexing

    def add_document(
        self,
        doc_id: str,
        frequencies: Mapping[str, float],
        *,
        overwrite: bool = False,
    ) -> str:
        """Store ``frequencies`` under ``doc_id``.

        Returns ``"inserted"``, ``"updated"`` (an existing entry was replaced)
        or ``"skipped"`` (entry exists and ``overwrite`` is off).
        """
        existing = self.documents.get(doc_id)
        if existing is not None:
            if not overwrite:
                return "skipped"
            self._forget(existing)

        table = {term: float(value) for term, value in frequencies.items() if value > 0}
        for term in table:
            self.document_frequencies[term] = self.document_frequencies.get(term, 0) + 1
        self.documents[doc_id] = table
        return "updated" if existing is not None else "inserted"

    def index_text(self, doc_id: str, text: str, *, overwrite: bool = False) -> str:
        """Tokenize ``text`` and store it under ``doc_id``."""
        if doc_id in self.documents and not overwrite:
            return "skipped"
        return self.add_document(doc_id, term_frequencies(self.tokenize(text)), overwrite=overwrite)

    def _forget(self, table: Mapping[str, float]) -> None:
        for term in table:
            remaining = self.document_frequencies.get(term, 0) - 1
            if remaining > 0:
                self.document_frequencies[term] = remaining
            else:
                self.document_frequencies.pop(term, None)

    # ------------------------------------------------------------------ #
    # Ranking

    def document_frequency(self, term: str) -> int:
        return self.document_frequencies.get(term, 0)

    def idf(self, term: str) -> float:
        """Smoothed inverse document frequency, ``log10((D + 1) / (df + 1))``."""
        return math.log10((len(self.documents) + 1) / (self.document_frequency(term) + 1))

    def score(self, query: str) -> List[ScoredDocument]:
        """Rank documents against ``query`` by TF-IDF cosine similarity.

        Vectors have one dimension per query token, duplicates included.
        Documents whose similarity is undefined (zero norm on either side)
        are left out. Results are ordered by score descending, then by id.
        """
        terms = list(self.tokenize(query))
        if not terms or not self.documents:
            return []

        idf = {term: self.idf(term) for term in set(terms)}
        weights = np.array([idf[term] for term in terms], dtype="float64")

        query_tf = term_frequencies(terms)
        query_vector = np.array([query_tf[term] for term in terms], dtype="float64") * weights
        query_norm = float(np.linalg.norm(query_vector))
        if query_norm == 0.0:
            LOGGER.debug("Query %r has no weighted terms", query)
            return []

        doc_ids = list(self.documents)
        matrix = np.array(
            [[self.documents[doc_id].get(term, 0.0) for term in terms] for doc_id in doc_ids],
            dtype="float64",
        ) * weights
        norms = np.linalg.norm(matrix, axis=1)
        dots = matrix @ query_vector

        results: List[ScoredDocument] = []
        for doc_id, dot, norm in zip(doc_ids, dots, norms):
            if norm == 0.0:
                continue
            similarity = round(float(dot / (query_norm * norm)), SCORE_PRECISION)
            if not math.isfinite(similarity):
                continue
            results.append((doc_id, min(max(similarity, 0.0), 1.0)))

        results.sort(key=lambda item: (-item[1], item[0]))
        return results

    # ------------------------------------------------------------------ #
    # Serialization

    def to_dict(self) -> Dict[str, Any]:
        return {
            "documents": {doc_id: dict(table) for doc_id, table in self.documents.items()},
            "document_frequencies": dict(self.document_frequencies),
        }

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], *, stemmer: Stemmer | None = None
    ) -> "CorpusIndex":
        corpus = cls(stemmer=stemmer)
        corpus.documents = {
            str(doc_id): {str(term): float(value) for term, value in table.items()}
            for doc_id, table in data.get("documents", {}).items()
        }
        corpus.document_frequencies = {
            str(term): int(count) for term, count in data.get("document_frequencies", {}).items()
        }
        return corpus
