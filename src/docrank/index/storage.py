"""Durable storage for the corpus index.

Two backends share one interface: a SQLite database (default) and a single
JSON document (``*.json``).
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Protocol

from docrank.analysis.lexer import Stemmer
from docrank.index.corpus import CorpusIndex
from docrank.models import DocumentSummary


class IndexStore(Protocol):
    def save(self, corpus: CorpusIndex) -> None: ...

    def load(self, *, stemmer: Stemmer | None = None) -> CorpusIndex: ...

    def get_stats(self) -> Dict[str, int]: ...

    def list_documents(self) -> List[DocumentSummary]: ...

    def close(self) -> None: ...


class SQLiteIndexStore:
    """Persistence layer for term and document frequencies."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._conn = sqlite3.connect(self.db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._conn.execute("PRAGMA foreign_keys=ON;")
        self._ensure_schema()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    id INTEGER PRIMARY KEY,
                    path TEXT NOT NULL UNIQUE,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS term_frequencies (
                    document_id INTEGER NOT NULL,
                    term TEXT NOT NULL,
                    frequency REAL NOT NULL,
                    PRIMARY KEY (document_id, term),
                    FOREIGN KEY(document_id) REFERENCES documents(id) ON DELETE CASCADE
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS document_frequencies (
                    term TEXT PRIMARY KEY,
                    count INTEGER NOT NULL
                )
                """
            )

    def save(self, corpus: CorpusIndex) -> None:
        """Replace the stored index with ``corpus``."""
        with self.transaction() as conn:
            conn.execute("DELETE FROM term_frequencies")
            conn.execute("DELETE FROM documents")
            conn.execute("DELETE FROM document_frequencies")

            for path, table in corpus.documents.items():
                doc_id = conn.execute(
                    "INSERT INTO documents(path) VALUES (?)", (path,)
                ).lastrowid
                conn.executemany(
                    """
                    INSERT INTO term_frequencies(document_id, term, frequency)
                    VALUES (?, ?, ?)
                    """,
                    [(doc_id, term, frequency) for term, frequency in table.items()],
                )

            conn.executemany(
                "INSERT INTO document_frequencies(term, count) VALUES (?, ?)",
                list(corpus.document_frequencies.items()),
            )

    def load(self, *, stemmer: Stemmer | None = None) -> CorpusIndex:
        documents: Dict[str, Dict[str, float]] = {
            row["path"]: {} for row in self._conn.execute("SELECT path FROM documents")
        }
        rows = self._conn.execute(
            """
            SELECT d.path AS path, t.term AS term, t.frequency AS frequency
            FROM term_frequencies t
            JOIN documents d ON d.id = t.document_id
            """
        )
        for row in rows:
            documents[row["path"]][row["term"]] = row["frequency"]

        frequencies = {
            row["term"]: row["count"]
            for row in self._conn.execute("SELECT term, count FROM document_frequencies")
        }
        return CorpusIndex.from_dict(
            {"documents": documents, "document_frequencies": frequencies}, stemmer=stemmer
        )

    def list_documents(self) -> List[DocumentSummary]:
        rows = self._conn.execute(
            """
            SELECT d.path AS path, COUNT(t.term) AS term_count
            FROM documents d
            LEFT JOIN term_frequencies t ON t.document_id = d.id
            GROUP BY d.id
            ORDER BY d.path
            """
        ).fetchall()
        return [DocumentSummary(path=row["path"], term_count=row["term_count"]) for row in rows]

    def get_stats(self) -> Dict[str, int]:
        document_count = self._conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0]
        term_count = self._conn.execute("SELECT COUNT(*) FROM document_frequencies").fetchone()[0]
        return {"document_count": document_count, "term_count": term_count}


class JsonIndexStore:
    """Whole index kept as one JSON object on disk."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def close(self) -> None:
        pass

    def save(self, corpus: CorpusIndex) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(corpus.to_dict(), handle, ensure_ascii=False)
        tmp_path.replace(self.path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def load(self, *, stemmer: Stemmer | None = None) -> CorpusIndex:
        return CorpusIndex.from_dict(self._read(), stemmer=stemmer)

    def list_documents(self) -> List[DocumentSummary]:
        documents = self._read().get("documents", {})
        return [
            DocumentSummary(path=path, term_count=len(table))
            for path, table in sorted(documents.items())
        ]

    def get_stats(self) -> Dict[str, int]:
        data = self._read()
        return {
            "document_count": len(data.get("documents", {})),
            "term_count": len(data.get("document_frequencies", {})),
        }


def open_store(path: Path) -> IndexStore:
    """Open the backend matching ``path``: JSON for ``.json``, SQLite otherwise."""
    path = Path(path)
    if path.suffix.lower() == ".json":
        return JsonIndexStore(path)
    return SQLiteIndexStore(path)
