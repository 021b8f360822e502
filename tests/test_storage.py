"""Tests for index persistence."""

import json
import sqlite3

import pytest

from docrank.index.corpus import CorpusIndex
from docrank.index.storage import JsonIndexStore, SQLiteIndexStore, open_store
from docrank.models import DocumentSummary

QUERIES = ["dog", "cat dog", "bird fish", "fish fish cat", "zebra", ""]


@pytest.fixture
def corpus():
    corpus = CorpusIndex()
    corpus.index_text("/docs/a.txt", "cat dog dog")
    corpus.index_text("/docs/b.txt", "dog dog dog")
    corpus.index_text("/docs/c.html", "bird fish, 42 birds")
    corpus.index_text("/docs/empty.txt", "")
    return corpus


@pytest.fixture
def temp_db(tmp_path):
    """Create a temporary database for testing."""
    store = SQLiteIndexStore(tmp_path / "test.db")
    yield store
    store.close()


class TestSQLiteIndexStore:
    """Test SQLiteIndexStore schema and round trips."""

    def test_init_creates_database(self, tmp_path):
        db_path = tmp_path / "new.db"
        assert not db_path.exists()

        store = SQLiteIndexStore(db_path)

        assert db_path.exists()
        assert store.db_path == db_path
        store.close()

    def test_schema_creation(self, temp_db):
        """Test that schema is properly created."""
        conn = temp_db.connection
        tables = {
            row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }

        assert {"documents", "term_frequencies", "document_frequencies"} <= tables

    def test_pragma_settings(self, temp_db):
        """Test that PRAGMA settings are applied."""
        conn = temp_db.connection

        assert conn.execute("PRAGMA journal_mode").fetchone()[0].lower() == "wal"
        assert conn.execute("PRAGMA synchronous").fetchone()[0] == 1

    def test_connection_property(self, temp_db):
        assert isinstance(temp_db.connection, sqlite3.Connection)

    def test_load_empty(self, temp_db):
        """An empty database loads as an empty index."""
        corpus = temp_db.load()

        assert len(corpus) == 0
        assert corpus.score("dog") == []

    def test_round_trip(self, temp_db, corpus):
        """Saved and reloaded indexes hold the same data and rank the same."""
        temp_db.save(corpus)
        restored = temp_db.load()

        assert restored.documents == corpus.documents
        assert restored.document_frequencies == corpus.document_frequencies
        for query in QUERIES:
            assert restored.score(query) == corpus.score(query)

    def test_round_trip_across_connections(self, tmp_path, corpus):
        """Data survives closing and reopening the database."""
        db_path = tmp_path / "persist.db"
        store = SQLiteIndexStore(db_path)
        store.save(corpus)
        store.close()

        reopened = SQLiteIndexStore(db_path)
        try:
            restored = reopened.load()
        finally:
            reopened.close()

        assert restored.to_dict() == corpus.to_dict()

    def test_save_replaces_previous_index(self, temp_db, corpus):
        """Saving twice keeps only the latest index."""
        temp_db.save(corpus)
        smaller = CorpusIndex()
        smaller.index_text("/docs/only.txt", "only")

        temp_db.save(smaller)

        assert temp_db.load().to_dict() == smaller.to_dict()

    def test_failed_save_rolls_back(self, temp_db, corpus):
        """A failing save leaves the previous index intact."""
        temp_db.save(corpus)
        broken = CorpusIndex()
        broken.index_text("/docs/x.txt", "x")
        temp_db.connection.execute(
            "CREATE TRIGGER reject BEFORE INSERT ON document_frequencies "
            "BEGIN SELECT RAISE(ABORT, 'rejected'); END"
        )

        with pytest.raises(sqlite3.DatabaseError):
            temp_db.save(broken)

        temp_db.connection.execute("DROP TRIGGER reject")
        assert temp_db.load().to_dict() == corpus.to_dict()

    def test_list_documents(self, temp_db, corpus):
        temp_db.save(corpus)

        documents = temp_db.list_documents()

        assert [doc.path for doc in documents] == sorted(corpus.documents)
        assert DocumentSummary(path="/docs/empty.txt", term_count=0) in documents

    def test_get_stats(self, temp_db, corpus):
        temp_db.save(corpus)

        assert temp_db.get_stats() == {
            "document_count": 4,
            "term_count": corpus.vocabulary_size,
        }


class TestJsonIndexStore:
    def test_round_trip(self, tmp_path, corpus):
        """JSON files restore an identical index."""
        store = JsonIndexStore(tmp_path / "docs.index.json")
        store.save(corpus)

        restored = store.load()

        assert restored.to_dict() == corpus.to_dict()
        for query in QUERIES:
            assert restored.score(query) == corpus.score(query)

    def test_file_layout(self, tmp_path, corpus):
        """The file is a single object with both frequency maps."""
        path = tmp_path / "docs.index.json"
        JsonIndexStore(path).save(corpus)

        data = json.loads(path.read_text(encoding="utf-8"))

        assert set(data) == {"documents", "document_frequencies"}
        assert data["document_frequencies"]["dog"] == 2
        assert not path.with_name("docs.index.json.tmp").exists()

    def test_load_missing_file(self, tmp_path):
        """A missing file loads as an empty index."""
        store = JsonIndexStore(tmp_path / "missing.json")

        assert len(store.load()) == 0
        assert store.get_stats() == {"document_count": 0, "term_count": 0}
        assert store.list_documents() == []

    def test_stats_and_listing(self, tmp_path, corpus):
        store = JsonIndexStore(tmp_path / "docs.json")
        store.save(corpus)

        assert store.get_stats()["document_count"] == 4
        assert store.list_documents()[0] == DocumentSummary(path="/docs/a.txt", term_count=2)


class TestOpenStore:
    def test_json_suffix(self, tmp_path):
        assert isinstance(open_store(tmp_path / "index.JSON"), JsonIndexStore)

    def test_sqlite_default(self, tmp_path):
        store = open_store(tmp_path / "index.db")
        try:
            assert isinstance(store, SQLiteIndexStore)
        finally:
            store.close()
