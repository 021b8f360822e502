"""Directory indexing pipeline."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List

from docrank.errors import ExtractionError, IndexingError
from docrank.index.corpus import CorpusIndex
from docrank.ingestion.readers import read_document
from docrank.models import IndexFailure
from docrank.utils.files import document_id, list_entries

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class IndexStats:
    visited: int = 0
    indexed: int = 0
    updated: int = 0
    skipped: int = 0
    processed_files: list[Path] = field(default_factory=list)
    failures: list[IndexFailure] = field(default_factory=list)

    def increment(self, status: str, path: Path) -> None:
        self.visited += 1
        if status == "inserted":
            self.indexed += 1
        elif status == "updated":
            self.updated += 1
        else:
            self.skipped += 1
        self.processed_files.append(path)

    def record_failure(self, path: Path, reason: object) -> None:
        self.failures.append(IndexFailure(path=Path(path), reason=str(reason)))


class Indexer:
    """Walks a directory tree and feeds every readable file into a corpus."""

    def __init__(
        self,
        corpus: CorpusIndex,
        *,
        overwrite: bool = False,
        reader: Callable[[Path], str] = read_document,
    ) -> None:
        self.corpus = corpus
        self.overwrite = overwrite
        self.reader = reader

    def index(self, root: Path) -> IndexStats:
        """Index every regular file under ``root``.

        Subdirectories are kept on an explicit stack. A directory that cannot
        be listed is reported and skipped, except ``root`` itself, which
        raises :class:`IndexingError`.
        """
        root = Path(root)
        try:
            entries = list_entries(root)
        except OSError as exc:
            raise IndexingError(f"Cannot open directory {root}: {exc}") from exc

        stats = IndexStats()
        pending: List[Path] = []

        while True:
            subdirs: List[Path] = []
            for entry in entries:
                self._handle_entry(entry, subdirs, stats)
            pending.extend(reversed(subdirs))

            if not pending:
                break
            directory = pending.pop()
            try:
                entries = list_entries(directory)
            except OSError as exc:
                LOGGER.error("Cannot read directory %s: %s", directory, exc)
                stats.record_failure(directory, exc)
                entries = []

        LOGGER.info(
            "Visited %d files: %d indexed, %d updated, %d skipped",
            stats.visited,
            stats.indexed,
            stats.updated,
            stats.skipped,
        )
        return stats

    def _handle_entry(self, entry: os.DirEntry, subdirs: List[Path], stats: IndexStats) -> None:
        path = Path(entry.path)
        try:
            if entry.is_dir(follow_symlinks=False):
                subdirs.append(path)
                return
            if not entry.is_file():
                return
        except OSError as exc:
            LOGGER.error("Cannot stat %s: %s", path, exc)
            stats.record_failure(path, exc)
            return

        stats.increment(self._index_single(path, stats), path)

    def _index_single(self, path: Path, stats: IndexStats) -> str:
        doc_id = document_id(path)
        if doc_id in self.corpus and not self.overwrite:
            LOGGER.debug("Already indexed, skipping %s", path)
            return "skipped"

        LOGGER.info("Indexing %s", path)
        try:
            text = self.reader(path)
        except ExtractionError as exc:
            LOGGER.warning("Skipping %s: %s", path, exc)
            stats.record_failure(path, exc)
            return "skipped"

        return self.corpus.index_text(doc_id, text, overwrite=self.overwrite)
