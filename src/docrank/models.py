"""Core DocRank data models."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class IndexFailure:
    """A file or directory the indexer had to skip, and why."""

    path: Path
    reason: str


@dataclass(slots=True)
class DocumentSummary:
    """Minimal view of an indexed document."""

    path: str
    term_count: int
