"""Exception hierarchy shared across DocRank."""

from __future__ import annotations

from pathlib import Path


class DocRankError(Exception):
    """Base class for all DocRank errors."""


class ExtractionError(DocRankError):
    """Content could not be extracted from a file."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(message)


class UnreadableFile(ExtractionError):
    def __init__(self, path: Path, reason: object) -> None:
        self.reason = reason
        super().__init__(path, f"cannot read file ({reason})")


class NoExtension(ExtractionError):
    def __init__(self, path: Path) -> None:
        super().__init__(path, "cannot read file without extension")


class UnsupportedExtension(ExtractionError):
    def __init__(self, path: Path, extension: str) -> None:
        self.extension = extension
        super().__init__(path, f"unknown extension {extension!r}")


class MalformedMarkup(ExtractionError):
    """Structured content (HTML, XML or PDF) could not be parsed."""

    def __init__(self, path: Path, reason: object) -> None:
        self.reason = reason
        super().__init__(path, f"cannot parse content ({reason})")


class IndexingError(DocRankError):
    """Raised when the root of an indexing pass cannot be opened."""
