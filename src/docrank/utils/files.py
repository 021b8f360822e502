"""Utility helpers for working with files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List


def list_entries(directory: Path) -> List[os.DirEntry]:
    """Return the entries of ``directory`` sorted by name.

    Raises ``OSError`` when the directory cannot be opened.
    """
    with os.scandir(directory) as entries:
        return sorted(entries, key=lambda entry: entry.name)


def document_id(path: Path) -> str:
    """Identifier under which ``path`` is stored in the index."""
    return str(Path(path))
