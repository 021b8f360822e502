"""Shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def docs_dir(tmp_path: Path) -> Path:
    """Small document tree with one file of every interesting kind."""
    root = tmp_path / "docs"
    (root / "pets").mkdir(parents=True)
    (root / "pets" / "deeper").mkdir()

    (root / "a.txt").write_text("cat dog dog", encoding="utf-8")
    (root / "pets" / "b.txt").write_text("dog dog dog", encoding="utf-8")
    (root / "pets" / "deeper" / "c.html").write_text(
        "<html><body><p>bird <b>fish</b></p></body></html>", encoding="utf-8"
    )
    (root / "README").write_text("no extension", encoding="utf-8")
    (root / "logo.png").write_bytes(b"\x89PNG\r\n")
    return root
