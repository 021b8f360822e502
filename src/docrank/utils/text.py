"""Text helpers shared by the content readers."""

from __future__ import annotations

from typing import Iterable


def normalize_whitespace(lines: Iterable[str]) -> str:
    """Strip each line, drop blank ones and join the rest with newlines."""
    return "\n".join(line.strip() for line in lines if line.strip())
