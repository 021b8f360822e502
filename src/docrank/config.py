"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_TOP_K = 10


def _get_default_db_path() -> Path:
    """Get the default index path for the current working directory."""
    # Prefer a project-local index when one is already there
    local_db = Path("data/docrank.db")
    if local_db.exists():
        return local_db

    return Path.home() / "Documents" / "DocRank" / "docrank.db"


@dataclass(slots=True)
class AppConfig:
    db_path: Path | None = None
    top_k: int = DEFAULT_TOP_K
    overwrite: bool = False

    def __post_init__(self) -> None:
        if self.db_path is None:
            self.db_path = _get_default_db_path()

    def resolve_db_path(self, base_dir: Path | None = None) -> Path:
        if self.db_path is None:
            self.db_path = _get_default_db_path()
        if Path(self.db_path).is_absolute() or base_dir is None:
            return Path(self.db_path)
        return base_dir / self.db_path
