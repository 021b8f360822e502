"""Search page served at the root of the DocRank web UI."""

from __future__ import annotations

from functools import lru_cache
from importlib.resources import files

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

TEMPLATE_NAME = "index.html"

router = APIRouter()


@lru_cache(maxsize=1)
def _load_template() -> str:
    """Read the bundled page once per process."""
    resource = files(__package__) / "templates" / TEMPLATE_NAME
    return resource.read_text(encoding="utf-8")


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def search_page() -> str:
    return _load_template()
