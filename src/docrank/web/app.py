"""FastAPI application backing the DocRank web UI."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, List

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from docrank import __version__
from docrank.config import DEFAULT_TOP_K, AppConfig
from docrank.errors import IndexingError
from docrank.index.corpus import CorpusIndex
from docrank.index.indexer import Indexer
from docrank.index.search import Searcher, SearchResult
from docrank.index.storage import open_store
from docrank.web.frontend import router as frontend_router

LOGGER = logging.getLogger(__name__)

MAX_TOP_K = 50

app = FastAPI(title="DocRank Web", version=__version__)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(frontend_router)
app.state.db_path = None


class SearchPayload(BaseModel):
    query: str
    db: Path | None = None
    top_k: int = DEFAULT_TOP_K


class IndexPayload(BaseModel):
    paths: List[str]
    db: str | None = None
    overwrite: bool = False


def _resolve_db_path(db: Path | None) -> Path:
    if db is None:
        db = app.state.db_path
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    return config.resolve_db_path(Path.cwd())


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _load_corpus(resolved_db: Path) -> CorpusIndex:
    if not resolved_db.exists():
        raise HTTPException(
            status_code=404,
            detail=f"Index not found at {resolved_db}. Please index a folder first.",
        )
    store = open_store(resolved_db)
    try:
        return store.load()
    finally:
        store.close()


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.post("/search")
async def search_documents(payload: SearchPayload) -> dict[str, List[SearchResult]]:
    query = payload.query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Empty query")

    top_k = max(1, min(payload.top_k, MAX_TOP_K))
    corpus = _load_corpus(_resolve_db_path(payload.db))
    return {"results": Searcher(corpus).search(query, top_k=top_k)}


@app.post("/api/search")
async def search_raw(request: Request) -> List[str]:
    """Plain-text query in the body, matching document paths out."""
    body = await request.body()
    query = body.decode("utf-8", errors="replace")
    corpus = _load_corpus(_resolve_db_path(None))
    return [result.path for result in Searcher(corpus).search(query, top_k=DEFAULT_TOP_K)]


@app.get("/documents")
async def list_documents(db: Path | None = None) -> dict[str, Any]:
    """List all indexed documents."""
    resolved_db = _resolve_db_path(db)
    if not resolved_db.exists():
        return {"documents": [], "stats": {"document_count": 0, "term_count": 0}}

    store = open_store(resolved_db)
    try:
        documents = store.list_documents()
        stats = store.get_stats()
    finally:
        store.close()

    return {"documents": documents, "stats": stats}


def _run_index_job(paths: List[Path], resolved_db: Path, overwrite: bool) -> dict[str, Any]:
    store = open_store(resolved_db)
    try:
        corpus = store.load()
        indexer = Indexer(corpus, overwrite=overwrite)
        totals = {"visited": 0, "indexed": 0, "updated": 0, "skipped": 0}
        failures: list[dict[str, str]] = []
        for path in paths:
            stats = indexer.index(path)
            for key in totals:
                totals[key] += getattr(stats, key)
            failures.extend(
                {"path": str(failure.path), "reason": failure.reason}
                for failure in stats.failures
            )
        store.save(corpus)
    finally:
        store.close()
    return {**totals, "failures": failures}


@app.post("/index")
async def index_paths(payload: IndexPayload) -> dict[str, Any]:
    resolved_db = _resolve_db_path(Path(payload.db) if payload.db else None)
    _ensure_db_parent(resolved_db)

    resolved_paths: List[Path] = []
    for raw in payload.paths:
        clean_path = raw.strip().replace("\r", "").replace("\n", "")
        if not clean_path:
            continue
        if "\0" in clean_path:
            raise HTTPException(status_code=400, detail="Invalid path: contains null byte")

        path = Path(clean_path).expanduser().resolve()
        if not path.exists():
            raise HTTPException(status_code=404, detail=f"Path not found: {clean_path}")
        if not path.is_dir():
            raise HTTPException(
                status_code=400, detail=f"Path must be a directory: {clean_path}"
            )
        resolved_paths.append(path)

    if not resolved_paths:
        raise HTTPException(status_code=400, detail="No paths provided")

    try:
        stats = await asyncio.to_thread(
            _run_index_job, resolved_paths, resolved_db, payload.overwrite
        )
    except IndexingError as exc:
        LOGGER.error("Indexing failed: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {"status": "ok", "db": str(resolved_db), "stats": stats}
