"""Command line interface for DocRank."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from docrank.config import DEFAULT_TOP_K, AppConfig
from docrank.errors import IndexingError
from docrank.index.corpus import CorpusIndex
from docrank.index.indexer import Indexer
from docrank.index.search import Searcher
from docrank.index.storage import open_store
from docrank.web.app import app as web_app


console = Console()
app = typer.Typer(help="DocRank - local TF-IDF search for text documents")

QUIT_COMMAND = "!q"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _resolve_db(db: Path | None) -> Path:
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    return config.resolve_db_path(Path.cwd())


def _load_corpus(resolved_db: Path) -> CorpusIndex:
    if not resolved_db.exists():
        raise typer.BadParameter(f"Index not found: {resolved_db}")
    store = open_store(resolved_db)
    try:
        return store.load()
    finally:
        store.close()


@app.command()
def index(
    root: Path = typer.Argument(..., help="Directory to index.", resolve_path=True),
    db: Path = typer.Option(None, "--db", help="Index path (SQLite, or JSON for *.json)"),
    overwrite: bool = typer.Option(
        False, "--overwrite", help="Re-index documents that are already in the index"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Index every supported file under a directory."""
    _setup_logging(verbose)
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path, overwrite=overwrite)
    resolved_db = config.resolve_db_path(Path.cwd())
    _ensure_db_parent(resolved_db)

    console.print(f"Indexing into [bold]{resolved_db}[/bold]...")
    store = open_store(resolved_db)
    try:
        corpus = store.load()
        indexer = Indexer(corpus, overwrite=config.overwrite)
        try:
            stats = indexer.index(root)
        except IndexingError as exc:
            console.print(str(exc), style="red", markup=False, soft_wrap=True)
            raise typer.Exit(code=1)
        store.save(corpus)
    finally:
        store.close()

    for failure in stats.failures:
        console.print(
            f"Skipped {failure.path}: {failure.reason}",
            style="yellow",
            markup=False,
            soft_wrap=True,
        )
    console.print(
        f"Indexed: {stats.indexed}, updated: {stats.updated}, "
        f"skipped: {stats.skipped}, visited: {stats.visited}"
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Query text"),
    db: Path = typer.Option(None, "--db", help="Index path"),
    top_k: int = typer.Option(DEFAULT_TOP_K, help="Number of results to display"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Rank indexed documents against a query."""
    _setup_logging(verbose)
    corpus = _load_corpus(_resolve_db(db))

    results = Searcher(corpus).search(query, top_k=top_k)
    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Score")
    table.add_column("Name")
    table.add_column("Path")

    for result in results:
        table.add_row(f"{result.score:.4f}", result.name, result.path)

    console.print(table)


@app.command()
def repl(
    db: Path = typer.Option(None, "--db", help="Index path"),
    top_k: int = typer.Option(DEFAULT_TOP_K, help="Number of results per query"),
) -> None:
    """Answer queries interactively until '!q' or end of input."""
    searcher = Searcher(_load_corpus(_resolve_db(db)))

    while True:
        try:
            query = console.input("> ")
        except EOFError:
            break
        query = query.rstrip()
        if query == QUIT_COMMAND:
            break

        console.print(f"Results for query: {query}", markup=False, highlight=False)
        for result in searcher.search(query, top_k=top_k):
            console.print(
                f"{result.path} ===> {result.score}",
                markup=False,
                highlight=False,
                soft_wrap=True,
            )


@app.command()
def info(
    db: Path = typer.Option(None, "--db", help="Index path"),
) -> None:
    """Show how many documents and terms an index holds."""
    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        console.print("[yellow]Index not found.[/yellow]")
        return

    store = open_store(resolved_db)
    try:
        stats = store.get_stats()
    finally:
        store.close()
    console.print(f"Documents: {stats['document_count']}, terms: {stats['term_count']}")


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    db: Path = typer.Option(None, "--db", help="Index path"),
) -> None:
    """Start the web interface."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - optional extra
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        console.print("[yellow]Warning: index not found, searches might fail.[/yellow]")

    web_app.state.db_path = resolved_db
    console.print(f"Starting web interface on http://{host}:{port} (index: {resolved_db})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":  # pragma: no cover
    app()
