"""Command line interface for aozoraindex."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from aozoraindex.collect.detail import DetailResolver
from aozoraindex.collect.discovery import EntryDiscoverer
from aozoraindex.collect.fetch import Fetcher
from aozoraindex.config import AppConfig
from aozoraindex.errors import CollectionAbortedError, CollectorError, StoreError
from aozoraindex.index.collector import CollectStats, Collector
from aozoraindex.index.search import Searcher
from aozoraindex.index.storage import SQLiteFullTextStore
from aozoraindex.ingestion.archive import ArchiveExtractor
from aozoraindex.ingestion.segmenter import Segmenter


console = Console()
app = typer.Typer(help="aozoraindex - collect Aozora Bunko works into a full-text index")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _print_summary(stats: CollectStats) -> None:
    console.print(
        f"Discovered: {stats.discovered}, inserted: {stats.inserted}, "
        f"updated: {stats.updated}, skipped: {stats.skipped}, failed: {stats.failed}"
    )


def _open_existing(db: Path | None) -> SQLiteFullTextStore:
    resolved_db = AppConfig(db_path=db).resolve_db_path(Path.cwd())
    if not resolved_db.exists():
        raise typer.BadParameter(f"Database not found: {resolved_db}")
    return SQLiteFullTextStore(resolved_db)


@app.command()
def collect(
    listing_url: str = typer.Argument(..., help="Catalog listing page to collect from."),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    workers: int = typer.Option(AppConfig().workers, help="Parallel fetch workers"),
    timeout: float = typer.Option(AppConfig().timeout, help="Per-request timeout in seconds"),
    retries: int = typer.Option(AppConfig().retries, help="Retries for transient HTTP failures"),
    link_policy: str = typer.Option(
        AppConfig().link_policy, help="Which .zip link wins on a detail page: first or last"
    ),
    site_root: str = typer.Option(AppConfig().site_root, help="Base URL for detail pages"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Collect every work linked from a listing page."""
    _setup_logging(verbose)
    try:
        config = AppConfig(
            db_path=db,
            site_root=site_root,
            timeout=timeout,
            retries=retries,
            workers=workers,
            link_policy=link_policy,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    resolved_db = config.resolve_db_path(Path.cwd())
    _ensure_db_parent(resolved_db)

    try:
        store = SQLiteFullTextStore(resolved_db)
    except StoreError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    fetcher = Fetcher(timeout=config.timeout, retries=config.retries, user_agent=config.user_agent)
    collector = Collector(
        EntryDiscoverer(fetcher, site_root=config.site_root),
        DetailResolver(fetcher, link_policy=config.link_policy),
        ArchiveExtractor(fetcher, encoding=config.source_encoding),
        Segmenter(),
        store,
        workers=config.workers,
        max_store_errors=config.max_store_errors,
    )

    console.print(f"Collecting into [bold]{resolved_db}[/bold]...")
    try:
        stats = collector.collect(listing_url)
    except CollectionAbortedError as exc:
        console.print(f"[red]Collection aborted: {exc}[/red]")
        if exc.stats is not None:
            _print_summary(exc.stats)
        raise typer.Exit(code=1) from exc
    except CollectorError as exc:
        console.print(f"[red]Collection aborted: {exc}[/red]")
        raise typer.Exit(code=1) from exc
    finally:
        fetcher.close()
        store.close()

    _print_summary(stats)


@app.command()
def search(
    query: str = typer.Argument(..., help="Boolean full-text query, e.g. '虫 AND ココア'"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    limit: int = typer.Option(None, help="Maximum number of rows"),
) -> None:
    """Run a boolean full-text query."""
    store = _open_existing(db)
    try:
        results = Searcher(store).search(query, limit=limit)
    except StoreError as exc:
        raise typer.BadParameter(str(exc)) from exc
    finally:
        store.close()

    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Author")
    table.add_column("Title")
    table.add_column("ID")
    for result in results:
        table.add_row(result.author, result.title, f"{result.author_id}/{result.title_id}")
    console.print(table)


@app.command()
def show(
    author_id: str = typer.Argument(..., help="Author identifier, e.g. 000879"),
    title_id: str = typer.Argument(..., help="Title identifier, e.g. 128"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
) -> None:
    """Print the stored text of one work."""
    store = _open_existing(db)
    try:
        record = store.get_content(author_id, title_id)
    finally:
        store.close()

    if record is None:
        console.print(f"[yellow]No work stored for {author_id}/{title_id}.[/yellow]")
        raise typer.Exit(code=1)
    console.print(f"[bold]{record.title}[/bold]")
    console.print(record.content, markup=False, highlight=False)
