# ABOUTME: The `shelfmark batch` command for enriching a CSV list of titles.
# ABOUTME: Runs the batch controller with a progress bar and reports where to resume after a pause.

import asyncio
import csv
from contextlib import AbstractAsyncContextManager
from pathlib import Path

import click
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from shelfmark.cli.options import build_config, engine_options
from shelfmark.enrichment.batch import BatchResult
from shelfmark.enrichment.config import EngineConfig
from shelfmark.enrichment.engine import EnrichmentEngine, open_book_engine
from shelfmark.enrichment.types import CatalogItem

console = Console()

_CREATOR_COLUMNS = ("author", "creator", "director", "host")


class CsvFormatError(Exception):
    """Raised when a catalog CSV cannot be turned into catalog items."""


def _open_engine(config: EngineConfig) -> AbstractAsyncContextManager[EnrichmentEngine]:
    """Open the default engine (Google Books + Open Library)."""
    return open_book_engine(config)


def read_catalog_csv(path: Path) -> list[CatalogItem]:
    """Read catalog items from a CSV with a title column.

    Header names are matched case-insensitively. The creator comes from the
    first of author/creator/director/host present; genre is optional. Rows
    with a blank title are skipped.
    """
    with path.open(newline="", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle)
        if reader.fieldnames is None:
            raise CsvFormatError(f"{path.name} is empty")

        columns = {name.strip().lower(): name for name in reader.fieldnames if name}
        if "title" not in columns:
            raise CsvFormatError(f"{path.name} has no 'title' column")
        creator_column = next((columns[c] for c in _CREATOR_COLUMNS if c in columns), None)
        genre_column = columns.get("genre")

        items: list[CatalogItem] = []
        for row in reader:
            title = (row.get(columns["title"]) or "").strip()
            if not title:
                continue
            creator = (row.get(creator_column) or "").strip() if creator_column else ""
            genre = (row.get(genre_column) or "").strip() if genre_column else ""
            items.append(CatalogItem(title=title, creator=creator or None, genre=genre or None))
    return items


def _make_progress(console: Console) -> Progress:
    """Create a Rich progress bar for batch processing."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeRemainingColumn(),
        console=console,
    )


async def _run(items: list[CatalogItem], config: EngineConfig, progress: Progress) -> BatchResult:
    task_id = progress.add_task("Enriching", total=len(items))

    def on_progress(done: int, total: int) -> None:
        progress.update(task_id, completed=done)

    async with _open_engine(config) as engine:
        return await engine.enrich_all_outcome(items, progress=on_progress)


def _render_results(result: BatchResult, offset: int) -> None:
    table = Table(title="Enriched")
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Creator")
    table.add_column("Genre")
    table.add_column("Rating", justify="right")

    for index, enriched in enumerate(result.items, start=offset + 1):
        rated = next((entry for entry in enriched.ratings if entry.rating is not None), None)
        table.add_row(
            str(index),
            enriched.title,
            enriched.creator or "[dim]unknown[/dim]",
            enriched.genre or "[dim]?[/dim]",
            f"{rated.rating:.1f} ({rated.source})" if rated else "—",
        )
    console.print(table)


@click.command()
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--skip",
    type=click.IntRange(min=0),
    default=0,
    help="Skip the first N rows (resume after a rate-limit pause).",
)
@engine_options
def batch(csv_path: Path, skip: int, min_interval: float, chunk_size: int) -> None:
    """Enrich every title in a CSV file, a few at a time."""
    try:
        items = read_catalog_csv(csv_path)
    except (CsvFormatError, csv.Error, UnicodeDecodeError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    items = items[skip:]
    if not items:
        console.print("[yellow]Nothing to enrich.[/yellow]")
        return

    config = build_config(min_interval=min_interval, chunk_size=chunk_size)
    progress = _make_progress(console)
    with progress:
        result = asyncio.run(_run(items, config, progress))

    if result.items:
        _render_results(result, skip)

    if result.interrupted:
        done = skip + len(result.items)
        console.print(
            f"\n[yellow]Paused after {len(result.items)} of {len(items)} item(s):[/yellow] "
            f"{result.error}"
        )
        console.print(f"Resume later with [bold]--skip {done}[/bold].")
        raise SystemExit(1)

    console.print(f"\nDone: [green]{len(result.items)} enriched[/green]")
