# ABOUTME: The `shelfmark enrich` command for enriching a single title.
# ABOUTME: Fetches from every book source, then prints the merged record and its ratings.

import asyncio
from contextlib import AbstractAsyncContextManager

import click
from rich.console import Console
from rich.table import Table

from shelfmark.cli.options import build_config, min_interval_option
from shelfmark.enrichment.config import EngineConfig
from shelfmark.enrichment.engine import EnrichmentEngine, open_book_engine
from shelfmark.enrichment.errors import RateLimited
from shelfmark.enrichment.types import CatalogItem, EnrichedItem

console = Console()


def _open_engine(config: EngineConfig) -> AbstractAsyncContextManager[EnrichmentEngine]:
    """Open the default engine (Google Books + Open Library)."""
    return open_book_engine(config)


async def _enrich(item: CatalogItem, config: EngineConfig) -> EnrichedItem:
    async with _open_engine(config) as engine:
        return await engine.enrich(item)


def render_item(enriched: EnrichedItem) -> None:
    """Print an enriched item as a field table followed by a ratings table."""
    table = Table(title=enriched.title, show_header=False, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Creator", enriched.creator or "[dim]unknown[/dim]")
    table.add_row("Genre", enriched.genre or "[dim]unknown[/dim]")
    table.add_row("Published", enriched.published_date or "[dim]unknown[/dim]")
    table.add_row("Publisher", enriched.publisher or "[dim]unknown[/dim]")
    table.add_row("Description", enriched.description or "[dim]none[/dim]")
    table.add_row("Cover", enriched.cover_url or "[dim]none[/dim]")
    if enriched.subjects:
        table.add_row("Subjects", ", ".join(enriched.subjects))
    if enriched.identifiers:
        ids_str = ", ".join(f"{k}={v}" for k, v in enriched.identifiers.items())
        table.add_row("Identifiers", ids_str)
    console.print(table)

    if not enriched.ratings:
        return

    ratings = Table(title="Ratings")
    ratings.add_column("Source", style="bold")
    ratings.add_column("Rating", justify="right")
    ratings.add_column("Count", justify="right")
    ratings.add_column("Link", style="dim")
    for entry in enriched.ratings:
        if entry.rating is None:
            rating_str = "—"
        elif entry.display == "percentage":
            rating_str = f"{entry.rating:.0f}%"
        else:
            rating_str = f"{entry.rating:.1f}/{entry.scale or 5:g}"
        ratings.add_row(
            entry.source,
            rating_str,
            f"{entry.count:,}" if entry.count is not None else "—",
            entry.url or "—",
        )
    console.print(ratings)


@click.command()
@click.argument("title")
@click.option("-c", "--creator", default=None, help="Known author or creator.")
@click.option("-g", "--genre", default=None, help="Genre already assigned in the catalog.")
@min_interval_option
def enrich(title: str, creator: str | None, genre: str | None, min_interval: float) -> None:
    """Look up a title across all sources and show the merged metadata."""
    try:
        item = CatalogItem(title=title, creator=creator, genre=genre)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="TITLE") from exc
    config = build_config(min_interval=min_interval)

    try:
        enriched = asyncio.run(_enrich(item, config))
    except RateLimited as exc:
        console.print(f"[red]Rate limited:[/red] {exc}. Try again later.")
        raise SystemExit(1) from exc

    render_item(enriched)
