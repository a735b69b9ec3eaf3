# ABOUTME: The `shelfmark who` command for working out who created a bare title.
# ABOUTME: Auto-resolves clear winners and asks the user when several creators are plausible.

import asyncio
from contextlib import AbstractAsyncContextManager

import click
from rich.console import Console

from shelfmark.cli.options import build_config, min_interval_option, ratio_option
from shelfmark.cli.review import CreatorReview
from shelfmark.enrichment.config import EngineConfig
from shelfmark.enrichment.disambiguation import Disambiguation
from shelfmark.enrichment.engine import EnrichmentEngine, open_book_engine
from shelfmark.enrichment.errors import RateLimited

console = Console()


def _open_engine(config: EngineConfig) -> AbstractAsyncContextManager[EnrichmentEngine]:
    """Open the default engine (Google Books + Open Library)."""
    return open_book_engine(config)


async def _disambiguate(title: str, config: EngineConfig) -> Disambiguation:
    async with _open_engine(config) as engine:
        return await engine.disambiguate_creator(title)


@click.command()
@click.argument("title")
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Take the most popular creator without prompting.",
)
@ratio_option
@min_interval_option
def who(title: str, quiet: bool, ratio: float, min_interval: float) -> None:
    """Find out which creator a title most likely belongs to."""
    config = build_config(min_interval=min_interval, ratio=ratio)

    try:
        result = asyncio.run(_disambiguate(title, config))
    except RateLimited as exc:
        console.print(f"[red]Rate limited:[/red] {exc}. Try again later.")
        raise SystemExit(1) from exc

    if not result.creators:
        console.print("[yellow]No creators found.[/yellow]")
        return

    if not result.needs_clarification:
        console.print(f"[green]Resolved:[/green] {result.creators[0]}")
        return

    chosen = CreatorReview(console=console, quiet=quiet).review(title, result)
    if chosen is None:
        console.print("[yellow]Skipped.[/yellow]")
        return
    console.print(f"[green]Chosen:[/green] {chosen}")
