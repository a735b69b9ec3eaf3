# ABOUTME: CLI package for shelfmark, built on Click.
# ABOUTME: Defines the root command group, sets up logging, and registers subcommands.

from pathlib import Path

import click

from shelfmark.cli.commands import batch_cmd, enrich_cmd, who_cmd
from shelfmark.logging_setup import setup_logging


@click.group()
@click.version_option(package_name="shelfmark")
@click.option("-v", "--verbose", count=True, help="Log more (-v info, -vv debug).")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write a debug log to this file.",
)
def cli(verbose: int, log_file: Path | None) -> None:
    """shelfmark - enrich catalog entries from public metadata sources."""
    level = {0: "WARNING", 1: "INFO"}.get(verbose, "DEBUG")
    setup_logging(level, log_file=log_file)


cli.add_command(enrich_cmd.enrich)
cli.add_command(batch_cmd.batch)
cli.add_command(who_cmd.who)
