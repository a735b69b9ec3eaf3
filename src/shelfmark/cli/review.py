# ABOUTME: Interactive review session for creator disambiguation.
# ABOUTME: Displays ranked creator groups in a Rich table and prompts the user to choose.

import click
from rich.console import Console
from rich.table import Table

from shelfmark.enrichment.disambiguation import Disambiguation


class CreatorReview:
    """Interactive choice among ambiguous creators for a title.

    Resolved results are returned without prompting. In quiet mode the
    top-ranked creator is taken even when clarification was requested.
    """

    def __init__(self, *, console: Console | None = None, quiet: bool = False) -> None:
        self._console = console or Console()
        self._quiet = quiet

    def review(self, title: str, result: Disambiguation) -> str | None:
        """Return the creator to record for title, or None if the user skips."""
        if not result.creators:
            return None
        if not result.needs_clarification or self._quiet:
            return result.creators[0]

        self._show_groups(title, result)

        while True:
            choice = click.prompt(
                "[1-N] Choose  [t] Type a name  [s] Skip", type=str, default="s"
            )

            if choice.lower() == "s":
                return None

            if choice.lower() == "t":
                name = click.prompt("Creator name", type=str, default="").strip()
                if name:
                    return name
                continue

            try:
                idx = int(choice) - 1
            except ValueError:
                continue
            if 0 <= idx < len(result.creators):
                return result.creators[idx]

    def _show_groups(self, title: str, result: Disambiguation) -> None:
        self._console.print(f"\n[bold]{title}[/bold] matches more than one creator:")

        table = Table(title="Creators")
        table.add_column("#", style="bold", width=3)
        table.add_column("Creator")
        table.add_column("Popularity", justify="right")
        table.add_column("Best single", justify="right")
        table.add_column("Results", justify="right", style="dim")

        for i, group in enumerate(result.groups, start=1):
            table.add_row(
                str(i),
                group.canonical_name,
                str(group.total_popularity),
                str(group.max_popularity),
                str(group.observations),
            )

        self._console.print(table)
