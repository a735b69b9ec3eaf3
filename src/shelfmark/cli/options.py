# ABOUTME: Shared Click options for shelfmark CLI commands.
# ABOUTME: Exposes engine tunables (pacing, chunking, disambiguation thresholds) as flags.

from collections.abc import Callable
from typing import Any

import click

from shelfmark.enrichment.config import EngineConfig
from shelfmark.enrichment.disambiguation import DisambiguationPolicy

_DEFAULTS = EngineConfig()
_POLICY_DEFAULTS = DisambiguationPolicy()

min_interval_option = click.option(
    "--min-interval",
    type=click.FloatRange(min=0.0),
    default=_DEFAULTS.min_interval,
    show_default=True,
    help="Minimum seconds between outbound requests.",
)

chunk_size_option = click.option(
    "--chunk-size",
    type=click.IntRange(min=1),
    default=_DEFAULTS.chunk_size,
    show_default=True,
    help="Items enriched concurrently per chunk.",
)

ratio_option = click.option(
    "--ratio",
    type=click.FloatRange(min=1.0),
    default=_POLICY_DEFAULTS.ratio,
    show_default=True,
    help="Auto-pick the top creator when it is this many times more popular.",
)


def engine_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the pacing and chunking options to a command."""
    return min_interval_option(chunk_size_option(func))


def build_config(
    *,
    min_interval: float = _DEFAULTS.min_interval,
    chunk_size: int = _DEFAULTS.chunk_size,
    ratio: float = _POLICY_DEFAULTS.ratio,
) -> EngineConfig:
    """Build an EngineConfig from CLI option values."""
    return EngineConfig(
        min_interval=min_interval,
        chunk_size=chunk_size,
        policy=DisambiguationPolicy(ratio=ratio),
    )
