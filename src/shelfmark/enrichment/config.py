# ABOUTME: Engine configuration: pacing, batching, and per-domain source wiring.
# ABOUTME: Plain frozen dataclasses with defaults, overridable by keyword or CLI options.

from collections.abc import Sequence
from dataclasses import dataclass, field

from shelfmark.enrichment.adapter import LinkOnlySource, SearchAdapter, SourceAdapter
from shelfmark.enrichment.batch import DEFAULT_CHUNK_SIZE
from shelfmark.enrichment.disambiguation import DisambiguationPolicy
from shelfmark.enrichment.http import (
    DEFAULT_COOLDOWN,
    DEFAULT_MIN_INTERVAL,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
)
from shelfmark.enrichment.types import Domain


@dataclass(frozen=True)
class EngineConfig:
    """Tunables for one engine instance."""

    min_interval: float = DEFAULT_MIN_INTERVAL
    cooldown: float = DEFAULT_COOLDOWN
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_cache_entries: int | None = None
    policy: DisambiguationPolicy = field(default_factory=DisambiguationPolicy)

    def __post_init__(self) -> None:
        if self.min_interval < 0:
            raise ValueError(f"min_interval must not be negative, got {self.min_interval}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")


@dataclass(frozen=True)
class DomainProfile:
    """Sources for one domain.

    adapters are in merge priority order (first wins). search_adapter, if
    set, is used for creator disambiguation.
    """

    domain: Domain
    adapters: Sequence[SourceAdapter]
    link_sources: Sequence[LinkOnlySource] = ()
    search_adapter: SearchAdapter | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "adapters", tuple(self.adapters))
        object.__setattr__(self, "link_sources", tuple(self.link_sources))
        names = [adapter.name for adapter in self.adapters]
        if len(names) != len(set(names)):
            raise ValueError(f"duplicate adapter names for {self.domain.value}: {names}")
