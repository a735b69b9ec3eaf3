# ABOUTME: EnrichmentEngine facade exposing enrich, refresh, enrich_all, and disambiguate_creator.
# ABOUTME: Also wires the bundled book sources over one shared rate limiter and gateway.

import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager

import httpx

from shelfmark.enrichment.batch import BatchController, BatchResult, ProgressCallback
from shelfmark.enrichment.cache import ResultCache
from shelfmark.enrichment.config import DomainProfile, EngineConfig
from shelfmark.enrichment.disambiguation import CreatorDisambiguator, Disambiguation
from shelfmark.enrichment.googlebooks import GoogleBooksAdapter
from shelfmark.enrichment.http import FetchGateway, RateLimiter
from shelfmark.enrichment.links import DEFAULT_LINK_SOURCES
from shelfmark.enrichment.openlibrary import OpenLibraryAdapter
from shelfmark.enrichment.orchestrator import Enricher
from shelfmark.enrichment.outcome import Outcome
from shelfmark.enrichment.types import CatalogItem, Domain, EnrichedItem

logger = logging.getLogger(__name__)


class EnrichmentEngine:
    """The interface the catalog application calls.

    enrich, refresh, and enrich_all may raise RateLimited; callers should
    stop issuing enrichment calls until they choose to resume().
    """

    def __init__(
        self,
        profiles: Sequence[DomainProfile],
        *,
        config: EngineConfig | None = None,
        cache: ResultCache | None = None,
        limiter: RateLimiter | None = None,
    ) -> None:
        self._config = config or EngineConfig()
        self._profiles: dict[Domain, DomainProfile] = {}
        for profile in profiles:
            if profile.domain in self._profiles:
                raise ValueError(f"duplicate profile for domain {profile.domain.value}")
            self._profiles[profile.domain] = profile

        self._cache = cache if cache is not None else ResultCache(
            max_entries=self._config.max_cache_entries
        )
        self._limiter = limiter
        self._enricher = Enricher(
            {domain: profile.adapters for domain, profile in self._profiles.items()},
            {domain: profile.link_sources for domain, profile in self._profiles.items()},
            cache=self._cache,
        )
        self._batch = BatchController(self._enricher, chunk_size=self._config.chunk_size)
        self._disambiguators: dict[Domain, CreatorDisambiguator] = {
            domain: CreatorDisambiguator(profile.search_adapter, self._config.policy)
            for domain, profile in self._profiles.items()
            if profile.search_adapter is not None
        }

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def cache(self) -> ResultCache:
        return self._cache

    @property
    def domains(self) -> list[Domain]:
        return list(self._profiles)

    async def enrich(self, item: CatalogItem) -> EnrichedItem:
        return await self._enricher.enrich(item)

    async def refresh(self, item: CatalogItem) -> EnrichedItem:
        return await self._enricher.refresh(item)

    async def enrich_outcome(
        self, item: CatalogItem, *, force: bool = False
    ) -> Outcome[EnrichedItem]:
        return await self._enricher.enrich_outcome(item, force=force)

    async def enrich_all(
        self,
        items: Sequence[CatalogItem],
        *,
        progress: ProgressCallback | None = None,
    ) -> list[EnrichedItem]:
        return await self._batch.enrich_all(items, progress=progress)

    async def enrich_all_outcome(
        self,
        items: Sequence[CatalogItem],
        *,
        force: bool = False,
        progress: ProgressCallback | None = None,
    ) -> BatchResult:
        return await self._batch.run(items, force=force, progress=progress)

    async def enrich_by_genre(
        self, items_by_genre: Mapping[str, Sequence[CatalogItem]]
    ) -> dict[str, list[EnrichedItem]]:
        return await self._batch.enrich_by_genre(items_by_genre)

    async def disambiguate_creator(
        self, title: str, domain: Domain = Domain.BOOK
    ) -> Disambiguation:
        """Rank the creators a bare title could belong to.

        Raises:
            ValueError: If no search adapter is configured for domain.
            RateLimited: If the search was throttled.
        """
        disambiguator = self._disambiguators.get(domain)
        if disambiguator is None:
            raise ValueError(f"no search adapter configured for {domain.value}")
        return await disambiguator.disambiguate(title)

    def resume(self) -> None:
        """Clear the back-off window after a rate-limit pause."""
        if self._limiter is not None:
            self._limiter.reset()
            logger.info("Rate-limit back-off cleared, resuming")


@asynccontextmanager
async def open_book_engine(
    config: EngineConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[EnrichmentEngine]:
    """Build an engine for books over Google Books and Open Library.

    Google Books has merge priority and serves disambiguation searches.
    Goodreads and Amazon are appended as link-only sources.
    """
    config = config or EngineConfig()
    limiter = RateLimiter(min_interval=config.min_interval, cooldown=config.cooldown)
    async with FetchGateway(
        limiter,
        timeout=config.timeout,
        user_agent=config.user_agent,
        transport=transport,
    ) as gateway:
        google_books = GoogleBooksAdapter(gateway)
        profile = DomainProfile(
            domain=Domain.BOOK,
            adapters=(google_books, OpenLibraryAdapter(gateway)),
            link_sources=DEFAULT_LINK_SOURCES[Domain.BOOK],
            search_adapter=google_books,
        )
        yield EnrichmentEngine([profile], config=config, limiter=limiter)
