# ABOUTME: Enrichment orchestrator: cache lookup, concurrent adapter fan-out, precedence merge.
# ABOUTME: Returns tagged outcomes internally and raises RateLimited only at the public boundary.

import asyncio
import logging
from collections.abc import Mapping, Sequence

from shelfmark.enrichment.adapter import LinkOnlySource, SourceAdapter
from shelfmark.enrichment.cache import ResultCache, cache_key
from shelfmark.enrichment.errors import RateLimited
from shelfmark.enrichment.merge import merge_records
from shelfmark.enrichment.outcome import Outcome
from shelfmark.enrichment.types import CatalogItem, Domain, EnrichedItem, SourceRecord

logger = logging.getLogger(__name__)


class Enricher:
    """Fans out to every adapter configured for an item's domain and merges.

    Adapter lists are in priority order: the first adapter with a non-empty
    value for a field wins it, however the responses arrive.
    """

    def __init__(
        self,
        adapters: Mapping[Domain, Sequence[SourceAdapter]],
        link_sources: Mapping[Domain, Sequence[LinkOnlySource]] | None = None,
        cache: ResultCache | None = None,
    ) -> None:
        self._adapters = {domain: tuple(found) for domain, found in adapters.items()}
        self._link_sources = {
            domain: tuple(links) for domain, links in (link_sources or {}).items()
        }
        self._cache = cache if cache is not None else ResultCache()

    @property
    def cache(self) -> ResultCache:
        return self._cache

    async def enrich(self, item: CatalogItem) -> EnrichedItem:
        """Enrich one item, serving it from the cache when possible.

        Raises:
            RateLimited: If any adapter was throttled; nothing is cached.
        """
        outcome = await self.enrich_outcome(item)
        return outcome.unwrap()

    async def refresh(self, item: CatalogItem) -> EnrichedItem:
        """Re-fetch an item ignoring any cached value, overwriting the slot."""
        outcome = await self.enrich_outcome(item, force=True)
        return outcome.unwrap()

    async def enrich_outcome(
        self, item: CatalogItem, *, force: bool = False
    ) -> Outcome[EnrichedItem]:
        """Enrich one item and report the result as a tagged outcome."""
        key = cache_key(item.title, item.creator)

        if not force:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for %s", key)
                return Outcome.ok(cached, from_cache=True)

        return await self._cache.single_flight(key, lambda: self._build(item, key))

    async def _build(self, item: CatalogItem, key: str) -> Outcome[EnrichedItem]:
        adapters = self._adapters.get(item.domain, ())
        outcomes = await asyncio.gather(
            *(self._fetch_source(adapter, item) for adapter in adapters)
        )

        records: list[tuple[str, SourceRecord]] = []
        for adapter, outcome in zip(adapters, outcomes):
            if outcome.is_rate_limited:
                logger.warning(
                    "Enrichment of %r stopped: %s rate limited", item.title, adapter.name
                )
                return Outcome.rate_limited(outcome.error)  # type: ignore[arg-type]
            records.append((adapter.name, outcome.value or SourceRecord.empty()))

        enriched = merge_records(item, records, self._link_sources.get(item.domain, ()))
        self._cache.put(key, enriched)
        return Outcome.ok(enriched)

    async def _fetch_source(
        self, adapter: SourceAdapter, item: CatalogItem
    ) -> Outcome[SourceRecord]:
        """Call one adapter, converting its result into a tagged outcome.

        Adapters are supposed to absorb everything but RateLimited; anything
        else that escapes is logged and treated as an empty record.
        """
        try:
            record = await adapter.fetch(item.title, item.creator)
        except RateLimited as exc:
            return Outcome.rate_limited(exc)
        except Exception as exc:
            logger.warning(
                "Source %s failed for %r: %s", adapter.name, item.title, exc
            )
            return Outcome.soft_failure(exc)
        return Outcome.ok(record)
