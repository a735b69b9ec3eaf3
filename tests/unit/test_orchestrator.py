# ABOUTME: Unit tests for the Enricher orchestrator.
# ABOUTME: Tests cache idempotency, forced refresh, fan-out merge order, and rate-limit propagation.

import asyncio

import pytest

from shelfmark.enrichment.errors import RateLimited
from shelfmark.enrichment.links import GOODREADS
from shelfmark.enrichment.orchestrator import Enricher
from shelfmark.enrichment.types import CatalogItem, Domain, SourceRecord
from tests.fixtures.fake_sources import FakeAdapter

FIRST = SourceRecord(description="first", url="https://first.example/dune")
SECOND = SourceRecord(description="second", cover_url="https://second.example/cover.jpg")


def _enricher(*adapters: FakeAdapter, **kwargs) -> Enricher:
    return Enricher({Domain.BOOK: list(adapters)}, **kwargs)


class TestEnrich:
    """Tests for Enricher.enrich."""

    def test_merges_all_sources(self) -> None:
        first = FakeAdapter("First", default=FIRST)
        second = FakeAdapter("Second", default=SECOND)
        enriched = asyncio.run(_enricher(first, second).enrich(CatalogItem(title="Dune")))

        assert enriched.description == "first"
        assert enriched.cover_url == "https://second.example/cover.jpg"
        assert first.calls == [("Dune", None)]
        assert second.calls == [("Dune", None)]

    def test_priority_not_arrival_order(self) -> None:
        """The first adapter wins even when it answers last."""
        slow_first = FakeAdapter("First", default=FIRST, delays={"Dune": 0.05})
        fast_second = FakeAdapter("Second", default=SECOND)
        enriched = asyncio.run(_enricher(slow_first, fast_second).enrich(CatalogItem(title="Dune")))

        assert enriched.description == "first"
        assert [entry.source for entry in enriched.ratings] == ["First"]

    def test_cache_hit_is_idempotent(self) -> None:
        """A second enrich returns the cached object with no adapter calls."""
        adapter = FakeAdapter("First", default=FIRST)
        enricher = _enricher(adapter)

        async def scenario():
            first = await enricher.enrich(CatalogItem(title="Dune"))
            second = await enricher.enrich(CatalogItem(title="  dune "))
            return first, second

        first, second = asyncio.run(scenario())
        assert first is second
        assert len(adapter.calls) == 1

    def test_cache_hit_reported_on_outcome(self) -> None:
        enricher = _enricher(FakeAdapter("First", default=FIRST))

        async def scenario():
            await enricher.enrich(CatalogItem(title="Dune"))
            return await enricher.enrich_outcome(CatalogItem(title="Dune"))

        outcome = asyncio.run(scenario())
        assert outcome.is_ok
        assert outcome.from_cache

    def test_refresh_bypasses_and_overwrites(self) -> None:
        """refresh refetches and replaces the cache slot."""
        adapter = FakeAdapter("First", default=FIRST)
        enricher = _enricher(adapter)
        item = CatalogItem(title="Dune")

        async def scenario():
            original = await enricher.enrich(item)
            refreshed = await enricher.refresh(item)
            again = await enricher.enrich(item)
            return original, refreshed, again

        original, refreshed, again = asyncio.run(scenario())
        assert refreshed is not original
        assert again is refreshed
        assert len(adapter.calls) == 2
        assert len(enricher.cache) == 1

    def test_concurrent_same_item_fetched_once(self) -> None:
        """Concurrent requests for one key share a single fan-out."""
        adapter = FakeAdapter("First", default=FIRST, delays={"Dune": 0.02})
        enricher = _enricher(adapter)

        async def scenario():
            return await asyncio.gather(
                *(enricher.enrich(CatalogItem(title="Dune")) for _ in range(3))
            )

        results = asyncio.run(scenario())
        assert len(adapter.calls) == 1
        assert results[0] is results[1] is results[2]

    def test_soft_failure_leaves_fields_empty(self) -> None:
        """An adapter error that is not a rate limit is absorbed."""
        broken = FakeAdapter("Broken", default=ValueError("unexpected payload"))
        working = FakeAdapter("Working", default=SECOND)
        enriched = asyncio.run(_enricher(broken, working).enrich(CatalogItem(title="Dune")))

        assert enriched.description == "second"
        assert enriched.rating_for("Broken") is None

    def test_rate_limited_propagates_and_is_not_cached(self) -> None:
        """RateLimited from any adapter fails the item and caches nothing."""
        throttled = FakeAdapter("Throttled", default=RateLimited("429", status_code=429))
        working = FakeAdapter("Working", default=SECOND)
        enricher = _enricher(working, throttled)

        with pytest.raises(RateLimited):
            asyncio.run(enricher.enrich(CatalogItem(title="Dune")))
        assert len(enricher.cache) == 0

    def test_link_only_sources_appended(self) -> None:
        enricher = _enricher(
            FakeAdapter("First", default=FIRST), link_sources={Domain.BOOK: [GOODREADS]}
        )
        enriched = asyncio.run(enricher.enrich(CatalogItem(title="Dune", creator="Herbert")))

        assert [entry.source for entry in enriched.ratings] == ["First", "Goodreads"]
        assert enriched.ratings[-1].url == GOODREADS.build_url("Dune", "Herbert")

    def test_domain_without_adapters(self) -> None:
        """An item whose domain has no adapters still enriches, with nothing found."""
        enricher = _enricher(FakeAdapter("First", default=FIRST))
        enriched = asyncio.run(enricher.enrich(CatalogItem(title="Serial", domain=Domain.PODCAST)))
        assert enriched.description is None
        assert enriched.ratings == ()
