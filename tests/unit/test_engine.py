# ABOUTME: Unit tests for the EnrichmentEngine facade and its configuration types.
# ABOUTME: Tests profile wiring, config validation, disambiguation routing, and resume.

import asyncio

import pytest

from shelfmark.enrichment.adapter import SearchHit
from shelfmark.enrichment.config import DomainProfile, EngineConfig
from shelfmark.enrichment.engine import EnrichmentEngine
from shelfmark.enrichment.http import RateLimiter
from shelfmark.enrichment.links import LETTERBOXD
from shelfmark.enrichment.types import CatalogItem, Domain, SourceRecord
from tests.fixtures.fake_sources import FakeAdapter, FakeSearchAdapter


class TestEngineConfig:
    """Tests for EngineConfig and DomainProfile validation."""

    def test_defaults(self) -> None:
        config = EngineConfig()
        assert config.chunk_size == 3
        assert config.max_cache_entries is None
        assert config.policy.ratio == 3.0

    def test_rejects_negative_interval(self) -> None:
        with pytest.raises(ValueError):
            EngineConfig(min_interval=-1)

    def test_rejects_zero_chunk_size(self) -> None:
        with pytest.raises(ValueError):
            EngineConfig(chunk_size=0)

    def test_profile_rejects_duplicate_adapter_names(self) -> None:
        with pytest.raises(ValueError):
            DomainProfile(domain=Domain.BOOK, adapters=[FakeAdapter("A"), FakeAdapter("A")])

    def test_profile_freezes_lists(self) -> None:
        profile = DomainProfile(domain=Domain.BOOK, adapters=[FakeAdapter("A")])
        assert isinstance(profile.adapters, tuple)


class TestEnrichmentEngine:
    """Tests for the engine facade."""

    def test_duplicate_domain_rejected(self) -> None:
        profile = DomainProfile(domain=Domain.BOOK, adapters=[FakeAdapter("A")])
        with pytest.raises(ValueError):
            EnrichmentEngine([profile, profile])

    def test_routes_by_domain(self) -> None:
        """Each item is fanned out to its own domain's adapters and links."""
        book_source = FakeAdapter("Books", default=SourceRecord(description="a book"))
        movie_source = FakeAdapter("Movies", default=SourceRecord(description="a movie"))
        engine = EnrichmentEngine(
            [
                DomainProfile(domain=Domain.BOOK, adapters=[book_source]),
                DomainProfile(
                    domain=Domain.MOVIE, adapters=[movie_source], link_sources=[LETTERBOXD]
                ),
            ]
        )
        enriched = asyncio.run(engine.enrich(CatalogItem(title="Dune", domain=Domain.MOVIE)))

        assert enriched.description == "a movie"
        assert enriched.rating_for("Letterboxd") is not None
        assert book_source.calls == []
        assert engine.domains == [Domain.BOOK, Domain.MOVIE]

    def test_cache_bound_from_config(self) -> None:
        engine = EnrichmentEngine(
            [DomainProfile(domain=Domain.BOOK, adapters=[FakeAdapter("A")])],
            config=EngineConfig(max_cache_entries=1),
        )

        async def scenario() -> None:
            await engine.enrich(CatalogItem(title="Dune"))
            await engine.enrich(CatalogItem(title="Emma"))

        asyncio.run(scenario())
        assert len(engine.cache) == 1

    def test_disambiguate_uses_domain_search(self) -> None:
        search = FakeSearchAdapter([SearchHit("Dune", "Frank Herbert", 10)])
        engine = EnrichmentEngine(
            [DomainProfile(domain=Domain.BOOK, adapters=[FakeAdapter("A")], search_adapter=search)]
        )
        result = asyncio.run(engine.disambiguate_creator("Dune"))

        assert result.creators == ["Frank Herbert"]
        assert search.queries == ["Dune"]

    def test_disambiguate_without_search_adapter(self) -> None:
        engine = EnrichmentEngine([DomainProfile(domain=Domain.BOOK, adapters=[])])
        with pytest.raises(ValueError):
            asyncio.run(engine.disambiguate_creator("Dune"))

    def test_resume_resets_limiter(self) -> None:
        limiter = RateLimiter(min_interval=0.0)
        engine = EnrichmentEngine(
            [DomainProfile(domain=Domain.BOOK, adapters=[])], limiter=limiter
        )
        limiter.trip(60)
        engine.resume()
        assert not limiter.is_tripped

    def test_enrich_all_outcome_uses_config_chunk_size(self, seven_books) -> None:
        engine = EnrichmentEngine(
            [DomainProfile(domain=Domain.BOOK, adapters=[FakeAdapter("A")])],
            config=EngineConfig(chunk_size=2),
        )
        result = asyncio.run(engine.enrich_all_outcome(seven_books))
        assert result.chunks_issued == 4
        assert len(result.items) == 7
