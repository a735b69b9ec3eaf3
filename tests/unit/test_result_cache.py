# ABOUTME: Unit tests for the result cache and its single-flight loading.
# ABOUTME: Tests key normalization, overwrite semantics, optional bounding, and load coalescing.

import asyncio

import pytest

from shelfmark.enrichment.cache import ResultCache, cache_key
from shelfmark.enrichment.types import CatalogItem, EnrichedItem


def _enriched(title: str) -> EnrichedItem:
    return EnrichedItem(item=CatalogItem(title=title))


class TestCacheKey:
    """Tests for cache_key normalization."""

    def test_case_and_whitespace_insensitive(self) -> None:
        """Trivially different spellings share a key."""
        assert cache_key("  The Hobbit ", "J.R.R.  Tolkien") == cache_key(
            "the hobbit", "j.r.r. tolkien"
        )

    def test_missing_creator(self) -> None:
        """A missing creator gives an empty creator half."""
        assert cache_key("Dune") == "dune|"
        assert cache_key("Dune", None) == cache_key("Dune", "")

    def test_creator_distinguishes(self) -> None:
        """Different creators give different keys."""
        assert cache_key("Solaris", "Lem") != cache_key("Solaris", "Doe")


class TestResultCache:
    """Tests for ResultCache storage."""

    def test_get_missing_is_none(self) -> None:
        assert ResultCache().get("dune|") is None

    def test_put_then_get(self) -> None:
        cache = ResultCache()
        value = _enriched("Dune")
        cache.put("dune|", value)
        assert cache.get("dune|") is value
        assert "dune|" in cache

    def test_overwrite_keeps_one_entry(self) -> None:
        """Putting the same key twice replaces the entry."""
        cache = ResultCache()
        cache.put("dune|", _enriched("Dune"))
        newer = _enriched("Dune")
        cache.put("dune|", newer)
        assert len(cache) == 1
        assert cache.get("dune|") is newer

    def test_unbounded_by_default(self) -> None:
        cache = ResultCache()
        for n in range(500):
            cache.put(f"book {n}|", _enriched(f"Book {n}"))
        assert len(cache) == 500

    def test_max_entries_evicts_oldest(self) -> None:
        """With max_entries set, the oldest insert is evicted first."""
        cache = ResultCache(max_entries=2)
        cache.put("a|", _enriched("A"))
        cache.put("b|", _enriched("B"))
        cache.put("a|", _enriched("A"))
        cache.put("c|", _enriched("C"))
        assert "b|" not in cache
        assert "a|" in cache
        assert "c|" in cache

    def test_max_entries_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            ResultCache(max_entries=0)


class TestSingleFlight:
    """Tests for ResultCache.single_flight."""

    def test_concurrent_loads_coalesce(self) -> None:
        """Three concurrent callers for one key run the loader once."""
        cache = ResultCache()
        calls = 0

        async def loader() -> str:
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return "loaded"

        async def scenario() -> list[str]:
            return await asyncio.gather(
                *(cache.single_flight("dune|", loader) for _ in range(3))
            )

        assert asyncio.run(scenario()) == ["loaded", "loaded", "loaded"]
        assert calls == 1
        assert not cache.is_loading("dune|")

    def test_different_keys_load_independently(self) -> None:
        cache = ResultCache()
        calls: list[str] = []

        def make_loader(key: str):
            async def loader() -> str:
                calls.append(key)
                await asyncio.sleep(0)
                return key

            return loader

        async def scenario() -> list[str]:
            return await asyncio.gather(
                cache.single_flight("a|", make_loader("a|")),
                cache.single_flight("b|", make_loader("b|")),
            )

        assert asyncio.run(scenario()) == ["a|", "b|"]
        assert sorted(calls) == ["a|", "b|"]

    def test_exception_reaches_every_caller(self) -> None:
        """A failed load raises in the caller and in every joined caller."""
        cache = ResultCache()

        async def loader() -> str:
            await asyncio.sleep(0.01)
            raise RuntimeError("boom")

        async def scenario() -> list[object]:
            return await asyncio.gather(
                cache.single_flight("x|", loader),
                cache.single_flight("x|", loader),
                return_exceptions=True,
            )

        results = asyncio.run(scenario())
        assert all(isinstance(result, RuntimeError) for result in results)
        assert not cache.is_loading("x|")

    def test_later_call_loads_again(self) -> None:
        """single_flight does not cache results by itself."""
        cache = ResultCache()
        calls = 0

        async def loader() -> int:
            nonlocal calls
            calls += 1
            return calls

        async def scenario() -> tuple[int, int]:
            first = await cache.single_flight("k|", loader)
            second = await cache.single_flight("k|", loader)
            return first, second

        assert asyncio.run(scenario()) == (1, 2)
