# ABOUTME: Result cache for enriched items, keyed by normalized (title, creator).
# ABOUTME: Coalesces concurrent loads of the same key into one in-flight fetch.

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from shelfmark.enrichment.types import EnrichedItem, normalize_text

logger = logging.getLogger(__name__)

T = TypeVar("T")


def cache_key(title: str, creator: str | None = None) -> str:
    """Build the composite cache key: normalize(title) + "|" + normalize(creator)."""
    return f"{normalize_text(title)}|{normalize_text(creator)}"


class ResultCache:
    """In-memory map of cache key -> EnrichedItem.

    Entries never expire and are only replaced by an explicit overwrite
    (a forced refresh). There is at most one entry per key. When
    max_entries is set, the oldest inserted entry is evicted first;
    by default the cache is unbounded.
    """

    def __init__(self, *, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self._max_entries = max_entries
        self._entries: dict[str, EnrichedItem] = {}
        self._inflight: dict[str, asyncio.Future[Any]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> EnrichedItem | None:
        return self._entries.get(key)

    def put(self, key: str, value: EnrichedItem) -> None:
        """Insert or overwrite the entry for key."""
        # Re-inserting moves an overwritten key to the back of the eviction order.
        self._entries.pop(key, None)
        self._entries[key] = value
        if self._max_entries is not None:
            while len(self._entries) > self._max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug("Evicted %s from result cache", oldest)

    def is_loading(self, key: str) -> bool:
        return key in self._inflight

    async def single_flight(self, key: str, loader: Callable[[], Awaitable[T]]) -> T:
        """Run loader for key unless a load for key is already in flight.

        Concurrent callers for the same key await the first caller's load
        and all receive its result (or its exception).
        """
        pending = self._inflight.get(key)
        if pending is not None:
            logger.debug("Joining in-flight load for %s", key)
            return await asyncio.shield(pending)

        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            result = await loader()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Joined callers re-raise it; mark it retrieved for when there are none.
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            del self._inflight[key]
