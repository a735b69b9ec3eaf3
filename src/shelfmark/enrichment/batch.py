# ABOUTME: Batch fetch controller: enriches an ordered list in fixed-size concurrent chunks.
# ABOUTME: Stops issuing chunks at the first rate-limited item and reports partial progress.

import asyncio
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

from shelfmark.enrichment.errors import BatchInterrupted, NetworkError, RateLimited
from shelfmark.enrichment.http import set_call_order
from shelfmark.enrichment.orchestrator import Enricher
from shelfmark.enrichment.outcome import Outcome
from shelfmark.enrichment.types import CatalogItem, EnrichedItem

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 3

ProgressCallback = Callable[[int, int], None]


@dataclass
class BatchResult:
    """Outcome of a batch run.

    items is always a contiguous, order-preserving prefix of the input;
    remaining holds every input item after it.
    """

    items: list[EnrichedItem] = field(default_factory=list)
    remaining: list[CatalogItem] = field(default_factory=list)
    error: RateLimited | None = None
    chunks_issued: int = 0

    @property
    def interrupted(self) -> bool:
        return self.error is not None


def chunked(items: Sequence[CatalogItem], size: int) -> list[list[CatalogItem]]:
    """Split items into consecutive chunks of at most size items."""
    if size < 1:
        raise ValueError(f"chunk size must be positive, got {size}")
    return [list(items[start : start + size]) for start in range(0, len(items), size)]


def stop_cause(errors: Sequence[RateLimited]) -> RateLimited:
    """Pick the error that tripped the limiter out of a chunk's rate-limit errors.

    Calls turned away by an open back-off window carry no status; the 429
    or network failure that opened it is the one worth reporting.
    """
    for error in errors:
        if error.status_code == 429 or isinstance(error, NetworkError):
            return error
    return errors[0]


class BatchController:
    """Drives an Enricher over an ordered list under a concurrency cap.

    Chunks run strictly one after another; the items inside a chunk run
    concurrently.
    """

    def __init__(self, enricher: Enricher, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk size must be positive, got {chunk_size}")
        self._enricher = enricher
        self._chunk_size = chunk_size

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    async def run(
        self,
        items: Sequence[CatalogItem],
        *,
        force: bool = False,
        progress: ProgressCallback | None = None,
    ) -> BatchResult:
        """Enrich items chunk by chunk and report how far the batch got."""
        result = BatchResult()
        total = len(items)
        run = object()
        start = 0

        for chunk in chunked(items, self._chunk_size):
            result.chunks_issued += 1
            outcomes = await asyncio.gather(
                *(
                    self._enrich_at(run, start + offset, item, force)
                    for offset, item in enumerate(chunk)
                )
            )
            start += len(chunk)

            for outcome in outcomes:
                if outcome.is_rate_limited:
                    result.error = stop_cause(
                        [o.error for o in outcomes if o.is_rate_limited]  # type: ignore[misc]
                    )
                    break
                result.items.append(outcome.unwrap())

            if progress is not None:
                progress(len(result.items), total)

            if result.interrupted:
                result.remaining = list(items[len(result.items) :])
                logger.warning(
                    "Batch paused after %d of %d item(s): %s",
                    len(result.items),
                    total,
                    result.error,
                )
                break

            logger.debug("Chunk %d done (%d/%d)", result.chunks_issued, len(result.items), total)

        return result

    async def _enrich_at(
        self, run: object, position: int, item: CatalogItem, force: bool
    ) -> Outcome[EnrichedItem]:
        # gather() gives each item its own task, so the tag stays with this item.
        set_call_order(run, position)
        return await self._enricher.enrich_outcome(item, force=force)

    async def enrich_all(
        self,
        items: Sequence[CatalogItem],
        *,
        progress: ProgressCallback | None = None,
    ) -> list[EnrichedItem]:
        """Enrich items in order.

        Raises:
            BatchInterrupted: When a rate limit stops the batch; carries the
                completed items and the ones still to fetch.
        """
        result = await self.run(items, progress=progress)
        if result.error is not None:
            raise BatchInterrupted(result.error, result.items, result.remaining)
        return result.items

    async def enrich_by_genre(
        self, items_by_genre: Mapping[str, Sequence[CatalogItem]]
    ) -> dict[str, list[EnrichedItem]]:
        """Enrich each genre's items in turn, one genre after another."""
        enriched: dict[str, list[EnrichedItem]] = {}
        for genre, items in items_by_genre.items():
            enriched[genre] = await self.enrich_all(items)
        return enriched
