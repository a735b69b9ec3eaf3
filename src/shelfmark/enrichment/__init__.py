# ABOUTME: Enrichment package: fetches, merges, and disambiguates catalog metadata.
# ABOUTME: Exports the engine facade, its data types, and the error taxonomy.

from shelfmark.enrichment.adapter import LinkOnlySource, SearchAdapter, SearchHit, SourceAdapter
from shelfmark.enrichment.batch import BatchController, BatchResult
from shelfmark.enrichment.cache import ResultCache, cache_key
from shelfmark.enrichment.config import DomainProfile, EngineConfig
from shelfmark.enrichment.disambiguation import (
    CreatorDisambiguator,
    Disambiguation,
    DisambiguationPolicy,
    surname_key,
)
from shelfmark.enrichment.engine import EnrichmentEngine, open_book_engine
from shelfmark.enrichment.errors import (
    BatchInterrupted,
    EnrichmentError,
    MalformedResponse,
    NetworkError,
    NotFound,
    RateLimited,
    SoftFailure,
    SourceUnavailable,
)
from shelfmark.enrichment.http import FetchGateway, RateLimiter
from shelfmark.enrichment.orchestrator import Enricher
from shelfmark.enrichment.outcome import Outcome, OutcomeKind
from shelfmark.enrichment.types import (
    CatalogItem,
    Domain,
    EnrichedItem,
    Rating,
    RatingEntry,
    SourceRecord,
)

__all__ = [
    "BatchController",
    "BatchInterrupted",
    "BatchResult",
    "CatalogItem",
    "CreatorDisambiguator",
    "Disambiguation",
    "DisambiguationPolicy",
    "Domain",
    "DomainProfile",
    "EngineConfig",
    "EnrichedItem",
    "Enricher",
    "EnrichmentEngine",
    "EnrichmentError",
    "FetchGateway",
    "LinkOnlySource",
    "MalformedResponse",
    "NetworkError",
    "NotFound",
    "Outcome",
    "OutcomeKind",
    "RateLimited",
    "RateLimiter",
    "Rating",
    "RatingEntry",
    "ResultCache",
    "SearchAdapter",
    "SearchHit",
    "SoftFailure",
    "SourceAdapter",
    "SourceRecord",
    "SourceUnavailable",
    "cache_key",
    "open_book_engine",
    "surname_key",
]
