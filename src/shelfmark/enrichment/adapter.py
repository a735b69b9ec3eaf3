# ABOUTME: Contracts for source adapters, search adapters, and link-only rating sources.
# ABOUTME: Any external provider (Google Books, Open Library, TMDB, ...) implements these.

from dataclasses import dataclass
from typing import Protocol, runtime_checkable
from urllib.parse import quote

from shelfmark.enrichment.types import SourceRecord

# Characters encodeURIComponent leaves alone, so generated URLs match what
# the providers' own search boxes produce.
_URI_COMPONENT_SAFE = "-_.!~*'()"


@dataclass(frozen=True)
class SearchHit:
    """One search result used for creator disambiguation."""

    title: str
    creator: str | None
    popularity: int = 0


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for per-provider metadata fetchers.

    fetch() must never raise except RateLimited, which is re-raised
    unchanged. Every other failure is absorbed and returned as an empty
    SourceRecord.
    """

    @property
    def name(self) -> str: ...

    async def fetch(self, title: str, creator: str | None = None) -> SourceRecord: ...


@runtime_checkable
class SearchAdapter(Protocol):
    """Protocol for providers that can list same-titled works with creators.

    Results are ordered by provider relevance; the caller caps the count.
    Same failure contract as SourceAdapter: only RateLimited escapes.
    """

    @property
    def name(self) -> str: ...

    async def search(self, title: str) -> list[SearchHit]: ...


def search_query(title: str, creator: str | None = None) -> str:
    """Join title and creator the way provider search boxes expect."""
    return f"{title} {creator}" if creator else title


def encode_uri_component(text: str) -> str:
    """Percent-encode text like JavaScript's encodeURIComponent."""
    return quote(text, safe=_URI_COMPONENT_SAFE)


@dataclass(frozen=True)
class LinkOnlySource:
    """A rating provider with no public API, represented by a search URL.

    url_template must contain a single "{query}" placeholder.
    """

    name: str
    url_template: str
    display: str = "stars"

    def __post_init__(self) -> None:
        if "{query}" not in self.url_template:
            msg = f"url_template for {self.name} must contain {{query}}"
            raise ValueError(msg)

    def build_url(self, title: str, creator: str | None = None) -> str:
        """Build the provider's search URL. Pure and deterministic."""
        query = encode_uri_component(search_query(title, creator))
        return self.url_template.replace("{query}", query)
