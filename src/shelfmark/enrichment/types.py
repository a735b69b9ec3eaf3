# ABOUTME: Core data structures for catalog enrichment.
# ABOUTME: CatalogItem is the input, SourceRecord the per-provider output, EnrichedItem the merged result.

import unicodedata
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class Domain(Enum):
    """Kinds of catalog entries the engine knows how to enrich."""

    BOOK = "book"
    MOVIE = "movie"
    TV_SHOW = "tv_show"
    PODCAST = "podcast"
    ARTICLE = "article"


def _frozen_mapping(value: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(value or {}))


def normalize_text(text: str | None) -> str:
    """Normalize text for keying: NFKC, case-folded, whitespace collapsed."""
    if not text:
        return ""
    folded = unicodedata.normalize("NFKC", text).casefold()
    return " ".join(folded.split())


@dataclass(frozen=True)
class CatalogItem:
    """A bare catalog entry as created by the catalog layer.

    Only title is required. Read-only input to the engine.
    """

    title: str
    creator: str | None = None
    domain: Domain = Domain.BOOK
    genre: str | None = None
    notes: str | None = None
    item_id: str | None = None

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise ValueError("title must not be blank")


@dataclass(frozen=True)
class Rating:
    """A provider's rating: value on a numeric scale plus how it displays."""

    value: float
    count: int | None = None
    scale: float = 5.0
    display: str = "stars"


@dataclass(frozen=True)
class SourceRecord:
    """One provider's partial contribution for a single item.

    Every field is optional. An empty record is what a soft failure looks
    like from the outside.
    """

    description: str | None = None
    rating: Rating | None = None
    cover_url: str | None = None
    identifiers: Mapping[str, str] = field(default_factory=dict)
    subjects: tuple[str, ...] = ()
    url: str | None = None
    creator: str | None = None
    published_date: str | None = None
    publisher: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "identifiers", _frozen_mapping(self.identifiers))
        object.__setattr__(self, "subjects", tuple(self.subjects))

    @classmethod
    def empty(cls) -> "SourceRecord":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self == SourceRecord()


@dataclass(frozen=True)
class RatingEntry:
    """One entry in an item's ratings list; source names are unique per item."""

    source: str
    rating: float | None = None
    count: int | None = None
    url: str | None = None
    display: str = "stars"
    scale: float | None = None

    @property
    def link_only(self) -> bool:
        """True for providers represented only by a generated search URL."""
        return self.rating is None and self.url is not None


@dataclass(frozen=True)
class EnrichedItem:
    """A catalog item plus merged metadata from all configured sources.

    Built fresh by the orchestrator on a cache miss and never mutated; a
    refresh builds a new instance that replaces the cache slot.
    """

    item: CatalogItem
    creator: str | None = None
    description: str | None = None
    cover_url: str | None = None
    identifiers: Mapping[str, str] = field(default_factory=dict)
    subjects: tuple[str, ...] = ()
    published_date: str | None = None
    publisher: str | None = None
    ratings: tuple[RatingEntry, ...] = ()
    deduced_genre: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "identifiers", _frozen_mapping(self.identifiers))
        object.__setattr__(self, "subjects", tuple(self.subjects))
        object.__setattr__(self, "ratings", tuple(self.ratings))

    @property
    def title(self) -> str:
        return self.item.title

    @property
    def domain(self) -> Domain:
        return self.item.domain

    @property
    def genre(self) -> str | None:
        """The catalog's own genre, falling back to the deduced one."""
        return self.item.genre or self.deduced_genre

    def rating_for(self, source: str) -> RatingEntry | None:
        """Look up a rating entry by source name."""
        for entry in self.ratings:
            if entry.source == source:
                return entry
        return None
