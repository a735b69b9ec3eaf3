# ABOUTME: Google Books source and search adapter for the books domain.
# ABOUTME: Top-priority book source; its ratingsCount doubles as the popularity score for disambiguation.

import logging
from typing import Any

from shelfmark.enrichment.adapter import SearchHit
from shelfmark.enrichment.errors import RateLimited
from shelfmark.enrichment.http import HttpGateway
from shelfmark.enrichment.types import Rating, SourceRecord

logger = logging.getLogger(__name__)

GOOGLE_BOOKS_API = "https://www.googleapis.com/books/v1/volumes"
_SEARCH_LIMIT = 20

# Largest first; thumbnails are the fallback.
_IMAGE_PREFERENCE = ("medium", "small", "thumbnail", "smallThumbnail")


def best_cover_url(image_links: dict[str, Any] | None) -> str | None:
    """Pick the largest cover and upgrade it to https and zoom level 2."""
    if not image_links:
        return None
    for size in _IMAGE_PREFERENCE:
        url = image_links.get(size)
        if url:
            return (
                url.replace("http://", "https://")
                .replace("zoom=1", "zoom=2")
                .replace("&edge=curl", "")
            )
    return None


def extract_isbn(identifiers: list[dict[str, str]] | None) -> str | None:
    """Prefer ISBN-13 over ISBN-10."""
    if not identifiers:
        return None
    by_type = {entry.get("type"): entry.get("identifier") for entry in identifiers}
    return by_type.get("ISBN_13") or by_type.get("ISBN_10")


def parse_volume(volume: dict[str, Any]) -> SourceRecord:
    """Parse one Google Books volume into a SourceRecord."""
    info = volume.get("volumeInfo") or {}
    volume_id = volume.get("id")

    rating = None
    if info.get("averageRating"):
        rating = Rating(
            value=float(info["averageRating"]),
            count=info.get("ratingsCount"),
            scale=5.0,
        )

    identifiers: dict[str, str] = {}
    isbn = extract_isbn(info.get("industryIdentifiers"))
    if isbn:
        identifiers["isbn"] = isbn
    if volume_id:
        identifiers["google_books"] = volume_id

    authors = info.get("authors") or []
    return SourceRecord(
        description=info.get("description"),
        rating=rating,
        cover_url=best_cover_url(info.get("imageLinks")),
        identifiers=identifiers,
        subjects=tuple(info.get("categories") or ()),
        url=f"https://books.google.com/books?id={volume_id}" if volume_id else None,
        creator=authors[0] if authors else None,
        published_date=info.get("publishedDate"),
        publisher=info.get("publisher"),
    )


def parse_search_hits(data: dict[str, Any]) -> list[SearchHit]:
    """Parse volumes into hits, de-duplicated by lower-cased title and author."""
    hits: list[SearchHit] = []
    seen: set[tuple[str, str]] = set()
    for volume in data.get("items") or []:
        info = volume.get("volumeInfo") or {}
        title = info.get("title")
        if not title:
            continue
        authors = info.get("authors") or []
        creator = authors[0] if authors else None
        dedupe_key = (title.lower(), (creator or "").lower())
        if dedupe_key in seen:
            continue
        seen.add(dedupe_key)
        hits.append(
            SearchHit(title=title, creator=creator, popularity=info.get("ratingsCount") or 0)
        )
    return hits


class GoogleBooksAdapter:
    """Metadata and search adapter backed by the Google Books volumes API."""

    def __init__(self, gateway: HttpGateway) -> None:
        self._http = gateway

    @property
    def name(self) -> str:
        return "Google Books"

    async def fetch(self, title: str, creator: str | None = None) -> SourceRecord:
        query = f"{title} inauthor:{creator}" if creator else title
        try:
            data = await self._http.get_json(
                GOOGLE_BOOKS_API, params={"q": query, "maxResults": "1"}
            )
        except RateLimited:
            raise
        except Exception as exc:
            logger.warning("Google Books lookup failed for %r: %s", title, exc)
            return SourceRecord.empty()

        items = data.get("items") or []
        if not items:
            return SourceRecord.empty()
        try:
            return parse_volume(items[0])
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("Malformed Google Books volume for %r: %s", title, exc)
            return SourceRecord.empty()

    async def search(self, title: str) -> list[SearchHit]:
        try:
            data = await self._http.get_json(
                GOOGLE_BOOKS_API, params={"q": title, "maxResults": str(_SEARCH_LIMIT)}
            )
            return parse_search_hits(data)
        except RateLimited:
            raise
        except Exception as exc:
            logger.warning("Google Books search failed for %r: %s", title, exc)
            return []
