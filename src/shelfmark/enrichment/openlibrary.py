# ABOUTME: Open Library source adapter for the books domain.
# ABOUTME: Searches openlibrary.org by title/author, following up on the ratings endpoint when needed.

import logging
import re
from dataclasses import replace
from typing import Any

from shelfmark.enrichment.adapter import SearchHit, search_query
from shelfmark.enrichment.errors import RateLimited
from shelfmark.enrichment.http import HttpGateway
from shelfmark.enrichment.openlibrary_parser import (
    OL_BASE_URL,
    parse_ratings_response,
    parse_search_doc,
    parse_search_hits,
)
from shelfmark.enrichment.types import SourceRecord

logger = logging.getLogger(__name__)

_SEARCH_FIELDS = (
    "key,title,author_name,cover_i,isbn,first_sentence,subject,"
    "first_publish_year,ratings_average,ratings_count"
)
_SEARCH_LIMIT = 20

# Matches a colon followed by a space and remaining text (subtitle pattern).
_SUBTITLE_RE = re.compile(r"\s*:\s+.+$")


def _strip_subtitle(title: str) -> str | None:
    """Remove subtitle from a title string (text after ": ").

    Returns the stripped title, or None if no subtitle was found or
    stripping would produce an identical or empty string.
    """
    stripped = _SUBTITLE_RE.sub("", title).strip()
    if stripped and stripped != title.strip():
        return stripped
    return None


class OpenLibraryAdapter:
    """Source and search adapter backed by the Open Library API.

    Uses a dependency-injected gateway for pacing and testability. Never
    raises except RateLimited.
    """

    def __init__(self, gateway: HttpGateway) -> None:
        self._http = gateway

    @property
    def name(self) -> str:
        return "Open Library"

    async def fetch(self, title: str, creator: str | None = None) -> SourceRecord:
        """Fetch the best Open Library match for title (and creator).

        If the search finds nothing and the title has a subtitle, retries
        with the subtitle stripped.
        """
        try:
            doc = await self._search_one(title, creator)
            if doc is None:
                stripped = _strip_subtitle(title)
                if stripped:
                    doc = await self._search_one(stripped, creator)
            if doc is None:
                return SourceRecord.empty()

            record = parse_search_doc(doc)
            work_key = record.identifiers.get("openlibrary_work")
            if record.rating is None and work_key:
                record = await self._with_ratings(record, work_key)
            return record
        except RateLimited:
            raise
        except Exception as exc:
            logger.warning("Open Library lookup failed for %r: %s", title, exc)
            return SourceRecord.empty()

    async def search(self, title: str) -> list[SearchHit]:
        """List Open Library works matching title, in relevance order."""
        params = {"title": title, "limit": str(_SEARCH_LIMIT), "fields": _SEARCH_FIELDS}
        try:
            data = await self._http.get_json(f"{OL_BASE_URL}/search.json", params=params)
            return parse_search_hits(data)
        except RateLimited:
            raise
        except Exception as exc:
            logger.warning("Open Library search failed for %r: %s", title, exc)
            return []

    async def _search_one(self, title: str, creator: str | None) -> dict[str, Any] | None:
        params = {"q": search_query(title, creator), "limit": "1", "fields": _SEARCH_FIELDS}
        data = await self._http.get_json(f"{OL_BASE_URL}/search.json", params=params)
        docs = data.get("docs") or []
        if not docs or not isinstance(docs[0], dict):
            return None
        return docs[0]

    async def _with_ratings(self, record: SourceRecord, work_key: str) -> SourceRecord:
        """Fill the rating from the works ratings endpoint; missing ratings are fine."""
        try:
            data = await self._http.get_json(f"{OL_BASE_URL}{work_key}/ratings.json")
        except RateLimited:
            raise
        except Exception as exc:
            logger.debug("No Open Library ratings for %s: %s", work_key, exc)
            return record

        rating = parse_ratings_response(data)
        if rating is None:
            return record
        return replace(record, rating=rating)
