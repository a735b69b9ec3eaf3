# ABOUTME: Parsing functions for Open Library API JSON responses.
# ABOUTME: Converts OL search docs and ratings summaries into SourceRecord and SearchHit values.

from typing import Any

from shelfmark.enrichment.adapter import SearchHit
from shelfmark.enrichment.types import Rating, SourceRecord

OL_BASE_URL = "https://openlibrary.org"
_COVERS_BASE_URL = "https://covers.openlibrary.org/b"
_MAX_SUBJECTS = 5


def build_cover_url(kind: str, value: str | int, size: str = "L") -> str:
    """Build an Open Library cover image URL.

    Args:
        kind: "id" for a cover_i value, or "isbn".
        value: The cover id or ISBN.
        size: Image size, "S" (small), "M" (medium), or "L" (large).
    """
    return f"{_COVERS_BASE_URL}/{kind}/{value}-{size}.jpg"


def _first_str(values: Any) -> str | None:
    if isinstance(values, list) and values and isinstance(values[0], str):
        return values[0]
    return None


def parse_rating(average: Any, count: Any) -> Rating | None:
    """Build a 5-star Rating from OL's average/count pair, if there is one."""
    if not isinstance(average, (int, float)) or average <= 0:
        return None
    return Rating(
        value=float(average),
        count=count if isinstance(count, int) else None,
        scale=5.0,
        display="stars",
    )


def parse_search_doc(doc: dict[str, Any]) -> SourceRecord:
    """Parse one doc from the OL search endpoint into a SourceRecord.

    OL has no description on search docs; the first sentence stands in.
    Cover comes from cover_i, falling back to the first ISBN.
    """
    isbn = _first_str(doc.get("isbn"))
    work_key = doc.get("key") if isinstance(doc.get("key"), str) else None

    cover_url = None
    if doc.get("cover_i"):
        cover_url = build_cover_url("id", doc["cover_i"])
    elif isbn:
        cover_url = build_cover_url("isbn", isbn)

    first_sentence = doc.get("first_sentence")
    description = None
    if isinstance(first_sentence, list):
        description = " ".join(s for s in first_sentence if isinstance(s, str)) or None
    elif isinstance(first_sentence, str):
        description = first_sentence or None

    identifiers: dict[str, str] = {}
    if isbn:
        identifiers["isbn"] = isbn
    if work_key:
        identifiers["openlibrary_work"] = work_key

    subjects = doc.get("subject") or []
    if not isinstance(subjects, list):
        subjects = []

    return SourceRecord(
        description=description,
        rating=parse_rating(doc.get("ratings_average"), doc.get("ratings_count")),
        cover_url=cover_url,
        identifiers=identifiers,
        subjects=tuple(s for s in subjects[:_MAX_SUBJECTS] if isinstance(s, str)),
        url=f"{OL_BASE_URL}{work_key}" if work_key else None,
        creator=_first_str(doc.get("author_name")),
        published_date=str(doc["first_publish_year"]) if doc.get("first_publish_year") else None,
    )


def parse_ratings_response(data: dict[str, Any]) -> Rating | None:
    """Extract the rating summary from an OL works ratings response."""
    summary = data.get("summary")
    if not isinstance(summary, dict):
        return None
    return parse_rating(summary.get("average"), summary.get("count"))


def parse_search_hits(data: dict[str, Any]) -> list[SearchHit]:
    """Parse OL search docs into disambiguation hits (ratings count as popularity)."""
    hits: list[SearchHit] = []
    for doc in data.get("docs", []):
        title = doc.get("title")
        if not isinstance(title, str):
            continue
        count = doc.get("ratings_count")
        hits.append(
            SearchHit(
                title=title,
                creator=_first_str(doc.get("author_name")),
                popularity=count if isinstance(count, int) else 0,
            )
        )
    return hits
