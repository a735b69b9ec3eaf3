# ABOUTME: Precedence merge of per-source records into one EnrichedItem.
# ABOUTME: First non-empty value in adapter priority order wins; ratings are a de-duplicated union.

from collections.abc import Sequence
from typing import Any

from shelfmark.enrichment.adapter import LinkOnlySource
from shelfmark.enrichment.genre import deduce_genre
from shelfmark.enrichment.types import CatalogItem, EnrichedItem, RatingEntry, SourceRecord

# Scalar fields merged by "first non-empty wins" in priority order.
MERGED_FIELDS = (
    "description",
    "cover_url",
    "identifiers",
    "subjects",
    "published_date",
    "publisher",
)


def _is_empty(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return len(value) == 0
    except TypeError:
        return False


def first_non_empty(records: Sequence[tuple[str, SourceRecord]], field_name: str) -> Any:
    """Return the first non-empty value of field_name in priority order, or None."""
    for _source, record in records:
        value = getattr(record, field_name)
        if not _is_empty(value):
            return value
    return None


def build_ratings(
    records: Sequence[tuple[str, SourceRecord]],
    link_sources: Sequence[LinkOnlySource],
    title: str,
    creator: str | None,
) -> list[RatingEntry]:
    """Assemble the ratings list for one item.

    One entry per record carrying a rating or a canonical URL, in priority
    order, skipping source names already present. Link-only sources follow,
    each with a generated search URL and no rating.
    """
    ratings: list[RatingEntry] = []
    seen: set[str] = set()

    for source, record in records:
        if record.rating is None and not record.url:
            continue
        if source in seen:
            continue
        seen.add(source)
        rating = record.rating
        ratings.append(
            RatingEntry(
                source=source,
                rating=rating.value if rating else None,
                count=rating.count if rating else None,
                url=record.url or None,
                display=rating.display if rating else "stars",
                scale=rating.scale if rating else None,
            )
        )

    for link in link_sources:
        if link.name in seen:
            continue
        seen.add(link.name)
        ratings.append(
            RatingEntry(
                source=link.name,
                url=link.build_url(title, creator),
                display=link.display,
            )
        )

    return ratings


def merge_records(
    item: CatalogItem,
    records: Sequence[tuple[str, SourceRecord]],
    link_sources: Sequence[LinkOnlySource] = (),
) -> EnrichedItem:
    """Merge per-source records into an EnrichedItem.

    records must already be in the domain's priority order, regardless of
    which source answered first. A creator supplied by the catalog always
    wins over any discovered creator.
    """
    creator = item.creator or first_non_empty(records, "creator")
    merged = {name: first_non_empty(records, name) for name in MERGED_FIELDS}

    all_subjects = [subject for _source, record in records for subject in record.subjects]

    return EnrichedItem(
        item=item,
        creator=creator,
        description=merged["description"],
        cover_url=merged["cover_url"],
        identifiers=merged["identifiers"] or {},
        subjects=merged["subjects"] or (),
        published_date=merged["published_date"],
        publisher=merged["publisher"],
        ratings=build_ratings(records, link_sources, item.title, creator),
        deduced_genre=deduce_genre(all_subjects),
    )
