# ABOUTME: Link-only rating sources for providers without public rating APIs.
# ABOUTME: Each domain gets a fixed list, appended after every API-backed rating.

from shelfmark.enrichment.adapter import LinkOnlySource
from shelfmark.enrichment.types import Domain

GOODREADS = LinkOnlySource(
    name="Goodreads",
    url_template="https://www.goodreads.com/search?q={query}",
)
AMAZON_BOOKS = LinkOnlySource(
    name="Amazon",
    url_template="https://www.amazon.com/s?k={query}&i=stripbooks",
)
LETTERBOXD = LinkOnlySource(
    name="Letterboxd",
    url_template="https://letterboxd.com/search/{query}/",
)
ROTTEN_TOMATOES = LinkOnlySource(
    name="Rotten Tomatoes",
    url_template="https://www.rottentomatoes.com/search?search={query}",
    display="percentage",
)
APPLE_PODCASTS = LinkOnlySource(
    name="Apple Podcasts",
    url_template="https://podcasts.apple.com/search?term={query}",
)

DEFAULT_LINK_SOURCES: dict[Domain, tuple[LinkOnlySource, ...]] = {
    Domain.BOOK: (GOODREADS, AMAZON_BOOKS),
    Domain.MOVIE: (LETTERBOXD,),
    Domain.TV_SHOW: (ROTTEN_TOMATOES,),
    Domain.PODCAST: (APPLE_PODCASTS,),
    Domain.ARTICLE: (),
}
