# ABOUTME: Creator disambiguation for bare titles via a popularity vote over search results.
# ABOUTME: Groups candidates by surname key and auto-resolves only when one creator clearly dominates.

import logging
from dataclasses import dataclass, field

from shelfmark.enrichment.adapter import SearchAdapter, SearchHit

logger = logging.getLogger(__name__)

# Markers of derivative works (summaries, guides) that share a title with
# the original but are not alternate editions of it.
DERIVATIVE_MARKERS = (
    "summary of",
    "summary:",
    "summary & analysis",
    "summary and analysis",
    "analysis of",
    "study guide",
    "abridged",
    "cliffnotes",
    "cliff notes",
    "cliffsnotes",
    "sparknotes",
    "spark notes",
    "companion",
    "workbook",
    "conversation starters",
    "key takeaways",
    "quicklet",
    "notes on",
    "reader's guide",
    "readers guide",
)

NAME_PARTICLES = frozenset(
    {
        "von",
        "van",
        "de",
        "du",
        "la",
        "le",
        "del",
        "della",
        "di",
        "da",
        "dos",
        "das",
        "mc",
        "mac",
        "o'",
    }
)


@dataclass(frozen=True)
class DisambiguationPolicy:
    """Tuning values for the auto-resolve decision.

    The top creator group is picked without asking when any of these hold:
    top >= ratio * runner-up; runner-up is zero and top is positive;
    top >= dominant_total and runner-up < runner_up_ceiling.
    """

    ratio: float = 3.0
    dominant_total: int = 100
    runner_up_ceiling: int = 20
    search_limit: int = 20
    derivative_markers: tuple[str, ...] = DERIVATIVE_MARKERS


@dataclass(frozen=True)
class DisambiguationCandidate:
    """One search observation of a (title, creator) pair."""

    title: str
    creator: str
    surname_key: str
    popularity: int


@dataclass
class CreatorGroup:
    """Candidates sharing a surname key, aggregated for ranking."""

    surname_key: str
    canonical_name: str
    total_popularity: int = 0
    max_popularity: int = 0
    observations: int = 0

    def add(self, candidate: DisambiguationCandidate) -> None:
        self.total_popularity += candidate.popularity
        self.max_popularity = max(self.max_popularity, candidate.popularity)
        self.observations += 1
        if len(candidate.creator) > len(self.canonical_name):
            self.canonical_name = candidate.creator


@dataclass(frozen=True)
class Disambiguation:
    """Result of disambiguating a title.

    creators is ranked by total popularity. When needs_clarification is
    False it holds at most one name; otherwise a human must choose.
    """

    creators: list[str] = field(default_factory=list)
    needs_clarification: bool = False
    groups: list[CreatorGroup] = field(default_factory=list)

    @property
    def resolved(self) -> str | None:
        """The auto-resolved creator, if there is one."""
        if self.needs_clarification or not self.creators:
            return None
        return self.creators[0]


def surname_key(name: str) -> str:
    """Reduce a full creator name to the key used for grouping.

    "Jane von Trapp" and "J. von Trapp" both give "von trapp";
    "Bob Marley" gives "marley"; a single token is used as-is.
    """
    tokens = name.split()
    if not tokens:
        return ""
    if len(tokens) == 1:
        return tokens[0].lower()
    particle = tokens[-2].lower()
    if particle in NAME_PARTICLES:
        return f"{particle} {tokens[-1].lower()}"
    return tokens[-1].lower()


def _titles_related(query: str, candidate: str) -> bool:
    query = query.strip().lower()
    candidate = candidate.strip().lower()
    if not query or not candidate:
        return False
    return query in candidate or candidate in query


def _is_derivative(query: str, candidate: str, markers: tuple[str, ...]) -> bool:
    query = query.lower()
    candidate = candidate.lower()
    # A marker that is part of the query itself ("The Companion") is not noise.
    return any(marker in candidate and marker not in query for marker in markers)


def collect_candidates(
    query: str, hits: list[SearchHit], policy: DisambiguationPolicy
) -> list[DisambiguationCandidate]:
    """Filter search hits down to plausible (title, creator) observations."""
    candidates: list[DisambiguationCandidate] = []
    for hit in hits:
        if not _titles_related(query, hit.title):
            continue
        if _is_derivative(query, hit.title, policy.derivative_markers):
            logger.debug("Skipping derivative work %r", hit.title)
            continue
        creator = (hit.creator or "").strip()
        if not creator:
            continue
        key = surname_key(creator)
        if not key:
            continue
        candidates.append(
            DisambiguationCandidate(
                title=hit.title,
                creator=creator,
                surname_key=key,
                popularity=max(0, hit.popularity),
            )
        )
    return candidates


def group_candidates(candidates: list[DisambiguationCandidate]) -> list[CreatorGroup]:
    """Bucket candidates by surname key, ranked by total popularity.

    The sort is stable, so equally popular groups keep search relevance order.
    """
    groups: dict[str, CreatorGroup] = {}
    for candidate in candidates:
        group = groups.get(candidate.surname_key)
        if group is None:
            group = CreatorGroup(
                surname_key=candidate.surname_key, canonical_name=candidate.creator
            )
            groups[candidate.surname_key] = group
        group.add(candidate)
    return sorted(groups.values(), key=lambda g: g.total_popularity, reverse=True)


def should_auto_resolve(top: int, runner_up: int, policy: DisambiguationPolicy) -> bool:
    """Decide whether the top group dominates the runner-up."""
    if top >= policy.ratio * runner_up and top > 0:
        return True
    if runner_up == 0 and top > 0:
        return True
    return top >= policy.dominant_total and runner_up < policy.runner_up_ceiling


def decide(groups: list[CreatorGroup], policy: DisambiguationPolicy) -> Disambiguation:
    """Turn ranked groups into a resolution or a request for clarification."""
    if not groups:
        return Disambiguation()
    if len(groups) == 1:
        return Disambiguation(creators=[groups[0].canonical_name], groups=groups)

    top, runner_up = groups[0], groups[1]
    if should_auto_resolve(top.total_popularity, runner_up.total_popularity, policy):
        return Disambiguation(creators=[top.canonical_name], groups=groups)

    return Disambiguation(
        creators=[group.canonical_name for group in groups],
        needs_clarification=True,
        groups=groups,
    )


class CreatorDisambiguator:
    """Resolves which real creator a bare title most likely belongs to."""

    def __init__(
        self,
        search_adapter: SearchAdapter,
        policy: DisambiguationPolicy | None = None,
    ) -> None:
        self._search = search_adapter
        self._policy = policy or DisambiguationPolicy()

    @property
    def policy(self) -> DisambiguationPolicy:
        return self._policy

    async def disambiguate(self, title: str) -> Disambiguation:
        """Search for title and rank the creators it could belong to.

        Raises:
            RateLimited: If the search adapter was throttled.
        """
        hits = (await self._search.search(title))[: self._policy.search_limit]
        candidates = collect_candidates(title, hits, self._policy)
        groups = group_candidates(candidates)
        result = decide(groups, self._policy)
        logger.debug(
            "Disambiguated %r: %d group(s), clarification=%s",
            title,
            len(groups),
            result.needs_clarification,
        )
        return result
