# ABOUTME: Error taxonomy for the enrichment engine.
# ABOUTME: RateLimited is the only error that crosses component boundaries; the rest are soft.


class EnrichmentError(Exception):
    """Base class for every error raised by the enrichment engine."""


class RateLimited(EnrichmentError):
    """Raised when a provider throttles us or the network is unreachable.

    Fatal to the current batch. Adapters must re-raise it unchanged, and the
    orchestrator and batch controller stop issuing work when they see it.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.retry_after = retry_after


class NetworkError(RateLimited):
    """Connection-level failure (DNS, connect, timeout, reset).

    Treated as throttling so the whole pipeline backs off instead of
    hammering a flaky link.
    """


class BatchInterrupted(RateLimited):
    """Raised by enrich_all when a rate limit stops the batch part-way.

    Carries the items enriched before the stop and the catalog items that
    still need fetching, so callers can report progress and resume.
    """

    def __init__(self, cause: RateLimited, completed: list, remaining: list) -> None:
        super().__init__(
            str(cause),
            url=cause.url,
            status_code=cause.status_code,
            retry_after=cause.retry_after,
        )
        self.completed = completed
        self.remaining = remaining


class SoftFailure(EnrichmentError):
    """A failure absorbed at the adapter boundary, leaving fields empty."""


class SourceUnavailable(SoftFailure):
    """Provider answered with a 5xx status."""

    def __init__(
        self, message: str, *, url: str | None = None, status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class NotFound(SoftFailure):
    """Provider had nothing for the query (404 or an empty result)."""


class MalformedResponse(SoftFailure):
    """Provider response did not have the expected shape."""
