# ABOUTME: Rate-limited fetch gateway, the single choke point for every outbound call.
# ABOUTME: Paces requests through an owned RateLimiter and classifies failures into the error taxonomy.

import asyncio
import logging
import time
from contextvars import ContextVar
from typing import Any, Protocol, runtime_checkable

import httpx

from shelfmark.enrichment.errors import (
    MalformedResponse,
    NetworkError,
    NotFound,
    RateLimited,
    SourceUnavailable,
)

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL = 0.2
DEFAULT_COOLDOWN = 30.0
DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "shelfmark/0.1.0 (personal catalog enrichment)"

# (run, position) of the batch item the current task works for; None outside a batch.
_call_order: ContextVar[tuple[object, int] | None] = ContextVar("call_order", default=None)


def set_call_order(run: object, position: int) -> None:
    """Tag calls made from the current task as belonging to item position of run.

    When a call trips the limiter, calls tagged with the same run and an
    earlier position keep going so those items can finish; everything
    else fails fast until the window closes.
    """
    _call_order.set((run, position))


class RateLimiter:
    """Minimum-spacing pacer shared by every gateway that should pace together.

    Holds the time of the last call and a back-off window. One instance
    shared across all gateways serializes pacing across every domain and
    provider. The lock makes the spacing hold under concurrent tasks.
    """

    def __init__(
        self,
        *,
        min_interval: float = DEFAULT_MIN_INTERVAL,
        cooldown: float = DEFAULT_COOLDOWN,
    ) -> None:
        self._min_interval = min_interval
        self._cooldown = cooldown
        self._last_call: float = 0.0
        self._open_until: float = 0.0
        # Batch items before this (run, position) are exempt from the open window.
        self._exempt_before: tuple[object, int] | None = None
        self._lock = asyncio.Lock()

    @property
    def min_interval(self) -> float:
        return self._min_interval

    @property
    def is_tripped(self) -> bool:
        """Whether the back-off window opened by trip() is still open."""
        return time.monotonic() < self._open_until

    async def acquire(self) -> None:
        """Wait until the next call may be issued, then claim the slot.

        Raises:
            RateLimited: While a back-off window is open, unless the call
                belongs to a batch item ahead of the one that tripped it.
        """
        async with self._lock:
            self._raise_if_tripped()
            if self._min_interval > 0 and self._last_call > 0:
                elapsed = time.monotonic() - self._last_call
                if elapsed < self._min_interval:
                    await asyncio.sleep(self._min_interval - elapsed)
                    # A response that landed during the wait may have tripped us.
                    self._raise_if_tripped()
            self._last_call = time.monotonic()

    def trip(self, retry_after: float | None = None) -> None:
        """Open a back-off window; calls fail fast until it closes or reset().

        Called from inside a batch item, the window spares calls from the
        same run's earlier items.
        """
        order = _call_order.get()
        if not self.is_tripped:
            self._exempt_before = order
        elif (
            order is None
            or self._exempt_before is None
            or order[0] is not self._exempt_before[0]
        ):
            self._exempt_before = None
        elif order[1] < self._exempt_before[1]:
            self._exempt_before = order

        window = retry_after if retry_after is not None else self._cooldown
        self._open_until = max(self._open_until, time.monotonic() + window)
        logger.warning("Rate limited, backing off for %.1fs", window)

    def reset(self) -> None:
        """Close the back-off window (manual resume)."""
        self._open_until = 0.0
        self._exempt_before = None

    def _is_exempt(self) -> bool:
        order = _call_order.get()
        barrier = self._exempt_before
        return (
            order is not None
            and barrier is not None
            and order[0] is barrier[0]
            and order[1] < barrier[1]
        )

    def _raise_if_tripped(self) -> None:
        remaining = self._open_until - time.monotonic()
        if remaining > 0 and not self._is_exempt():
            raise RateLimited(
                f"Backing off for another {remaining:.1f}s after a rate limit",
                retry_after=remaining,
            )


@runtime_checkable
class HttpGateway(Protocol):
    """Protocol for the JSON GET operations source adapters depend on."""

    async def get_json(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]: ...


def _parse_retry_after(value: str | None) -> float | None:
    """Parse a Retry-After header given in seconds; dates are ignored."""
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


class FetchGateway:
    """Async HTTP gateway with pacing and failure classification.

    - 429 trips the limiter and raises RateLimited.
    - 5xx raises SourceUnavailable (soft, logged).
    - Connection failures trip the limiter and raise NetworkError, a
      RateLimited subclass.
    - Every other status is passed through for the adapter to interpret.
    """

    def __init__(
        self,
        limiter: RateLimiter | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": user_agent},
            "timeout": timeout,
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**client_kwargs)
        self._limiter = limiter or RateLimiter()

    @property
    def limiter(self) -> RateLimiter:
        return self._limiter

    async def get(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a paced GET request and classify the result.

        Raises:
            RateLimited: On HTTP 429 or while backing off.
            NetworkError: On connection-level failures.
            SourceUnavailable: On HTTP 5xx.
        """
        await self._limiter.acquire()

        try:
            response = await self._client.get(url, params=params, headers=headers)
        except httpx.TransportError as exc:
            logger.warning("Network error for %s: %s", url, exc)
            self._limiter.trip()
            raise NetworkError(f"Network error for {url}: {exc}", url=url) from exc

        if response.status_code == 429:
            retry_after = _parse_retry_after(response.headers.get("retry-after"))
            self._limiter.trip(retry_after)
            raise RateLimited(
                f"Rate limited by {url}",
                url=url,
                status_code=429,
                retry_after=retry_after,
            )

        if response.status_code >= 500:
            logger.warning("Server error (%d) for %s", response.status_code, url)
            raise SourceUnavailable(
                f"HTTP {response.status_code} from {url}",
                url=url,
                status_code=response.status_code,
            )

        return response

    async def get_json(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """GET a URL and return its JSON object body.

        Raises:
            NotFound: On HTTP 404.
            MalformedResponse: On any other non-2xx status or a non-object body.
        """
        response = await self.get(url, params=params, headers=headers)
        if response.status_code == 404:
            raise NotFound(f"HTTP 404 from {url}")
        if not response.is_success:
            raise MalformedResponse(f"HTTP {response.status_code} from {url}")
        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedResponse(f"Invalid JSON from {url}: {exc}") from exc
        if not isinstance(data, dict):
            raise MalformedResponse(f"Expected a JSON object from {url}")
        return data

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "FetchGateway":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
