# ABOUTME: Fake source and search adapters for orchestrator, batch, and engine tests.
# ABOUTME: Return canned records per title, optionally delayed or failing, and log every call.

import asyncio
from typing import Any

from shelfmark.enrichment.adapter import SearchHit
from shelfmark.enrichment.types import SourceRecord


class FakeAdapter:
    """Source adapter that answers from a title -> record/exception map.

    A default record is returned for titles missing from the map. delays
    maps a title to seconds of simulated latency.
    """

    def __init__(
        self,
        name: str,
        records: dict[str, Any] | None = None,
        *,
        default: Any = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self._name = name
        self._records = records or {}
        self._default = default if default is not None else SourceRecord.empty()
        self._delays = delays or {}
        self.calls: list[tuple[str, str | None]] = []

    @property
    def name(self) -> str:
        return self._name

    async def fetch(self, title: str, creator: str | None = None) -> SourceRecord:
        self.calls.append((title, creator))
        delay = self._delays.get(title, 0.0)
        if delay:
            await asyncio.sleep(delay)
        else:
            await asyncio.sleep(0)
        result = self._records.get(title, self._default)
        if isinstance(result, Exception):
            raise result
        return result


class FakeSearchAdapter:
    """Search adapter returning canned hits, or raising a canned error."""

    def __init__(self, hits: list[SearchHit] | Exception | None = None) -> None:
        self._hits = hits if hits is not None else []
        self.queries: list[str] = []

    @property
    def name(self) -> str:
        return "Fake Search"

    async def search(self, title: str) -> list[SearchHit]:
        self.queries.append(title)
        if isinstance(self._hits, Exception):
            raise self._hits
        return list(self._hits)


class FakeGateway:
    """HttpGateway stand-in that returns canned JSON by URL substring."""

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self._responses = responses or {}
        self.request_log: list[tuple[str, dict[str, str] | None]] = []

    async def get_json(
        self,
        url: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        self.request_log.append((url, params))
        for pattern, response in self._responses.items():
            if pattern in url:
                if isinstance(response, Exception):
                    raise response
                if callable(response):
                    return response(url, params)
                return response
        return {}
