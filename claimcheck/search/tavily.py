"""
Tavily Provider — Tavily Search API implementation.

Uses httpx. The client is lazily initialized, so the app loads
without an API key and only fails on an actual search call.

Features:
- Advanced depth with raw page content, never Tavily's generated answer
- Circuit breaker: after consecutive failures, fail fast for 60s
- Exponential backoff retry on transient errors (429, 5xx, network)
- 401/403 surface immediately as SearchAuthError
"""

from __future__ import annotations

import asyncio
import os
import time
from typing import Any, Optional

import httpx

from claimcheck.logging import get_logger
from claimcheck.search import (
    SEARCH_DEPTHS,
    SearchAuthError,
    SearchError,
    SearchProvider,
    SearchResult,
)

logger = get_logger("search.tavily")

TAVILY_API_URL = "https://api.tavily.com/search"

# Circuit breaker settings
_CB_FAILURE_THRESHOLD = 3   # Open after this many consecutive failures
_CB_RECOVERY_TIMEOUT = 60   # Seconds before trying again (half-open)

_TRANSIENT_STATUS = {429, 500, 502, 503, 504}


class CircuitBreaker:
    """Simple circuit breaker: closed → open → half-open → closed.

    When open, search() raises CircuitOpenError immediately so the
    pipeline drops the query variant instead of waiting on timeouts.
    """

    def __init__(
        self,
        failure_threshold: int = _CB_FAILURE_THRESHOLD,
        recovery_timeout: float = _CB_RECOVERY_TIMEOUT,
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self._failures = 0
        self._last_failure_time: float = 0
        self._state = "closed"  # closed | open | half-open

    @property
    def state(self) -> str:
        if self._state == "open":
            if time.monotonic() - self._last_failure_time >= self.recovery_timeout:
                self._state = "half-open"
        return self._state

    def record_success(self) -> None:
        self._failures = 0
        self._state = "closed"

    def record_failure(self) -> None:
        self._failures += 1
        self._last_failure_time = time.monotonic()
        if self._failures >= self.failure_threshold:
            self._state = "open"
            logger.warning(
                "Circuit breaker OPEN — %d consecutive search failures. "
                "Failing fast for %ds.",
                self._failures, self.recovery_timeout,
            )

    @property
    def is_open(self) -> bool:
        return self.state == "open"


class CircuitOpenError(SearchError):
    """Raised when the circuit breaker is open."""


def _parse_results(data: Any) -> list[SearchResult]:
    results = []
    for item in (data or {}).get("results") or []:
        url = item.get("url")
        if not url:
            continue
        results.append(SearchResult(
            url=url,
            content=item.get("content") or "",
            raw_content=item.get("raw_content") or None,
            published_date=item.get("published_date") or None,
            title=item.get("title"),
            score=item.get("score"),
        ))
    return results


class TavilyProvider(SearchProvider):
    """Tavily search provider with retry and circuit breaker."""

    name = "tavily"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 20.0,
        client: Optional[httpx.AsyncClient] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        api_url: str = TAVILY_API_URL,
    ):
        self._api_key = api_key if api_key is not None else os.getenv("TAVILY_API_KEY", "")
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._api_url = api_url
        self.circuit_breaker = CircuitBreaker()

    @property
    def has_credentials(self) -> bool:
        return bool(self._api_key)

    def _get_client(self) -> httpx.AsyncClient:
        if not self._api_key:
            raise SearchAuthError(
                "TAVILY_API_KEY not set. Get one from https://app.tavily.com",
                status_code=401,
            )
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def _post(self, payload: dict) -> httpx.Response:
        client = self._get_client()
        return await client.post(
            self._api_url,
            json={"api_key": self._api_key, **payload},
            headers={"Authorization": f"Bearer {self._api_key}"},
        )

    async def _call_api(self, payload: dict) -> list[SearchResult]:
        """POST with retry on transient failures."""
        last_error: Optional[SearchError] = None
        for attempt in range(self._max_retries):
            try:
                response = await self._post(payload)
            except httpx.HTTPError as e:
                last_error = SearchError(f"Tavily request failed: {e}")
            else:
                if response.status_code in (401, 403):
                    raise SearchAuthError(
                        f"Tavily API error: {response.status_code} {response.reason_phrase}",
                        status_code=response.status_code,
                        body=response.text,
                    )
                if response.is_success:
                    return _parse_results(response.json())

                last_error = SearchError(
                    f"Tavily API error: {response.status_code} {response.reason_phrase}",
                    status_code=response.status_code,
                    body=response.text,
                )
                if response.status_code not in _TRANSIENT_STATUS:
                    raise last_error

            if attempt < self._max_retries - 1:
                await asyncio.sleep(self._retry_delay * 2 ** attempt)

        raise last_error  # type: ignore[misc]

    async def search(
        self,
        query: str,
        depth: str = "advanced",
        include_raw_content: bool = True,
        max_results: int = 6,
    ) -> list[SearchResult]:
        if depth not in SEARCH_DEPTHS:
            raise ValueError(f"Unknown search depth: {depth!r} (expected one of {SEARCH_DEPTHS})")

        # Fast-fail while the provider is known to be down
        if self.circuit_breaker.is_open:
            raise CircuitOpenError(
                "Search circuit breaker is open — too many consecutive failures."
            )

        payload = {
            "query": query,
            "search_depth": depth,
            "include_raw_content": include_raw_content,
            "max_results": max_results,
            "include_answer": False,
        }
        try:
            results = await self._call_api(payload)
        except SearchAuthError:
            raise
        except SearchError:
            self.circuit_breaker.record_failure()
            raise
        self.circuit_breaker.record_success()
        return results

    async def verify_api_key(self) -> bool:
        """True if the key is accepted by a minimal one-result query."""
        if not self._api_key:
            return False
        try:
            response = await self._post({
                "query": "test",
                "search_depth": "basic",
                "max_results": 1,
            })
        except httpx.HTTPError:
            return False
        return response.is_success

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
