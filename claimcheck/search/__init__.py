"""
Search Provider — Abstract Interface

Every web search goes through this interface. Swap providers by
changing CLAIMCHECK_SEARCH_PROVIDER in env.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

SEARCH_DEPTHS = ("basic", "advanced")


@dataclass(frozen=True)
class SearchResult:
    """One ranked result returned by a provider."""
    url: str
    content: str
    raw_content: Optional[str] = None
    published_date: Optional[str] = None
    title: Optional[str] = None
    score: Optional[float] = None


class SearchError(Exception):
    """A provider call failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @property
    def is_auth_error(self) -> bool:
        return self.status_code in (401, 403)

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429


class SearchAuthError(SearchError):
    """Missing or rejected API key. Never retried."""


class SearchProvider(ABC):
    """Abstract base for web search providers."""

    name: str = "abstract"

    @abstractmethod
    async def search(
        self,
        query: str,
        depth: str = "advanced",
        include_raw_content: bool = True,
        max_results: int = 6,
    ) -> list[SearchResult]:
        """Run one query and return ranked results."""
        ...

    @property
    def has_credentials(self) -> bool:
        return True

    async def aclose(self) -> None:
        """Release network resources. Default: nothing to release."""
        return None


__all__ = [
    "SEARCH_DEPTHS",
    "SearchAuthError",
    "SearchError",
    "SearchProvider",
    "SearchResult",
]
