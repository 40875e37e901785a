"""
Search Provider — factory.
"""

from typing import Optional

from claimcheck.search import SearchProvider


def get_provider(
    provider_name: str = "tavily",
    api_key: Optional[str] = None,
    timeout: float = 20.0,
) -> SearchProvider:
    """Factory — returns the configured search provider."""
    if provider_name == "tavily":
        from claimcheck.search.tavily import TavilyProvider
        return TavilyProvider(api_key=api_key, timeout=timeout)
    else:
        raise ValueError(f"Unknown search provider: {provider_name}")
