"""
claimcheck Configuration

Central settings loaded from environment variables.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

from claimcheck.search import SEARCH_DEPTHS

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    # --- Versioning ---
    VERSION: str = "0.3.0"
    API_VERSION: str = "1"

    # --- Search Provider ---
    SEARCH_PROVIDER: str = os.getenv("CLAIMCHECK_SEARCH_PROVIDER", "tavily")
    TAVILY_API_KEY: str = os.getenv("TAVILY_API_KEY", "")
    SEARCH_DEPTH: str = os.getenv("CLAIMCHECK_SEARCH_DEPTH", "advanced")
    MAX_RESULTS: int = int(os.getenv("CLAIMCHECK_MAX_RESULTS", "6"))
    SEARCH_TIMEOUT: float = float(os.getenv("CLAIMCHECK_SEARCH_TIMEOUT", "20"))

    # --- Throttle ---
    RATE_MAX_REQUESTS: int = int(os.getenv("CLAIMCHECK_RATE_MAX_REQUESTS", "10"))
    RATE_WINDOW_SECONDS: float = float(os.getenv("CLAIMCHECK_RATE_WINDOW_SECONDS", "60"))

    # --- Verdict Cache ---
    CACHE_TTL_SECONDS: float = float(os.getenv("CLAIMCHECK_CACHE_TTL_SECONDS", "86400"))
    CACHE_MAX_ENTRIES: int = int(os.getenv("CLAIMCHECK_CACHE_MAX_ENTRIES", "100"))

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("CLAIMCHECK_LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("CLAIMCHECK_LOG_FORMAT", "json")

    # --- Server ---
    HOST: str = os.getenv("CLAIMCHECK_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("CLAIMCHECK_PORT", "8000"))

    # --- CORS ---
    CORS_ORIGINS: str = os.getenv("CLAIMCHECK_CORS_ORIGINS", "*")

    def __post_init__(self):
        if self.SEARCH_DEPTH not in SEARCH_DEPTHS:
            raise ValueError(
                f"CLAIMCHECK_SEARCH_DEPTH must be one of {SEARCH_DEPTHS}, got {self.SEARCH_DEPTH!r}"
            )


settings = Settings()
