"""
Structured Logging — JSON Output for Production

Configures Python logging to emit structured JSON logs.
Each log entry includes timestamp, level, module, and
any additional context fields.

Usage:
    from claimcheck.logging import get_logger
    logger = get_logger("pipeline")
    logger.info("Claim verified", extra={"claim_id": claim.id, "verdict": "FALSE"})
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

LOG_LEVEL = os.getenv("CLAIMCHECK_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("CLAIMCHECK_LOG_FORMAT", "json")  # "json" or "text"

EXTRA_FIELDS = (
    "claim_id", "verdict", "confidence", "query", "url",
    "sources_count", "queries_count", "duration_ms", "error",
    "error_type", "status_code", "method", "path", "wait_seconds",
    "cache_hit",
)


class JSONFormatter(logging.Formatter):
    """Formats log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable format for development."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Logger:
    """Configure the claimcheck root logger. Call once at app startup."""
    level = (level or LOG_LEVEL).upper()
    fmt = fmt or LOG_FORMAT

    root = logging.getLogger("claimcheck")
    root.setLevel(getattr(logging, level, logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    root.addHandler(handler)

    # Suppress noisy third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    """Get a named logger under the claimcheck namespace."""
    return logging.getLogger(f"claimcheck.{name}")
