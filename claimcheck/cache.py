"""
Verdict Cache

In-memory TTL cache of completed verifications.
Key = normalized claim text (case-folded, punctuation stripped,
whitespace collapsed). TTL = 24 hours, capped at 100 entries,
newest first. Storing a claim replaces any older entry for it.

Prevents repeat search calls for claims verified recently.
Thread-safe via asyncio lock.

Usage:
    cached = await cache.lookup(claim.text)
    if cached:
        return cached.verdict
    verdict = ...
    await cache.store(claim, verdict, queries)
"""

from __future__ import annotations

import asyncio
import re
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from claimcheck.models import Claim, Verdict

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_claim_text(text: str) -> str:
    text = _PUNCTUATION.sub("", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


@dataclass(frozen=True)
class CachedVerification:
    claim: Claim
    verdict: Verdict
    timestamp: float
    queries: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "claim": self.claim.to_dict(),
            "verdict": self.verdict.to_dict(),
            "timestamp": self.timestamp,
            "queries": list(self.queries),
        }


class VerdictCache:
    """In-memory verdict cache with TTL expiry and a size cap."""

    def __init__(
        self,
        ttl_seconds: float = 24 * 60 * 60,
        max_entries: int = 100,
        clock: Callable[[], float] = time.time,
    ):
        self._entries: list[CachedVerification] = []   # newest first
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    def _fresh(self) -> list[CachedVerification]:
        now = self._clock()
        self._entries = [e for e in self._entries if now - e.timestamp < self._ttl]
        return self._entries

    async def lookup(self, claim_text: str) -> Optional[CachedVerification]:
        """Return the cached verification for a claim if it has not expired."""
        key = normalize_claim_text(claim_text)
        async with self._lock:
            for entry in self._fresh():
                if key in (
                    normalize_claim_text(entry.claim.text),
                    normalize_claim_text(entry.claim.original_text),
                ):
                    self._hits += 1
                    return entry
            self._misses += 1
            return None

    async def store(self, claim: Claim, verdict: Verdict, queries: list[str]) -> None:
        """Store newest-first, replacing any entry for the same claim."""
        key = normalize_claim_text(claim.text)
        entry = CachedVerification(
            claim=claim,
            verdict=verdict,
            timestamp=self._clock(),
            queries=list(queries),
        )
        async with self._lock:
            kept = [
                e for e in self._fresh()
                if normalize_claim_text(e.claim.text) != key
            ]
            self._entries = [entry, *kept][: self._max_entries]

    async def history(self, limit: int = 20) -> list[CachedVerification]:
        """Most recent verifications, newest first."""
        async with self._lock:
            return list(self._fresh()[:limit])

    async def clear(self) -> None:
        async with self._lock:
            self._entries = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def stats(self) -> dict:
        """Cache hit/miss statistics."""
        total = self._hits + self._misses
        return {
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total, 3) if total > 0 else 0.0,
        }
