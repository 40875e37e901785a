"""
Rate Limiter — Search Request Throttling

Sliding window limiter guarding the external search provider.
Default: 10 requests per 60 seconds.

Each Verifier owns its own limiter instance, so independent
pipelines (and tests) never share a window. Thread-safe via lock.

A slot is reserved before the provider call and handed back if the
call produced nothing, so concurrent callers can never pass the check
together and oversubscribe the window.

Usage:
    limiter = SlidingWindowLimiter(max_requests=10, window_seconds=60)
    slot = limiter.acquire()      # raises RateLimitError when exhausted
    try:
        ...call the provider...
    except SearchError:
        limiter.release(slot)
        raise
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass, field
from typing import Callable


class RateLimitError(Exception):
    """Raised when the sliding window is exhausted."""

    def __init__(self, message: str, wait_seconds: int):
        super().__init__(message)
        self.wait_seconds = wait_seconds


@dataclass
class RateWindow:
    """Sliding window counter."""
    timestamps: list[float] = field(default_factory=list)

    def prune(self, now: float, window_seconds: float) -> int:
        """Drop timestamps outside the window; return the remaining count."""
        cutoff = now - window_seconds
        self.timestamps = [t for t in self.timestamps if t > cutoff]
        return len(self.timestamps)

    def record(self, now: float) -> None:
        self.timestamps.append(now)


class SlidingWindowLimiter:
    """Owned sliding-window counter for outbound search calls."""

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._window = RateWindow()
        self._lock = threading.Lock()

    def _has_slot(self) -> bool:
        return self._window.prune(self._clock(), self.window_seconds) < self.max_requests

    def _seconds_until_slot(self) -> float:
        if self._has_slot():
            return 0.0
        expiry = min(self._window.timestamps) + self.window_seconds
        return max(0.0, expiry - self._clock())

    def can_acquire(self) -> bool:
        with self._lock:
            return self._has_slot()

    def record(self) -> None:
        """Record one request. Call after a successful provider call."""
        with self._lock:
            self._window.record(self._clock())

    def try_acquire(self) -> bool:
        """Take a slot if one is free."""
        with self._lock:
            if not self._has_slot():
                return False
            self._window.record(self._clock())
            return True

    def _exhausted(self) -> RateLimitError:
        wait = math.ceil(self._seconds_until_slot())
        return RateLimitError(
            f"Rate limit exceeded. Please wait {wait} seconds before trying again.",
            wait_seconds=wait,
        )

    def check(self) -> None:
        """Raise RateLimitError if no slot is free. Does not record."""
        with self._lock:
            if self._has_slot():
                return
            error = self._exhausted()
        raise error

    def acquire(self) -> float:
        """
        Reserve a slot or raise RateLimitError. Check and reservation
        happen under one lock. Returns the slot's timestamp for release().
        """
        with self._lock:
            now = self._clock()
            if self._window.prune(now, self.window_seconds) < self.max_requests:
                self._window.record(now)
                return now
            error = self._exhausted()
        raise error

    def release(self, slot: float) -> None:
        """Hand back a slot reserved by acquire()."""
        with self._lock:
            if slot in self._window.timestamps:
                self._window.timestamps.remove(slot)

    def remaining(self) -> int:
        with self._lock:
            count = self._window.prune(self._clock(), self.window_seconds)
            return max(0, self.max_requests - count)

    def time_until_next_slot(self) -> float:
        """Seconds until a slot opens; 0 when one is free now."""
        with self._lock:
            return self._seconds_until_slot()

    def reset(self) -> None:
        with self._lock:
            self._window = RateWindow()

    @property
    def usage(self) -> dict:
        remaining = self.remaining()
        return {
            "remaining": remaining,
            "max_requests": self.max_requests,
            "window_seconds": self.window_seconds,
            "retry_after_seconds": math.ceil(self.time_until_next_slot()),
        }
