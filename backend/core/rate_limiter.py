# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""
In-process fixed-window rate limiter for the unauthenticated auth routes.

State lives in this worker only; behind several workers each one enforces
its own window.
"""

import threading
import time

from fastapi import Request

from core.config import settings
from core.errors import TooManyRequestsError
from core.security import get_client_ip


class RateLimiter:
    def __init__(self) -> None:
        self._hits: dict[str, tuple[int, float]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, limit: int, window_seconds: int) -> None:
        """Count one request for *key*; raise 429 once *limit* is exceeded in the window."""
        now = time.monotonic()
        with self._lock:
            self._prune(now)
            count, reset_at = self._hits.get(key, (0, now + window_seconds))
            count += 1
            self._hits[key] = (count, reset_at)
        if count > limit:
            raise TooManyRequestsError("Too many requests, please try again later")

    def _prune(self, now: float) -> None:
        # caller holds the lock
        expired = [key for key, (_, reset_at) in self._hits.items() if now >= reset_at]
        for key in expired:
            del self._hits[key]

    def __len__(self) -> int:
        """Number of windows currently tracked."""
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


limiter = RateLimiter()


def rate_limited(scope: str):
    """Build a dependency that rate-limits *scope* per client IP."""

    def _dependency(request: Request) -> None:
        key = f"{scope}:{get_client_ip(request) or 'unknown'}"
        limiter.hit(key, settings.auth_rate_limit, settings.auth_rate_window_seconds)

    return _dependency
