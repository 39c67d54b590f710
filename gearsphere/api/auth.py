"""Admin access for catalog management.

Catalog writes need an ``X-API-Key`` header matching one of the keys in
``GEARSPHERE_ADMIN_KEYS`` (comma-separated), and each key is limited to
``GEARSPHERE_RATE_LIMIT_MAX`` writes per minute. Build suggestions and
catalog reads stay public.
"""

from __future__ import annotations

import hmac
import logging
import os
import time
from collections import defaultdict, deque

from fastapi import Depends, HTTPException, Security
from fastapi.security import APIKeyHeader

logger = logging.getLogger(__name__)

API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)

RATE_LIMIT_WINDOW = 60  # seconds

_admin_keys: frozenset[str] | None = None


def _configured_keys() -> frozenset[str]:
    global _admin_keys
    if _admin_keys is None:
        raw = os.getenv("GEARSPHERE_ADMIN_KEYS", "")
        _admin_keys = frozenset(k.strip() for k in raw.split(",") if k.strip())
        if not _admin_keys:
            logger.warning("GEARSPHERE_ADMIN_KEYS is empty; catalog writes are disabled")
    return _admin_keys


def _is_admin_key(candidate: str, keys: frozenset[str]) -> bool:
    # Constant time across every configured key
    matched = False
    for key in keys:
        matched |= hmac.compare_digest(candidate.encode(), key.encode())
    return matched


async def require_admin_key(api_key: str | None = Security(API_KEY_HEADER)) -> str:
    """FastAPI dependency: 401 without a key, 503 if none configured, 403 if wrong."""
    if not api_key:
        raise HTTPException(status_code=401, detail="Missing X-API-Key header")

    keys = _configured_keys()
    if not keys:
        raise HTTPException(status_code=503, detail="Catalog management is not configured.")

    if not _is_admin_key(api_key, keys):
        logger.warning("Rejected catalog write with an unknown API key")
        raise HTTPException(status_code=403, detail="Invalid API key")

    return api_key


class SlidingWindowLimiter:
    """Counts hits per key over the last ``window`` seconds."""

    def __init__(self, window: float = RATE_LIMIT_WINDOW) -> None:
        self.window = window
        self._hits: dict[str, deque[float]] = defaultdict(deque)

    def hit(self, key: str, limit: int) -> bool:
        """Record a hit for ``key``; False if it would exceed ``limit``."""
        now = time.monotonic()
        hits = self._hits[key]
        while hits and hits[0] <= now - self.window:
            hits.popleft()
        if len(hits) >= limit:
            return False
        hits.append(now)
        return True

    def reset(self) -> None:
        self._hits.clear()


_limiter = SlidingWindowLimiter()


def _rate_limit_max() -> int:
    # Read per request
    return int(os.getenv("GEARSPHERE_RATE_LIMIT_MAX", "120"))


async def check_rate_limit(api_key: str = Depends(require_admin_key)) -> str:
    """FastAPI dependency for catalog writes: valid key, then the per-key limit."""
    limit = _rate_limit_max()
    if not _limiter.hit(api_key, limit):
        raise HTTPException(
            status_code=429,
            detail=f"Rate limit exceeded. Max {limit} requests per minute.",
            headers={"Retry-After": str(RATE_LIMIT_WINDOW)},
        )
    return api_key


def reset_rate_limits() -> None:
    """Forget all recorded hits (for testing)."""
    _limiter.reset()


def reset_api_keys() -> None:
    """Re-read GEARSPHERE_ADMIN_KEYS on the next request (for testing)."""
    global _admin_keys
    _admin_keys = None
