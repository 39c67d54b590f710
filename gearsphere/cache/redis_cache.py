"""Build suggestion cache backed by Redis.

Entries are whole response payloads, stored as JSON under
``gearsphere:build:<generation>:<digest>`` where the digest covers the
normalized usage and the canonical budget. A catalog write invalidates
every entry: any price or stock change can move the best part for any
budget. Invalidation also bumps the catalog generation, so a build that
was computed before the write is stored under a key no reader asks for.

Without Redis the engine keeps working; every request just goes to the
catalog.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import time
from decimal import Decimal
from typing import Any

logger = logging.getLogger(__name__)

CACHE_PREFIX = "gearsphere:build:"
GENERATION_KEY = "gearsphere:catalog:generation"
DEFAULT_TTL = int(os.getenv("GEARSPHERE_CACHE_TTL", "600"))
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Keys unlinked per round trip when invalidating
_UNLINK_BATCH = 500

Payload = dict[str, Any]


def build_cache_key(usage: str, budget: Decimal, generation: int = 0) -> str:
    """Cache key for one (usage, budget) request against one catalog generation.

    ``usage`` is expected normalized. ``150000`` and ``150000.00`` map to
    the same key.
    """
    amount = str(budget.normalize())
    digest = hashlib.sha256(f"{usage}|{amount}".encode()).hexdigest()[:16]
    return f"{CACHE_PREFIX}{generation}:{digest}"


class BuildCache:
    """Stores build payloads in Redis.

    Every operation degrades to a miss / no-op while Redis is down, so
    callers never need their own error handling.
    """

    def __init__(self, redis_url: str = REDIS_URL, ttl: int = DEFAULT_TTL) -> None:
        self.redis_url = redis_url
        self.ttl = ttl
        self._client = None

    @property
    def available(self) -> bool:
        return self._client is not None

    async def connect(self) -> bool:
        import redis.asyncio as aioredis
        from redis.exceptions import RedisError

        client = aioredis.from_url(
            self.redis_url,
            decode_responses=True,
            socket_connect_timeout=3,
            socket_timeout=3,
        )
        try:
            await client.ping()
        except (RedisError, OSError) as e:
            logger.warning("Build cache disabled, Redis unreachable at %s: %s", self.redis_url, e)
            await client.aclose()
            return False

        self._client = client
        logger.info("Build cache connected to %s", self.redis_url)
        return True

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def generation(self) -> int | None:
        """Current catalog generation, or None when Redis cannot say."""
        value = await self._call("incrby", GENERATION_KEY, 0)
        return int(value) if value is not None else None

    async def get_build(self, key: str) -> Payload | None:
        """Cached payload for ``key``, or None on a miss or Redis failure."""
        raw = await self._call("get", key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable cache entry %s", key)
            await self._call("delete", key)
            return None

    async def put_build(self, key: str, payload: Payload) -> bool:
        """Store a payload for ``self.ttl`` seconds. Returns False when not stored."""
        stored = await self._call("set", key, json.dumps(payload), ex=self.ttl)
        return bool(stored)

    async def invalidate(self) -> int:
        """Drop every cached build. Returns the number of entries removed."""
        if self._client is None:
            return 0

        await self._call("incr", GENERATION_KEY)

        from redis.exceptions import RedisError

        removed = 0
        batch = []
        try:
            async for key in self._client.scan_iter(match=CACHE_PREFIX + "*", count=_UNLINK_BATCH):
                batch.append(key)
                if len(batch) >= _UNLINK_BATCH:
                    removed += await self._client.unlink(*batch)
                    batch = []
            if batch:
                removed += await self._client.unlink(*batch)
        except (RedisError, OSError) as e:
            logger.warning("Build cache invalidation incomplete after %d keys: %s", removed, e)
            return removed

        logger.info("Invalidated %d cached builds", removed)
        return removed

    async def _call(self, command: str, *args, **kwargs):
        if self._client is None:
            return None

        from redis.exceptions import RedisError

        try:
            return await getattr(self._client, command)(*args, **kwargs)
        except (RedisError, OSError) as e:
            logger.warning("Build cache %s failed: %s", command.upper(), e)
            return None


class InMemoryCache(BuildCache):
    """Process-local stand-in for Redis, used in tests and local runs.

    Honours the TTL so expiry behaves like the real cache.
    """

    def __init__(self, ttl: int = DEFAULT_TTL) -> None:
        super().__init__(redis_url="memory://", ttl=ttl)
        self._entries: dict[str, tuple[float, str]] = {}
        self._generation = 0
        self._connected = False

    @property
    def available(self) -> bool:
        return self._connected

    async def connect(self) -> bool:
        self._connected = True
        return True

    async def disconnect(self) -> None:
        self._entries.clear()
        self._connected = False

    async def generation(self) -> int | None:
        return self._generation

    async def get_build(self, key: str) -> Payload | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, raw = entry
        if time.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return json.loads(raw)

    async def put_build(self, key: str, payload: Payload) -> bool:
        self._entries[key] = (time.monotonic() + self.ttl, json.dumps(payload))
        return True

    async def invalidate(self) -> int:
        removed = len(self._entries)
        self._generation += 1
        self._entries.clear()
        return removed
