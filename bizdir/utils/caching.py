from typing import Any, Callable, Dict, List, Optional, Tuple
import json
import time

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from bizdir.core.exceptions.errors import CacheError
from bizdir.utils.logging import get_logger

logger = get_logger()


class Cache:
    """Key/value cache with per-entry expiry.

    Values must be JSON-serializable. They are stored serialized, so a value
    handed out by ``get`` is always a fresh copy. An entry is valid while
    ``now - inserted_at < ttl``; expired entries read as absent and are
    dropped when seen. A ``ttl`` of 0 stores the entry without expiry.

    Backends: ``inmemory`` (a process-local dict) and ``redis``.
    """

    def __init__(
        self,
        cache_type: str = "inmemory",
        default_ttl: int = 3600,
        redis_url: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.cache_type = cache_type.lower()
        self.default_ttl = default_ttl
        self._redis_url = redis_url
        self._redis = None
        self._clock = clock
        # key -> (serialized value, expires_at or None)
        self._inmemory: Dict[str, Tuple[str, Optional[float]]] = {}

    async def init_redis(self):
        if self.cache_type == "redis" and self._redis_url:
            self._redis = aioredis.from_url(self._redis_url)

    @property
    def uses_redis(self) -> bool:
        return self.cache_type == "redis" and self._redis is not None

    def _expired(self, expires_at: Optional[float]) -> bool:
        return expires_at is not None and self._clock() >= expires_at

    async def get(self, key: str) -> Optional[Any]:
        if self.uses_redis:
            try:
                value = await self._redis.get(key)
            except RedisError as e:
                logger.warning(f"Cache read failed for '{key}', treating as miss: {e}")
                return None
            return json.loads(value) if value else None

        entry = self._inmemory.get(key)
        if entry is None:
            return None
        val_str, expires_at = entry
        if self._expired(expires_at):
            self._inmemory.pop(key, None)
            return None
        return json.loads(val_str)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None):
        expire = self.default_ttl if ttl is None else ttl
        val_str = json.dumps(value)
        if self.uses_redis:
            try:
                await self._redis.set(key, val_str, ex=expire or None)
            except RedisError as e:
                logger.warning(f"Cache write failed for '{key}': {e}")
            return

        expires_at = self._clock() + expire if expire else None
        self._inmemory[key] = (val_str, expires_at)

    async def delete(self, key: str) -> bool:
        if self.uses_redis:
            try:
                return bool(await self._redis.delete(key))
            except RedisError as e:
                raise CacheError(detail=str(e)) from e

        entry = self._inmemory.pop(key, None)
        return entry is not None and not self._expired(entry[1])

    async def keys(self) -> List[str]:
        if self.uses_redis:
            try:
                return [
                    k.decode() if isinstance(k, bytes) else k
                    async for k in self._redis.scan_iter()
                ]
            except RedisError as e:
                raise CacheError(message="Failed to list cache keys", detail=str(e)) from e

        self.prune()
        return list(self._inmemory)

    def prune(self) -> int:
        """Drop expired in-memory entries; returns how many were removed."""
        expired = [k for k, (_, exp) in self._inmemory.items() if self._expired(exp)]
        for k in expired:
            del self._inmemory[k]
        return len(expired)

    async def close(self):
        if self._redis:
            await self._redis.aclose()
