"""Geocode payload cache in Redis. Any Redis failure reads as a miss."""

import hashlib
import json
import logging
from typing import Any, Callable, Optional

import redis

from .rate_limiter import get_redis_client

logger = logging.getLogger(__name__)


class Cache:
    def __init__(self, prefix: str = "cache", client_factory: Callable[[], redis.Redis] = get_redis_client):
        self.prefix = prefix
        self._client_factory = client_factory
        self._client: Optional[redis.Redis] = None
        self._unavailable = False

    def _connection(self) -> Optional[redis.Redis]:
        # One failed connect disables the cache for this instance
        if self._client is None and not self._unavailable:
            try:
                self._client = self._client_factory()
            except redis.RedisError as e:
                logger.warning(f"⚠️ Redis cache unavailable, continuing without it: {e}")
                self._unavailable = True
        return self._client

    def key(self, raw: str) -> str:
        """Namespaced key for a lookup string; case and surrounding whitespace are ignored"""
        digest = hashlib.sha256(raw.strip().lower().encode("utf-8")).hexdigest()[:32]
        return f"{self.prefix}:{digest}"

    def get(self, key: str) -> Optional[Any]:
        client = self._connection()
        if client is None:
            return None

        try:
            raw = client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None

        if not raw:
            return None
        logger.debug(f"Cache hit: {key}")
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl: int = 3600) -> bool:
        client = self._connection()
        if client is None:
            return False

        try:
            client.setex(key, ttl, json.dumps(value))
        except redis.RedisError as e:
            logger.warning(f"Cache write failed for {key}: {e}")
            return False
        return True
