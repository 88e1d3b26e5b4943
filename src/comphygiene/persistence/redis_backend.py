"""Redis cache backend implementing ICacheBackend for cached analysis reports.

Every key is stored under a configurable namespace so several deployments
can share one Redis database.
"""

from __future__ import annotations

import redis

from comphygiene.core.config import RedisConfig
from comphygiene.core.exceptions import CacheError


class RedisCacheBackend:
    """Production ICacheBackend backed by Redis, with namespaced keys."""

    def __init__(self, client: redis.Redis, key_prefix: str = "") -> None:
        self._client = client
        self._prefix = key_prefix

    @classmethod
    def from_config(cls, config: RedisConfig) -> RedisCacheBackend:
        client = redis.Redis(
            host=config.host,
            port=config.port,
            db=config.db,
            decode_responses=True,
        )
        return cls(client, key_prefix=config.key_prefix)

    def namespaced(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> str | None:
        try:
            value = self._client.get(self.namespaced(key))
        except redis.RedisError as exc:
            raise CacheError(f"Redis GET failed for key={key!r}: {exc}") from exc
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def setex(self, key: str, ttl: int, value: str) -> None:
        if ttl <= 0:
            raise CacheError(f"TTL must be positive for key={key!r}, got {ttl}")
        try:
            self._client.setex(self.namespaced(key), ttl, value)
        except redis.RedisError as exc:
            raise CacheError(f"Redis SETEX failed for key={key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete(self.namespaced(key))
        except redis.RedisError as exc:
            raise CacheError(f"Redis DELETE failed for key={key!r}: {exc}") from exc
