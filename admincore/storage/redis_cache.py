"""Cache back end stored in a Redis server."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Mapping, Optional

import redis

from admincore.storage.types import CacheAdapter, Duration


def _decode(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode()
    return str(value)


class RedisCache(CacheAdapter):
    """A cache that keeps its keys in Redis."""

    def __init__(
        self,
        client: Optional[Any] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if client is None:
            client = redis.Redis(**dict(options or {}))
        self.client = client
        self.client.ping()

    def __str__(self) -> str:
        return "redis"

    def get(self, key: str) -> str:
        value = self.client.get(key)
        if value is None:
            raise KeyError(key)
        return _decode(value)

    def set(self, key: str, value: Any, expire: int) -> None:
        self.client.set(key, value, ex=expire if expire > 0 else None)

    def delete(self, key: str) -> None:
        self.client.delete(key)

    def hash_get(self, hk: str, key: str) -> str:
        value = self.client.hget(hk, key)
        if value is None:
            raise KeyError(key)
        return _decode(value)

    def hash_delete(self, hk: str, key: str) -> None:
        self.client.hdel(hk, key)

    def increase(self, key: str) -> None:
        self.client.incr(key)

    def decrease(self, key: str) -> None:
        self.client.decr(key)

    def expire(self, key: str, duration: Duration) -> None:
        if not isinstance(duration, timedelta):
            duration = timedelta(seconds=duration)
        self.client.expire(key, duration)