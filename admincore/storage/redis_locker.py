"""Distributed locks held in a Redis server."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from redis.exceptions import LockError

from admincore.storage.types import LockerAdapter


class RedisLocker(LockerAdapter):
    """A locker that obtains locks through a Redis client."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def __str__(self) -> str:
        return "redis"

    def lock(self, key: str, ttl: int, options: Optional[Mapping[str, Any]] = None) -> Any:
        """Obtain a lock on ``key`` for ``ttl`` seconds; raise ``LockError`` if taken.

        ``options`` may hold ``blocking`` and ``blocking_timeout`` for the
        acquisition and any further keyword accepted by the client's ``lock``.
        By default the attempt is made once, without waiting.
        """
        opts = dict(options or {})
        blocking = opts.pop("blocking", False)
        blocking_timeout = opts.pop("blocking_timeout", None)
        lock = self.client.lock(key, timeout=ttl, **opts)
        if not lock.acquire(blocking=blocking, blocking_timeout=blocking_timeout):
            raise LockError(f"lock {key!r} not obtained")
        return lock