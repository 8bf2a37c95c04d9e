"""Cache, queue and locker wrappers that scope keys to a tenant prefix."""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from admincore.storage.message import Message
from admincore.storage.types import (
    CacheAdapter,
    ConsumerFunc,
    Duration,
    LockerAdapter,
    QueueAdapter,
)

_DEFAULT_WX_TOKEN_STORE_KEY = "wx_token_store_key"


class PrefixedCache(CacheAdapter):
    """A cache that prepends a prefix to every key it passes on."""

    def __init__(
        self,
        prefix: str,
        store: Optional[CacheAdapter],
        wx_token_store_key: str = "",
    ) -> None:
        self.prefix = prefix
        self.store = store
        self.wx_token_store_key = wx_token_store_key or _DEFAULT_WX_TOKEN_STORE_KEY

    def __str__(self) -> str:
        return "" if self.store is None else str(self.store)

    def _key(self, key: str) -> str:
        return self.prefix + key

    def get(self, key: str) -> str:
        return self.store.get(self._key(key))

    def set(self, key: str, value: Any, expire: int) -> None:
        self.store.set(self._key(key), value, expire)

    def delete(self, key: str) -> None:
        self.store.delete(self._key(key))

    def hash_get(self, hk: str, key: str) -> str:
        return self.store.hash_get(hk, self._key(key))

    def hash_delete(self, hk: str, key: str) -> None:
        self.store.hash_delete(hk, self._key(key))

    def increase(self, key: str) -> None:
        self.store.increase(self._key(key))

    def decrease(self, key: str) -> None:
        self.store.decrease(self._key(key))

    def expire(self, key: str, duration: Duration) -> None:
        self.store.expire(self._key(key), duration)

    def token(self) -> dict[str, Any]:
        """Return the stored OAuth2 token."""
        return json.loads(self.store.get(self._key(self.wx_token_store_key)))

    def put_token(self, token: Mapping[str, Any]) -> None:
        """Store an OAuth2 token until 200 seconds before it expires."""
        encoded = json.dumps(dict(token))
        expire = int(token.get("expires_in", 0)) - 200
        self.store.set(self._key(self.wx_token_store_key), encoded, expire)


class PrefixedQueue(QueueAdapter):
    """A queue that tags every appended message with a tenant prefix."""

    def __init__(self, prefix: str, queue: Optional[QueueAdapter]) -> None:
        self.prefix = prefix
        self.queue = queue

    def __str__(self) -> str:
        return str(self.queue)

    def register(self, name: str, consumer: ConsumerFunc) -> None:
        self.queue.register(name, consumer)

    def append(self, message: Message) -> None:
        message.prefix = self.prefix
        self.queue.append(message)

    def run(self) -> None:
        self.queue.run()

    def shutdown(self) -> None:
        if self.queue is not None:
            self.queue.shutdown()


class PrefixedLocker(LockerAdapter):
    """A locker that prepends a prefix to every lock key."""

    def __init__(self, prefix: str, locker: LockerAdapter) -> None:
        self.prefix = prefix
        self.locker = locker

    def __str__(self) -> str:
        return str(self.locker)

    def lock(self, key: str, ttl: int, options: Any) -> Any:
        return self.locker.lock(self.prefix + key, ttl, options)