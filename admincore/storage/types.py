"""Abstract interfaces shared by the cache, queue and locker back ends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Callable, Union

if TYPE_CHECKING:
    from admincore.storage.message import Message

PREFIX_KEY = "__host"

Duration = Union[timedelta, int, float]
ConsumerFunc = Callable[["Message"], None]


class CacheAdapter(ABC):
    """A key/value cache with expiry and simple counters."""

    @abstractmethod
    def get(self, key: str) -> str:
        """Return the value stored under ``key``; raise ``KeyError`` if absent."""

    @abstractmethod
    def set(self, key: str, value: Any, expire: int) -> None:
        """Store ``value`` under ``key`` for ``expire`` seconds."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``."""

    @abstractmethod
    def hash_get(self, hk: str, key: str) -> str:
        """Return ``key`` from the hash table ``hk``."""

    @abstractmethod
    def hash_delete(self, hk: str, key: str) -> None:
        """Remove ``key`` from the hash table ``hk``."""

    @abstractmethod
    def increase(self, key: str) -> None:
        """Add one to the integer stored under ``key``."""

    @abstractmethod
    def decrease(self, key: str) -> None:
        """Subtract one from the integer stored under ``key``."""

    @abstractmethod
    def expire(self, key: str, duration: Duration) -> None:
        """Let ``key`` expire ``duration`` from now."""


class QueueAdapter(ABC):
    """A message queue with named streams and consumers."""

    @abstractmethod
    def append(self, message: Message) -> None:
        """Publish ``message`` to its stream."""

    @abstractmethod
    def register(self, name: str, consumer: ConsumerFunc) -> None:
        """Attach ``consumer`` to the stream ``name``."""

    @abstractmethod
    def run(self) -> None:
        """Run the queue until it is shut down."""

    @abstractmethod
    def shutdown(self) -> None:
        """Stop the queue."""


class LockerAdapter(ABC):
    """A distributed lock provider."""

    @abstractmethod
    def lock(self, key: str, ttl: int, options: Any) -> Any:
        """Obtain a lock on ``key`` for ``ttl`` seconds."""