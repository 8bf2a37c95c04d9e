"""Application-wide registry of databases, adapters, routes and settings."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

from admincore.runtime.scoped import PrefixedCache, PrefixedLocker, PrefixedQueue
from admincore.storage.memory_queue import MemoryQueue
from admincore.storage.message import Message
from admincore.storage.types import CacheAdapter, LockerAdapter, QueueAdapter

_default_logger: Any = logging.getLogger("admincore")

_MEMORY_QUEUE_POOL = 10000


@dataclass(frozen=True)
class Router:
    """One route of the HTTP engine."""

    http_method: str
    relative_path: str
    handler: str


class Registry:
    """A thread-safe keyed store; with ``wildcard`` a ``"*"`` entry answers every lookup."""

    def __init__(self, wildcard: bool = True) -> None:
        self.wildcard = wildcard
        self._items: dict[str, Any] = {}
        self._lock = threading.Lock()

    def __setitem__(self, key: str, value: Any) -> None:
        with self._lock:
            self._items[key] = value

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def lookup(self, key: str) -> Any:
        """Return the entry for ``key``, the ``"*"`` entry first if wildcard, else None."""
        with self._lock:
            if self.wildcard and "*" in self._items:
                return self._items["*"]
            return self._items.get(key)

    def snapshot(self) -> dict[str, Any]:
        """Return a copy of all entries."""
        with self._lock:
            return dict(self._items)


class Application:
    """Holds the shared resources of a running application."""

    def __init__(self) -> None:
        self.dbs = Registry()
        self.casbins = Registry()
        self.crontabs = Registry()
        self.apps = Registry()
        self.casbin_excludes = Registry()
        self.middlewares = Registry(wildcard=False)
        self.engine: Any = None
        self.cache_adapter: Optional[CacheAdapter] = None
        self.queue_adapter: Optional[QueueAdapter] = None
        self.locker_adapter: Optional[LockerAdapter] = None
        self._memory_queue = MemoryQueue(_MEMORY_QUEUE_POOL)
        self._handlers: dict[str, list[Callable[..., Any]]] = {}
        self._routers: list[Router] = []
        self._configs: dict[str, dict[str, Any]] = {}
        self._before: list[Callable[[], Any]] = []
        self._app_routers: list[Callable[[], Any]] = []
        self._lock = threading.Lock()

    @property
    def logger(self) -> Any:
        """The process-wide default logger."""
        return _default_logger

    @logger.setter
    def logger(self, value: Any) -> None:
        global _default_logger
        _default_logger = value

    @property
    def before(self) -> list[Callable[[], Any]]:
        """Functions to run before start-up, in the order added."""
        return list(self._before)

    @property
    def app_routers(self) -> list[Callable[[], Any]]:
        """Functions that register the application's routes."""
        return list(self._app_routers)

    def add_before(self, func: Callable[[], Any]) -> None:
        self._before.append(func)

    def add_app_router(self, func: Callable[[], Any]) -> None:
        self._app_routers.append(func)

    def add_handler(self, key: str, handler: Callable[..., Any]) -> None:
        with self._lock:
            self._handlers.setdefault(key, []).append(handler)

    def handlers(self, key: Optional[str] = None) -> Any:
        """Return the handlers under ``key``, or every key's handlers if None."""
        with self._lock:
            if key is None:
                return {k: list(v) for k, v in self._handlers.items()}
            return list(self._handlers.get(key, []))

    def cache(self, prefix: str = "") -> PrefixedCache:
        return PrefixedCache(prefix, self.cache_adapter, "")

    def queue(self, prefix: str = "") -> PrefixedQueue:
        return PrefixedQueue(prefix, self.queue_adapter)

    def locker(self, prefix: str = "") -> PrefixedLocker:
        return PrefixedLocker(prefix, self.locker_adapter)

    def memory_queue(self, prefix: str = "") -> PrefixedQueue:
        return PrefixedQueue(prefix, self._memory_queue)

    def stream_message(self, id: str, stream: str, values: Optional[dict[str, Any]]) -> Message:
        """Build a queue message."""
        return Message(id=id, stream=stream, values=values)

    def set_config(self, tenant: str, key: str, value: Any) -> None:
        with self._lock:
            self._configs.setdefault(tenant, {})[key] = value

    def config(self, tenant: str, key: str) -> Any:
        with self._lock:
            return self._configs.get(tenant, {}).get(key)

    def set_tenant_config(self, tenant: str, values: dict[str, Any]) -> None:
        with self._lock:
            self._configs[tenant] = values

    def tenant_config(self, tenant: str) -> Optional[dict[str, Any]]:
        with self._lock:
            return self._configs.get(tenant)

    def routes(self) -> list[Router]:
        """Collect the engine's routes into the route table and return it.

        The engine is read when it offers a ``routes()`` method whose items carry
        ``method``, ``path`` and ``handler``; each call adds them to the table again.
        """
        routes = getattr(self.engine, "routes", None)
        if callable(routes):
            for info in routes():
                self._routers.append(
                    Router(
                        http_method=info.method,
                        relative_path=info.path,
                        handler=info.handler,
                    )
                )
        return list(self._routers)