"""In-process cache with per-key expiry."""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Any, Callable

from admincore.storage.types import CacheAdapter, Duration


@dataclass
class _Item:
    value: str
    expires_at: float


def _to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "+Inf" if value > 0 else "-Inf"
        text = format(Decimal(repr(value)), "f")
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return text
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode()
    if isinstance(value, Exception):
        return str(value)
    raise TypeError(f"unable to cast {value!r} of type {type(value).__name__} to string")


def _to_int(text: str) -> int:
    stripped = text.strip()
    if "." in stripped:
        whole, _, fraction = stripped.partition(".")
        if fraction and set(fraction) == {"0"}:
            stripped = whole
    try:
        return int(stripped, 10)
    except ValueError:
        return int(stripped, 0)


def _seconds(duration: Duration) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)


class MemoryCache(CacheAdapter):
    """A thread-safe cache kept in memory."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._items: dict[str, _Item] = {}
        self._lock = threading.RLock()
        self._clock = clock

    def __str__(self) -> str:
        return "memory"

    def _item(self, key: str) -> _Item:
        with self._lock:
            item = self._items.get(key)
            if item is None:
                raise KeyError(key)
            if item.expires_at < self._clock():
                del self._items[key]
                raise KeyError(key)
            return item

    def get(self, key: str) -> str:
        return self._item(key).value

    def set(self, key: str, value: Any, expire: int) -> None:
        text = _to_string(value)
        with self._lock:
            self._items[key] = _Item(text, self._clock() + expire)

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def hash_get(self, hk: str, key: str) -> str:
        return self.get(hk + key)

    def hash_delete(self, hk: str, key: str) -> None:
        self.delete(hk + key)

    def _calculate(self, key: str, amount: int) -> None:
        with self._lock:
            try:
                item = self._item(key)
            except KeyError:
                raise KeyError(f"{key} not exist") from None
            item.value = str(_to_int(item.value) + amount)

    def increase(self, key: str) -> None:
        self._calculate(key, 1)

    def decrease(self, key: str) -> None:
        self._calculate(key, -1)

    def expire(self, key: str, duration: Duration) -> None:
        with self._lock:
            try:
                item = self._item(key)
            except KeyError:
                raise KeyError(f"{key} not exist") from None
            item.expires_at = self._clock() + _seconds(duration)