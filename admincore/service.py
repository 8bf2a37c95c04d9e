"""Base service holding shared resources and an accumulated error."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from admincore.storage.types import CacheAdapter


@dataclass
class Service:
    """Common state for business services."""

    orm: Any = None
    msg: str = ""
    msg_id: str = ""
    log: Any = None
    error: Optional[BaseException] = None
    cache: Optional[CacheAdapter] = None

    def add_error(self, err: Optional[BaseException]) -> Optional[BaseException]:
        """Record ``err`` alongside any earlier error and return the combined error."""
        if self.error is None:
            self.error = err
        elif err is not None:
            combined = RuntimeError(f"{self.error}; {err}")
            combined.__cause__ = err
            self.error = combined
        return self.error