"""Queue message carrying a stream name, values and a retry counter."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Optional

from admincore.storage.types import PREFIX_KEY


@dataclass
class Message:
    """A message travelling through a queue."""

    id: str = ""
    stream: str = ""
    values: Optional[dict[str, Any]] = field(default_factory=dict)
    error_count: int = 0

    @property
    def prefix(self) -> str:
        """The tenant prefix stored in the values, or an empty string."""
        if self.values is None:
            return ""
        value = self.values.get(PREFIX_KEY)
        return value if isinstance(value, str) else ""

    @prefix.setter
    def prefix(self, prefix: str) -> None:
        if self.values is None:
            self.values = {}
        self.values[PREFIX_KEY] = prefix

    def copy(self) -> Message:
        """Return a copy whose values can be changed independently."""
        values = dict(self.values) if self.values is not None else None
        return dataclasses.replace(self, values=values)