"""A small mutable set of named log fields."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union


class Fields:
    """Named values attached to log statements."""

    def __init__(self, values: Optional[Mapping[str, Any]] = None) -> None:
        self._values: dict[str, Any] = dict(values or {})

    def __repr__(self) -> str:
        return f"Fields({self._values!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Fields):
            return self._values == other._values
        return NotImplemented

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def set(self, key: str, value: Any) -> None:
        """Set ``key`` to ``value``, replacing any earlier value."""
        self._values[key] = value

    def merge(self, other: Union[Fields, Mapping[str, Any]]) -> None:
        """Copy every value of ``other`` into these fields."""
        values = other.as_dict() if isinstance(other, Fields) else other
        for key, value in values.items():
            self.set(key, value)

    def as_dict(self) -> dict[str, Any]:
        """Return the fields as a new dictionary."""
        return dict(self._values)

    def copy(self) -> Fields:
        """Return an independent copy."""
        return Fields(self._values)