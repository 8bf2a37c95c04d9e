"""Spreadsheet column names and request metadata helpers."""

from __future__ import annotations

import uuid
from typing import Any, Iterable, Mapping, Optional, Union

REQUEST_ID_KEY = "x-request-id"
USERNAME_KEY = "x-username"

COLS = ["", *"ABCDEFGHIJKLMNOPQRSTUVWXYZ"]

Metadata = Optional[Union[Mapping[str, Any], Iterable[tuple[str, Any]]]]


def convert_num_to_chars(num: int) -> str:
    """Return the spreadsheet column name of the zero-based index ``num``."""
    letters = []
    v = num + 1
    while v > 0:
        k = v % 26 or 26
        v = (v - k) // 26
        letters.append(COLS[k])
    return "".join(reversed(letters))


def _values(metadata: Metadata, key: str) -> list[Any]:
    if metadata is None:
        return []
    key = key.lower()
    items = metadata.items() if isinstance(metadata, Mapping) else metadata
    found: list[Any] = []
    for name, value in items:
        if name.lower() != key:
            continue
        if isinstance(value, (str, bytes)):
            found.append(value)
        else:
            found.extend(value)
    return found


def get_header_first(metadata: Metadata, key: str) -> str:
    """Return the first value of ``key`` in request metadata, or an empty string.

    ``metadata`` is a mapping of keys to a value or list of values, or a
    sequence of ``(key, value)`` pairs; keys match case-insensitively.
    """
    values = _values(metadata, key)
    return values[0] if values else ""


def get_request_id(metadata: Metadata) -> str:
    """Return the request id from metadata, or a newly generated one."""
    return get_header_first(metadata, REQUEST_ID_KEY) or new_request_id()


def get_username(metadata: Metadata) -> str:
    """Return the username from metadata, or an empty string."""
    return get_header_first(metadata, USERNAME_KEY)


def new_request_id() -> str:
    """Generate a random request id."""
    return str(uuid.uuid4())