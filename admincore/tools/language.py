"""Parsing of HTTP Accept-Language headers."""

from __future__ import annotations

import math
from typing import Optional, Sequence


def _parse_quality(text: str) -> float:
    if not text or text != text.strip() or "_" in text:
        raise ValueError(text)
    unsigned = text.lstrip("+-")
    if unsigned.startswith("0x"):
        value = float.fromhex(text)
    else:
        value = float(text)
    if math.isinf(value) and unsigned not in ("inf", "infinity"):
        raise ValueError(text)
    return value


def parse_accept_language(
    languages: str, supported_languages: Optional[Sequence[str]] = None
) -> list[str]:
    """Return the language codes of an Accept-Language value, best first.

    When ``supported_languages`` is not empty, only codes listed there are kept.
    Items without a quality are ranked by their position.
    """
    preferred = languages.split(",")
    total = len(preferred)
    ranked: list[tuple[str, float]] = []

    for position, raw in enumerate(preferred):
        item = raw.strip().lower()
        if not item:
            continue
        parts = item.split(";", 1)
        name = parts[0]
        if supported_languages and name not in supported_languages:
            continue

        quality = 0.0
        if len(parts) == 2 and parts[1].startswith("q="):
            try:
                quality = _parse_quality(parts[1].split("=", 1)[1])
            except ValueError:
                quality = 1.0
        if quality == 0:
            quality = float(total - position)
        ranked.append((name, quality))

    ranked.sort(key=lambda entry: entry[1], reverse=True)
    return [name for name, _ in ranked]