"""
Text-related helpers.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable

_URL_PATTERN = re.compile(r"^https?:", re.IGNORECASE)


def is_absolute_url(value: str) -> bool:
    """
    True when value already points at a remote resource (http:// or https://).
    """
    return bool(_URL_PATTERN.match(value or ""))


def parse_assignments(items: Iterable[str]) -> Dict[str, str]:
    """
    Turn ``key=value`` strings into a dict; the last assignment of a key wins.

    Raises:
        ValueError: If an item has no ``=`` or an empty key.
    """
    result: Dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {item!r}")
        result[key] = value
    return result
