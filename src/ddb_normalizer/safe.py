"""
Safe-navigation helpers for the raw D&D Beyond record.

D&D Beyond exports are deeply nested and any branch may be missing, null, or
of an unexpected type. Every calculator reads the raw record through these
helpers so that an absent branch degrades to a default instead of raising.
"""

from __future__ import annotations

import math
from typing import Any


def dig(data: Any, *path: str | int, default: Any = None) -> Any:
    """Walk a nested dict/list structure, returning ``default`` on any miss.

    Args:
        data: Root object (usually the raw character dict).
        *path: Sequence of dict keys or list indexes.
        default: Value returned when any step is missing or None.

    Returns:
        The value at the end of the path, or ``default``.
    """
    current = data
    for step in path:
        if isinstance(current, dict):
            current = current.get(step)
        elif isinstance(current, list) and isinstance(step, int):
            if -len(current) <= step < len(current):
                current = current[step]
            else:
                return default
        else:
            return default
        if current is None:
            return default
    return current


def as_list(value: Any) -> list:
    """Return ``value`` if it is a list, else an empty list."""
    return value if isinstance(value, list) else []


def as_dict(value: Any) -> dict:
    """Return ``value`` if it is a dict, else an empty dict."""
    return value if isinstance(value, dict) else {}


def as_int(value: Any, default: int = 0) -> int:
    """Coerce a loosely typed number to int.

    Booleans are rejected so that ``True`` never becomes a level of 1.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except (OverflowError, ValueError):
            return default
    return default


def as_float(value: Any, default: float = 0.0) -> float:
    """Coerce a loosely typed number to float."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return default
    return default


def as_str(value: Any, default: str = "") -> str:
    """Return a stripped string, or ``default`` for non-strings and blanks."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def optional_int(value: Any) -> int | None:
    """Like :func:`as_int` but keeps the distinction between absent and zero."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except (OverflowError, ValueError):
            return None
    return None


def as_id(value: Any, fallback: int | str | None = None) -> int | str | None:
    """Coerce a record id to ``int | str``.

    Whole-number floats become ints; other scalars keep their text form so
    that distinct ids stay distinct. Containers, booleans and blanks give
    ``fallback``.
    """
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        return str(value)
    if isinstance(value, str):
        return value.strip() or fallback
    return fallback
