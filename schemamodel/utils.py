"""Helpers the engine calls but does not own: dotted paths, dates, loose equality."""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Mapping, MutableMapping

from .types import RFC3339

PATH_SEPARATOR = "."


# ---------------------------------------------------------------------------
# Dotted-path access on nested mappings
# ---------------------------------------------------------------------------

def get_path(path: str, data: Mapping[str, Any], default: Any = None) -> Any:
    """Read ``a.b.c`` from nested mappings, returning ``default`` when any
    segment is missing or the final value is None."""
    current: Any = data
    for key in path.split(PATH_SEPARATOR):
        if not isinstance(current, Mapping) or key not in current:
            return default
        current = current[key]
    return default if current is None else current


def set_path(path: str, data: MutableMapping[str, Any], value: Any) -> None:
    """Write ``value`` at ``a.b.c``, creating intermediate dicts as needed."""
    keys = path.split(PATH_SEPARATOR)
    current = data
    for key in keys[:-1]:
        nxt = current.get(key)
        if not isinstance(nxt, MutableMapping):
            nxt = current[key] = {}
        current = nxt
    current[keys[-1]] = value


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def try_parse_date(value: Any, fmt: str = RFC3339) -> date | None:
    if value is None or isinstance(value, (date, datetime)):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value, fmt)
    except ValueError:
        return None


def parse_date(value: Any, fmt: str = RFC3339) -> date:
    parsed = try_parse_date(value, fmt)
    if parsed is None:
        raise ValueError(f"Invalid date format ({value!r} does not conform to {fmt})")
    return parsed


def format_date(value: date, fmt: str = RFC3339) -> str:
    if fmt == RFC3339:
        # strftime renders %z without the colon RFC 3339 requires
        if not isinstance(value, datetime):
            value = datetime(value.year, value.month, value.day)
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat(timespec="seconds")
    return value.strftime(fmt)


# ---------------------------------------------------------------------------
# Numbers and loose equality
# ---------------------------------------------------------------------------

# Decimal or exponent notation only: no "nan", "inf" or "1_000"
_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def to_number(value: Any) -> float | None:
    """Finite float for an int, float or numeric string; None otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and _NUMERIC.match(value):
        number = float(value)
    else:
        return None
    return number if math.isfinite(number) else None


def loose_equals(a: Any, b: Any) -> bool:
    """Equality that also matches a numeric string against a number.

    ``loose_equals("1", 1)`` is True; booleans only ever equal booleans
    or the integers 0 and 1.
    """
    if a == b:
        return True
    if isinstance(a, str) != isinstance(b, str):
        left, right = to_number(a), to_number(b)
        return left is not None and left == right
    return False
