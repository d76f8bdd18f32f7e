"""Coercions for loosely typed answer values.

Answers arrive from browsers and JSON documents, so a field's value may be a
string, a number, a boolean, a list of selections or missing entirely. The
engine never compares raw values; everything goes through these helpers.
"""

from __future__ import annotations

import math
import re
from typing import Any

_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def to_text(value: Any) -> str:
    """Render a value the way it would be displayed in a form input."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(item) for item in value)
    return str(value)


def to_number(value: Any) -> float:
    """Return the numeric reading of a value, or NaN when it has none.

    Blank and whitespace-only strings read as 0, the same as an empty input
    box; `None` has no numeric reading.
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return 0.0
        if _NUMBER_RE.match(stripped):
            return float(stripped)
    return math.nan


def is_number(value: Any) -> bool:
    return not math.isnan(to_number(value))


def normalize_text(value: Any, case_sensitive: bool = False) -> str:
    text = to_text(value).strip()
    return text if case_sensitive else text.casefold()


def as_selection(value: Any) -> list[Any]:
    """View an answer as a list of selections (multi-select fields)."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    if isinstance(value, str) and value == "":
        return []
    return [value]
