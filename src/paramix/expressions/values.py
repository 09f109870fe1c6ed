"""Interpretation of parameter values.

Parameter values are always strings, or None when a parameter has no
value. Boolean and numeric readings are derived here on demand and never
stored.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

from paramix.constants import FALSE, TRUE
from paramix.expressions.errors import InvalidArgumentError, NotANumberError

__all__ = [
    "is_true",
    "to_number",
    "to_index",
    "format_number",
    "format_bool",
    "render_json_value",
]

_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def is_true(value: str | None) -> bool:
    """Apply True Semantics to a value.

    A value is true iff it is present, non-empty and not the word "false"
    in any letter case.

    Examples:
        >>> is_true("yes"), is_true("FaLsE"), is_true(""), is_true(None)
        (True, False, False, False)
    """
    return bool(value) and value.lower() != FALSE


def to_number(value: str) -> float:
    """Parse a finite decimal number.

    Raises:
        NotANumberError: If the value is not a decimal literal or overflows.
    """
    if not _DECIMAL.fullmatch(value):
        raise NotANumberError(value)
    number = float(value)
    if not math.isfinite(number):
        raise NotANumberError(value)
    return number


def to_index(value: str) -> int:
    """Parse a number and truncate it toward zero."""
    return int(to_number(value))


def format_number(number: float) -> str:
    """Render a numeric result.

    Integral results drop the fractional part (``-4`` rather than ``-4.0``);
    others use the shortest representation that round-trips.

    Raises:
        InvalidArgumentError: If the result overflowed the float range.
    """
    if not math.isfinite(number):
        raise InvalidArgumentError("Numeric result is out of range")
    if number == 0:
        return "0"
    if number.is_integer() and abs(number) < 1e21:
        return str(int(number))
    return repr(number)


def format_bool(flag: bool) -> str:
    return TRUE if flag else FALSE


def render_json_value(value: Any) -> str:
    """Render a value found inside a JSON (or EDN) document as a parameter.

    Strings are used verbatim; everything else is rendered as compact JSON.
    """
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
