"""Numeric coercion, comparison and format-sniffing helpers shared by the dice modules.

Coercion is loose: a value counts as numeric when it *starts*
with an integer, so ``"12abc"`` is numeric and parses as 12. Helpers never
raise on bad input; they fall back to 0 or False instead.
"""

from __future__ import annotations

import base64
import binascii
import json
import math
import random
import re
from typing import Any

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")
_LEADING_FLOAT_RE = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

_NON_NUMERIC_TYPES = (list, tuple, dict, set, frozenset, bool)


def _leading_int(value: Any) -> int | None:
    """Return the integer at the start of value, or None if there isn't one."""
    if value is None or isinstance(value, _NON_NUMERIC_TYPES):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    m = _LEADING_INT_RE.match(str(value))
    return int(m.group(1)) if m else None


def _leading_float(value: Any) -> float:
    """Return the float at the start of value, or NaN if there isn't one."""
    if value is None or isinstance(value, _NON_NUMERIC_TYPES):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    m = _LEADING_FLOAT_RE.match(str(value))
    return float(m.group(1)) if m else math.nan


def is_numeric(value: Any) -> bool:
    """Return True if value is not a collection and begins with a finite integer."""
    return _leading_int(value) is not None


def is_base64(value: Any) -> bool:
    """Return True if decoding then re-encoding value reproduces it exactly."""
    if not value or not isinstance(value, str):
        return False
    try:
        decoded = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    return base64.b64encode(decoded).decode("ascii") == value


def is_json(value: Any) -> bool:
    """Return True if value is JSON text describing an object or an array."""
    if not value or not isinstance(value, str):
        return False
    try:
        parsed = json.loads(value)
    except ValueError:
        return False
    return isinstance(parsed, (dict, list))


def generate_number(min_value: Any = None, max_value: Any = None) -> int:
    """Return a random integer between min_value and max_value, inclusive.

    Bounds are read as leading integers, so "3.5" is 3. min_value defaults
    to 1 and max_value defaults to min_value. When
    max_value is not greater than min_value, min_value is returned as is;
    reversed bounds are not swapped.
    """
    min_value = (_leading_int(min_value) if min_value else None) or 1
    max_value = (_leading_int(max_value) if max_value else None) or min_value

    if max_value <= min_value:
        return min_value

    return random.randint(min_value, max_value)


def sum_array(numbers: Any) -> float:
    """Add up the numeric items of a list; anything else contributes 0."""
    if not isinstance(numbers, (list, tuple)):
        return 0
    return sum((_leading_float(n) for n in numbers if is_numeric(n)), 0)


def equate_numbers(a: Any, b: Any, operator: str = "+") -> float:
    """Apply an arithmetic operator (+, -, *, /) to a and b.

    Non-numeric operands count as 0 and dividing by zero yields 0.
    """
    a = _leading_float(a) if is_numeric(a) else 0
    b = _leading_float(b) if is_numeric(b) else 0

    if operator == "*":
        return a * b
    if operator == "/":
        return a / b if b else 0
    if operator == "-":
        return a - b
    return a + b


def compare_numbers(a: Any, b: Any, operator: str) -> bool:
    """Return True if a compares to b under operator (=, ==, <, >, <=, >=, !, !=).

    Unknown operators compare as False.
    """
    a = _leading_float(a)
    b = _leading_float(b)

    if operator in ("=", "=="):
        return a == b
    if operator == "<":
        return a < b
    if operator == ">":
        return a > b
    if operator == "<=":
        return a <= b
    if operator == ">=":
        return a >= b
    if operator in ("!", "!="):
        return a != b
    return False


def format_number(value: float) -> str:
    """Render a number without a trailing ".0" when it is integral."""
    return str(int(value)) if float(value).is_integer() else str(value)
