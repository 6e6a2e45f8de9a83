"""
Value coercion shared by conditions and actions.

Authored values arrive as strings, numbers or booleans depending on which
editor field produced them ("5" and 5 are both common), so comparisons
coerce instead of failing.
"""

from __future__ import annotations

import math
from typing import Any

Number = int | float


def to_number(value: Any) -> Number | None:
    """
    Numeric reading of a value, or None when it has none.

    Booleans read as 0/1, blank strings as 0. Non-finite results are
    treated as unparseable.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def loose_equals(left: Any, right: Any) -> bool:
    """
    Coercing equality: 5 == "5", 1 == True, "" == 0.

    None only equals None. Two strings compare as text; any pairing with a
    number or boolean compares numerically.
    """
    if left is None or right is None:
        return left is None and right is None
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    if isinstance(left, (bool, int, float, str)) and isinstance(right, (bool, int, float, str)):
        left_number = to_number(left)
        right_number = to_number(right)
        if left_number is None or right_number is None:
            return False
        return left_number == right_number
    return left == right


def compare(left: Any, operator: str, right: Any) -> bool | None:
    """
    Apply an ordering/equality operator.

    Returns None for operators this helper does not know, so callers can
    decide their own fallback.
    """
    if operator == "eq":
        return loose_equals(left, right)

    if operator not in ("gt", "lt", "gte", "lte"):
        return None

    left_number = to_number(left)
    right_number = to_number(right)
    if left_number is None or right_number is None:
        return False
    if operator == "gt":
        return left_number > right_number
    if operator == "lt":
        return left_number < right_number
    if operator == "gte":
        return left_number >= right_number
    return left_number <= right_number


def add_numbers(base: Any, delta: Any) -> Number | None:
    """Sum of two coerced values, or None if either is not numeric or the sum overflows."""
    base_number = to_number(base)
    delta_number = to_number(delta)
    if base_number is None or delta_number is None:
        return None
    total = base_number + delta_number
    return total if math.isfinite(total) else None


def as_flag(value: Any) -> bool:
    """Boolean reading of an authored set_flag value; unset means true."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "0", "no", "off", "")
    return bool(value)


def coerce_literal(text: str) -> int | float | bool | str:
    """Typed reading of free text: number, then boolean literal, else the text."""
    number = to_number(text)
    if number is not None and text.strip():
        return number
    if text == "true":
        return True
    if text == "false":
        return False
    return text


def format_value(value: Any) -> str:
    """Render a value the way authors typed it (true, 3.5, text)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
