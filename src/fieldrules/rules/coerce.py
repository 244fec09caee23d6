"""Shared coercion helpers for rule implementations.

Every numeric rule goes through :func:`to_number`; every integer or float
parameter goes through :func:`int_param` / :func:`float_param`.  Rules never
switch on value types themselves.
"""

from __future__ import annotations

import re
from decimal import Decimal
from numbers import Real
from typing import Any

from fieldrules.domain.errors import InvalidRuleParameterError

_INT_PARAM = re.compile(r"[+-]?\d+")


class NotANumberError(TypeError):
    """Value cannot be treated as a number."""


def is_number(value: Any) -> bool:
    """True for real numbers and Decimals.  Booleans are not numbers."""
    if isinstance(value, bool):
        return False
    return isinstance(value, (Real, Decimal))


def to_number(value: Any) -> Real | Decimal:
    """Return *value* as a comparable number.

    Ints and Decimals are kept exact, so a bound comparison never overflows
    a float.  A NaN Decimal becomes a float NaN, which compares false.

    Raises:
        NotANumberError: If *value* is not a number (strings included).
    """
    if not is_number(value):
        msg = f"expected a number, got {type(value).__name__}"
        raise NotANumberError(msg)
    if isinstance(value, Decimal) and value.is_nan():
        return float("nan")
    return value


def parses_as_float(text: str) -> bool:
    """Whether *text* is a float literal (``"3.14"``, ``"-2"``, ``"1e6"``)."""
    try:
        float(text)
    except ValueError:
        return False
    return True


def float_param(rule: str, parameter: str | None) -> float:
    """Parse a numeric bound parameter such as the ``18`` in ``min:18``."""
    if parameter is None:
        raise InvalidRuleParameterError(rule, parameter, f"{rule} rule requires a numeric value")
    try:
        return float(parameter.strip())
    except ValueError:
        raise InvalidRuleParameterError(rule, parameter) from None


def int_param(rule: str, parameter: str | None, *, minimum: int | None = None) -> int:
    """Parse a strict integer parameter such as the ``3`` in ``min_length:3``."""
    if parameter is None or not _INT_PARAM.fullmatch(parameter.strip()):
        raise InvalidRuleParameterError(rule, parameter)
    number = int(parameter.strip())
    if minimum is not None and number < minimum:
        raise InvalidRuleParameterError(rule, parameter)
    return number


def list_param(parameter: str | None) -> list[str]:
    """Split a comma-separated parameter into trimmed tokens.

    Examples:
        >>> list_param("tech, business ,lifestyle")
        ['tech', 'business', 'lifestyle']
    """
    if not parameter:
        return []
    return [token.strip() for token in parameter.split(",")]


def format_value(value: Any) -> str:
    """String form used by set-membership rules.

    Booleans render as ``true``/``false``, integral floats drop their
    ``.0``, and ``None`` renders as the empty string.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_bound(bound: float) -> str:
    """Render a numeric bound without a trailing ``.0`` (``18.0`` -> ``18``)."""
    return format_value(bound)


def byte_length(text: str) -> int:
    """UTF-8 byte length of *text*."""
    return len(text.encode("utf-8"))
