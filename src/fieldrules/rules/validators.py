"""Builtin validate predicates.

Each predicate receives ``(value, parameter)`` and returns ``None`` when the
value passes or a :class:`Violation` when it does not.  A malformed
parameter is reported as a soft ``invalid_rule_parameter`` violation, the
same way a bad value is.

String, number and date rules treat ``None`` (an absent field) and the
empty string as valid; emptiness is the job of ``required``.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Sized
from datetime import datetime
from functools import lru_cache
from typing import Any
from urllib.parse import urlsplit

from fieldrules.domain.errors import ErrorCode, InvalidRuleParameterError, Violation
from fieldrules.rules.coerce import (
    NotANumberError,
    byte_length,
    float_param,
    format_bound,
    format_value,
    int_param,
    is_number,
    list_param,
    parses_as_float,
    to_number,
)

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
DEFAULT_DATE_FORMAT = "%Y-%m-%d"

_URL_FORBIDDEN = re.compile(r"[\s\x00-\x1f\x7f]")
# Any directive other than the zero-padded numeric ones
_LOOSE_DIRECTIVE = re.compile(r"%[^YymdHMS]")

# Layout tokens accepted in date formats written without strptime directives.
# Longest tokens first so "YYYY" wins over "YY".
_DATE_TOKENS: dict[str, str] = {
    "YYYY": "%Y",
    "2006": "%Y",
    "YY": "%y",
    "MM": "%m",
    "01": "%m",
    "DD": "%d",
    "02": "%d",
    "HH": "%H",
    "15": "%H",
    "mm": "%M",
    "04": "%M",
    "ss": "%S",
    "05": "%S",
}
_DATE_TOKEN_PATTERN = re.compile("|".join(sorted(_DATE_TOKENS, key=len, reverse=True)))


def _violation(rule: str, code: ErrorCode, message: str) -> Violation:
    return Violation(rule=rule, code=code, message=message)


def _not_a_string(rule: str) -> Violation:
    return _violation(rule, ErrorCode.TYPE_MISMATCH, "field must be a string")


def _bad_parameter(exc: InvalidRuleParameterError) -> Violation:
    return _violation(exc.rule, ErrorCode.INVALID_RULE_PARAMETER, str(exc))


# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


def validate_required(value: Any, parameter: str | None) -> Violation | None:
    """Fail on None, blank strings, zero numbers, and empty collections.

    Booleans always pass; ``False`` is a legitimate value.
    """
    missing = _violation("required", ErrorCode.MISSING_REQUIRED, "field is required")
    if value is None:
        return missing
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return missing if not value.strip() else None
    if is_number(value):
        return missing if to_number(value) == 0 else None
    if isinstance(value, Sized) and len(value) == 0:
        return missing
    return None


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------


def _compare_bound(rule: str, value: Any, parameter: str | None) -> Violation | None:
    try:
        bound = float_param(rule, parameter)
    except InvalidRuleParameterError as exc:
        return _bad_parameter(exc)
    if value is None:
        return None
    try:
        number = to_number(value)
    except NotANumberError:
        return _violation(rule, ErrorCode.TYPE_MISMATCH, "field must be a number")

    if rule == "min" and number < bound:
        message = f"field must be at least {format_bound(bound)}"
        return _violation(rule, ErrorCode.OUT_OF_RANGE, message)
    if rule == "max" and number > bound:
        message = f"field must be at most {format_bound(bound)}"
        return _violation(rule, ErrorCode.OUT_OF_RANGE, message)
    return None


def validate_min(value: Any, parameter: str | None) -> Violation | None:
    return _compare_bound("min", value, parameter)


def validate_max(value: Any, parameter: str | None) -> Violation | None:
    return _compare_bound("max", value, parameter)


def validate_numeric(value: Any, parameter: str | None) -> Violation | None:
    """Pass numbers and strings that parse as floats."""
    if value is None or is_number(value):
        return None
    if isinstance(value, str) and (value == "" or parses_as_float(value)):
        return None
    return _violation("numeric", ErrorCode.TYPE_MISMATCH, "field must be numeric")


# ---------------------------------------------------------------------------
# Strings
# ---------------------------------------------------------------------------


def _check_length(rule: str, value: Any, parameter: str | None) -> Violation | None:
    try:
        limit = int_param(rule, parameter)
    except InvalidRuleParameterError as exc:
        return _bad_parameter(exc)
    if value is None:
        return None
    if not isinstance(value, str):
        return _not_a_string(rule)

    length = byte_length(value)
    if rule == "min_length" and length < limit:
        return _violation(
            rule, ErrorCode.LENGTH_VIOLATION, f"field must be at least {limit} characters long"
        )
    if rule == "max_length" and length > limit:
        return _violation(
            rule, ErrorCode.LENGTH_VIOLATION, f"field must be at most {limit} characters long"
        )
    return None


def validate_min_length(value: Any, parameter: str | None) -> Violation | None:
    return _check_length("min_length", value, parameter)


def validate_max_length(value: Any, parameter: str | None) -> Violation | None:
    return _check_length("max_length", value, parameter)


def validate_email(value: Any, parameter: str | None) -> Violation | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return _not_a_string("email")
    if value == "" or EMAIL_PATTERN.fullmatch(value):
        return None
    return _violation("email", ErrorCode.PATTERN_MISMATCH, "field must be a valid email address")


def validate_alpha(value: Any, parameter: str | None) -> Violation | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return _not_a_string("alpha")
    if all(char.isalpha() for char in value):
        return None
    return _violation("alpha", ErrorCode.PATTERN_MISMATCH, "field must contain only letters")


def _is_number_char(char: str) -> bool:
    return unicodedata.category(char).startswith("N")


def validate_alpha_numeric(value: Any, parameter: str | None) -> Violation | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return _not_a_string("alpha_numeric")
    if all(char.isalpha() or _is_number_char(char) for char in value):
        return None
    return _violation(
        "alpha_numeric",
        ErrorCode.PATTERN_MISMATCH,
        "field must contain only letters and numbers",
    )


def is_request_uri(text: str) -> bool:
    """Whether *text* is an absolute URI or an absolute path.

    Examples:
        >>> is_request_uri("https://example.com/a?b=c")
        True
        >>> is_request_uri("/api/items")
        True
        >>> is_request_uri("not-a-url")
        False
    """
    if _URL_FORBIDDEN.search(text):
        return False
    try:
        parts = urlsplit(text)
    except ValueError:
        return False
    if parts.scheme:
        return bool(parts.netloc or parts.path)
    return text.startswith("/")


def validate_url(value: Any, parameter: str | None) -> Violation | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return _not_a_string("url")
    if value == "" or is_request_uri(value):
        return None
    return _violation("url", ErrorCode.PATTERN_MISMATCH, "field must be a valid URL")


def to_strptime_format(layout: str) -> str:
    """Translate a token layout into a ``strptime`` format.

    Formats that already contain ``%`` directives are returned unchanged.

    Examples:
        >>> to_strptime_format("YYYY/MM/DD")
        '%Y/%m/%d'
        >>> to_strptime_format("2006-01-02 15:04")
        '%Y-%m-%d %H:%M'
    """
    if "%" in layout:
        return layout
    return _DATE_TOKEN_PATTERN.sub(lambda m: _DATE_TOKENS[m.group(0)], layout)


def validate_date(value: Any, parameter: str | None) -> Violation | None:
    """Parse against *parameter* (default ``YYYY-MM-DD``)."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        return _not_a_string("date")

    layout = parameter or DEFAULT_DATE_FORMAT
    fmt = to_strptime_format(layout)
    invalid = _violation(
        "date", ErrorCode.PATTERN_MISMATCH, f"field must be a valid date in format {layout}"
    )
    try:
        parsed = datetime.strptime(value, fmt)
    except ValueError:
        return invalid
    # strptime accepts "2024-1-5" for %Y-%m-%d; numeric layouts are fixed-width
    if not _LOOSE_DIRECTIVE.search(fmt) and parsed.strftime(fmt) != value:
        return invalid
    return None


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile and cache a ``regex`` rule pattern."""
    return re.compile(pattern)


def validate_regex(value: Any, parameter: str | None) -> Violation | None:
    """Full-match *value* against the compiled *parameter*."""
    if not parameter:
        return _violation(
            "regex", ErrorCode.INVALID_RULE_PARAMETER, "regex rule requires a pattern"
        )
    try:
        pattern = compile_pattern(parameter)
    except re.error:
        return _violation(
            "regex", ErrorCode.INVALID_RULE_PARAMETER, f"invalid regex pattern: {parameter}"
        )
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        return _not_a_string("regex")
    if pattern.fullmatch(value):
        return None
    return _violation(
        "regex", ErrorCode.PATTERN_MISMATCH, "field does not match required pattern"
    )


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------


def validate_in(value: Any, parameter: str | None) -> Violation | None:
    allowed = list_param(parameter)
    if not allowed:
        return _violation(
            "in", ErrorCode.INVALID_RULE_PARAMETER, "in rule requires a list of values"
        )
    if format_value(value) in allowed:
        return None
    return _violation(
        "in", ErrorCode.NOT_IN_SET, f"field must be one of: {', '.join(allowed)}"
    )


def validate_not_in(value: Any, parameter: str | None) -> Violation | None:
    forbidden = list_param(parameter)
    if not forbidden:
        return _violation(
            "not_in", ErrorCode.INVALID_RULE_PARAMETER, "not_in rule requires a list of values"
        )
    if format_value(value) not in forbidden:
        return None
    return _violation(
        "not_in", ErrorCode.FORBIDDEN_VALUE, f"field must not be one of: {', '.join(forbidden)}"
    )


BUILTIN_PREDICATES = {
    "required": validate_required,
    "email": validate_email,
    "min": validate_min,
    "max": validate_max,
    "min_length": validate_min_length,
    "max_length": validate_max_length,
    "numeric": validate_numeric,
    "alpha": validate_alpha,
    "alpha_numeric": validate_alpha_numeric,
    "url": validate_url,
    "date": validate_date,
    "regex": validate_regex,
    "in": validate_in,
    "not_in": validate_not_in,
}
