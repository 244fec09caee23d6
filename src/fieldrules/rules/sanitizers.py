"""Builtin sanitize transforms.

Each transform receives ``(value, parameter)`` and returns the new value.
Non-string values pass through untouched; lists and tuples of strings are
transformed element-wise.  A transform raises
:class:`InvalidRuleParameterError` when its parameter is unusable, whatever
the value.

INVARIANT: ``trim``, ``lowercase``, ``strip_html`` and
``normalize_whitespace`` are idempotent.
"""

from __future__ import annotations

import html
import re
import unicodedata
from collections.abc import Callable
from functools import wraps
from typing import Any

from fieldrules.rules.coerce import int_param

_TAG = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"\s+")
_SPECIAL_CHARS = re.compile(r"[^a-zA-Z0-9\s]")
_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")
_NON_DIGIT = re.compile(r"[^0-9]")
_SLUG_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_SLUG_SEPARATORS = re.compile(r"[\s_-]+")

# Emoji, pictograph, dingbat, flag and joiner code points.
_EMOJI_RANGES: tuple[tuple[int, int], ...] = (
    (0x1F600, 0x1F64F),
    (0x1F300, 0x1F5FF),
    (0x1F680, 0x1F6FF),
    (0x1F1E0, 0x1F1FF),
    (0x2600, 0x26FF),
    (0x2700, 0x27BF),
    (0xFE00, 0xFE0F),
    (0x1F900, 0x1F9FF),
    (0x1F018, 0x1F270),
    (0x200C, 0x200D),
)

StringTransform = Callable[[str, str | None], str]
FieldTransform = Callable[[Any, str | None], Any]
ParameterCheck = Callable[[str | None], Any]


def string_transform(
    fn: StringTransform | None = None,
    *,
    check: ParameterCheck | None = None,
) -> Any:
    """Lift a ``str -> str`` transform to any field value.

    *check* runs on the parameter before the value is inspected, so a bad
    parameter fails even when the field holds no string.

    Usage::

        @string_transform
        def sanitize_trim(value, parameter): ...

        @string_transform(check=_length_limit)
        def sanitize_limit_length(value, parameter): ...
    """
    if fn is None:
        return lambda inner: _lift(inner, check)
    return _lift(fn, check)


def _lift(fn: StringTransform, check: ParameterCheck | None) -> FieldTransform:
    @wraps(fn)
    def wrapper(value: Any, parameter: str | None) -> Any:
        if check is not None:
            check(parameter)
        if isinstance(value, str):
            return fn(value, parameter)
        if isinstance(value, (list, tuple)):
            mapped = [fn(item, parameter) if isinstance(item, str) else item for item in value]
            return type(value)(mapped)
        return value

    return wrapper


def _is_emoji(char: str) -> bool:
    point = ord(char)
    return any(low <= point <= high for low, high in _EMOJI_RANGES)


@string_transform
def sanitize_trim(value: str, parameter: str | None) -> str:
    return value.strip()


@string_transform
def sanitize_lowercase(value: str, parameter: str | None) -> str:
    return value.lower()


@string_transform
def sanitize_uppercase(value: str, parameter: str | None) -> str:
    return value.upper()


@string_transform
def sanitize_titlecase(value: str, parameter: str | None) -> str:
    return value.title()


@string_transform
def sanitize_escape_html(value: str, parameter: str | None) -> str:
    return html.escape(value)


@string_transform
def sanitize_unescape_html(value: str, parameter: str | None) -> str:
    return html.unescape(value)


@string_transform
def sanitize_strip_html(value: str, parameter: str | None) -> str:
    """Drop anything that looks like a tag.  Not an HTML parser."""
    return _TAG.sub("", value)


@string_transform
def sanitize_strip_whitespace(value: str, parameter: str | None) -> str:
    return _WHITESPACE.sub("", value)


@string_transform
def sanitize_normalize_whitespace(value: str, parameter: str | None) -> str:
    """Collapse whitespace runs to one space, then trim."""
    return _WHITESPACE.sub(" ", value.strip())


@string_transform
def sanitize_remove_special_chars(value: str, parameter: str | None) -> str:
    return _SPECIAL_CHARS.sub("", value)


@string_transform
def sanitize_keep_alphanumeric(value: str, parameter: str | None) -> str:
    return _NON_ALPHANUMERIC.sub("", value)


@string_transform
def sanitize_normalize_email(value: str, parameter: str | None) -> str:
    return value.lower().strip()


@string_transform
def sanitize_normalize_phone(value: str, parameter: str | None) -> str:
    return _NON_DIGIT.sub("", value)


@string_transform
def sanitize_slug(value: str, parameter: str | None) -> str:
    """URL slug: ``"Hello World!"`` -> ``"hello-world"``."""
    text = _SLUG_DISALLOWED.sub("", value.lower())
    text = _SLUG_SEPARATORS.sub("-", text)
    return text.strip("-")


def _length_limit(parameter: str | None) -> int | None:
    if parameter is None or parameter == "":
        return None
    return int_param("limit_length", parameter, minimum=0)


@string_transform(check=_length_limit)
def sanitize_limit_length(value: str, parameter: str | None) -> str:
    """Truncate to at most N UTF-8 bytes without splitting a character.

    No parameter means no limit.  A non-integer or negative parameter raises
    :class:`InvalidRuleParameterError`.
    """
    limit = _length_limit(parameter)
    if limit is None:
        return value
    encoded = value.encode("utf-8")
    if len(encoded) <= limit:
        return value
    return encoded[:limit].decode("utf-8", errors="ignore")


@string_transform
def sanitize_remove_emojis(value: str, parameter: str | None) -> str:
    """Drop symbol-category characters and emoji code points."""
    return "".join(
        char
        for char in value
        if not unicodedata.category(char).startswith("S") and not _is_emoji(char)
    )


@string_transform
def sanitize_normalize_unicode(value: str, parameter: str | None) -> str:
    """NFKC-normalize and lowercase."""
    return unicodedata.normalize("NFKC", value).lower()


BUILTIN_TRANSFORMS = {
    "trim": sanitize_trim,
    "lowercase": sanitize_lowercase,
    "uppercase": sanitize_uppercase,
    "titlecase": sanitize_titlecase,
    "escape_html": sanitize_escape_html,
    "unescape_html": sanitize_unescape_html,
    "strip_html": sanitize_strip_html,
    "strip_whitespace": sanitize_strip_whitespace,
    "normalize_whitespace": sanitize_normalize_whitespace,
    "remove_special_chars": sanitize_remove_special_chars,
    "keep_alphanumeric": sanitize_keep_alphanumeric,
    "normalize_email": sanitize_normalize_email,
    "normalize_phone": sanitize_normalize_phone,
    "slug": sanitize_slug,
    "limit_length": sanitize_limit_length,
    "remove_emojis": sanitize_remove_emojis,
    "normalize_unicode": sanitize_normalize_unicode,
}
