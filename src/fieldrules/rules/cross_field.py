"""Builtin cross-field rules: ``confirmed``, ``same``, ``different``.

These receive a :class:`FieldContext` alongside the value so they can read
sibling fields of the record being validated.  Comparison is strict
``==`` with no case folding or type coercion; anything looser belongs in a
custom cross-field rule registered by the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fieldrules.domain.errors import ErrorCode, Violation

if TYPE_CHECKING:
    from fieldrules.engine.schema import FieldContext

CONFIRMATION_SUFFIX = "_confirmation"


def _sibling(rule: str, other: str | None, context: FieldContext) -> tuple[Any, Violation | None]:
    """Resolve *other* in the record, or explain why it cannot be compared."""
    if not other:
        msg = f"{rule} rule requires a field name"
        return None, Violation(rule=rule, code=ErrorCode.INVALID_RULE_PARAMETER, message=msg)
    if other not in context.record:
        msg = f"{rule} rule refers to unknown field: {other}"
        return None, Violation(rule=rule, code=ErrorCode.INVALID_RULE_PARAMETER, message=msg)
    return context.record[other], None


def validate_same(value: Any, parameter: str | None, context: FieldContext) -> Violation | None:
    other_value, problem = _sibling("same", parameter, context)
    if problem is not None:
        return problem
    if value == other_value:
        return None
    return Violation(
        rule="same", code=ErrorCode.FIELD_MISMATCH, message=f"field must match {parameter}"
    )


def validate_confirmed(
    value: Any, parameter: str | None, context: FieldContext
) -> Violation | None:
    """Compare against ``<field>_confirmation`` unless a sibling is named."""
    other = parameter or f"{context.field}{CONFIRMATION_SUFFIX}"
    other_value, problem = _sibling("confirmed", other, context)
    if problem is not None:
        return problem
    if value == other_value:
        return None
    return Violation(
        rule="confirmed",
        code=ErrorCode.FIELD_MISMATCH,
        message="field confirmation does not match",
    )


def validate_different(
    value: Any, parameter: str | None, context: FieldContext
) -> Violation | None:
    other_value, problem = _sibling("different", parameter, context)
    if problem is not None:
        return problem
    if value != other_value:
        return None
    return Violation(
        rule="different",
        code=ErrorCode.FIELD_CONFLICT,
        message=f"field must be different from {parameter}",
    )


BUILTIN_CROSS_FIELD = {
    "confirmed": validate_confirmed,
    "different": validate_different,
    "same": validate_same,
}
