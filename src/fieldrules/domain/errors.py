"""Error taxonomy, soft violations, and hard-error exceptions.

Two propagation modes:
- Soft: a :class:`Violation` returned by a predicate.  Collected into the
  report; never stops sibling rules or fields.
- Hard: a :class:`FieldRulesError` subclass raised out of the engine.
  Aborts the current pass immediately.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fieldrules.domain.report import ValidationErrorSet


class ErrorCode(StrEnum):
    """Machine-readable classification for every failure the engine reports."""

    TYPE_MISMATCH = "type_mismatch"
    OUT_OF_RANGE = "out_of_range"
    LENGTH_VIOLATION = "length_violation"
    PATTERN_MISMATCH = "pattern_mismatch"
    NOT_IN_SET = "not_in_set"
    FORBIDDEN_VALUE = "forbidden_value"
    MISSING_REQUIRED = "missing_required"
    INVALID_RULE_PARAMETER = "invalid_rule_parameter"
    UNKNOWN_RULE = "unknown_rule"
    FIELD_MISMATCH = "field_mismatch"
    FIELD_CONFLICT = "field_conflict"
    MISSING_CONTEXT = "missing_context"
    CUSTOM = "custom"


@dataclass(frozen=True)
class Violation:
    """A single soft failure produced by one rule against one value."""

    rule: str
    code: ErrorCode
    message: str


class FieldRulesError(Exception):
    """Base class for hard errors raised by the engine."""

    code: ErrorCode = ErrorCode.CUSTOM


class InvalidRuleParameterError(FieldRulesError, ValueError):
    """A rule parameter could not be parsed (``limit_length:abc``)."""

    code = ErrorCode.INVALID_RULE_PARAMETER

    def __init__(self, rule: str, parameter: str | None, reason: str | None = None) -> None:
        self.rule = rule
        self.parameter = parameter
        msg = reason or f"invalid {rule} rule value: {parameter}"
        super().__init__(msg)


class UnknownRuleError(FieldRulesError, LookupError):
    """A rule name has no registered implementation."""

    code = ErrorCode.UNKNOWN_RULE

    def __init__(self, rule: str, namespace: str) -> None:
        self.rule = rule
        self.namespace = namespace
        super().__init__(f"unknown {namespace} rule: {rule}")


class SanitizationError(FieldRulesError):
    """A field's transform chain failed; the whole sanitize pass is void.

    Earlier fields may already have been rewritten.  Callers must treat the
    record as failed, not partially sanitized.
    """

    def __init__(self, field: str, rule: str, reason: str, code: ErrorCode) -> None:
        self.field = field
        self.rule = rule
        self.code = code
        super().__init__(f"sanitization failed for field '{field}' at rule '{rule}': {reason}")


class RecordTypeError(FieldRulesError, TypeError):
    """The struct-level entry points were handed something that is not a record."""

    code = ErrorCode.TYPE_MISMATCH


class RegistryFrozenError(FieldRulesError, RuntimeError):
    """A rule was registered after the registry started serving records."""


class ValidationFailedError(FieldRulesError):
    """Exception form of a non-empty :class:`ValidationErrorSet`."""

    def __init__(self, errors: ValidationErrorSet) -> None:
        self.errors = errors
        super().__init__(str(errors))
