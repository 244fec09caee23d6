"""ValidationError and ValidationErrorSet: the whole-record report.

Ordering follows field declaration order, then rule order within a field.
INVARIANT: The report never depends on the iteration order of an unordered
container, so identical input always yields an identical report.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from fieldrules.domain.errors import ErrorCode, ValidationFailedError, Violation


@dataclass(frozen=True)
class ValidationError:
    """One violation addressed by the field's exposed (wire) name."""

    field: str
    message: str
    value: Any = None
    code: ErrorCode = ErrorCode.CUSTOM
    rule: str = ""

    @classmethod
    def from_violation(cls, field_name: str, violation: Violation, value: Any) -> ValidationError:
        return cls(
            field=field_name,
            message=violation.message,
            value=value,
            code=violation.code,
            rule=violation.rule,
        )

    def __str__(self) -> str:
        return f"validation failed for field '{self.field}': {self.message}"


@dataclass
class ValidationErrorSet:
    """Ordered collection of :class:`ValidationError`.  Empty means valid.

    Created fresh per call and owned by the caller.
    """

    errors: list[ValidationError] = field(default_factory=list)

    def add(
        self,
        field_name: str,
        message: str,
        value: Any = None,
        *,
        code: ErrorCode = ErrorCode.CUSTOM,
        rule: str = "",
    ) -> None:
        """Append a single error."""
        self.errors.append(
            ValidationError(field=field_name, message=message, value=value, code=code, rule=rule)
        )

    def extend(self, errors: Iterable[ValidationError]) -> None:
        self.errors.extend(errors)

    def merge(self, other: ValidationErrorSet) -> ValidationErrorSet:
        """Return a new set with *other*'s errors appended after this one's."""
        return ValidationErrorSet(errors=[*self.errors, *other.errors])

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def fields(self) -> list[str]:
        """Field names with at least one error, in first-seen order."""
        return list(self.by_field())

    def by_field(self) -> dict[str, list[str]]:
        """Map of field -> ordered messages."""
        grouped: dict[str, list[str]] = {}
        for err in self.errors:
            grouped.setdefault(err.field, []).append(err.message)
        return grouped

    def messages_for(self, field_name: str) -> list[str]:
        return [err.message for err in self.errors if err.field == field_name]

    def codes_for(self, field_name: str) -> list[ErrorCode]:
        return [err.code for err in self.errors if err.field == field_name]

    def to_payload(self) -> list[dict[str, str]]:
        """``{field, message}`` pairs in report order, for a 422-style body."""
        return [{"field": err.field, "message": err.message} for err in self.errors]

    def raise_if_invalid(self) -> None:
        """Raise :class:`ValidationFailedError` when the set is non-empty."""
        if self.errors:
            raise ValidationFailedError(self)

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self) -> Iterator[ValidationError]:
        return iter(self.errors)

    def __str__(self) -> str:
        if not self.errors:
            return "no validation errors"
        return "; ".join(str(err) for err in self.errors)
