"""Pipeline: sanitize, then validate, as one operation.

Sanitizing first means validation sees the canonical value: ``min_length``
applies to the trimmed string, not the raw wire value.

Outcomes:
- ``SanitizationError`` (hard): raised; validation never runs.
- ``ValidationErrorSet`` (soft): returned, possibly empty.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from fieldrules.domain.report import ValidationErrorSet
from fieldrules.engine.field import sanitize_field, validate_field
from fieldrules.engine.record import sanitize_record, validate_record
from fieldrules.engine.schema import ChainInput, RecordSchema
from fieldrules.rules.registry import (
    CrossFieldPredicate,
    Namespace,
    RuleRegistry,
    sanitize_registry,
    validate_registry,
)

logger = logging.getLogger(__name__)


def validate_and_sanitize(
    record: Any,
    schema: RecordSchema | None = None,
    *,
    validators: RuleRegistry,
    sanitizers: RuleRegistry,
) -> ValidationErrorSet:
    """Sanitize *record* in place, then validate it.

    Raises:
        RecordTypeError: If *record* is not a record.
        SanitizationError: If any sanitize chain fails; validation is skipped.
    """
    sanitize_record(record, sanitizers, schema)
    return validate_record(record, validators, schema)


class Pipeline:
    """A validate registry and a sanitize registry used together.

    Each Pipeline owns independent registries, so differently configured
    pipelines can coexist in one process.

    Usage::

        pipeline = Pipeline()
        pipeline.register_validator("even", lambda v, _: v % 2 == 0)
        errors = pipeline.validate_and_sanitize(signup)
        if errors:
            return 422, errors.to_payload()
    """

    def __init__(
        self,
        validators: RuleRegistry | None = None,
        sanitizers: RuleRegistry | None = None,
    ) -> None:
        self._validators = validators if validators is not None else validate_registry()
        self._sanitizers = sanitizers if sanitizers is not None else sanitize_registry()
        if self._validators.namespace is not Namespace.VALIDATE:
            msg = "validators must be a validate-namespace registry"
            raise TypeError(msg)
        if self._sanitizers.namespace is not Namespace.SANITIZE:
            msg = "sanitizers must be a sanitize-namespace registry"
            raise TypeError(msg)

    @property
    def validators(self) -> RuleRegistry:
        return self._validators

    @property
    def sanitizers(self) -> RuleRegistry:
        return self._sanitizers

    # ------------------------------------------------------------------
    # Registration (before first use)
    # ------------------------------------------------------------------

    def register_validator(self, name: str, fn: Callable[..., Any]) -> None:
        self._validators.register(name, fn)

    def register_cross_field(self, name: str, fn: CrossFieldPredicate) -> None:
        self._validators.register_cross_field(name, fn)

    def register_sanitizer(self, name: str, fn: Callable[..., Any]) -> None:
        self._sanitizers.register(name, fn)

    # ------------------------------------------------------------------
    # Record-level
    # ------------------------------------------------------------------

    def validate(self, record: Any, schema: RecordSchema | None = None) -> ValidationErrorSet:
        return validate_record(record, self._validators, schema)

    def sanitize(self, record: Any, schema: RecordSchema | None = None) -> None:
        sanitize_record(record, self._sanitizers, schema)

    def validate_and_sanitize(
        self,
        record: Any,
        schema: RecordSchema | None = None,
    ) -> ValidationErrorSet:
        """Sanitize in place, then validate.  See :func:`validate_and_sanitize`."""
        errors = validate_and_sanitize(
            record,
            schema,
            validators=self._validators,
            sanitizers=self._sanitizers,
        )
        logger.debug("Pipeline finished with %d validation errors", len(errors))
        return errors

    # ------------------------------------------------------------------
    # Field-level
    # ------------------------------------------------------------------

    def validate_field(self, value: Any, chain: ChainInput) -> list[str]:
        """Messages for every rule of *chain* that *value* fails."""
        return [v.message for v in validate_field(value, chain, self._validators)]

    def sanitize_field(self, value: Any, chain: ChainInput) -> Any:
        return sanitize_field(value, chain, self._sanitizers)
