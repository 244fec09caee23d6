"""StructEngine: walk a RecordSchema against a record instance.

``validate_record`` visits every field with a validate chain and always
produces the exhaustive report.  ``sanitize_record`` rewrites fields in
place and aborts on the first failing chain.

Both entry points freeze the registry they are given: from the first
processed record on, rule tables are read-only.
"""

from __future__ import annotations

import logging
from typing import Any

from fieldrules.domain.errors import FieldRulesError, RecordTypeError, SanitizationError
from fieldrules.domain.report import ValidationError, ValidationErrorSet
from fieldrules.engine.field import sanitize_field, validate_field
from fieldrules.engine.schema import FieldContext, RecordSchema, resolve_schema
from fieldrules.rules.registry import RuleRegistry

logger = logging.getLogger(__name__)


def validate_record(
    record: Any,
    registry: RuleRegistry,
    schema: RecordSchema | None = None,
) -> ValidationErrorSet:
    """Validate every field of *record* that declares a validate chain.

    Args:
        record: A dataclass or pydantic instance, or a mapping when
            *schema* is given.
        registry: Validate-namespace registry.
        schema: Explicit schema; derived from the record's type when omitted.

    Raises:
        RecordTypeError: If *record* is not a record the schema describes.
    """
    resolved = resolve_schema(record, schema)
    registry.freeze()

    errors = ValidationErrorSet()
    view = resolved.view(record)
    for descriptor in resolved.validated_fields():
        value = descriptor.get(record)
        context = FieldContext(field=descriptor.exposed_name, record=view)
        violations = validate_field(value, descriptor.validate, registry, context=context)
        errors.extend(
            ValidationError.from_violation(descriptor.exposed_name, v, value) for v in violations
        )

    if errors:
        logger.debug(
            "Validation of %s found %d errors in fields %s",
            resolved.name,
            len(errors),
            errors.fields(),
        )
    return errors


def sanitize_record(
    record: Any,
    registry: RuleRegistry,
    schema: RecordSchema | None = None,
) -> None:
    """Rewrite every field of *record* that declares a sanitize chain.

    Raises:
        RecordTypeError: If *record* is not a writable record.
        SanitizationError: On the first field whose chain fails.  Fields
            before it have already been rewritten.
    """
    resolved = resolve_schema(record, schema, writable=True)
    registry.freeze()

    targets = resolved.sanitized_fields()
    read_only = [d.name for d in targets if not d.writable]
    if read_only:
        msg = f"{resolved.name} fields with sanitize rules are read-only: {', '.join(read_only)}"
        raise RecordTypeError(msg)

    for descriptor in targets:
        try:
            value = sanitize_field(descriptor.get(record), descriptor.sanitize, registry)
        except FieldRulesError as exc:
            rule = getattr(exc, "rule", "")
            logger.warning(
                "Sanitization of %s aborted at field %s (rule %s)",
                resolved.name,
                descriptor.exposed_name,
                rule,
            )
            raise SanitizationError(descriptor.exposed_name, rule, str(exc), exc.code) from exc
        descriptor.set(record, value)
