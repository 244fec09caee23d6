"""RecordService: sanitize and validate decoded payloads.

Maps engine outcomes onto ServiceResult:
- non-empty ValidationErrorSet -> ``VALIDATION_FAILED`` with every
  ``{field, message}`` pair in report order.
- SanitizationError -> ``SANITIZE_FAILED``, a single opaque failure whose
  detail names the field and rule.
- RecordTypeError / unknown request rules -> ``INVALID_INPUT``.

Payloads are deep-copied; the caller's mapping is never modified.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from fieldrules.domain.errors import FieldRulesError, RecordTypeError, SanitizationError
from fieldrules.rules.registry import Namespace
from fieldrules.services.contracts import (
    RulesListData,
    SanitizeFailureDetail,
    SanitizeResultData,
    ValidationReportData,
    dump_validated,
)
from fieldrules.services.result import (
    INVALID_INPUT,
    SANITIZE_FAILED,
    VALIDATION_FAILED,
    ServiceError,
    ServiceResult,
)

if TYPE_CHECKING:
    from fieldrules.domain.report import ValidationErrorSet
    from fieldrules.engine.pipeline import Pipeline
    from fieldrules.engine.request import RequestSanitizer
    from fieldrules.engine.schema import RecordSchema

logger = logging.getLogger(__name__)

# Field name reported when the blanket request chain fails
REQUEST_FIELD = "<request>"


class RecordService:
    """Run a Pipeline over record payloads.

    Usage::

        svc = RecordService(pipeline)
        result = svc.check({"email": " A@B.COM "}, schema)
        if not result.ok:
            print(result.error.detail["errors"])
    """

    def __init__(self, pipeline: Pipeline, *, warnings: list[str] | None = None) -> None:
        self._pipeline = pipeline
        # Carried onto every result (plugin warnings collected at build time)
        self._warnings = list(warnings or [])

    # ------------------------------------------------------------------
    # Record operations
    # ------------------------------------------------------------------

    def check(self, payload: Mapping[str, Any], schema: RecordSchema) -> ServiceResult:
        """Sanitize a copy of *payload*, then validate it."""
        op = "check"
        record = copy.deepcopy(dict(payload))
        try:
            errors = self._pipeline.validate_and_sanitize(record, schema)
        except SanitizationError as exc:
            return self._sanitize_failure(op, exc)
        except RecordTypeError as exc:
            return ServiceResult.failure(op, INVALID_INPUT, str(exc), warnings=self._warnings)
        return self._report(op, errors, record, schema)

    def validate(self, payload: Mapping[str, Any], schema: RecordSchema) -> ServiceResult:
        """Validate *payload* as-is, without sanitizing."""
        op = "validate"
        record = copy.deepcopy(dict(payload))
        try:
            errors = self._pipeline.validate(record, schema)
        except RecordTypeError as exc:
            return ServiceResult.failure(op, INVALID_INPUT, str(exc), warnings=self._warnings)
        return self._report(op, errors, record, schema)

    def sanitize(self, payload: Mapping[str, Any], schema: RecordSchema) -> ServiceResult:
        """Return a sanitized copy of *payload*."""
        op = "sanitize"
        record = copy.deepcopy(dict(payload))
        try:
            self._pipeline.sanitize(record, schema)
        except SanitizationError as exc:
            return self._sanitize_failure(op, exc)
        except RecordTypeError as exc:
            return ServiceResult.failure(op, INVALID_INPUT, str(exc), warnings=self._warnings)

        data = dump_validated(
            SanitizeResultData,
            {"fields": [d.exposed_name for d in schema.sanitized_fields()], "record": record},
        )
        return ServiceResult(
            ok=True,
            op=op,
            data=data,
            warnings=self._warnings,
            meta={"schema": schema.name},
        )

    def sanitize_request(
        self,
        payload: Mapping[str, Any],
        sanitizer: RequestSanitizer,
    ) -> ServiceResult:
        """Apply the blanket request chain to every string in *payload*."""
        op = "sanitize_request"
        try:
            record = sanitizer.sanitize_payload(payload)
        except FieldRulesError as exc:
            wrapped = SanitizationError(REQUEST_FIELD, getattr(exc, "rule", ""), str(exc), exc.code)
            return self._sanitize_failure(op, wrapped)

        return ServiceResult(
            ok=True,
            op=op,
            data={"record": record},
            warnings=self._warnings,
            meta={"chain": "|".join(str(spec) for spec in sanitizer.chain)},
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def list_rules(self, namespace: Namespace | str | None = None) -> ServiceResult:
        """List registered rules, validate namespace first."""
        op = "rules"
        registries = [self._pipeline.validators, self._pipeline.sanitizers]
        if namespace is not None:
            wanted = Namespace(namespace)
            registries = [r for r in registries if r.namespace is wanted]

        items: list[dict[str, str]] = []
        for registry in registries:
            for name in registry.names():
                rule = registry.lookup(name)
                items.append(
                    {"name": name, "namespace": registry.namespace.value, "kind": rule.kind.value}
                )

        data = dump_validated(RulesListData, {"count": len(items), "items": items})
        return ServiceResult(ok=True, op=op, data=data, warnings=self._warnings)

    # ------------------------------------------------------------------
    # Result builders
    # ------------------------------------------------------------------

    def _report(
        self,
        op: str,
        errors: ValidationErrorSet,
        record: dict[str, Any],
        schema: RecordSchema,
    ) -> ServiceResult:
        items = [
            {"field": e.field, "message": e.message, "code": str(e.code), "rule": e.rule}
            for e in errors
        ]
        data = dump_validated(
            ValidationReportData,
            {"valid": errors.is_valid, "count": len(items), "errors": items, "record": record},
        )
        meta = {"schema": schema.name, "fields": len(schema)}
        if errors.is_valid:
            return ServiceResult(ok=True, op=op, data=data, warnings=self._warnings, meta=meta)

        logger.debug("%s found %d validation errors", op, len(items))
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code=VALIDATION_FAILED, message=str(errors), detail=data),
            warnings=self._warnings,
            meta=meta,
        )

    def _sanitize_failure(self, op: str, exc: SanitizationError) -> ServiceResult:
        detail = dump_validated(
            SanitizeFailureDetail,
            {"field": exc.field, "rule": exc.rule, "code": str(exc.code)},
        )
        detail["reason"] = str(exc)
        return ServiceResult.failure(
            op,
            SANITIZE_FAILED,
            "Sanitization failed; check the sanitize rule configuration",
            detail=detail,
            warnings=self._warnings,
        )
