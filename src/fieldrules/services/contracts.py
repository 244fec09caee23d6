"""Typed payload contracts for service and adapter boundaries.

These models validate operation payload shapes before they leave the
service layer so key regressions (for example ``errors`` vs ``items``)
fail fast in tests and during development.
"""

from __future__ import annotations

from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T", bound=BaseModel)


def dump_validated(model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


class ViolationItem(BaseModel):
    """One failed rule on one field."""

    field: str
    message: str
    code: str
    rule: str = ""


class ValidationReportData(BaseModel):
    """Payload contract for ``RecordService.check`` and ``RecordService.validate``."""

    valid: bool
    count: int
    errors: list[ViolationItem]
    record: dict[str, Any]


class SanitizeResultData(BaseModel):
    """Payload contract for ``RecordService.sanitize``."""

    model_config = ConfigDict(extra="forbid")

    fields: list[str]
    record: dict[str, Any]


class SanitizeFailureDetail(BaseModel):
    """Error detail for ``SANITIZE_FAILED``."""

    field: str
    rule: str
    code: str


class RuleItem(BaseModel):
    """One registered rule."""

    name: str
    namespace: Literal["validate", "sanitize"]
    kind: Literal["predicate", "cross_field", "transform"]


class RulesListData(BaseModel):
    """Payload contract for ``RecordService.list_rules``."""

    count: int
    items: list[RuleItem]
