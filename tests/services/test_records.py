"""Tests for RecordService."""

from __future__ import annotations

import pytest

from fieldrules.engine.pipeline import Pipeline
from fieldrules.engine.request import RequestSanitizer
from fieldrules.engine.schema import RecordSchema, SchemaBuilder
from fieldrules.services.records import REQUEST_FIELD, RecordService
from fieldrules.services.result import (
    INVALID_INPUT,
    SANITIZE_FAILED,
    VALIDATION_FAILED,
)

VALID = {
    "username": "  Alice42 ",
    "email": " ALICE@EXAMPLE.COM ",
    "age": 30,
    "password": "pw",
    "password_confirmation": "pw",
}


@pytest.fixture
def service(pipeline: Pipeline) -> RecordService:
    return RecordService(pipeline)


class TestCheck:
    def test_valid_payload(self, service: RecordService, signup_schema: RecordSchema) -> None:
        result = service.check(VALID, signup_schema)
        assert result.ok
        assert result.op == "check"
        assert result.data["valid"] is True
        assert result.data["count"] == 0
        assert result.data["record"]["username"] == "alice42"
        assert result.data["record"]["email"] == "alice@example.com"
        assert result.meta == {"schema": "mapping", "fields": 5}

    def test_input_not_modified(
        self, service: RecordService, signup_schema: RecordSchema
    ) -> None:
        payload = dict(VALID)
        service.check(payload, signup_schema)
        assert payload == VALID

    def test_validation_failure(self, service: RecordService, signup_schema: RecordSchema) -> None:
        result = service.check({**VALID, "username": " ab ", "age": 12}, signup_schema)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == VALIDATION_FAILED
        errors = result.error.detail["errors"]
        assert [e["field"] for e in errors] == ["username", "age"]
        assert errors[0] == {
            "field": "username",
            "message": "field must be at least 3 characters long",
            "code": "length_violation",
            "rule": "min_length",
        }
        assert result.error.message == (
            "validation failed for field 'username': field must be at least 3 characters long; "
            "validation failed for field 'age': field must be at least 18"
        )

    def test_huge_int_is_compared_not_raised(
        self, service: RecordService, signup_schema: RecordSchema
    ) -> None:
        assert service.check({**VALID, "age": 10**400}, signup_schema).ok
        result = service.check({**VALID, "age": -(10**400)}, signup_schema)
        assert result.error is not None
        assert result.error.detail["errors"][0]["message"] == "field must be at least 18"

    def test_sanitize_failure_is_opaque(self, service: RecordService) -> None:
        schema = SchemaBuilder().field("bio", sanitize="limit_length:x").build()
        result = service.check({"bio": "text"}, schema)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == SANITIZE_FAILED
        assert "bio" not in result.error.message
        assert result.error.detail["field"] == "bio"
        assert result.error.detail["rule"] == "limit_length"
        assert result.error.detail["code"] == "invalid_rule_parameter"


class TestValidate:
    def test_does_not_sanitize(self, service: RecordService, signup_schema: RecordSchema) -> None:
        result = service.validate(VALID, signup_schema)
        assert not result.ok
        assert result.error is not None
        fields = [e["field"] for e in result.error.detail["errors"]]
        # Raw "  Alice42 " fails alpha_numeric; raw email fails the pattern.
        assert fields == ["username", "email"]


class TestSanitize:
    def test_returns_sanitized_copy(
        self, service: RecordService, signup_schema: RecordSchema
    ) -> None:
        result = service.sanitize(VALID, signup_schema)
        assert result.ok
        assert result.data["fields"] == ["username", "email"]
        assert result.data["record"]["username"] == "alice42"
        assert result.data["record"]["age"] == 30

    def test_failure(self, service: RecordService) -> None:
        schema = SchemaBuilder().field("a", sanitize="foobar").build()
        result = service.sanitize({"a": "x"}, schema)
        assert result.error is not None
        assert result.error.code == SANITIZE_FAILED
        assert result.error.detail["code"] == "unknown_rule"

    def test_record_type_error(self, service: RecordService) -> None:
        class Other:
            pass

        other_schema = SchemaBuilder(Other).field("a", sanitize="trim").build()
        result = service.sanitize({"a": "x"}, other_schema)
        assert result.error is not None
        assert result.error.code == INVALID_INPUT


class TestSanitizeRequest:
    def test_blanket_chain(self, service: RecordService) -> None:
        result = service.sanitize_request(
            {"comment": "  <b>hi</b>  ", "n": 1}, RequestSanitizer()
        )
        assert result.ok
        assert result.data["record"] == {"comment": "&lt;b&gt;hi&lt;/b&gt;", "n": 1}
        assert result.meta == {"chain": "trim|normalize_whitespace|escape_html"}

    def test_bad_parameter(self, service: RecordService) -> None:
        result = service.sanitize_request({"a": "text"}, RequestSanitizer(chain="limit_length:x"))
        assert result.error is not None
        assert result.error.code == SANITIZE_FAILED
        assert result.error.detail["field"] == REQUEST_FIELD


class TestListRules:
    def test_all_rules(self, service: RecordService) -> None:
        result = service.list_rules()
        assert result.ok
        items = result.data["items"]
        assert result.data["count"] == len(items)
        namespaces = [i["namespace"] for i in items]
        assert namespaces == sorted(namespaces, key=lambda ns: ns != "validate")
        assert {"name": "confirmed", "namespace": "validate", "kind": "cross_field"} in items
        assert {"name": "slug", "namespace": "sanitize", "kind": "transform"} in items

    def test_filter_namespace(self, service: RecordService) -> None:
        result = service.list_rules("sanitize")
        assert {i["namespace"] for i in result.data["items"]} == {"sanitize"}

    def test_plugin_warnings_carried(self, pipeline: Pipeline) -> None:
        result = RecordService(pipeline, warnings=["Plugin hook x failed"]).list_rules()
        assert result.warnings == ["Plugin hook x failed"]
