"""Tests for the format_result dispatcher and OutputSettings."""

from __future__ import annotations

import json

from fieldrules.output.formatters import OutputSettings, format_result
from fieldrules.services.result import VALIDATION_FAILED, ServiceError, ServiceResult


def _ok(op: str = "check", **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _invalid() -> ServiceResult:
    errors = [{"field": "age", "message": "field must be at least 18", "code": "out_of_range"}]
    return ServiceResult(
        ok=False,
        op="check",
        error=ServiceError(code=VALIDATION_FAILED, message="bad", detail={"errors": errors}),
    )


class TestOutputSettings:
    def test_defaults(self) -> None:
        s = OutputSettings()
        assert s.json_output is False
        assert s.quiet is False
        assert s.verbose is False


class TestFormatResult:
    def test_json_mode(self) -> None:
        output = format_result(_ok(valid=True), settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["ok"] is True
        assert data["data"]["valid"] is True

    def test_json_error_keeps_violations(self) -> None:
        output = format_result(_invalid(), settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["error"]["code"] == VALIDATION_FAILED
        assert data["error"]["detail"]["errors"][0]["field"] == "age"

    def test_json_wins_over_quiet(self) -> None:
        output = format_result(_ok(), settings=OutputSettings(json_output=True, quiet=True))
        assert json.loads(output)["op"] == "check"

    def test_quiet_mode(self) -> None:
        output = format_result(_invalid(), settings=OutputSettings(quiet=True))
        assert output == "age: field must be at least 18"

    def test_default_is_rich(self) -> None:
        output = format_result(_ok(valid=True))
        assert output.startswith("OK")
