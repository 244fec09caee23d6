"""Commands: check, validate and sanitize a record payload."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import click

from fieldrules.commands._base import RecordCommand

if TYPE_CHECKING:
    from fieldrules.commands._context import AppContext
    from fieldrules.engine.schema import RecordSchema
    from fieldrules.services.records import RecordService
    from fieldrules.services.result import ServiceResult

Operation = Callable[["RecordService", dict[str, Any], "RecordSchema"], "ServiceResult"]



def _run(
    app: AppContext,
    op: str,
    payload: str,
    schema_name: str | None,
    schema_file: str | None,
    operation: Operation,
) -> None:
    """Load payload and schema, then emit *operation*'s result."""
    from fieldrules.services.loader import InputError, load_payload, select_schema
    from fieldrules.services.result import ServiceResult

    try:
        record = load_payload(payload)
        schema = select_schema(app.settings, name=schema_name, path=schema_file)
    except InputError as exc:
        app.emit(ServiceResult.failure(op, exc.code, str(exc)))
        return
    app.emit(operation(app.service, record, schema))


@click.command(
    cls=RecordCommand,
    examples=(
        "fieldrules check signup.json --schema signup",
        "fieldrules check signup.yaml --schema-file schemas/signup.toml",
        "cat signup.json | fieldrules --json check - --schema signup",
    ),
)
@click.pass_obj
def check(app: AppContext, payload: str, schema_name: str | None, schema_file: str | None) -> None:
    """Sanitize PAYLOAD, then validate it (use - for stdin)."""
    _run(app, "check", payload, schema_name, schema_file, lambda svc, r, s: svc.check(r, s))


@click.command(
    cls=RecordCommand,
    examples=(
        "fieldrules validate signup.json --schema signup",
        "fieldrules -q validate signup.json --schema-file signup.yaml",
    ),
)
@click.pass_obj
def validate(
    app: AppContext,
    payload: str,
    schema_name: str | None,
    schema_file: str | None,
) -> None:
    """Validate PAYLOAD as-is, without sanitizing."""
    _run(app, "validate", payload, schema_name, schema_file, lambda svc, r, s: svc.validate(r, s))


@click.command(
    cls=RecordCommand,
    examples=(
        "fieldrules sanitize signup.json --schema signup",
        "fieldrules sanitize comment.json --request",
        "fieldrules --json sanitize - --schema-file signup.toml",
    ),
)
@click.option(
    "--request",
    "request_mode",
    is_flag=True,
    help="Apply [engine] request_chain to every string instead of a schema.",
)
@click.pass_obj
def sanitize(
    app: AppContext,
    payload: str,
    schema_name: str | None,
    schema_file: str | None,
    request_mode: bool,
) -> None:
    """Print a sanitized copy of PAYLOAD."""
    if not request_mode:
        _run(
            app,
            "sanitize",
            payload,
            schema_name,
            schema_file,
            lambda svc, r, s: svc.sanitize(r, s),
        )
        return

    from fieldrules.domain.errors import UnknownRuleError
    from fieldrules.services.factory import build_request_sanitizer
    from fieldrules.services.loader import InputError, load_payload
    from fieldrules.services.result import INVALID_INPUT, ServiceResult

    op = "sanitize_request"
    if schema_name or schema_file:
        app.emit(ServiceResult.failure(op, INVALID_INPUT, "--request does not take a schema"))
        return
    try:
        record = load_payload(payload)
        sanitizer = build_request_sanitizer(app.settings, app.pipeline)
    except InputError as exc:
        app.emit(ServiceResult.failure(op, exc.code, str(exc)))
        return
    except UnknownRuleError as exc:
        app.emit(ServiceResult.failure(op, INVALID_INPUT, f"Invalid [engine] request_chain: {exc}"))
        return
    app.emit(app.service.sanitize_request(record, sanitizer))
