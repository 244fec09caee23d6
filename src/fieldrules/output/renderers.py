"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from fieldrules.output.console import create_console, get_output, style_for_namespace

if TYPE_CHECKING:
    from rich.console import Console

    from fieldrules.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        err = result.error
        violations = err.detail.get("errors") if err else None
        if violations and isinstance(violations, list):
            return "\n".join(f"{v.get('field')}: {v.get('message')}" for v in violations)
        msg = err.message if err else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    # Rule listings print names only
    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item.get("name", "")) for item in items if isinstance(item, dict))

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="fr.ok")
    op = Text(f"  {result.op}", style="fr.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="fr.key")
    if isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":"), default=str))
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the meta block (verbose only)."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


def _violation_table(violations: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    """Build a Rich Table of ``{field, message}`` rows in report order."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Field", style="fr.field", no_wrap=True)
    table.add_column("Message")
    if verbose:
        table.add_column("Rule", style="fr.rule")
        table.add_column("Code", style="fr.code")

    for violation in violations:
        row = [str(violation.get("field", "")), str(violation.get("message", ""))]
        if verbose:
            row.extend([str(violation.get("rule", "")), str(violation.get("code", ""))])
        table.add_row(*row)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="fr.error")
    op = Text(f"  {result.op}", style="fr.op")

    violations = err.detail.get("errors") if err else None
    if violations and isinstance(violations, list):
        count = len(violations)
        noun = "error" if count == 1 else "errors"
        console.print(label, op, Text(f" — {count} validation {noun}"))
        console.print(_violation_table(violations, verbose=verbose))
        return

    console.print(label, op, Text(" — "), msg)
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Record renderers ──────────────────────────────────────────────────


def _render_report(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a passing check/validate result."""
    _status_line(console, result)
    meta = result.meta or {}
    if "schema" in meta:
        _field(console, "schema", meta["schema"])
    _field(console, "valid", result.data.get("valid", True))
    if verbose:
        for key, value in result.data.get("record", {}).items():
            _field(console, key, value)
        _render_meta(console, result)


def _render_record(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render sanitize results: the rewritten record."""
    _status_line(console, result)
    for key, value in result.data.get("record", {}).items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


def _render_rules(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the registered rule catalogue as a table."""
    items = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Rule", style="fr.rule", no_wrap=True)
    table.add_column("Namespace")
    table.add_column("Kind")
    for item in items:
        namespace = str(item.get("namespace", ""))
        style = style_for_namespace(namespace)
        table.add_row(
            str(item.get("name", "")),
            Text(namespace, style=style) if style else namespace,
            str(item.get("kind", "")),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} rules")


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "check": _render_report,
    "validate": _render_report,
    "sanitize": _render_record,
    "sanitize_request": _render_record,
    "rules": _render_rules,
}
