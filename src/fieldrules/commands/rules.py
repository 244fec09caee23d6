"""Command: list registered rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from fieldrules.commands._base import FieldRulesCommand

if TYPE_CHECKING:
    from fieldrules.commands._context import AppContext


@click.command(
    cls=FieldRulesCommand,
    examples=(
        "fieldrules rules",
        "fieldrules rules --namespace sanitize",
        "fieldrules -q rules --namespace validate",
    ),
)
@click.option(
    "--namespace",
    type=click.Choice(["validate", "sanitize"]),
    default=None,
    help="Only list rules of one namespace.",
)
@click.pass_obj
def rules(app: AppContext, namespace: str | None) -> None:
    """List builtin and plugin-provided rules."""
    app.emit(app.service.list_rules(namespace))
