"""Click base classes shared by fieldrules commands.

- ``--examples`` prints a command's usage examples and exits, keeping
  ``--help`` short.
- :class:`RecordCommand` carries the parameters every record command takes:
  the ``PAYLOAD`` argument (``-`` for stdin) and the ``--schema`` /
  ``--schema-file`` pair that selects the RecordSchema.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import click

Examples = Sequence[str] | None


def _examples_option(examples: Sequence[str]) -> click.Option:
    """Eager ``--examples`` flag that echoes one invocation per line."""

    def show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Usage examples for {ctx.command_path}:\n")
        for line in examples:
            click.echo(f"  $ {line}")
        ctx.exit(0)

    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=show,
        help="Show usage examples.",
    )


def _record_params() -> list[click.Parameter]:
    return [
        click.Argument(["payload"], metavar="PAYLOAD"),
        click.Option(
            ["--schema", "schema_name"],
            default=None,
            help="Named schema from the [schemas] section of fieldrules.toml.",
        ),
        click.Option(
            ["--schema-file"],
            default=None,
            help="Schema file (TOML, YAML or JSON): field -> rules.",
        ),
    ]


class FieldRulesCommand(click.Command):
    """Command with an optional ``--examples`` flag."""

    def __init__(self, *args: Any, examples: Examples = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = tuple(examples or ())
        if self.examples:
            self.params.append(_examples_option(self.examples))


class RecordCommand(FieldRulesCommand):
    """Command that operates on one record payload checked against a schema.

    The callback receives ``payload``, ``schema_name`` and ``schema_file``
    ahead of its own options.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.params[:0] = _record_params()


class FieldRulesGroup(click.Group):
    """Group with ``--examples`` whose subcommands default to FieldRulesCommand."""

    command_class = FieldRulesCommand

    def __init__(self, *args: Any, examples: Examples = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = tuple(examples or ())
        if self.examples:
            self.params.append(_examples_option(self.examples))
