"""Root CLI group for fieldrules with global flags and command registration."""

from __future__ import annotations

import click

from fieldrules import __version__
from fieldrules.commands import register_commands
from fieldrules.commands._base import FieldRulesGroup
from fieldrules.commands._context import AppContext
from fieldrules.config.settings import FieldRulesSettings


@click.group(
    cls=FieldRulesGroup,
    invoke_without_command=True,
    examples=(
        "fieldrules rules",
        "fieldrules check signup.json --schema signup",
        "fieldrules --json -c ./fieldrules.toml validate signup.yaml --schema signup",
    ),
)
@click.version_option(version=__version__, prog_name="fieldrules")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """fieldrules: sanitize and validate records from rule chains."""
    ctx.ensure_object(dict)
    settings = FieldRulesSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
