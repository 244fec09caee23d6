"""Tests for the shared Click command classes."""

from __future__ import annotations

import click
from click.testing import CliRunner

from fieldrules.commands._base import FieldRulesCommand, FieldRulesGroup, RecordCommand


@click.group(cls=FieldRulesGroup)
def demo() -> None:
    pass


@demo.command(cls=RecordCommand, examples=("demo show a.json --schema signup",))
@click.option("--loud", is_flag=True)
def show(payload: str, schema_name: str | None, schema_file: str | None, loud: bool) -> None:
    click.echo(f"{payload}|{schema_name}|{schema_file}|{loud}")


@demo.command()
def plain() -> None:
    click.echo("plain")


class TestRecordCommand:
    def test_record_params_first(self) -> None:
        names = [p.name for p in show.params]
        assert names[:3] == ["payload", "schema_name", "schema_file"]
        assert "loud" in names

    def test_callback_receives_record_params(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(demo, ["show", "-", "--schema-file", "s.toml", "--loud"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "-|None|s.toml|True"

    def test_payload_required(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(demo, ["show"])
        assert result.exit_code == 2
        assert "PAYLOAD" in result.output


class TestExamples:
    def test_lines_prefixed(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(demo, ["show", "--examples"])
        assert result.exit_code == 0
        assert "  $ demo show a.json --schema signup" in result.output

    def test_no_flag_without_examples(self, cli_runner: CliRunner) -> None:
        assert isinstance(plain, FieldRulesCommand)
        assert "--examples" not in cli_runner.invoke(demo, ["plain", "--help"]).output
