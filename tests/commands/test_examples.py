"""Tests for --examples flag on CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from fieldrules.cli import cli

# (CLI args, expected keywords in output)
EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["--examples"], ["fieldrules rules", "fieldrules check"]),
    (["check", "--examples"], ["--schema signup", "--schema-file"]),
    (["validate", "--examples"], ["fieldrules validate"]),
    (["sanitize", "--examples"], ["--request"]),
    (["rules", "--examples"], ["--namespace sanitize"]),
]


@pytest.mark.parametrize(("args", "keywords"), EXAMPLES_COMMANDS)
def test_examples_flag(cli_runner: CliRunner, args: list[str], keywords: list[str]) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0, result.output
    assert "Usage examples for" in result.output
    for keyword in keywords:
        assert keyword in result.output


def test_examples_not_in_help_body(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["check", "--help"])
    assert result.exit_code == 0
    assert "--examples" in result.output
    assert "Usage examples for" not in result.output
