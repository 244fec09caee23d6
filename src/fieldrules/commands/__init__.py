"""Subcommand modules for fieldrules.

Provides register_commands() which uses deferred imports to keep
``fieldrules --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from fieldrules.commands.records import check, sanitize, validate
    from fieldrules.commands.rules import rules

    cli.add_command(check)
    cli.add_command(validate)
    cli.add_command(sanitize)
    cli.add_command(rules)
