"""Rich Console factory and theme for fieldrules output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

FIELDRULES_THEME = Theme(
    {
        "fr.ok": "bold green",
        "fr.error": "bold red",
        "fr.warning": "bold yellow",
        "fr.op": "bold cyan",
        "fr.key": "dim",
        "fr.field": "bold blue",
        "fr.rule": "magenta",
        "fr.code": "dim",
        "fr.ns.validate": "green",
        "fr.ns.sanitize": "yellow",
    }
)

_NAMESPACE_STYLES: dict[str, str] = {
    "validate": "fr.ns.validate",
    "sanitize": "fr.ns.sanitize",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=FIELDRULES_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_namespace(namespace: str) -> str:
    """Return the Rich style name for a rule namespace."""
    return _NAMESPACE_STYLES.get(namespace, "")
