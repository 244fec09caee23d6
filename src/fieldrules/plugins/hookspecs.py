"""Pluggy hook specifications for contributing rules.

Each hook returns ``{rule_name: fn}`` (or None).  Rules are installed into
a pipeline's registries before the first record is processed.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pluggy

PROJECT_NAME = "fieldrules"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)

RuleMap = dict[str, Callable[..., Any]]


class FieldRulesHookSpec:
    """Hook specifications for the fieldrules plugin system."""

    @hookspec
    def register_validate_rules(self) -> RuleMap | None:
        """Return predicates ``(value, parameter) -> Violation | str | bool | None``."""

    @hookspec
    def register_cross_field_rules(self) -> RuleMap | None:
        """Return cross-field predicates ``(value, parameter, context)``."""

    @hookspec
    def register_sanitize_rules(self) -> RuleMap | None:
        """Return transforms ``(value, parameter) -> new value``."""
