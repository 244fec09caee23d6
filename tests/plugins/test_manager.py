"""Tests for PluginManager: registration, hook relay, and rule installation."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pluggy

from fieldrules.domain.errors import Violation
from fieldrules.engine.schema import FieldContext
from fieldrules.plugins.hookspecs import hookimpl
from fieldrules.plugins.manager import PluginManager
from fieldrules.rules.registry import RuleKind, sanitize_registry, validate_registry


class _DummyPlugin:
    @hookimpl
    def register_validate_rules(self) -> None:
        return None


class _RulesPlugin:
    @hookimpl
    def register_validate_rules(self) -> dict[str, Callable[..., Any]]:
        return {"even": lambda value, parameter: value % 2 == 0}

    @hookimpl
    def register_cross_field_rules(self) -> dict[str, Callable[..., Any]]:
        return {"after": self._after}

    @hookimpl
    def register_sanitize_rules(self) -> dict[str, Callable[..., Any]]:
        return {"reverse": lambda value, parameter: value[::-1]}

    @staticmethod
    def _after(value: Any, parameter: str | None, context: FieldContext) -> Violation | None:
        return None


class _OverridePlugin:
    @hookimpl
    def register_validate_rules(self) -> dict[str, Callable[..., Any]]:
        return {"required": lambda value, parameter: None}


class _BrokenNamePlugin:
    @hookimpl
    def register_sanitize_rules(self) -> dict[str, Callable[..., Any]]:
        return {"bad|name": lambda value, parameter: value, "fine": lambda value, parameter: value}


class _RaisingPlugin:
    @hookimpl
    def register_validate_rules(self) -> dict[str, Callable[..., Any]]:
        raise RuntimeError("boom")


class _NonDictPlugin:
    @hookimpl
    def register_sanitize_rules(self) -> list[str]:
        return ["not", "a", "dict"]


class TestPluginManager:
    def test_hook_relay_accessible(self) -> None:
        pm = PluginManager()
        assert hasattr(pm.hook, "register_validate_rules")
        assert hasattr(pm.hook, "register_sanitize_rules")
        assert hasattr(pm.hook, "register_cross_field_rules")

    def test_register_plugin(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_DummyPlugin(), name="dummy")
        assert "dummy" in pm.list_plugin_names()

    def test_register_plugin_default_name(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_DummyPlugin())
        assert "_DummyPlugin" in pm.list_plugin_names()

    def test_unregister_plugin(self) -> None:
        pm = PluginManager()
        plugin = _DummyPlugin()
        pm.register_plugin(plugin, name="dummy")
        pm.unregister(plugin)
        assert "dummy" not in pm.list_plugin_names()

    def test_is_loaded(self) -> None:
        pm = PluginManager()
        assert pm.is_loaded is False
        pm.discover_and_load()
        assert pm.is_loaded is True

    def test_hookimpl_marker_project(self) -> None:
        assert isinstance(hookimpl, pluggy.HookimplMarker)
        assert hookimpl.project_name == "fieldrules"


class TestInstallRules:
    def test_installs_each_kind(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_RulesPlugin())
        validators, sanitizers = validate_registry(), sanitize_registry()

        warnings = pm.install_rules(validators, sanitizers)

        assert warnings == []
        assert validators.lookup("even").kind is RuleKind.PREDICATE
        assert validators.lookup("after").kind is RuleKind.CROSS_FIELD
        assert sanitizers.lookup("reverse").kind is RuleKind.TRANSFORM
        assert "reverse" not in validators

    def test_plugin_overrides_builtin(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_OverridePlugin())
        validators = validate_registry()
        pm.install_rules(validators, sanitize_registry())
        assert validators.lookup("required").fn(None, None) is None

    def test_bad_rule_name_is_warning(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_BrokenNamePlugin())
        sanitizers = sanitize_registry()
        warnings = pm.install_rules(validate_registry(), sanitizers)
        assert len(warnings) == 1
        assert "bad|name" in warnings[0]
        assert "fine" in sanitizers

    def test_raising_hook_is_warning(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_RaisingPlugin())
        pm.register_plugin(_RulesPlugin())
        validators = validate_registry()
        warnings = pm.install_rules(validators, sanitize_registry())
        assert warnings == ["Plugin hook register_validate_rules failed"]
        # Other hooks still ran.
        assert "after" in validators

    def test_non_dict_result_is_warning(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_NonDictPlugin())
        warnings = pm.install_rules(validate_registry(), sanitize_registry())
        assert warnings == ["Plugin hook register_sanitize_rules returned a non-dict result"]

    def test_frozen_registry_is_warning(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_RulesPlugin())
        validators = validate_registry()
        validators.freeze()
        warnings = pm.install_rules(validators, sanitize_registry())
        assert any("even" in w for w in warnings)
        assert "even" not in validators
