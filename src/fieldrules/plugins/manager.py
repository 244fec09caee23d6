"""Plugin discovery, loading, and rule installation.

Discovery: the ``fieldrules.plugins`` entry-point group via pluggy, plus
local ``*.py`` files from the project's plugin directory.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import pluggy

from fieldrules.plugins.hookspecs import PROJECT_NAME, FieldRulesHookSpec, RuleMap
from fieldrules.rules.registry import RuleKind

if TYPE_CHECKING:
    from fieldrules.rules.registry import RuleRegistry

ENTRY_POINT_GROUP = "fieldrules.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery and installs plugin rules into registries."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(FieldRulesHookSpec)
        self._loaded: bool = False

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Discover plugins from entry points and an optional local directory.

        Returns a list of loaded plugin names.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        if local_dir is not None:
            self._discover_local(local_dir)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Rule installation
    # ------------------------------------------------------------------

    def install_rules(self, validators: RuleRegistry, sanitizers: RuleRegistry) -> list[str]:
        """Register every plugin-provided rule into the given registries.

        Returns warnings for rule maps that could not be collected or rules
        that could not be registered.  Nothing here raises.
        """
        warnings: list[str] = []
        targets: list[tuple[str, RuleRegistry, RuleKind]] = [
            ("register_validate_rules", validators, RuleKind.PREDICATE),
            ("register_cross_field_rules", validators, RuleKind.CROSS_FIELD),
            ("register_sanitize_rules", sanitizers, RuleKind.TRANSFORM),
        ]
        for hook_name, registry, kind in targets:
            for rule_map in self._collect(hook_name, warnings):
                for rule_name, fn in rule_map.items():
                    try:
                        registry.register(rule_name, fn, kind=kind)
                    except (TypeError, ValueError, RuntimeError) as exc:
                        logger.warning("Skipping plugin rule %r: %s", rule_name, exc)
                        warnings.append(f"Skipped plugin rule {rule_name!r}: {exc}")
        return warnings

    def _collect(self, hook_name: str, warnings: list[str]) -> list[RuleMap]:
        try:
            results = getattr(self._pm.hook, hook_name)()
        except Exception:
            logger.warning("Plugin hook %s failed", hook_name, exc_info=True)
            warnings.append(f"Plugin hook {hook_name} failed")
            return []

        maps: list[RuleMap] = []
        # pluggy returns results in LIFO registration order; install FIFO
        for result in reversed(results):
            if result is None:
                continue
            if not isinstance(result, dict):
                warnings.append(f"Plugin hook {hook_name} returned a non-dict result")
                continue
            maps.append(result)
        return maps

    # ------------------------------------------------------------------
    # Local directory discovery
    # ------------------------------------------------------------------

    def _discover_local(self, local_dir: Path) -> None:
        """Load single-file plugins from *local_dir*.

        Each ``*.py`` file (excluding ``_``-prefixed names) is imported.
        Classes defined in it that carry hookimpl-decorated methods are
        instantiated and registered.  A broken file is logged and skipped.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"fieldrules_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    logger.warning("Could not create module spec for %s", py_file)
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                sys.modules.pop(module_name, None)
                continue

            for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name or not self._has_hook_impls(obj):
                    continue
                try:
                    self.register_plugin(obj(), name=f"{module_name}.{obj.__name__}")
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        obj.__name__,
                        py_file,
                        exc_info=True,
                    )

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Whether *cls* has any ``@hookimpl`` methods.

        ``HookimplMarker("fieldrules")`` sets a ``fieldrules_impl`` attribute.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, f"{PROJECT_NAME}_impl", None):
                return True
        return False
