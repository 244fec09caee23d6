"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs: CLI flags passed by Click
  2. Env vars: ``FIELDRULES_*`` prefix
  3. TOML file: ``fieldrules.toml`` discovered via walk-up
  4. Code defaults: baked into the section models
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from fieldrules.config.discovery import find_config
from fieldrules.config.models import EngineConfig, FieldRuleConfig, PluginsConfig
from fieldrules.engine.schema import RecordSchema, schema_from_mapping


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a discovered ``fieldrules.toml``."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for the TOML path during construction.
_tls = threading.local()


class FieldRulesSettings(BaseSettings):
    """Unified settings for the fieldrules CLI.

    Attributes:
        project_root: Directory holding ``fieldrules.toml`` (or CWD).
        config_path: The config file actually loaded, if any.
        schemas: Named record schemas, ``{name: {field: rules}}``.
            A field's rules are a table or a bare validate chain.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "FIELDRULES_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    engine: EngineConfig = Field(default_factory=EngineConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    schemas: dict[str, dict[str, FieldRuleConfig | str]] = Field(default_factory=dict)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> FieldRulesSettings:
        """Construct settings from a CLI invocation.

        Discovers ``fieldrules.toml`` via walk-up (or explicit *config_path*),
        resolves *project_root* from the config file's directory, and merges
        CLI flags as highest-priority overrides.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(project_root)

        resolved_root = project_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(project_root=resolved_root, config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None

    def named_schema(self, name: str) -> RecordSchema:
        """Build the named schema from the ``[schemas]`` section.

        Raises:
            KeyError: If no schema with that name is configured.
        """
        table = self.schemas[name]
        spec = {
            field_name: entry if isinstance(entry, str) else entry.to_spec()
            for field_name, entry in table.items()
        }
        return schema_from_mapping(spec)

    @property
    def plugin_dir(self) -> Path:
        """Local plugin directory, resolved against the project root."""
        return self.project_root / self.plugins.local_dir
