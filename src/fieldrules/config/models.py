"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, fieldrules.toml only contains
overrides and the named schemas a project wants to check from the CLI.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from fieldrules.engine.request import DEFAULT_REQUEST_CHAIN


class EngineConfig(BaseModel):
    """[engine] section."""

    model_config = {"frozen": True}

    request_chain: str = DEFAULT_REQUEST_CHAIN


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".fieldrules/plugins"


class FieldRuleConfig(BaseModel):
    """One ``[schemas.<name>.<field>]`` table."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    # "validate" would shadow BaseModel.validate
    validate_chain: str | list[str] | None = Field(default=None, alias="validate")
    sanitize: str | list[str] | None = None
    alias: str | None = None

    def to_spec(self) -> dict[str, str | list[str]]:
        """Shape expected by :func:`fieldrules.engine.schema.schema_from_mapping`."""
        spec: dict[str, str | list[str]] = {}
        if self.validate_chain is not None:
            spec["validate"] = self.validate_chain
        if self.sanitize is not None:
            spec["sanitize"] = self.sanitize
        if self.alias is not None:
            spec["alias"] = self.alias
        return spec
