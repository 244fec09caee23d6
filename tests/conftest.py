"""Shared pytest fixtures for fieldrules tests."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from fieldrules.config.discovery import CONFIG_ENV_VAR, CONFIG_FILENAME
from fieldrules.engine.pipeline import Pipeline
from fieldrules.engine.schema import RecordSchema, SchemaBuilder, clear_schema_cache
from fieldrules.rules.registry import RuleRegistry, sanitize_registry, validate_registry

SIGNUP_TOML = """\
[plugins]
enabled = false

[schemas.signup.username]
validate = "required|min_length:3|alpha_numeric"
sanitize = "trim|lowercase"

[schemas.signup.email]
validate = "required|email"
sanitize = "normalize_email"

[schemas.signup.age]
validate = "min:18"

[schemas.signup.password]
validate = "required|confirmed"

[schemas.signup.password_confirmation]
validate = "required"
"""


@pytest.fixture(autouse=True)
def _isolated_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Reset process-wide state touched by the engine and the CLI."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    package_level = logging.getLogger("fieldrules").level
    clear_schema_cache()
    yield
    clear_schema_cache()
    root.handlers = original_handlers
    root.setLevel(original_level)
    logging.getLogger("fieldrules").setLevel(package_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def validators() -> RuleRegistry:
    """Fresh validate registry with the builtin catalogue."""
    return validate_registry()


@pytest.fixture
def sanitizers() -> RuleRegistry:
    """Fresh sanitize registry with the builtin catalogue."""
    return sanitize_registry()


@pytest.fixture
def pipeline() -> Pipeline:
    return Pipeline()


@pytest.fixture
def signup_schema() -> RecordSchema:
    """Mapping schema mirroring the ``signup`` schema in SIGNUP_TOML."""
    return (
        SchemaBuilder()
        .field(
            "username",
            validate="required|min_length:3|alpha_numeric",
            sanitize="trim|lowercase",
        )
        .field("email", validate="required|email", sanitize="normalize_email")
        .field("age", validate="min:18")
        .field("password", validate="required|confirmed")
        .field("password_confirmation", validate="required")
        .build()
    )


@pytest.fixture
def project_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary project with a fieldrules.toml, used as CWD.

    Plugins are disabled so local plugin files from the host never leak in.
    """
    (tmp_path / CONFIG_FILENAME).write_text(SIGNUP_TOML, encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_payload(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a JSON payload into tmp_path and returning its path."""

    def _write(data: dict[str, Any], name: str = "payload.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
