"""Payload and schema loading for the CLI surface.

Payloads are JSON, YAML or TOML documents holding one record (a table).
YAML is parsed with ruamel.yaml's safe loader; since JSON is a subset of
YAML, stdin input goes through the same loader.
"""

from __future__ import annotations

import json
import sys
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from fieldrules.engine.schema import RecordSchema, schema_from_mapping
from fieldrules.services.result import INVALID_INPUT, UNKNOWN_SCHEMA

if TYPE_CHECKING:
    from fieldrules.config.settings import FieldRulesSettings

STDIN_MARKER = "-"


class InputError(ValueError):
    """A payload or schema could not be loaded.

    ``code`` is the ServiceError code the failure maps to.
    """

    def __init__(self, message: str, code: str = INVALID_INPUT) -> None:
        super().__init__(message)
        self.code = code


def _parse(text: str, suffix: str, origin: str) -> Any:
    try:
        if suffix == ".json":
            return json.loads(text)
        if suffix == ".toml":
            return tomllib.loads(text)
        return YAML(typ="safe").load(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, YAMLError) as exc:
        msg = f"Could not parse {origin}: {exc}"
        raise InputError(msg) from exc


def load_document(source: str | Path) -> dict[str, Any]:
    """Read and parse a mapping document from *source* (a path or ``-``).

    Raises:
        InputError: If the source is unreadable, unparseable, or not a table.
    """
    if str(source) == STDIN_MARKER:
        origin, suffix = "<stdin>", ""
        text = sys.stdin.read()
    else:
        path = Path(source)
        origin, suffix = str(path), path.suffix.lower()
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeError) as exc:
            msg = f"Could not read {origin}: {exc}"
            raise InputError(msg) from exc

    data = _parse(text, suffix, origin)
    if not isinstance(data, Mapping):
        msg = f"{origin} must contain a single table of fields, got {type(data).__name__}"
        raise InputError(msg)
    return dict(data)


def load_payload(source: str | Path) -> dict[str, Any]:
    """Load one record payload."""
    return load_document(source)


def load_schema_file(path: str | Path) -> RecordSchema:
    """Load a declarative schema file: ``{field: chain | {validate, sanitize, alias}}``."""
    spec = load_document(path)
    try:
        return schema_from_mapping(spec)
    except (TypeError, ValueError) as exc:
        msg = f"Invalid schema in {path}: {exc}"
        raise InputError(msg) from exc


def select_schema(
    settings: FieldRulesSettings,
    *,
    name: str | None = None,
    path: str | Path | None = None,
) -> RecordSchema:
    """Resolve the schema named on the command line.

    Raises:
        InputError: If neither or both sources are given, the schema file is
            invalid, or *name* is not configured (code ``UNKNOWN_SCHEMA``).
    """
    if name and path:
        msg = "Use either --schema or --schema-file, not both"
        raise InputError(msg)
    if path:
        return load_schema_file(path)
    if not name:
        msg = "A schema is required: pass --schema NAME or --schema-file PATH"
        raise InputError(msg)
    try:
        return settings.named_schema(name)
    except KeyError:
        known = ", ".join(sorted(settings.schemas)) or "none configured"
        msg = f"Unknown schema: {name!r} (known: {known})"
        raise InputError(msg, code=UNKNOWN_SCHEMA) from None
    except (TypeError, ValueError) as exc:
        msg = f"Invalid schema {name!r}: {exc}"
        raise InputError(msg) from exc
