"""RequestSanitizer: blanket sanitization of decoded request payloads.

Unlike the schema-driven record engine, this applies one chain to every
string it finds, recursing into nested mappings and lists.  Useful for
free-form payloads that have no schema.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from fieldrules.domain.chain import RuleSpec, parse_chain
from fieldrules.engine.field import sanitize_field
from fieldrules.rules.registry import RuleRegistry, sanitize_registry

DEFAULT_REQUEST_CHAIN = "trim|normalize_whitespace|escape_html"


class RequestSanitizer:
    """Apply a single sanitize chain to every string in a payload."""

    def __init__(
        self,
        registry: RuleRegistry | None = None,
        chain: str | Sequence[str] = DEFAULT_REQUEST_CHAIN,
    ) -> None:
        self._registry = registry if registry is not None else sanitize_registry()
        self._chain: tuple[RuleSpec, ...] = parse_chain(chain)
        for spec in self._chain:
            self._registry.lookup(spec.name)

    @property
    def chain(self) -> tuple[RuleSpec, ...]:
        return self._chain

    def sanitize_string(self, value: str) -> str:
        return sanitize_field(value, self._chain, self._registry)

    def sanitize_value(self, value: Any) -> Any:
        """Sanitize strings, recurse into mappings and lists, keep the rest."""
        if isinstance(value, str):
            return self.sanitize_string(value)
        if isinstance(value, Mapping):
            return self.sanitize_payload(value)
        if isinstance(value, list):
            return [self.sanitize_value(item) for item in value]
        return value

    def sanitize_payload(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Return a sanitized copy of *data*.  The input is not modified."""
        return {key: self.sanitize_value(value) for key, value in data.items()}

    def sanitize_form(self, data: Mapping[str, Sequence[str]]) -> dict[str, list[str]]:
        """Sanitize multi-valued form data (``key -> [values]``)."""
        return {key: [self.sanitize_string(v) for v in values] for key, values in data.items()}
