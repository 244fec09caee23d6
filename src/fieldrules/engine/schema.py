"""RecordSchema: precomputed field descriptors per record type.

A schema is a table of :class:`FieldDescriptor` entries, each with accessor
and mutator closures plus its validate and sanitize chains.  Schemas come
from three places:

- ``schema_for(cls)`` introspects a dataclass or pydantic model once and
  caches the result.  Chains are declared with :func:`rules` in field
  metadata (``dataclasses.field(metadata=...)`` or
  ``pydantic.Field(json_schema_extra=...)``).
- :class:`SchemaBuilder` for hand-written schemas, including dict records.
- :func:`schema_from_mapping` for declarative ``{field: {validate, ...}}``
  tables loaded from config files.

INVARIANT: A schema is never mutated after construction.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from collections.abc import Callable, Iterable, Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Self

from pydantic import BaseModel

from fieldrules.domain.chain import RuleSpec, parse_chain
from fieldrules.domain.errors import RecordTypeError

logger = logging.getLogger(__name__)

RULES_METADATA_KEY = "fieldrules"
SCHEMA_ATTRIBUTE = "__fieldrules_schema__"
_SPEC_KEYS = frozenset({"validate", "sanitize", "alias"})

Getter = Callable[[Any], Any]
Setter = Callable[[Any, Any], None]
ChainInput = str | Iterable[str | RuleSpec] | None


def rules(
    *,
    validate: ChainInput = None,
    sanitize: ChainInput = None,
    alias: str | None = None,
) -> dict[str, Any]:
    """Build field metadata declaring rule chains and the exposed name.

    Usage::

        @dataclass
        class Signup:
            username: str = field(
                default="",
                metadata=rules(validate="required|min_length:3", sanitize="trim|lowercase"),
            )
    """
    return {RULES_METADATA_KEY: {"validate": validate, "sanitize": sanitize, "alias": alias}}


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldDescriptor:
    """How to read and write one field, and which chains apply to it."""

    name: str
    exposed_name: str
    getter: Getter
    setter: Setter | None = None
    validate: tuple[RuleSpec, ...] = ()
    sanitize: tuple[RuleSpec, ...] = ()

    def get(self, record: Any) -> Any:
        return self.getter(record)

    def set(self, record: Any, value: Any) -> None:
        if self.setter is None:
            msg = f"field {self.name!r} of {type(record).__name__} is read-only"
            raise RecordTypeError(msg)
        self.setter(record, value)

    @property
    def writable(self) -> bool:
        return self.setter is not None


@dataclass(frozen=True)
class RecordSchema:
    """Ordered field descriptors for one record type.

    ``record_type`` is ``None`` for mapping records (dicts decoded from a
    wire payload); otherwise records must be instances of it.
    """

    fields: tuple[FieldDescriptor, ...]
    record_type: type | None = None

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for descriptor in self.fields:
            for key in {descriptor.name, descriptor.exposed_name}:
                if key in seen:
                    msg = f"Duplicate field name in schema: {key!r}"
                    raise ValueError(msg)
            seen.update({descriptor.name, descriptor.exposed_name})

    @cached_property
    def _index(self) -> dict[str, FieldDescriptor]:
        index: dict[str, FieldDescriptor] = {}
        for descriptor in self.fields:
            index[descriptor.name] = descriptor
            index[descriptor.exposed_name] = descriptor
        return index

    @property
    def name(self) -> str:
        return self.record_type.__name__ if self.record_type else "mapping"

    def field(self, name: str) -> FieldDescriptor:
        """Look up a descriptor by internal or exposed name.

        Raises:
            KeyError: If no field has that name.
        """
        return self._index[name]

    def validated_fields(self) -> list[FieldDescriptor]:
        """Descriptors with a non-empty validate chain, in declaration order."""
        return [d for d in self.fields if d.validate]

    def sanitized_fields(self) -> list[FieldDescriptor]:
        """Descriptors with a non-empty sanitize chain, in declaration order."""
        return [d for d in self.fields if d.sanitize]

    def check(self, record: Any, *, writable: bool = False) -> None:
        """Reject anything that is not a record this schema describes.

        Raises:
            RecordTypeError: For the wrong type, a class instead of an
                instance, or a read-only mapping when *writable*.
        """
        if isinstance(record, type):
            msg = f"expected a record instance, got the class {record.__name__}"
            raise RecordTypeError(msg)
        if self.record_type is None:
            expected: type = MutableMapping if writable else Mapping
            if not isinstance(record, expected):
                msg = f"expected a {expected.__name__} record, got {type(record).__name__}"
                raise RecordTypeError(msg)
            return
        if not isinstance(record, self.record_type):
            msg = f"expected a {self.record_type.__name__} record, got {type(record).__name__}"
            raise RecordTypeError(msg)

    def view(self, record: Any) -> RecordView:
        return RecordView(self, record)

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)


class RecordView(Mapping[str, Any]):
    """Read-only view of a record keyed by exposed name.

    Internal names resolve too, so cross-field rules can name a sibling
    either way.
    """

    def __init__(self, schema: RecordSchema, record: Any) -> None:
        self._schema = schema
        self._record = record

    def __getitem__(self, key: str) -> Any:
        return self._schema.field(key).get(self._record)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key in self._schema._index

    def __iter__(self) -> Iterator[str]:
        return (d.exposed_name for d in self._schema.fields)

    def __len__(self) -> int:
        return len(self._schema.fields)


@dataclass(frozen=True)
class FieldContext:
    """What a cross-field rule sees besides the value itself."""

    field: str
    record: Mapping[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def _item_getter(name: str) -> Getter:
    def get(record: Any) -> Any:
        return record.get(name)

    return get


def _item_setter(name: str) -> Setter:
    def set_(record: Any, value: Any) -> None:
        if name not in record and value is None:
            return
        record[name] = value

    return set_


def _attr_getter(name: str) -> Getter:
    def get(record: Any) -> Any:
        return getattr(record, name)

    return get


def _attr_setter(name: str) -> Setter:
    def set_(record: Any, value: Any) -> None:
        setattr(record, name, value)

    return set_


class SchemaBuilder:
    """Fluent builder for hand-written schemas.

    Usage::

        schema = (
            SchemaBuilder()
            .field("email", validate="required|email", sanitize="normalize_email")
            .field("age", validate="min:18")
            .build()
        )

    Without a ``record_type`` the schema reads and writes mapping keys;
    with one it uses attribute access unless explicit accessors are given.
    """

    def __init__(self, record_type: type | None = None, *, read_only: bool = False) -> None:
        self._record_type = record_type
        self._read_only = read_only
        self._fields: list[FieldDescriptor] = []

    def field(
        self,
        name: str,
        *,
        validate: ChainInput = None,
        sanitize: ChainInput = None,
        alias: str | None = None,
        getter: Getter | None = None,
        setter: Setter | None = None,
    ) -> Self:
        """Append a field.  Declaration order is report order."""
        if self._record_type is None:
            default_get, default_set = _item_getter(name), _item_setter(name)
        else:
            default_get, default_set = _attr_getter(name), _attr_setter(name)

        resolved_setter = setter or (None if self._read_only else default_set)
        self._fields.append(
            FieldDescriptor(
                name=name,
                exposed_name=alias or name,
                getter=getter or default_get,
                setter=resolved_setter,
                validate=parse_chain(validate),
                sanitize=parse_chain(sanitize),
            )
        )
        return self

    def build(self) -> RecordSchema:
        return RecordSchema(fields=tuple(self._fields), record_type=self._record_type)


def schema_from_mapping(spec: Mapping[str, Mapping[str, Any] | str]) -> RecordSchema:
    """Build a mapping-record schema from a declarative table.

    Each value is either a validate chain string or a table with any of
    ``validate``, ``sanitize`` and ``alias``.

    Raises:
        ValueError: On unknown keys in a field table.
    """
    builder = SchemaBuilder()
    for name, entry in spec.items():
        if isinstance(entry, str):
            builder.field(name, validate=entry)
            continue
        unknown = set(entry) - _SPEC_KEYS
        if unknown:
            msg = f"Unknown keys for field {name!r}: {', '.join(sorted(unknown))}"
            raise ValueError(msg)
        builder.field(
            name,
            validate=entry.get("validate"),
            sanitize=entry.get("sanitize"),
            alias=entry.get("alias"),
        )
    return builder.build()


# ---------------------------------------------------------------------------
# Introspection + cache
# ---------------------------------------------------------------------------


def _declared(metadata: Mapping[str, Any] | None) -> dict[str, Any]:
    if not metadata:
        return {}
    declared = metadata.get(RULES_METADATA_KEY)
    return dict(declared) if isinstance(declared, Mapping) else {}


def _dataclass_schema(cls: type) -> RecordSchema:
    frozen = cls.__dataclass_params__.frozen  # type: ignore[attr-defined]
    builder = SchemaBuilder(cls, read_only=frozen)
    for f in dataclasses.fields(cls):
        declared = _declared(f.metadata)
        builder.field(
            f.name,
            validate=declared.get("validate"),
            sanitize=declared.get("sanitize"),
            alias=declared.get("alias"),
        )
    return builder.build()


def _pydantic_schema(cls: type[BaseModel]) -> RecordSchema:
    builder = SchemaBuilder(cls, read_only=bool(cls.model_config.get("frozen")))
    for name, info in cls.model_fields.items():
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, Mapping) else None
        declared = _declared(extra)
        builder.field(
            name,
            validate=declared.get("validate"),
            sanitize=declared.get("sanitize"),
            alias=declared.get("alias") or info.serialization_alias or info.alias,
        )
    return builder.build()


def _derive_schema(cls: type) -> RecordSchema:
    declared = getattr(cls, SCHEMA_ATTRIBUTE, None)
    if isinstance(declared, RecordSchema):
        return declared
    if dataclasses.is_dataclass(cls):
        return _dataclass_schema(cls)
    if issubclass(cls, BaseModel):
        return _pydantic_schema(cls)
    msg = (
        f"cannot derive a record schema for {cls.__name__}; "
        "use a dataclass, a pydantic model, or pass a schema explicitly"
    )
    raise RecordTypeError(msg)


_schema_cache: dict[type, RecordSchema] = {}
_schema_lock = threading.Lock()


def schema_for(record_type: type) -> RecordSchema:
    """Return the cached schema for *record_type*, deriving it on first use.

    Safe to call from several threads at once; derivation runs once.

    Raises:
        RecordTypeError: If *record_type* is not a dataclass, a pydantic
            model, or a class carrying ``__fieldrules_schema__``.
    """
    schema = _schema_cache.get(record_type)
    if schema is not None:
        return schema
    with _schema_lock:
        schema = _schema_cache.get(record_type)
        if schema is None:
            schema = _derive_schema(record_type)
            _schema_cache[record_type] = schema
            logger.debug("Derived schema for %s with %d fields", schema.name, len(schema))
    return schema


def clear_schema_cache() -> None:
    """Forget every derived schema (test isolation)."""
    with _schema_lock:
        _schema_cache.clear()


def resolve_schema(
    record: Any,
    schema: RecordSchema | None,
    *,
    writable: bool = False,
) -> RecordSchema:
    """Pick the schema for *record* and check the record against it.

    Raises:
        RecordTypeError: If *record* is not a record, or is a mapping and
            no schema was given.
    """
    if schema is None:
        if isinstance(record, Mapping):
            msg = "mapping records need an explicit schema"
            raise RecordTypeError(msg)
        if record is None or isinstance(record, type):
            msg = f"expected a record instance, got {record!r}"
            raise RecordTypeError(msg)
        schema = schema_for(type(record))
    schema.check(record, writable=writable)
    return schema
