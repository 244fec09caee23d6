"""Tests for RecordSchema construction, introspection and caching."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel, ConfigDict, Field

from fieldrules.domain.chain import RuleSpec
from fieldrules.domain.errors import RecordTypeError
from fieldrules.engine.schema import (
    RecordSchema,
    SchemaBuilder,
    resolve_schema,
    rules,
    schema_for,
    schema_from_mapping,
)


@dataclass
class Signup:
    username: str = field(
        default="",
        metadata=rules(validate="required|min_length:3", sanitize="trim|lowercase"),
    )
    email: str = field(default="", metadata=rules(validate="required|email", alias="Email"))
    note: str = ""


@dataclass(frozen=True)
class FrozenSignup:
    username: str = field(default="", metadata=rules(validate="required"))


class Profile(BaseModel):
    display_name: str = Field(
        default="",
        json_schema_extra=rules(validate="required", sanitize="trim"),
        serialization_alias="displayName",
    )
    bio: str = ""


class FrozenProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", json_schema_extra=rules(validate="required"))


class TestDataclassIntrospection:
    def test_fields_in_declaration_order(self) -> None:
        schema = schema_for(Signup)
        assert [d.name for d in schema] == ["username", "email", "note"]
        assert schema.record_type is Signup
        assert schema.name == "Signup"

    def test_chains_parsed(self) -> None:
        username = schema_for(Signup).field("username")
        assert username.validate == (RuleSpec("required"), RuleSpec("min_length", "3"))
        assert username.sanitize == (RuleSpec("trim"), RuleSpec("lowercase"))

    def test_alias_becomes_exposed_name(self) -> None:
        schema = schema_for(Signup)
        assert schema.field("email").exposed_name == "Email"
        assert schema.field("Email").name == "email"

    def test_undeclared_field_has_no_chains(self) -> None:
        note = schema_for(Signup).field("note")
        assert note.validate == ()
        assert note.sanitize == ()

    def test_validated_and_sanitized_fields(self) -> None:
        schema = schema_for(Signup)
        assert [d.name for d in schema.validated_fields()] == ["username", "email"]
        assert [d.name for d in schema.sanitized_fields()] == ["username"]

    def test_accessors(self) -> None:
        record = Signup(username="bob")
        descriptor = schema_for(Signup).field("username")
        assert descriptor.get(record) == "bob"
        descriptor.set(record, "alice")
        assert record.username == "alice"

    def test_frozen_dataclass_is_read_only(self) -> None:
        descriptor = schema_for(FrozenSignup).field("username")
        assert not descriptor.writable
        with pytest.raises(RecordTypeError, match="read-only"):
            descriptor.set(FrozenSignup(), "x")


class TestPydanticIntrospection:
    def test_rules_from_json_schema_extra(self) -> None:
        schema = schema_for(Profile)
        descriptor = schema.field("display_name")
        assert descriptor.validate == (RuleSpec("required"),)
        assert descriptor.sanitize == (RuleSpec("trim"),)
        assert descriptor.exposed_name == "displayName"

    def test_setter_writes_attribute(self) -> None:
        profile = Profile(display_name="x")
        schema_for(Profile).field("display_name").set(profile, "y")
        assert profile.display_name == "y"

    def test_frozen_model_is_read_only(self) -> None:
        assert not schema_for(FrozenProfile).field("name").writable


class TestSchemaCache:
    def test_same_instance_returned(self) -> None:
        assert schema_for(Signup) is schema_for(Signup)

    def test_concurrent_first_use_derives_once(self) -> None:
        results: list[RecordSchema] = []

        def worker() -> None:
            results.append(schema_for(Signup))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len({id(s) for s in results}) == 1

    def test_explicit_schema_attribute(self) -> None:
        declared = SchemaBuilder().field("x", validate="required").build()

        class Custom:
            __fieldrules_schema__ = declared

        assert schema_for(Custom) is declared

    def test_unsupported_class(self) -> None:
        class Plain:
            pass

        with pytest.raises(RecordTypeError, match="cannot derive"):
            schema_for(Plain)


class TestSchemaBuilder:
    def test_mapping_schema(self) -> None:
        schema = SchemaBuilder().field("email", validate="email", alias="e-mail").build()
        assert schema.record_type is None
        assert schema.name == "mapping"
        record = {"email": "a@b.co"}
        assert schema.field("e-mail").get(record) == "a@b.co"

    def test_mapping_missing_key_reads_none(self) -> None:
        schema = SchemaBuilder().field("age", validate="min:18").build()
        assert schema.field("age").get({}) is None

    def test_mapping_setter_skips_absent_none(self) -> None:
        schema = SchemaBuilder().field("age", sanitize="trim").build()
        record: dict[str, object] = {}
        schema.field("age").set(record, None)
        assert record == {}
        schema.field("age").set(record, "x")
        assert record == {"age": "x"}

    def test_custom_accessors(self) -> None:
        store: dict[str, str] = {}
        schema = (
            SchemaBuilder(dict)
            .field(
                "token",
                getter=lambda r: r["raw"],
                setter=lambda r, v: store.__setitem__("token", v),
            )
            .build()
        )
        descriptor = schema.field("token")
        assert descriptor.get({"raw": "abc"}) == "abc"
        descriptor.set({}, "def")
        assert store == {"token": "def"}

    def test_duplicate_names_rejected(self) -> None:
        with pytest.raises(ValueError, match="Duplicate"):
            SchemaBuilder().field("a").field("b", alias="a").build()

    def test_view_resolves_both_names(self) -> None:
        schema = SchemaBuilder().field("email", alias="Email").build()
        view = schema.view({"email": "x"})
        assert view["Email"] == "x"
        assert view["email"] == "x"
        assert "email" in view
        assert list(view) == ["Email"]
        assert len(view) == 1


class TestSchemaFromMapping:
    def test_string_is_validate_chain(self) -> None:
        schema = schema_from_mapping({"age": "required|min:18"})
        assert schema.field("age").validate == (RuleSpec("required"), RuleSpec("min", "18"))
        assert schema.field("age").sanitize == ()

    def test_table(self) -> None:
        schema = schema_from_mapping(
            {"email": {"validate": "email", "sanitize": "normalize_email", "alias": "Email"}}
        )
        descriptor = schema.field("Email")
        assert descriptor.sanitize == (RuleSpec("normalize_email"),)

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unknown keys for field 'email': valdate"):
            schema_from_mapping({"email": {"valdate": "email"}})


class TestResolveSchema:
    def test_mapping_needs_schema(self) -> None:
        with pytest.raises(RecordTypeError, match="explicit schema"):
            resolve_schema({"a": 1}, None)

    @pytest.mark.parametrize("record", [None, 42, "text", Signup])
    def test_non_records_rejected(self, record: object) -> None:
        with pytest.raises(RecordTypeError):
            resolve_schema(record, None)

    def test_wrong_type_for_schema(self) -> None:
        with pytest.raises(RecordTypeError, match="expected a Signup record"):
            resolve_schema(FrozenSignup(), schema_for(Signup))

    def test_read_only_mapping_not_writable(self) -> None:
        from types import MappingProxyType

        schema = SchemaBuilder().field("a", sanitize="trim").build()
        resolve_schema(MappingProxyType({"a": " x "}), schema)
        with pytest.raises(RecordTypeError, match="MutableMapping"):
            resolve_schema(MappingProxyType({"a": " x "}), schema, writable=True)
