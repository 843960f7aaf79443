"""Type & Record — tests for schema definition, parsing and record access.

Tests cover:
    - Parsing valid and invalid maps; errors keyed by field name
    - Absent keys reach converters as UNDEFINED, explicit null as None
    - Undefined results are omitted from attrs() and pick()
    - get()/pick() fail fast on names the Type never declared
    - Duplicate fields and registration after freeze are rejected
    - Nested Types and sequences of nested records
    - Oversized numbers become field errors, never exceptions
    - Re-parsing attrs() through the same Type is stable
"""

from decimal import Decimal

import pytest

from flexmap.core.convert_numeric import (
    boolean, decimal_number, float64, int32, int64,
)
from flexmap.core.convert_sequence import sequence_of_records
from flexmap.core.convert_text import single_line_string, string, uuid_value
from flexmap.core.domain_types import UNDEFINED, ErrorKind
from flexmap.core.enforce_constraints import if_defined, require
from flexmap.core.errors import (
    ConversionError, FieldErrors, SchemaDefinitionError, SliceElementErrors,
    UnknownFieldError,
)
from flexmap.core.schema_type import Field, Type


def _pair_type() -> Type:
    return Type().field("a", require(), int64()).field("b", require(), int64())


# ─── Parsing ─────────────────────────────────────────────────────

def test_parse_valid_input():
    record = _pair_type().parse({"a": 1, "b": 2})
    assert record.get("a") == 1
    assert record.get("b") == 2
    assert record.errors() is None
    assert record.is_valid


def test_parse_collects_conversion_error_under_field_name():
    record = Type().field("age", int64()).parse({"age": "abc"})
    errors = record.errors()
    assert errors is not None
    assert "age" in errors
    assert errors["age"].kind == ErrorKind.INVALID_NUMBER
    assert record.get("age") is None


def test_parse_missing_required_field_is_error():
    record = Type().field("name", require()).parse({"misspelled": "adam"})
    errors = record.errors()
    assert errors is not None
    assert str(errors["name"]) == "must be defined"


def test_parse_collects_every_failing_field():
    record = _pair_type().parse({"a": "x", "b": None})
    errors = record.errors()
    assert len(errors) == 2
    assert str(errors) == "a not a valid number, b cannot be nil"
    assert errors.to_json() == {"a": "not a valid number", "b": "cannot be nil"}


def test_parse_identity_with_no_converters():
    record = Type().field("x").field("y").parse({"x": 42, "y": None})
    assert record.get("x") == 42
    assert record.attrs() == {"x": 42, "y": None}


def test_parse_ignores_unknown_keys():
    record = Type().field("x", int64()).parse({"x": "1", "extra": "ignored"})
    assert record.attrs() == {"x": 1}
    assert record.original == {"x": "1", "extra": "ignored"}


def test_parse_none_means_empty_input():
    record = Type().field("x").parse(None)
    assert record.errors() is None
    assert record.attrs() == {}


def test_parse_rejects_non_mapping():
    with pytest.raises(TypeError):
        Type().field("x").parse(["x"])


def test_parse_is_deterministic():
    type_ = _pair_type()
    first = type_.parse({"a": "1", "b": "z"})
    second = type_.parse({"a": "1", "b": "z"})
    assert first.attrs() == second.attrs()
    assert str(first.errors()) == str(second.errors())


def test_absent_and_null_reach_converters_differently():
    seen = []
    type_ = Type().field("x", lambda v: seen.append(v) or v)
    type_.parse({})
    type_.parse({"x": None})
    assert seen == [UNDEFINED, None]


# ─── Record access ───────────────────────────────────────────────

def test_undefined_fields_are_omitted():
    record = Type().field("a", int64()).field("b", if_defined(int64())).parse({"a": 1})
    assert record.attrs() == {"a": 1}
    assert record.pick("a", "b") == {"a": 1}
    assert record.get("b") is None


def test_pick_returns_requested_subset():
    record = Type().field("a").field("b").field("c").parse({"a": 1, "b": 2, "c": 3})
    assert record.pick("a", "c") == {"a": 1, "c": 3}


def test_pick_unknown_field_fails_fast():
    record = _pair_type().parse({"a": 1, "b": 2})
    with pytest.raises(UnknownFieldError) as exc_info:
        record.pick("a", "b", "z")
    assert exc_info.value.name == "z"
    assert str(exc_info.value) == '"z" is not a field of type'


def test_get_unknown_field_fails_fast():
    record = _pair_type().parse({"a": 1, "b": 2})
    with pytest.raises(UnknownFieldError):
        record.get("z")


def test_attrs_returns_a_copy():
    record = Type().field("a").parse({"a": 1})
    record.attrs()["a"] = 99
    assert record.get("a") == 1


def test_original_is_read_only():
    record = Type().field("a").parse({"a": 1})
    with pytest.raises(TypeError):
        record.original["a"] = 2


def test_single_line_string_field():
    record = Type().field("s", single_line_string()).parse({"s": "a\r\n"})
    assert record.get("s") == "a"


# ─── Definition ──────────────────────────────────────────────────

def test_duplicate_field_is_rejected():
    with pytest.raises(SchemaDefinitionError):
        Type().field("a").field("a", string())


def test_type_freezes_on_first_parse():
    type_ = Type().field("a")
    assert not type_.frozen
    type_.parse({})
    assert type_.frozen
    with pytest.raises(SchemaDefinitionError):
        type_.field("b")


def test_build_defines_then_freezes():
    type_ = Type.build(lambda t: t.field("a", int64()).field("b"))
    assert type_.frozen
    assert type_.field_names == frozenset({"a", "b"})
    assert [f.name for f in type_] == ["a", "b"]
    assert len(type_) == 2


def test_constructor_accepts_fields():
    type_ = Type(Field("a", int64()), Field("b"))
    assert type_.has_field("a")
    assert not type_.has_field("z")


def test_field_is_immutable():
    f = Field("a", int64())
    with pytest.raises(AttributeError):
        f.name = "b"


def test_field_requires_a_name():
    with pytest.raises(SchemaDefinitionError):
        Field("")


def test_field_rejects_non_converters():
    with pytest.raises(TypeError):
        Field("a", 42)


# ─── Nesting ─────────────────────────────────────────────────────

def test_nested_type_converts_map_to_record():
    inner = Type().field("n", require(), int32())
    outer = Type().field("inner", inner)
    record = outer.parse({"inner": {"n": "7"}})
    assert record.get("inner").get("n") == 7


def test_nested_type_errors_are_nested_field_errors():
    inner = Type().field("n", require(), int32())
    outer = Type().field("inner", inner)
    errors = outer.parse({"inner": {"n": "x"}}).errors()
    assert isinstance(errors["inner"], FieldErrors)
    assert errors.to_json() == {"inner": {"n": "not a valid number"}}


def test_nested_type_rejects_non_map():
    with pytest.raises(ConversionError) as exc_info:
        Type().field("n").convert_value("scalar")
    assert exc_info.value.kind == ErrorKind.INVALID_RECORD


def test_sequence_of_nested_records_reports_failing_index():
    item = Type().field("n", require(), int32())
    with pytest.raises(SliceElementErrors) as exc_info:
        sequence_of_records(item).convert_value([{"n": 1}, {"n": "abc"}])
    assert exc_info.value.indexes == [1]
    assert exc_info.value.to_json() == {"1": {"n": "not a valid number"}}


# ─── Totality ────────────────────────────────────────────────────

def test_parse_collects_oversized_integer_as_field_error():
    type_ = Type().field("n", int64())
    for value in ("1" * 5000, Decimal("1E+100000000")):
        errors = type_.parse({"n": value}).errors()
        assert errors is not None
        assert errors["n"].kind == ErrorKind.TOO_LARGE


# ─── Idempotence ─────────────────────────────────────────────────

def test_reparsing_attrs_gives_equivalent_record():
    type_ = (
        Type()
        .field("count", require(), int32())
        .field("ratio", float64())
        .field("price", decimal_number())
        .field("title", single_line_string())
        .field("id", uuid_value())
        .field("active", boolean())
        .field("raw")
    )
    first = type_.parse({
        "count": " 12 ",
        "ratio": "0.25",
        "price": 19.99,
        "title": "  Hello\tworld\r\n",
        "id": "0b6a1c2e-5a3f-4b8d-9c1e-2f3a4b5c6d7e",
        "active": "true",
        "raw": [1, "x"],
    })
    assert first.errors() is None

    second = type_.parse(first.attrs())
    assert second.errors() is None
    assert second.attrs() == first.attrs()
    assert second.get("title") == "Hello world"
    assert second.get("price") == Decimal("19.99")
