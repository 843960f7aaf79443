"""Sequence Converters — tests for element-wise conversion and nested record lists.

Tests cover:
    - sequence_of converts every element and reports every failing index
    - Strings and mappings are not sequences
    - sequence_of_records parses maps, rejects non-maps, nests FieldErrors per index
"""

import pytest

from flexmap.core.convert_numeric import int32, int64
from flexmap.core.convert_sequence import sequence_of, sequence_of_records
from flexmap.core.domain_types import UNDEFINED, ErrorKind
from flexmap.core.enforce_constraints import require
from flexmap.core.errors import (
    ConversionError, FieldErrors, SchemaDefinitionError, SliceElementErrors,
)
from flexmap.core.record import Record
from flexmap.core.schema_type import Type


# ─── sequence_of ─────────────────────────────────────────────────

def test_sequence_of_converts_each_element():
    assert sequence_of(int64()).convert_value(["1", 2, " 3 "]) == [1, 2, 3]


def test_sequence_of_accepts_tuples():
    assert sequence_of(int64()).convert_value(("4",)) == [4]


def test_sequence_of_reports_all_failing_indexes():
    with pytest.raises(SliceElementErrors) as exc_info:
        sequence_of(int64()).convert_value(["1", "x", "2", "y"])
    errors = exc_info.value
    assert errors.indexes == [1, 3]
    assert len(errors) == 2
    assert str(errors) == "Element 1: not a valid number, Element 3: not a valid number"
    assert errors.to_json() == {"1": "not a valid number", "3": "not a valid number"}
    assert errors.kind == ErrorKind.INVALID_ELEMENTS


def test_sequence_of_wraps_plain_callables():
    assert sequence_of(str.upper).convert_value(["a", "b"]) == ["A", "B"]


def test_sequence_of_checks_element_type():
    with pytest.raises(SliceElementErrors) as exc_info:
        sequence_of(lambda v: v, int).convert_value([1, "two"])
    assert exc_info.value.indexes == [1]


def test_sequence_of_rejects_non_sequences():
    for value in ("abc", b"abc", {"a": 1}, 42):
        with pytest.raises(ConversionError) as exc_info:
            sequence_of(int64()).convert_value(value)
        assert str(exc_info.value) == "cannot convert to slice"


def test_sequence_of_skips_missing_values():
    assert sequence_of(int64()).convert_value(None) is None
    assert sequence_of(int64()).convert_value(UNDEFINED) is UNDEFINED


def test_sequence_of_empty_list():
    assert sequence_of(int64()).convert_value([]) == []


# ─── sequence_of_records ─────────────────────────────────────────

def _item_type() -> Type:
    return Type().field("n", require(), int32())


def test_sequence_of_records_parses_each_map():
    records = sequence_of_records(_item_type()).convert_value([{"n": "1"}, {"n": 2}])
    assert all(isinstance(r, Record) for r in records)
    assert [r.get("n") for r in records] == [1, 2]


def test_sequence_of_records_reports_failing_element():
    items = Type().field("items", sequence_of_records(_item_type()))
    record = items.parse({"items": [{"n": 1}, {"n": None}]})

    errors = record.errors()
    assert errors is not None
    element_errors = errors["items"]
    assert isinstance(element_errors, SliceElementErrors)
    assert element_errors.indexes == [1]
    assert isinstance(element_errors.elements[0].error, FieldErrors)
    assert errors.to_json() == {"items": {"1": {"n": "cannot be nil"}}}
    assert str(errors) == "items Element 1: n cannot be nil"


def test_sequence_of_records_rejects_non_map_elements():
    with pytest.raises(SliceElementErrors) as exc_info:
        sequence_of_records(_item_type()).convert_value([{"n": 1}, "oops"])
    assert exc_info.value.to_json() == {"1": "cannot convert to record"}


def test_sequence_of_records_requires_a_type():
    with pytest.raises(SchemaDefinitionError):
        sequence_of_records({"n": int64()})
