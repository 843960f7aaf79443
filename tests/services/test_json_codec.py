"""JSON Codec — tests for marshalling handler results.

Tests cover:
    - None <-> empty bytes
    - Decimal, UUID and Record values serialize
    - Only JSON objects unmarshal
"""

import uuid
from decimal import Decimal

import pytest
from pydantic_core import from_json

from flexmap.core.convert_numeric import int64
from flexmap.core.domain_types import UNDEFINED
from flexmap.core.schema_type import Type
from flexmap.services.json_codec import marshal, unmarshal


def test_none_marshals_to_empty_bytes():
    assert marshal(None) == b""


def test_empty_bytes_unmarshal_to_none():
    assert unmarshal(b"") is None
    assert unmarshal(None) is None
    assert unmarshal(b"null") is None


def test_marshal_rich_values():
    u = uuid.uuid4()
    data = from_json(marshal({"id": u, "price": Decimal("1.50"), "missing": UNDEFINED}))
    assert data == {"id": str(u), "price": "1.50", "missing": None}


def test_marshal_record_as_attrs():
    record = Type().field("n", int64()).parse({"n": "5"})
    assert from_json(marshal({"record": record})) == {"record": {"n": 5}}


def test_unmarshal_object():
    assert unmarshal(b'{"a": [1, 2]}') == {"a": [1, 2]}


def test_unmarshal_rejects_non_objects():
    with pytest.raises(ValueError):
        unmarshal(b"[1, 2]")


def test_unmarshal_rejects_invalid_json():
    with pytest.raises(ValueError):
        unmarshal(b"{not json")
