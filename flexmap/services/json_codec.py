"""JSON Codec — marshal handler results to bytes and back.

Invariants:
    - None marshals to b"" and empty bytes unmarshal to None
    - Only JSON objects unmarshal: a command's native result is always a dict
    - Records marshal as their attrs(); flexmap errors as their structured form

Design Decisions:
    - pydantic_core.to_json over json.dumps: Decimal, UUID, datetime and bytes
      serialize without a hand-written encoder
"""

from typing import Any

from pydantic_core import from_json, to_json

from flexmap.core.domain_types import Undefined
from flexmap.core.errors import ConversionError
from flexmap.core.record import Record


def _fallback(value: Any) -> Any:
    if isinstance(value, Record):
        return value.attrs()
    if isinstance(value, ConversionError):
        return value.to_json()
    if isinstance(value, Undefined):
        return None
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def marshal(result: dict[str, Any] | None) -> bytes:
    """Serialize a native result. None becomes empty bytes."""
    if result is None:
        return b""
    return to_json(result, fallback=_fallback)


def unmarshal(data: bytes | None) -> dict[str, Any] | None:
    """Parse JSON bytes into a dict. Empty input becomes None."""
    if not data:
        return None
    value = from_json(data)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValueError(f"expected a JSON object, got {type(value).__name__}")
    return value
