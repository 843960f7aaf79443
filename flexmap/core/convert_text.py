"""Text Converters — strings, normalized single/multi-line text, UUIDs and timestamps.

Invariants:
    - string() never fails; the line-oriented converters require str input
    - single_line_string() is idempotent: normalizing twice equals normalizing once
    - multi_line_string() keeps newlines and never trims
    - UNDEFINED and None pass through every converter here unchanged
"""

import unicodedata
import uuid
from datetime import datetime
from typing import Any

from flexmap.core.convert_numeric import ParsingConverter
from flexmap.core.domain_types import ErrorKind, is_missing
from flexmap.core.errors import ConversionError, SchemaDefinitionError


DEFAULT_TIME_FORMATS: tuple[str, ...] = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
)

# Whitespace control characters kept by multi_line_string (Z* categories are kept separately)
_CONTROL_SPACES = frozenset("\t\n\v\f\r\x85")


def _not_a_string() -> ConversionError:
    return ConversionError("not a string", ErrorKind.WRONG_TYPE)


# ─── Plain String ────────────────────────────────────────────────

def convert_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


class StringConverter:
    """Textual form of any value, without normalization."""

    def convert_value(self, value: Any) -> Any:
        if is_missing(value):
            return value
        return convert_string(value)


def string() -> StringConverter:
    """Convert any value to str. In almost all cases prefer single_line_string or multi_line_string."""
    return StringConverter()


# ─── Normalized Text ─────────────────────────────────────────────

def _drop_invalid_code_points(s: str) -> str:
    return s.encode("utf-8", errors="ignore").decode("utf-8")


def _is_printable(ch: str) -> bool:
    return ch == " " or unicodedata.category(ch)[0] in "LMNPS"


def _is_graphic_or_space(ch: str) -> bool:
    category = unicodedata.category(ch)
    return category[0] in "LMNPSZ" or ch in _CONTROL_SPACES


def normalize_single_line(s: str) -> str:
    """Drop invalid code points, replace non-printables with a space, strip."""
    s = _drop_invalid_code_points(s)
    s = "".join(ch if _is_printable(ch) else " " for ch in s)
    return s.strip()


def normalize_multi_line(s: str) -> str:
    """Drop invalid code points, replace anything not graphic or whitespace with a space."""
    s = _drop_invalid_code_points(s)
    return "".join(ch if _is_graphic_or_space(ch) else " " for ch in s)


class SingleLineStringConverter:
    def convert_value(self, value: Any) -> Any:
        if is_missing(value):
            return value
        if not isinstance(value, str):
            raise _not_a_string()
        return normalize_single_line(value)


class MultiLineStringConverter:
    def convert_value(self, value: Any) -> Any:
        if is_missing(value):
            return value
        if not isinstance(value, str):
            raise _not_a_string()
        return normalize_multi_line(value)


def single_line_string() -> SingleLineStringConverter:
    """Normalize a str to one printable, trimmed line. Non-str input fails."""
    return SingleLineStringConverter()


def multi_line_string() -> MultiLineStringConverter:
    """Normalize a str, keeping whitespace and newlines. Non-str input fails."""
    return MultiLineStringConverter()


# ─── UUID ────────────────────────────────────────────────────────

def convert_uuid(value: Any) -> uuid.UUID:
    """16 raw bytes parse as a binary UUID; anything else parses from its text."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        if isinstance(value, (bytes, bytearray)):
            return uuid.UUID(bytes=bytes(value))
        return uuid.UUID(str(value))
    except ValueError:
        raise ConversionError("not a valid UUID", ErrorKind.INVALID_UUID) from None


def uuid_value() -> ParsingConverter:
    """Convert to uuid.UUID. None and blank strings become None."""
    return ParsingConverter("uuid_value", convert_uuid)


# ─── Time ────────────────────────────────────────────────────────

class TimestampConverter:
    """Parse a string against formats in order; the first match wins."""

    __slots__ = ("formats", "_parser")

    def __init__(self, formats: tuple[str, ...]):
        self.formats = formats
        self._parser = ParsingConverter("timestamp", self._parse)

    def _parse(self, value: Any) -> datetime:
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            for fmt in self.formats:
                try:
                    return datetime.strptime(value, fmt)
                except ValueError:
                    continue
        raise ConversionError("not a valid time", ErrorKind.INVALID_TIME)

    def convert_value(self, value: Any) -> Any:
        return self._parser.convert_value(value)

    def __repr__(self) -> str:
        return f"timestamp{self.formats!r}"


def timestamp(*formats: str) -> TimestampConverter:
    """Convert to datetime using strptime formats (DEFAULT_TIME_FORMATS when none given)."""
    if any(not isinstance(f, str) or not f for f in formats):
        raise SchemaDefinitionError("timestamp formats must be non-empty strings")
    return TimestampConverter(tuple(formats) or DEFAULT_TIME_FORMATS)

