"""Numeric Converters — integer, float, decimal and boolean coercion.

Invariants:
    - UNDEFINED passes through untouched so a later require() still sees it
    - None and blank strings normalize to None (no error)
    - Out-of-range input raises kind TOO_LARGE / TOO_SMALL, never truncates
    - Syntactically invalid input raises kind INVALID_NUMBER
    - bool is never accepted as a number even though it subclasses int
"""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from flexmap.core.domain_types import (
    FLOAT32_MAX, INT32_MAX, INT32_MIN, INT64_MAX, INT64_MIN,
    UNDEFINED, ErrorKind,
)
from flexmap.core.errors import ConversionError


_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_DECIMAL_PATTERN = re.compile(
    r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?",
)
_FLOAT_SPECIAL_PATTERN = re.compile(r"[+-]?(?:inf|infinity|nan)", re.IGNORECASE)

# Digits in INT64_MIN / INT64_MAX; longer strings are out of range without parsing
_MAX_INT_DIGITS = 19

_TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_STRINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def _invalid_number() -> ConversionError:
    return ConversionError("not a valid number", ErrorKind.INVALID_NUMBER)


def _too_large() -> ConversionError:
    return ConversionError(
        "greater than maximum allowed number", ErrorKind.TOO_LARGE,
    )


def _too_small() -> ConversionError:
    return ConversionError(
        "less than minimum allowed number", ErrorKind.TOO_SMALL,
    )


def normalize_for_parsing(value: Any) -> Any:
    """Trim strings; a string that is blank after trimming becomes None."""
    if isinstance(value, str):
        value = value.strip()
        if value == "":
            return None
    return value


class ParsingConverter:
    """Shared shell for parse-style converters: UNDEFINED/None/blank handling, then parse."""

    __slots__ = ("name", "_parse")

    def __init__(self, name: str, parse: Callable[[Any], Any]):
        self.name = name
        self._parse = parse

    def convert_value(self, value: Any) -> Any:
        if value is UNDEFINED:
            return value
        value = normalize_for_parsing(value)
        if value is None:
            return None
        return self._parse(value)

    def __repr__(self) -> str:
        return f"{self.name}()"


# ─── Integers ────────────────────────────────────────────────────

def _check_int_range(n: int, lo: int, hi: int) -> int:
    if n > hi:
        raise _too_large()
    if n < lo:
        raise _too_small()
    return n


def convert_int(value: Any, lo: int = INT64_MIN, hi: int = INT64_MAX) -> int:
    """Convert value to an int within [lo, hi]."""
    if isinstance(value, bool):
        raise _invalid_number()

    if isinstance(value, int):
        return _check_int_range(value, lo, hi)

    if isinstance(value, float):
        if math.isnan(value):
            raise _invalid_number()
        if value > hi:
            raise _too_large()
        if value < lo:
            raise _too_small()
        if not value.is_integer():
            raise _invalid_number()
        return int(value)

    if isinstance(value, Decimal):
        if value.is_nan():
            raise _invalid_number()
        # range first: int() on a huge exponent never finishes
        if value > hi:
            raise _too_large()
        if value < lo:
            raise _too_small()
        if value != value.to_integral_value():
            raise _invalid_number()
        return int(value)

    s = str(value).strip()
    if not _INT_PATTERN.fullmatch(s):
        raise _invalid_number()
    if len(s.lstrip("+-").lstrip("0")) > _MAX_INT_DIGITS:
        raise _too_small() if s.startswith("-") else _too_large()
    return _check_int_range(int(s), lo, hi)


def convert_int64(value: Any) -> int:
    return convert_int(value, INT64_MIN, INT64_MAX)


def convert_int32(value: Any) -> int:
    return convert_int(value, INT32_MIN, INT32_MAX)


def int64() -> ParsingConverter:
    """Convert to a 64-bit integer. None and blank strings become None."""
    return ParsingConverter("int64", convert_int64)


def int32() -> ParsingConverter:
    """Convert to a 32-bit integer. None and blank strings become None."""
    return ParsingConverter("int32", convert_int32)


# ─── Floats ──────────────────────────────────────────────────────

def _overflowed(result: float) -> ConversionError:
    return _too_small() if result < 0 else _too_large()


def convert_float64(value: Any) -> float:
    """Convert value to a float. Finite input that overflows is a range error."""
    if isinstance(value, bool):
        raise _invalid_number()

    if isinstance(value, float):
        return value

    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            raise (_too_small() if value < 0 else _too_large()) from None

    if isinstance(value, Decimal):
        result = float(value)
        if math.isinf(result) and value.is_finite():
            raise _overflowed(result)
        return result

    s = str(value).strip()
    if _FLOAT_SPECIAL_PATTERN.fullmatch(s):
        return float(s)
    if not _DECIMAL_PATTERN.fullmatch(s):
        raise _invalid_number()
    result = float(s)
    if math.isinf(result):
        raise _overflowed(result)
    return result


def convert_float32(value: Any) -> float:
    """Convert value to a float within the 32-bit float range."""
    n = convert_float64(value)
    if n < -FLOAT32_MAX:
        raise _too_small()
    if n > FLOAT32_MAX:
        raise _too_large()
    return n


def float64() -> ParsingConverter:
    """Convert to a 64-bit float. None and blank strings become None."""
    return ParsingConverter("float64", convert_float64)


def float32() -> ParsingConverter:
    """Convert to a float range-checked against 32-bit limits."""
    return ParsingConverter("float32", convert_float32)


# ─── Decimal ─────────────────────────────────────────────────────

def try_decimal(value: Any) -> Decimal | None:
    """Coerce value to a finite Decimal, or None when it cannot be."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return Decimal(repr(value))

    s = str(value).strip()
    if not _DECIMAL_PATTERN.fullmatch(s):
        return None
    try:
        return Decimal(s)
    except InvalidOperation:
        return None


def convert_decimal(value: Any) -> Decimal:
    n = try_decimal(value)
    if n is None:
        raise _invalid_number()
    return n


def decimal_number() -> ParsingConverter:
    """Convert to decimal.Decimal. Floats go through their shortest repr."""
    return ParsingConverter("decimal_number", convert_decimal)


# ─── Boolean ─────────────────────────────────────────────────────

def convert_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        s = value.strip()
        if s in _TRUE_STRINGS:
            return True
        if s in _FALSE_STRINGS:
            return False
    raise ConversionError("not a valid boolean", ErrorKind.INVALID_BOOLEAN)


def boolean() -> ParsingConverter:
    """Convert a bool or a boolean string (true/false/t/f/1/0 ...)."""
    return ParsingConverter("boolean", convert_bool)
