"""Constraint Converters — requiredness, conditionals, length bounds, inclusion and ordering.

Invariants:
    - require() rejects UNDEFINED, None and "" (and nothing else: 0 and False pass)
    - Bounds never imply requiredness: None and UNDEFINED pass through untouched
    - Validators return the input value unchanged on success
    - Comparator bounds are coerced at construction: an uncoercible bound raises
      SchemaDefinitionError from the factory, never per call
    - Captured configuration (allow sets, bounds, sub-chains) is frozen at construction
"""

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any, Callable

from flexmap.core.convert_numeric import try_decimal
from flexmap.core.domain_types import UNDEFINED, ErrorKind, is_missing
from flexmap.core.errors import ConversionError, SchemaDefinitionError
from flexmap.core.value_converter import ValueConverter, ValueConverterFunc, chain


# ─── Presence ────────────────────────────────────────────────────

def _require_defined(value: Any) -> Any:
    if value is UNDEFINED:
        raise ConversionError("must be defined", ErrorKind.REQUIRED)
    return value


def _not_nil(value: Any) -> Any:
    if value is None:
        raise ConversionError("cannot be nil", ErrorKind.REQUIRED)
    return value


def _require(value: Any) -> Any:
    _require_defined(value)
    _not_nil(value)
    if isinstance(value, str) and value == "":
        raise ConversionError("cannot be empty", ErrorKind.REQUIRED)
    return value


def not_nil() -> ValueConverter:
    """Fail iff value is None."""
    return ValueConverterFunc(_not_nil)


def require_defined() -> ValueConverter:
    """Fail iff the key was absent from the input."""
    return ValueConverterFunc(_require_defined)


def require() -> ValueConverter:
    """Fail if value is UNDEFINED, None or the empty string."""
    return ValueConverterFunc(_require)


# ─── Conditionals ────────────────────────────────────────────────

def if_not_nil(*converters: ValueConverter | Callable[[Any], Any]) -> ValueConverter:
    """Apply converters unless value is None."""
    sub_chain = chain(*converters)

    def convert(value: Any) -> Any:
        if value is None:
            return value
        return sub_chain.convert_value(value)

    return ValueConverterFunc(convert)


def if_defined(*converters: ValueConverter | Callable[[Any], Any]) -> ValueConverter:
    """Apply converters unless the key was absent from the input."""
    sub_chain = chain(*converters)

    def convert(value: Any) -> Any:
        if value is UNDEFINED:
            return value
        return sub_chain.convert_value(value)

    return ValueConverterFunc(convert)


# ─── Length ──────────────────────────────────────────────────────

def try_len(value: Any) -> int | None:
    """Length of a str, bytes, sequence or mapping; None for anything else."""
    if isinstance(value, (str, bytes, bytearray, Sequence, Mapping)):
        return len(value)
    return None


def _nilify_empty(value: Any) -> Any:
    if try_len(value) == 0:
        return None
    return value


def nilify_empty() -> ValueConverter:
    """Collapse empty strings, sequences and mappings to None. Never fails."""
    return ValueConverterFunc(_nilify_empty)


def _length_bound(
    test: Callable[[int], bool], message: str, kind: ErrorKind,
) -> ValueConverter:
    def convert(value: Any) -> Any:
        if is_missing(value):
            return value
        n = try_len(value)
        if n is None:
            raise ConversionError("not a string, slice or map", ErrorKind.WRONG_TYPE)
        if not test(n):
            raise ConversionError(message, kind)
        return value

    return ValueConverterFunc(convert)


def min_len(minimum: int) -> ValueConverter:
    """Fail if len(value) < minimum. Length counts characters for str."""
    return _length_bound(lambda n: n >= minimum, "too short", ErrorKind.TOO_SHORT)


def max_len(maximum: int) -> ValueConverter:
    """Fail if len(value) > maximum. Length counts characters for str."""
    return _length_bound(lambda n: n <= maximum, "too long", ErrorKind.TOO_LONG)


# ─── Inclusion ───────────────────────────────────────────────────

def _string_membership(items: frozenset[str], allowed: bool) -> ValueConverter:
    def convert(value: Any) -> Any:
        if is_missing(value):
            return value
        if not isinstance(value, str) or (value in items) != allowed:
            raise ConversionError("not allowed value", ErrorKind.NOT_ALLOWED)
        return value

    return ValueConverterFunc(convert)


def allow_strings(*allowed_items: str) -> ValueConverter:
    """Fail unless value is one of allowed_items."""
    return _string_membership(frozenset(allowed_items), allowed=True)


def exclude_strings(*excluded_items: str) -> ValueConverter:
    """Fail if value is one of excluded_items."""
    return _string_membership(frozenset(excluded_items), allowed=False)


# ─── Ordering ────────────────────────────────────────────────────

def _comparison(
    bound: Any, test: Callable[[Decimal, Decimal], bool],
    message: str, kind: ErrorKind,
) -> ValueConverter:
    bound_decimal = try_decimal(bound)
    if bound_decimal is None:
        raise SchemaDefinitionError(
            f"{bound!r} is not convertable to a decimal number",
        )

    def convert(value: Any) -> Any:
        if is_missing(value):
            return value
        n = try_decimal(value)
        if n is None:
            raise ConversionError("not a number", ErrorKind.INVALID_NUMBER)
        if not test(n, bound_decimal):
            raise ConversionError(message, kind)
        return value

    return ValueConverterFunc(convert)


def less_than(x: Any) -> ValueConverter:
    """Fail unless value < x."""
    return _comparison(x, lambda n, b: n < b, "too large", ErrorKind.TOO_LARGE)


def less_than_or_equal(x: Any) -> ValueConverter:
    """Fail unless value <= x."""
    return _comparison(x, lambda n, b: n <= b, "too large", ErrorKind.TOO_LARGE)


def greater_than(x: Any) -> ValueConverter:
    """Fail unless value > x."""
    return _comparison(x, lambda n, b: n > b, "too small", ErrorKind.TOO_SMALL)


def greater_than_or_equal(x: Any) -> ValueConverter:
    """Fail unless value >= x."""
    return _comparison(x, lambda n, b: n >= b, "too small", ErrorKind.TOO_SMALL)
