"""Sequence Converters — lists of converted values and lists of nested records.

Invariants:
    - Every element is attempted; one failing element never hides another
    - All failing indices are reported together in one SliceElementErrors
    - str, bytes and mappings are not sequences here
    - None and UNDEFINED pass through untouched
"""

from collections.abc import Mapping, Sequence
from typing import Any, Callable

from flexmap.core.domain_types import ErrorKind, is_missing
from flexmap.core.errors import (
    ConversionError, SchemaDefinitionError, SliceElementError, SliceElementErrors,
)
from flexmap.core.schema_type import Type
from flexmap.core.value_converter import ValueConverter, as_converter


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (str, bytes, bytearray, Mapping)) or not isinstance(value, Sequence):
        raise ConversionError("cannot convert to slice", ErrorKind.WRONG_TYPE)
    return list(value)


class SequenceConverter:
    """Convert every element with one element converter."""

    __slots__ = ("element_converter", "element_type")

    def __init__(
        self,
        element_converter: ValueConverter,
        element_type: type | tuple[type, ...] | None = None,
    ):
        self.element_converter = element_converter
        self.element_type = element_type

    def _convert_element(self, element: Any) -> Any:
        converted = self.element_converter.convert_value(element)
        if self.element_type is not None and not isinstance(converted, self.element_type):
            raise ConversionError(
                f"cannot convert {type(converted).__name__} to element type",
                ErrorKind.WRONG_TYPE,
            )
        return converted

    def convert_value(self, value: Any) -> Any:
        if is_missing(value):
            return value

        elements = _as_list(value)
        converted: list[Any] = []
        failures: list[SliceElementError] = []
        for i, element in enumerate(elements):
            try:
                converted.append(self._convert_element(element))
            except ConversionError as e:
                failures.append(SliceElementError(index=i, error=e))
                converted.append(None)

        if failures:
            raise SliceElementErrors(failures)
        return converted


def sequence_of(
    element_converter: ValueConverter | Callable[[Any], Any],
    element_type: type | tuple[type, ...] | None = None,
) -> SequenceConverter:
    """Convert a list/tuple element by element. `element_type` checks each converted element."""
    return SequenceConverter(as_converter(element_converter), element_type)


class RecordSequenceConverter:
    """Parse every element, which must be a map, with a nested Type."""

    __slots__ = ("type",)

    def __init__(self, type_: Type):
        self.type = type_

    def convert_value(self, value: Any) -> Any:
        if is_missing(value):
            return value

        elements = _as_list(value)
        records = []
        failures: list[SliceElementError] = []
        for i, element in enumerate(elements):
            if not isinstance(element, Mapping):
                failures.append(SliceElementError(
                    index=i,
                    error=ConversionError("cannot convert to record", ErrorKind.INVALID_RECORD),
                ))
                continue
            record = self.type.parse(element)
            errors = record.errors()
            if errors is not None:
                failures.append(SliceElementError(index=i, error=errors))
                continue
            records.append(record)

        if failures:
            raise SliceElementErrors(failures)
        return records


def sequence_of_records(type_: Type) -> RecordSequenceConverter:
    """Convert a list of maps into a list of Records of `type_`."""
    if not isinstance(type_, Type):
        raise SchemaDefinitionError(f"{type_!r} is not a Type")
    return RecordSequenceConverter(type_)
