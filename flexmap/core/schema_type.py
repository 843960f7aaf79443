"""Type & Field — the schema: named fields, each with an ordered converter chain.

Invariants:
    - Field names are unique within a Type: re-registering a name raises SchemaDefinitionError
    - A Type freezes on its first parse (or on freeze()); registering after that raises
    - parse() never raises for bad field values: ConversionErrors land in Record.errors()
    - Fields convert independently; no field sees its siblings, so iteration order is irrelevant
    - An absent key reaches the chain as UNDEFINED, an explicit null as None

Design Decisions:
    - Builder-then-freeze over a mutable registry: parse() only reads, so one Type is
      safe to share across threads once defined
    - Type implements convert_value(): nested Types validate nested maps
"""

from collections.abc import Mapping
from typing import Any, Callable, Iterator

from flexmap.core.domain_types import UNDEFINED, ErrorKind, is_missing
from flexmap.core.errors import (
    ConversionError, FieldErrors, SchemaDefinitionError,
)
from flexmap.core.record import Record
from flexmap.core.value_converter import ValueConverter, as_converter, run_chain


class Field:
    """A name bound to an ordered chain of converters. Immutable."""

    __slots__ = ("name", "converters")

    def __init__(self, name: str, *converters: ValueConverter | Callable[[Any], Any]):
        if not isinstance(name, str) or not name:
            raise SchemaDefinitionError(f"field name must be a non-empty string, got {name!r}")
        object.__setattr__(self, "name", name)
        object.__setattr__(
            self, "converters", tuple(as_converter(c) for c in converters),
        )

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError("Field is immutable")

    def convert_value(self, value: Any) -> Any:
        return run_chain(value, self.converters)

    def __repr__(self) -> str:
        return f"Field({self.name!r}, {len(self.converters)} converter(s))"


class Type:
    """A set of Fields keyed by name. Converts maps into Records."""

    def __init__(self, *fields: Field):
        self._fields: dict[str, Field] = {}
        self._frozen = False
        for f in fields:
            self.add_field(f)

    @classmethod
    def build(cls, define: Callable[["Type"], Any]) -> "Type":
        """Create a Type, let `define` register its fields, then freeze it."""
        type_ = cls()
        define(type_)
        return type_.freeze()

    # ─── Definition ──────────────────────────────────────────────

    def add_field(self, f: Field) -> "Type":
        if self._frozen:
            raise SchemaDefinitionError(
                f'cannot add field "{f.name}": type is frozen',
            )
        if f.name in self._fields:
            raise SchemaDefinitionError(f'duplicate field "{f.name}"')
        self._fields[f.name] = f
        return self

    def field(self, name: str, *converters: ValueConverter | Callable[[Any], Any]) -> "Type":
        """Register a field. Returns self for chaining."""
        return self.add_field(Field(name, *converters))

    def freeze(self) -> "Type":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def fields(self) -> tuple[Field, ...]:
        return tuple(self._fields.values())

    @property
    def field_names(self) -> frozenset[str]:
        return frozenset(self._fields)

    def has_field(self, name: str) -> bool:
        return name in self._fields

    # ─── Conversion ──────────────────────────────────────────────

    def parse(self, attrs: Mapping[str, Any] | None) -> Record:
        """Apply every field's chain to attrs. Never raises for bad values."""
        self._frozen = True
        if attrs is None:
            attrs = {}
        if not isinstance(attrs, Mapping):
            raise TypeError(f"cannot parse {type(attrs).__name__}: expected a mapping")

        converted: dict[str, Any] = {}
        errors: dict[str, ConversionError] = {}
        for name, f in self._fields.items():
            try:
                value = f.convert_value(attrs.get(name, UNDEFINED))
            except ConversionError as e:
                errors[name] = e
                continue
            if value is not UNDEFINED:
                converted[name] = value

        return Record(self, attrs, converted, FieldErrors(errors))

    def convert_value(self, value: Any) -> Any:
        """Nested use: a map becomes a Record, or its FieldErrors are raised."""
        if is_missing(value):
            return value
        if isinstance(value, Mapping):
            record = self.parse(value)
            errors = record.errors()
            if errors is not None:
                raise errors
            return record
        raise ConversionError("cannot convert to record", ErrorKind.INVALID_RECORD)

    def __iter__(self) -> Iterator[Field]:
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Type({', '.join(self._fields)})"
