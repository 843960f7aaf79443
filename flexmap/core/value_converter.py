"""Value Converter — the contract every conversion/validation step implements.

Invariants:
    - convert_value(value) returns the converted value or raises ConversionError
    - Converters are pure: no IO, no mutation of captured configuration
    - A chain stops at the first ConversionError; later converters never run

Design Decisions:
    - Protocol over base class: any object with convert_value() qualifies,
      and plain callables are wrapped with ValueConverterFunc
"""

from typing import Any, Callable, Iterable, Protocol, runtime_checkable


@runtime_checkable
class ValueConverter(Protocol):
    """Converts a value to a different type or validates it."""

    def convert_value(self, value: Any) -> Any:
        ...


class ValueConverterFunc:
    """Adapts a plain `(value) -> value` function to the ValueConverter protocol."""

    __slots__ = ("func",)

    def __init__(self, func: Callable[[Any], Any]):
        self.func = func

    def convert_value(self, value: Any) -> Any:
        return self.func(value)

    def __repr__(self) -> str:
        name = getattr(self.func, "__qualname__", repr(self.func))
        return f"ValueConverterFunc({name})"


def as_converter(obj: ValueConverter | Callable[[Any], Any]) -> ValueConverter:
    """Accept a ValueConverter as-is, wrap a callable, reject anything else."""
    if isinstance(obj, ValueConverter):
        return obj
    if callable(obj):
        return ValueConverterFunc(obj)
    raise TypeError(f"{obj!r} is not a value converter")


def run_chain(value: Any, converters: Iterable[ValueConverter]) -> Any:
    """Feed value through converters in order. The first ConversionError propagates."""
    for converter in converters:
        value = converter.convert_value(value)
    return value


class ChainConverter:
    """A fixed sequence of converters applied as one."""

    __slots__ = ("converters",)

    def __init__(self, converters: Iterable[ValueConverter | Callable[[Any], Any]]):
        self.converters: tuple[ValueConverter, ...] = tuple(
            as_converter(c) for c in converters
        )

    def convert_value(self, value: Any) -> Any:
        return run_chain(value, self.converters)


def chain(*converters: ValueConverter | Callable[[Any], Any]) -> ValueConverter:
    """Compose converters into a single converter."""
    return ChainConverter(converters)
