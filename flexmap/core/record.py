"""Record — the materialized result of applying a Type to one input map.

Invariants:
    - A field name appears in at most one of converted / errors, never both
    - A field whose chain left the value UNDEFINED is omitted from attrs() and pick()
    - get() / pick() on a name the Type never declared raise UnknownFieldError:
      that is schema drift or a typo, not bad input, and is never collected
    - Records are read-only after construction: accessors return copies or views
"""

from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping

from flexmap.core.errors import FieldErrors, UnknownFieldError

if TYPE_CHECKING:
    from flexmap.core.schema_type import Type


class Record:
    """An "instance" of a Type. Created by Type.parse."""

    __slots__ = ("_type", "_original", "_converted", "_errors")

    def __init__(
        self,
        type_: "Type",
        original: Mapping[str, Any],
        converted: dict[str, Any],
        errors: FieldErrors,
    ):
        self._type = type_
        self._original = MappingProxyType(dict(original))
        self._converted = converted
        self._errors = errors

    @property
    def type(self) -> "Type":
        return self._type

    @property
    def original(self) -> Mapping[str, Any]:
        """The input map, kept for diagnostics."""
        return self._original

    @property
    def is_valid(self) -> bool:
        return len(self._errors) == 0

    def _check_field(self, name: str) -> None:
        if not self._type.has_field(name):
            raise UnknownFieldError(name)

    def get(self, name: str) -> Any:
        """Converted value of field `name`; None when the field was omitted or failed."""
        self._check_field(name)
        return self._converted.get(name)

    def errors(self) -> FieldErrors | None:
        """The aggregate field errors, or None when every field converted."""
        if len(self._errors) == 0:
            return None
        return self._errors

    def pick(self, *names: str) -> dict[str, Any]:
        """Sub-map of converted values for exactly `names` (omitted fields left out)."""
        picked: dict[str, Any] = {}
        for name in names:
            self._check_field(name)
            if name in self._converted:
                picked[name] = self._converted[name]
        return picked

    def attrs(self) -> dict[str, Any]:
        return dict(self._converted)

    def __repr__(self) -> str:
        if self.is_valid:
            return f"Record({self._converted!r})"
        return f"Record({self._converted!r}, errors={self._errors!r})"
