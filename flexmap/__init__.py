"""flexmap — parse untyped maps into validated records, and dispatch them to commands.

Invariants:
    - Package root re-exports the public API only; importing it has no side effects
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("flexmap")
except PackageNotFoundError:
    __version__ = "dev"

from flexmap.core.convert_numeric import (
    boolean, decimal_number, float32, float64, int32, int64,
)
from flexmap.core.convert_sequence import sequence_of, sequence_of_records
from flexmap.core.convert_text import (
    multi_line_string, single_line_string, string, timestamp, uuid_value,
)
from flexmap.core.domain_types import UNDEFINED, ErrorKind, Undefined
from flexmap.core.enforce_constraints import (
    allow_strings, exclude_strings, greater_than, greater_than_or_equal,
    if_defined, if_not_nil, less_than, less_than_or_equal, max_len, min_len,
    nilify_empty, not_nil, require, require_defined,
)
from flexmap.core.errors import (
    BuildParamsError, CommandDefinitionError, CommandHandlerError,
    CommandNotFoundError, CommandSerializationError, ConversionError,
    ExecError, FieldErrors, FlexmapError, ParamsInvalidError,
    SchemaDefinitionError, SliceElementErrors, UnknownFieldError, WriteError,
)
from flexmap.core.record import Record
from flexmap.core.schema_type import Field, Type
from flexmap.core.value_converter import ValueConverter, ValueConverterFunc, chain
from flexmap.services.command_shell import Command, Shell

__all__ = [
    "__version__",
    # schema
    "Type", "Field", "Record", "UNDEFINED", "Undefined",
    "ValueConverter", "ValueConverterFunc", "chain",
    # converters
    "int64", "int32", "float64", "float32", "decimal_number", "boolean",
    "string", "single_line_string", "multi_line_string", "uuid_value", "timestamp",
    "sequence_of", "sequence_of_records",
    "not_nil", "require", "require_defined", "if_not_nil", "if_defined",
    "nilify_empty", "min_len", "max_len", "allow_strings", "exclude_strings",
    "less_than", "less_than_or_equal", "greater_than", "greater_than_or_equal",
    # errors
    "ErrorKind", "FlexmapError", "ConversionError", "FieldErrors",
    "SliceElementErrors", "UnknownFieldError", "SchemaDefinitionError",
    "CommandDefinitionError", "CommandNotFoundError", "ParamsInvalidError",
    "CommandHandlerError", "CommandSerializationError",
    "BuildParamsError", "ExecError", "WriteError",
    # shell
    "Command", "Shell",
]
