"""Error Hierarchy — typed, categorized exceptions for every flexmap failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - ConversionError and its subclasses are data problems: Type.parse collects them, never raises them
    - UnknownFieldError and SchemaDefinitionError are programming errors: never collected, never caught
    - FieldErrors renders fields sorted by name in both textual and structured form
    - to_response() produces the REST envelope used by the HTTP layer

Design Decisions:
    - Single hierarchy with FlexmapError base: FastAPI global handler catches all
    - Wrappers keep the wrapped exception as `.error` and raise it as __cause__
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator, Mapping

from flexmap.core.domain_types import ErrorCategory, ErrorKind, ErrorSeverity


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    command_name: str | None = None
    field_name: str | None = None


class FlexmapError(Exception):
    """Base exception for all flexmap errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def details(self) -> Any | None:
        """Structured detail payload for the response envelope. None when there is none."""
        return None

    def to_response(self, include_details: bool = True) -> dict:
        """Convert to standardized REST error response."""
        body: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "command_name": self.context.command_name,
                "field_name": self.context.field_name,
            },
        }
        details = self.details() if include_details else None
        if details is not None:
            body["details"] = details
        return {"error": body}


# ─── Conversion Errors (collected by Type.parse) ─────────────────

class ConversionError(FlexmapError):
    """A single value converter rejected its input."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.WRONG_TYPE,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, kind.value.upper(), ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.kind = kind

    def to_json(self) -> Any:
        """Structured form: the flat message for a leaf error."""
        return self.message

    def details(self) -> Any | None:
        return self.to_json()


def _field_name_of(error: Exception) -> str | None:
    if isinstance(error, FlexmapError):
        return error.context.field_name
    return None


def _error_to_json(error: Exception) -> Any:
    to_json = getattr(error, "to_json", None)
    if callable(to_json):
        return to_json()
    return str(error)


class FieldErrors(ConversionError):
    """Aggregate of per-field conversion errors, keyed by field name.

    Behaves as a read-only mapping of field name -> error. Non-empty means the
    record is invalid. Nested FieldErrors (from nested Types) and
    SliceElementErrors are unwrapped recursively by to_json().
    """

    def __init__(
        self,
        errors: Mapping[str, Exception] | None = None,
        context: ErrorContext | None = None,
    ):
        self._errors: dict[str, Exception] = dict(
            sorted((errors or {}).items()),
        )
        ctx = context or ErrorContext()
        if ctx.field_name is None and len(self._errors) == 1:
            ctx.field_name = next(iter(self._errors))
        super().__init__(self._render(), ErrorKind.INVALID_RECORD, ctx)
        self.code = "VALIDATION_ERROR"

    def _render(self) -> str:
        return ", ".join(f"{name} {err}" for name, err in self._errors.items())

    def __getitem__(self, name: str) -> Exception:
        return self._errors[name]

    def __contains__(self, name: object) -> bool:
        return name in self._errors

    def __iter__(self) -> Iterator[str]:
        return iter(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def get(self, name: str, default: Exception | None = None) -> Exception | None:
        return self._errors.get(name, default)

    def items(self):
        return self._errors.items()

    def to_json(self) -> dict[str, Any]:
        """Structured form: {field: nested_structure_or_message}. Empty is {}."""
        return {name: _error_to_json(err) for name, err in self._errors.items()}


@dataclass(frozen=True)
class SliceElementError:
    """One failing element of a sequence-valued field."""
    index: int
    error: Exception


class SliceElementErrors(ConversionError):
    """Every failing element of one sequence conversion, in index order."""

    def __init__(
        self,
        elements: Iterable[SliceElementError],
        context: ErrorContext | None = None,
    ):
        self.elements: tuple[SliceElementError, ...] = tuple(
            sorted(elements, key=lambda e: e.index),
        )
        message = ", ".join(
            f"Element {e.index}: {e.error}" for e in self.elements
        )
        super().__init__(message, ErrorKind.INVALID_ELEMENTS, context)

    @property
    def indexes(self) -> list[int]:
        return [e.index for e in self.elements]

    def __iter__(self) -> Iterator[SliceElementError]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self.elements)

    def to_json(self) -> dict[str, Any]:
        return {str(e.index): _error_to_json(e.error) for e in self.elements}


# ─── Programming Errors (fail fast, never collected) ─────────────

class UnknownFieldError(FlexmapError, LookupError):
    """A Record was asked for a name its Type never declared."""
    def __init__(self, name: str, context: ErrorContext | None = None):
        super().__init__(
            f'"{name}" is not a field of type',
            "UNKNOWN_FIELD", ErrorCategory.SCHEMA,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.name = name


class SchemaDefinitionError(FlexmapError, ValueError):
    """A Type or converter was configured incorrectly at definition time."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "SCHEMA_DEFINITION_ERROR", ErrorCategory.SCHEMA,
            ErrorSeverity.CRITICAL, context, 500,
        )


class CommandDefinitionError(FlexmapError, ValueError):
    """A Command, Shell or HTTP handler was wired incorrectly."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "COMMAND_DEFINITION_ERROR", ErrorCategory.SCHEMA,
            ErrorSeverity.CRITICAL, context, 500,
        )


# ─── Command Dispatch Errors ─────────────────────────────────────

class CommandNotFoundError(FlexmapError):
    """No command registered under the requested name."""
    def __init__(self, command_name: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.command_name = command_name
        super().__init__(
            f"command not found: {command_name}",
            "COMMAND_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.command_name = command_name


class ParamsInvalidError(FlexmapError):
    """Command params failed to parse. The handler was not invoked."""
    def __init__(
        self, command_name: str, errors: FieldErrors,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.command_name = command_name
        ctx.field_name = errors.context.field_name
        super().__init__(
            f"{command_name}: failed to parse params: {errors}",
            "PARAMS_INVALID", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.command_name = command_name
        self.errors = errors

    def details(self) -> dict[str, Any]:
        return self.errors.to_json()


class CommandHandlerError(FlexmapError):
    """The command handler raised. The original exception is kept as `.error`."""
    def __init__(
        self, command_name: str, func_label: str, error: Exception,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.command_name = command_name
        ctx.field_name = _field_name_of(error)
        status = error.http_status if isinstance(error, FlexmapError) else 500
        super().__init__(
            f"{command_name}: {func_label}: {error}",
            "COMMAND_HANDLER_ERROR", ErrorCategory.HANDLER,
            ErrorSeverity.ERROR, ctx, status,
        )
        self.command_name = command_name
        self.error = error

    def details(self) -> Any | None:
        if isinstance(self.error, FlexmapError):
            return self.error.details()
        return None


class CommandSerializationError(FlexmapError):
    """Converting a handler result between dict and JSON bytes failed."""
    def __init__(
        self, command_name: str, operation: str, error: Exception,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.command_name = command_name
        super().__init__(
            f"{command_name}: {operation}: {error}",
            "COMMAND_SERIALIZATION_ERROR", ErrorCategory.SERIALIZATION,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.command_name = command_name
        self.operation = operation
        self.error = error


# ─── HTTP Adapter Errors ─────────────────────────────────────────

class _HandlerStageError(FlexmapError):
    """Wraps an error from one stage of a JSON handler request."""

    stage: str = ""
    stage_code: str = ""
    default_status: int = 500

    def __init__(
        self, command_name: str, error: Exception,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.command_name = command_name
        ctx.field_name = _field_name_of(error)
        if isinstance(error, FlexmapError):
            status = error.http_status
            category = error.category
        else:
            status = self.default_status
            category = ErrorCategory.TRANSPORT
        super().__init__(
            f"{command_name}: {self.stage}: {error}",
            self.stage_code, category, ErrorSeverity.ERROR, ctx, status,
        )
        self.command_name = command_name
        self.error = error

    def details(self) -> Any | None:
        if isinstance(self.error, FlexmapError):
            return self.error.details()
        return None


class BuildParamsError(_HandlerStageError):
    """Building params from the request failed."""
    stage = "build params"
    stage_code = "BUILD_PARAMS_ERROR"
    default_status = 400


class ExecError(_HandlerStageError):
    """Executing the command failed."""
    stage = "exec"
    stage_code = "EXEC_ERROR"
    default_status = 500


class WriteError(_HandlerStageError):
    """Writing the response failed."""
    stage = "write"
    stage_code = "WRITE_ERROR"
    default_status = 500
