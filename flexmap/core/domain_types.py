"""Domain Types — the undefined marker, error kinds and numeric limits shared by converters.

Invariants:
    - UNDEFINED is a singleton: identity comparison (`is UNDEFINED`) is always valid
    - UNDEFINED is distinct from None: None is an explicit null, UNDEFINED is a missing key
    - All error kinds encoded as Enums — no raw string matching on messages

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum


# ─── Undefined Marker ────────────────────────────────────────────

class Undefined:
    """Marker for a key absent from the input map. Use the UNDEFINED instance."""

    _instance: "Undefined | None" = None

    def __new__(cls) -> "Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "Undefined":
        return self

    def __deepcopy__(self, memo: dict) -> "Undefined":
        return self

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED = Undefined()


def is_missing(value: object) -> bool:
    """True for None and UNDEFINED."""
    return value is None or value is UNDEFINED


# ─── Numeric Limits ──────────────────────────────────────────────

INT64_MIN: int = -(2 ** 63)
INT64_MAX: int = 2 ** 63 - 1
INT32_MIN: int = -(2 ** 31)
INT32_MAX: int = 2 ** 31 - 1
FLOAT32_MAX: float = 3.4028234663852886e38


# ─── Enums ───────────────────────────────────────────────────────

class ErrorKind(str, Enum):
    """What a single converter rejected. Lets callers branch without parsing messages."""
    INVALID_NUMBER = "invalid_number"
    INVALID_BOOLEAN = "invalid_boolean"
    INVALID_TIME = "invalid_time"
    INVALID_UUID = "invalid_uuid"
    TOO_LARGE = "too_large"
    TOO_SMALL = "too_small"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    REQUIRED = "required"
    NOT_ALLOWED = "not_allowed"
    WRONG_TYPE = "wrong_type"
    INVALID_RECORD = "invalid_record"
    INVALID_ELEMENTS = "invalid_elements"


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    SCHEMA = "schema"
    RESOURCE_NOT_FOUND = "resource_not_found"
    HANDLER = "handler"
    SERIALIZATION = "serialization"
    TRANSPORT = "transport"
    INTERNAL = "internal"
