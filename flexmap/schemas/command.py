"""Command Schemas — Pydantic models for the command index and error envelope.

Invariants:
    - CommandInfo.fields lists the params Type's field names in declaration order
    - ErrorBody mirrors FlexmapError.to_response()["error"]
"""

from typing import Any

from pydantic import BaseModel, Field


class CommandInfo(BaseModel):
    """One registered command."""
    name: str
    fields: list[str] = Field(default_factory=list)
    returns_json: bool = False


class CommandListResponse(BaseModel):
    """Every registered command, sorted by name."""
    commands: list[CommandInfo]
    total: int = Field(ge=0)


class ErrorBody(BaseModel):
    """Structured error payload."""
    code: str
    message: str
    category: str
    severity: str
    timestamp: str | None = None
    context: dict[str, Any] | None = None
    details: Any | None = None


class ErrorEnvelope(BaseModel):
    error: ErrorBody
