"""Error Handlers — global exception handlers and the default JSONHandler error hook.

Invariants:
    - FlexmapError -> structured JSON envelope with code, message, severity and status
    - RequestValidationError -> field-level error details
    - Exception (catch-all) -> never leaks internal details
    - default_error_handler keeps the status of the wrapped error (404 for unknown
      commands, 400 for invalid params, 500 otherwise)

Design Decisions:
    - Three-layer handler: domain (FlexmapError), validation (Pydantic), catch-all (Exception)
    - Per-field details gated by settings.expose_error_details
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from flexmap.config import get_settings
from flexmap.core.domain_types import ErrorSeverity
from flexmap.core.errors import FlexmapError
from flexmap.schemas.command import ErrorEnvelope

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_flexmap_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


async def default_error_handler(request: Request, exc: FlexmapError) -> JSONResponse:
    """Error hook for JSONHandler: render the wrapped error as the standard envelope."""
    if exc.http_status >= 500:
        logger.error(
            f"FlexmapError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
    else:
        logger.warning(
            f"FlexmapError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
    return _flexmap_error_response(exc)


def _flexmap_error_response(exc: FlexmapError) -> JSONResponse:
    include_details = get_settings().expose_error_details
    return JSONResponse(
        status_code=exc.http_status,
        content=ErrorEnvelope.model_validate(
            exc.to_response(include_details=include_details),
        ).model_dump(mode="json", exclude_unset=True),
    )


def _register_flexmap_error_handler(app: FastAPI) -> None:
    """Register flexmap domain error handler."""

    @app.exception_handler(FlexmapError)
    async def flexmap_error_handler(request: Request, exc: FlexmapError):
        """Handle all flexmap errors raised from routes."""
        logger.error(
            f"FlexmapError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return _flexmap_error_response(exc)


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
