"""Error Handlers — global exception handlers for the ministry API.

Invariants:
    - MinistryError → structured JSON with code, message, category, severity
    - RequestValidationError → 400 with field-level details
    - Exception (catch-all) → 500, never leaks internal details
    - 4xx domain errors log at WARNING; 5xx at ERROR

Design Decisions:
    - Three-layer handler: domain (MinistryError), validation (Pydantic), catch-all (Exception)
    - Extracted from main.py to keep the entry point's import fan-out small
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ministry.core.errors import ErrorSeverity, MinistryError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_ministry_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_ministry_error_handler(app: FastAPI) -> None:

    @app.exception_handler(MinistryError)
    async def ministry_error_handler(request: Request, exc: MinistryError):
        """Handle all domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"{type(exc).__name__}: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "member_id": exc.context.member_id,
            },
        )
        headers = None
        if exc.context.retry_after_ms:
            headers = {"Retry-After": str(max(1, exc.context.retry_after_ms // 1000))}
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(), headers=headers,
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

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
