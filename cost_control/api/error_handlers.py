# This file defines consistent API error payloads and exception handlers.
# Every endpoint returns the same error shape with a success flag and request trace fields.
# Validation, auth, lookup, and conflict failures are domain errors; anything else is a logged 500.

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Domain error type with structured API details."""

    def __init__(
        self,
        *,
        status_code: int,
        error_code: str,
        message: str,
        details: Any | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.details = details
        self.errors = errors
        super().__init__(message)


class RequestValidationFailed(APIError):
    def __init__(self, errors: list[dict[str, Any]], message: str = "Validation failed.") -> None:
        super().__init__(
            status_code=400,
            error_code="VALIDATION_ERROR",
            message=message,
            errors=errors,
        )


class AuthenticationRequired(APIError):
    def __init__(self, message: str = "Authentication required.") -> None:
        super().__init__(status_code=401, error_code="AUTHENTICATION_REQUIRED", message=message)


class NotFoundError(APIError):
    def __init__(self, error_code: str, message: str) -> None:
        super().__init__(status_code=404, error_code=error_code, message=message)


class ConflictError(APIError):
    def __init__(self, error_code: str, message: str) -> None:
        super().__init__(status_code=409, error_code=error_code, message=message)


def _request_id(request: Request) -> str:
    return str(getattr(request.state, "request_id", "unknown"))


def _error_body(
    *,
    request: Request,
    error_code: str,
    message: str,
    details: Any | None = None,
    errors: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    return {
        "success": False,
        "error_code": error_code,
        "message": message,
        "errors": errors,
        "details": details,
        "request_id": _request_id(request),
        "timestamp": datetime.now(tz=UTC).isoformat(),
    }


def _framework_violations(exc: RequestValidationError) -> list[dict[str, Any]]:
    violations: list[dict[str, Any]] = []
    for item in exc.errors():
        location = [str(part) for part in item.get("loc", ())]
        violations.append(
            {
                "field": ".".join(location[1:]) or (location[0] if location else "request"),
                "message": str(item.get("msg", "Invalid value.")),
                "location": location[0] if location else "request",
            }
        )
    return violations


def register_error_handlers(app: FastAPI, *, expose_error_details: bool = False) -> None:
    """Register global exception handlers."""

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(
                _error_body(
                    request=request,
                    error_code=exc.error_code,
                    message=exc.message,
                    details=exc.details,
                    errors=exc.errors,
                )
            ),
            headers={"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=_error_body(
                request=request,
                error_code="VALIDATION_ERROR",
                message="Invalid request parameters.",
                errors=_framework_violations(exc),
            ),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(
                request=request,
                error_code="HTTP_ERROR",
                message=str(exc.detail),
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error on %s %s (request_id=%s)",
            request.method,
            request.url.path,
            _request_id(request),
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                request=request,
                error_code="INTERNAL_SERVER_ERROR",
                message="The server encountered an unexpected error.",
                details=str(exc) if expose_error_details else None,
            ),
        )
