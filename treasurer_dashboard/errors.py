"""API error taxonomy.

Every error a handler or dependency raises on purpose is an `ApiError`. They all
render as `{"message": ...}` with the class status code; nothing else about the
failure (driver errors, stack traces) reaches the client.
"""

from __future__ import annotations

from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ApiError(Exception):
    status_code: int = 500
    message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def headers(self) -> Optional[Dict[str, str]]:
        return None


class Unauthenticated(ApiError):
    """Missing, malformed, forged or expired bearer token."""

    status_code = 401
    message = "Unauthorized"

    def headers(self) -> Optional[Dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class Forbidden(ApiError):
    status_code = 403
    message = "Access denied"


class Conflict(ApiError):
    status_code = 400
    message = "User already exists"


class InvalidCredentials(ApiError):
    # Same message for unknown username and wrong password.
    status_code = 400
    message = "Invalid credentials"


class ValidationFailure(ApiError):
    status_code = 400
    message = "Missing or invalid fields"


class StoreFailure(ApiError):
    status_code = 500
    message = "Internal Server Error"


def _render(exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message},
        headers=exc.headers(),
    )


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return _render(exc)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted(
        {
            str(err["loc"][-1])
            for err in exc.errors()
            if err.get("loc") and err["loc"][0] == "body" and len(err["loc"]) > 1
        }
    )
    if fields:
        return _render(ValidationFailure(f"Missing or invalid fields: {', '.join(fields)}"))
    return _render(ValidationFailure())


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
