"""Interface layer errors and their HTTP rendering.

Every failure is returned as::

    {"success": false, "error": {"kind": ..., "message": ...}, "revert": true}

``revert`` tells clients to restore the state they showed before the
action, since a failed mutation never partially applies.
"""

import logfire
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from tally.domain.error import (
    DomainError,
    NotFoundError,
    QuotaExceededError,
    StorageError,
    ValidationError,
)
from tally.util.clock import utc_now

QUOTA_MESSAGE = "Vote limit reached. Sign in for unlimited voting."
RETRY_MESSAGE = "Couldn't register your vote, please retry."


class ErrorDetail(BaseModel):
    """Machine-readable kind plus a message fit for display."""

    kind: str
    message: str


class ErrorBody(BaseModel):
    """Error response body."""

    success: bool = False
    error: ErrorDetail
    revert: bool = True


def error_response(
    status_code: int,
    kind: str,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorBody(error=ErrorDetail(kind=kind, message=message))
    return JSONResponse(
        status_code=status_code, content=body.model_dump(), headers=headers
    )


async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, exc.kind, str(exc))


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()))
        message = f"{location}: {errors[0].get('msg', 'invalid value')}"
    else:
        message = "Invalid request"
    return error_response(status.HTTP_400_BAD_REQUEST, ValidationError.kind, message)


async def handle_quota_exceeded(
    request: Request, exc: QuotaExceededError
) -> JSONResponse:
    headers = None
    if exc.window_reset_at is not None:
        seconds = max(int((exc.window_reset_at - utc_now()).total_seconds()), 0)
        headers = {"Retry-After": str(seconds)}
    return error_response(
        status.HTTP_429_TOO_MANY_REQUESTS, exc.kind, QUOTA_MESSAGE, headers=headers
    )


async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, exc.kind, str(exc))


async def handle_storage_error(request: Request, exc: StorageError) -> JSONResponse:
    logfire.warn(
        "Request failed on storage", path=request.url.path, kind=exc.kind, error=str(exc)
    )
    return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc.kind, RETRY_MESSAGE)


async def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    logfire.error("Unhandled domain error", path=request.url.path, kind=exc.kind)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.kind, str(exc))


def register_error_handlers(app: FastAPI) -> None:
    """Map domain errors to HTTP responses.

    Starlette picks the handler of the closest class in the exception's
    MRO, so ConcurrencyConflict falls under StorageError.
    """
    app.add_exception_handler(ValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(QuotaExceededError, handle_quota_exceeded)  # type: ignore[arg-type]
    app.add_exception_handler(NotFoundError, handle_not_found)  # type: ignore[arg-type]
    app.add_exception_handler(StorageError, handle_storage_error)  # type: ignore[arg-type]
    app.add_exception_handler(DomainError, handle_domain_error)  # type: ignore[arg-type]
