"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import error_response, request_id_of, ErrorCodes
from auth.exceptions import (
    AccountNotFoundError,
    AuthError,
    DuplicateAccountError,
    InvalidCredentialError,
    InvalidTokenError,
    SessionExpiredError,
    UploadError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# (status, code) per error type; most specific class first
_AUTH_ERROR_MAP: list[tuple[type[AuthError], int, str]] = [
    (ValidationError, 400, ErrorCodes.VALIDATION_ERROR),
    (DuplicateAccountError, 409, ErrorCodes.ALREADY_EXISTS),
    (AccountNotFoundError, 404, ErrorCodes.NOT_FOUND),
    (InvalidCredentialError, 401, ErrorCodes.INVALID_CREDENTIALS),
    (SessionExpiredError, 401, ErrorCodes.SESSION_EXPIRED),
    (InvalidTokenError, 400, ErrorCodes.INVALID_TOKEN),
    (UploadError, 502, ErrorCodes.UPLOAD_FAILED),
]


def auth_error_response(exc: AuthError, request_id: str | None = None) -> JSONResponse:
    """Render an AuthError as a JSON error envelope.

    NotificationError, InternalError and anything unmapped become 500s that
    carry only the exception's safe message.
    """
    for error_type, status_code, code in _AUTH_ERROR_MAP:
        if isinstance(exc, error_type):
            break
    else:
        status_code, code = 500, ErrorCodes.INTERNAL_ERROR

    return JSONResponse(
        status_code=status_code,
        content=error_response(code, exc.message, request_id).model_dump(mode="json"),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        if exc.__cause__ is not None:
            logger.warning(f"{exc.kind}: {exc.__cause__!r}")
        return auth_error_response(exc, request_id_of(request))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content=error_response(
                ErrorCodes.VALIDATION_ERROR,
                "Request body is malformed",
                request_id_of(request),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return JSONResponse(
            status_code=500,
            content=error_response(
                ErrorCodes.INTERNAL_ERROR,
                "An internal error occurred",
                request_id_of(request),
            ).model_dump(mode="json"),
        )
