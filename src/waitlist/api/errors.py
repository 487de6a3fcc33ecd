"""
Error responses - Single mapping from exceptions to HTTP responses.

Every domain exception class maps to exactly one (status, error, message)
triple here. Messages are client-safe; internal detail is only logged.
"""

import logging
from dataclasses import dataclass

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from waitlist.api.models import ErrorResponse
from waitlist.domain.exceptions import (
    DuplicateEntry,
    EmailQuotaExceeded,
    EmailSendFailed,
    LeaderboardUnavailable,
    LinkGenerationFailed,
    ProfileNotFound,
    RateLimited,
    Unauthorized,
    ValidationErrorKind,
    ValidationFailed,
    WaitlistError,
)

logger = logging.getLogger(__name__)


class UnsupportedMediaType(Exception):
    """Request body is not declared as application/json."""

    pass


@dataclass(frozen=True)
class ErrorSpec:
    status_code: int
    error: str
    message: str


INTERNAL_ERROR = ErrorSpec(
    status.HTTP_500_INTERNAL_SERVER_ERROR,
    "internal_server_error",
    "Something went wrong. Please try again later.",
)

METHOD_NOT_ALLOWED = ErrorSpec(
    status.HTTP_405_METHOD_NOT_ALLOWED,
    "method_not_allowed",
    "Method not allowed on this endpoint.",
)

INVALID_CONTENT_TYPE = ErrorSpec(
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    "invalid_content_type",
    "Content-Type must be application/json.",
)

VALIDATION_ERRORS: dict[ValidationErrorKind, ErrorSpec] = {
    ValidationErrorKind.INVALID_BODY: ErrorSpec(
        status.HTTP_400_BAD_REQUEST, "invalid_body", "Request body must be a JSON object."
    ),
    ValidationErrorKind.FULL_NAME_REQUIRED: ErrorSpec(
        status.HTTP_400_BAD_REQUEST, "missing_field", "Full name is required."
    ),
    ValidationErrorKind.EMAIL_REQUIRED: ErrorSpec(
        status.HTTP_400_BAD_REQUEST, "missing_field", "Email is required."
    ),
    ValidationErrorKind.FULL_NAME_TOO_LONG: ErrorSpec(
        status.HTTP_400_BAD_REQUEST, "field_too_long", "Full name is too long. Please shorten it."
    ),
    ValidationErrorKind.EMAIL_TOO_LONG: ErrorSpec(
        status.HTTP_400_BAD_REQUEST, "field_too_long", "Email is too long. Please shorten it."
    ),
    ValidationErrorKind.BRAND_NAME_TOO_LONG: ErrorSpec(
        status.HTTP_400_BAD_REQUEST, "field_too_long", "Brand name is too long. Please shorten it."
    ),
    ValidationErrorKind.INVALID_EMAIL_FORMAT: ErrorSpec(
        422, "invalid_email", "Please enter a valid email address."
    ),
}

DOMAIN_ERRORS: dict[type[WaitlistError], ErrorSpec] = {
    DuplicateEntry: ErrorSpec(
        status.HTTP_409_CONFLICT,
        "duplicate_entry",
        "This email is already on the waitlist. Check your spam folder for our email.",
    ),
    LinkGenerationFailed: ErrorSpec(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "magic_link_error",
        "You have joined the waitlist but we could not create your dashboard link. "
        "Please contact support.",
    ),
    EmailQuotaExceeded: ErrorSpec(
        status.HTTP_501_NOT_IMPLEMENTED,
        "email_quota_exceeded",
        "You have joined the waitlist but our daily email quota is reached. "
        "Check back in 24 hours.",
    ),
    EmailSendFailed: ErrorSpec(
        status.HTTP_502_BAD_GATEWAY,
        "email_send_failed",
        "You have joined the waitlist but we couldn't send your confirmation email. "
        "Please contact support.",
    ),
    ProfileNotFound: ErrorSpec(
        status.HTTP_404_NOT_FOUND,
        "profile_not_found",
        "No waitlist entry found for this account.",
    ),
    LeaderboardUnavailable: ErrorSpec(
        status.HTTP_400_BAD_REQUEST,
        "leaderboard_unavailable",
        "Could not load the leaderboard. Please try again later.",
    ),
}

UNAUTHORIZED_ERRORS: dict[str, ErrorSpec] = {
    Unauthorized.MISSING: ErrorSpec(
        status.HTTP_401_UNAUTHORIZED, "unauthorized", "Missing or malformed bearer token."
    ),
    Unauthorized.INVALID_TOKEN: ErrorSpec(
        status.HTTP_401_UNAUTHORIZED, "invalid_token", "Invalid or expired token."
    ),
}


def error_response(
    spec: ErrorSpec, field: str | None = None, headers: dict[str, str] | None = None
) -> JSONResponse:
    body = ErrorResponse(error=spec.error, message=spec.message, field=field)
    return JSONResponse(
        status_code=spec.status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def response_for(exc: WaitlistError) -> JSONResponse:
    """Build the HTTP response for a domain exception."""
    if isinstance(exc, ValidationFailed):
        return error_response(VALIDATION_ERRORS[exc.kind], field=exc.kind.field)

    if isinstance(exc, RateLimited):
        minutes = max(1, round(exc.window_seconds / 60))
        spec = ErrorSpec(
            status.HTTP_429_TOO_MANY_REQUESTS,
            "rate_limit_exceeded",
            f"Too many requests. Please wait {minutes} minute{'s' if minutes != 1 else ''}.",
        )
        return error_response(spec, headers={"Retry-After": str(exc.window_seconds)})

    if isinstance(exc, Unauthorized):
        spec = UNAUTHORIZED_ERRORS.get(exc.reason, UNAUTHORIZED_ERRORS[Unauthorized.MISSING])
        return error_response(spec, headers={"WWW-Authenticate": "Bearer"})

    for exc_type in type(exc).__mro__:
        if exc_type in DOMAIN_ERRORS:
            return error_response(DOMAIN_ERRORS[exc_type])

    logger.error("No response mapping for %s", type(exc).__name__)
    return error_response(INTERNAL_ERROR)


async def waitlist_error_handler(request: Request, exc: WaitlistError) -> JSONResponse:
    logger.info("%s %s -> %s", request.method, request.url.path, type(exc).__name__)
    return response_for(exc)


async def unsupported_media_type_handler(
    request: Request, exc: UnsupportedMediaType
) -> JSONResponse:
    logger.info("Rejected Content-Type %r on %s", str(exc), request.url.path)
    return error_response(INVALID_CONTENT_TYPE)


async def routing_error_handler(request: Request, exc: StarletteHTTPException):
    """Replace the default 405 body; defer every other HTTP error to FastAPI."""
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return error_response(METHOD_NOT_ALLOWED, headers=exc.headers)
    return await http_exception_handler(request, exc)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(WaitlistError, waitlist_error_handler)
    app.add_exception_handler(UnsupportedMediaType, unsupported_media_type_handler)
    app.add_exception_handler(StarletteHTTPException, routing_error_handler)
