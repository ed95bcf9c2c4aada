"""Domain errors and RFC 7807 problem-details responses."""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clubber.telemetry.sentry import capture_exception

logger = logging.getLogger(__name__)

PROBLEM_CONTENT_TYPE = "application/problem+json"

PROBLEM_TYPES = {
    400: "https://tools.ietf.org/html/rfc7231#section-6.5.1",
    401: "https://tools.ietf.org/html/rfc7235#section-3.1",
    403: "https://tools.ietf.org/html/rfc7231#section-6.5.3",
    404: "https://tools.ietf.org/html/rfc7231#section-6.5.4",
    409: "https://tools.ietf.org/html/rfc7231#section-6.5.8",
    429: "https://tools.ietf.org/html/rfc6585#section-4",
    500: "https://tools.ietf.org/html/rfc7231#section-6.6.1",
    503: "https://tools.ietf.org/html/rfc7231#section-6.6.4",
}

DEFAULT_TITLES = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    429: "Too Many Requests",
    500: "An unexpected error occurred.",
    503: "Service Unavailable",
}


class ClubberError(Exception):
    """Base class for errors that map to a problem response."""

    status_code = 400
    title = "Bad Request"

    def __init__(self, detail: str, title: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        if title:
            self.title = title


class NotFoundError(ClubberError):
    status_code = 404
    title = "Not Found"


class ConflictError(ClubberError):
    status_code = 409
    title = "Conflict"


class AuthenticationError(ClubberError):
    status_code = 401
    title = "Unauthorized"


def problem_response(
    status: int,
    detail: str,
    instance: str,
    title: Optional[str] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    """Build an application/problem+json response."""
    return JSONResponse(
        status_code=status,
        content={
            "type": PROBLEM_TYPES.get(status, "about:blank"),
            "title": title or DEFAULT_TITLES.get(status, "Error"),
            "status": status,
            "detail": detail,
            "instance": instance,
        },
        media_type=PROBLEM_CONTENT_TYPE,
        headers=headers,
    )


async def clubber_error_handler(request: Request, exc: ClubberError) -> JSONResponse:
    return problem_response(exc.status_code, exc.detail, request.url.path, title=exc.title)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return problem_response(
        exc.status_code, detail, request.url.path, headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return problem_response(400, errors or "Invalid request.", request.url.path, title="Validation failed")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"An unhandled exception occurred on {request.url.path}: {exc}", exc_info=exc)
    capture_exception(exc)
    return problem_response(500, str(exc), request.url.path)


def register_exception_handlers(app: FastAPI) -> None:
    """Route every error through problem-details."""
    app.add_exception_handler(ClubberError, clubber_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
