"""Exception handlers producing the API error envelope.

Every error leaves the API as ``{"success": false, "error", "code", ...}``:

- ``AppException`` subclasses keep their status code and error code
- request validation failures become 400 with field-level details
- framework HTTP errors (unknown route, wrong method) keep their status
- anything else becomes a generic 500 and is logged with its traceback
"""

from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tbsa.config import settings
from tbsa.core.errors.exceptions import AppException, UnauthorizedError
from tbsa.core.responses import ErrorResponse, FieldError


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()

# 401s that leave the session usable, so the client keeps its cookies
COOKIE_PRESERVING_CODES = frozenset({"FINGERPRINT_MISMATCH"})


def _get_request_id(request: Request) -> str | None:
    """Extract the request ID from request state if available."""
    return getattr(request.state, "request_id", None)


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    code: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    content = ErrorResponse(
        error=message,
        code=code,
        details=details or None,
        request_id=_get_request_id(request),
    ).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=content)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle application-specific exceptions.

    A 401 raised for a request that carried an auth cookie also expires the
    auth cookies so the browser stops sending a dead token. Codes in
    ``COOKIE_PRESERVING_CODES`` leave the session live and keep them.
    """
    logger.warning(
        "app_exception",
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        path=str(request.url.path),
        details=exc.details,
    )

    response = _error_response(
        request,
        exc.status_code,
        exc.message,
        exc.error_code,
        exc.details,
    )

    if (
        isinstance(exc, UnauthorizedError)
        and exc.error_code not in COOKIE_PRESERVING_CODES
        and (
            request.cookies.get(settings.auth_cookie_name)
            or request.cookies.get(settings.refresh_cookie_name)
        )
    ):
        from tbsa.core.auth.cookies import clear_auth_cookies  # noqa: PLC0415

        clear_auth_cookies(response)

    return response


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with field-level detail."""
    errors: list[FieldError] = []

    for error in exc.errors():
        loc = error.get("loc", ())
        # Skip "body"/"query" prefix in field path
        field_parts = [str(part) for part in loc if part not in ("body", "query", "path")]
        field = ".".join(field_parts) if field_parts else "unknown"

        errors.append(
            FieldError(
                field=field,
                message=error.get("msg", "Invalid value"),
                type=error.get("type"),
            )
        )

    logger.warning(
        "validation_error",
        path=str(request.url.path),
        error_count=len(errors),
    )

    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "Request validation failed",
        "VALIDATION_FAILED",
        {"errors": [e.model_dump(exclude_none=True) for e in errors]},
    )


HTTP_ERROR_CODES = {
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Wrap errors raised by the framework itself in the envelope."""
    response = _error_response(
        request,
        exc.status_code,
        str(exc.detail),
        HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions.

    The actual error details are logged but not exposed to clients.
    """
    logger.exception(
        "unhandled_exception",
        path=str(request.url.path),
        error_type=type(exc).__name__,
    )

    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred",
        "INTERNAL_ERROR",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Call this function during app initialization:

        app = FastAPI()
        register_exception_handlers(app)
    """
    app.add_exception_handler(
        AppException, cast("ExceptionHandler", app_exception_handler)
    )
    app.add_exception_handler(
        StarletteHTTPException, cast("ExceptionHandler", http_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast("ExceptionHandler", validation_exception_handler)
    )
    app.add_exception_handler(Exception, generic_exception_handler)
