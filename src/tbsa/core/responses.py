"""Response envelope shared by every ``/api`` endpoint.

Successful responses look like ``{"success": true, "data": ..., "message": ...}``
and failures like ``{"success": false, "error": ..., "code": ..., "details": ...}``.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel


T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope."""

    success: bool = True
    data: T
    message: str | None = None


class FieldError(BaseModel):
    """Represents a single field validation error."""

    field: str
    message: str
    type: str | None = None


class ErrorResponse(BaseModel):
    """Failure envelope.

    Attributes:
        success: Always False
        error: Human-readable message safe to show to the client
        code: Machine-readable error code
        details: Extra context, e.g. field errors for validation failures
        request_id: Request ID for correlating with server logs
    """

    success: bool = False
    error: str
    code: str
    details: dict[str, Any] | None = None
    request_id: str | None = None


def ok(data: T, message: str | None = None) -> ApiResponse[T]:
    """Wrap a payload in the success envelope."""
    return ApiResponse[T](data=data, message=message)
