"""Request context middleware.

This module provides middleware for:
- Binding the authenticated user to the logging context
- Request tracing with unique IDs
"""

import uuid

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from tbsa.config import settings
from tbsa.core.auth.backend import decode_token


logger = structlog.get_logger()


class AuthContextMiddleware(BaseHTTPMiddleware):
    """Middleware that exposes the token's identity to downstream code.

    Decodes the access token (cookie first, then Bearer header) without
    verifying its session and stores ``user_id`` and ``organization_id``
    on ``request.state`` and in the structlog context. Authorization is
    still decided by the route dependencies.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process the request and bind the identity context.

        Args:
            request: The incoming request
            call_next: The next middleware/handler

        Returns:
            The response from the handler
        """
        token = request.cookies.get(settings.auth_cookie_name)
        if not token:
            auth_header = request.headers.get("Authorization")
            if auth_header and auth_header.startswith("Bearer "):
                token = auth_header.split(" ", 1)[1]

        if token:
            token_data = decode_token(token)
            if token_data:
                request.state.user_id = token_data.user_id
                request.state.organization_id = token_data.organization_id

                structlog.contextvars.bind_contextvars(
                    user_id=str(token_data.user_id),
                    organization_id=(
                        str(token_data.organization_id)
                        if token_data.organization_id
                        else None
                    ),
                )

        return await call_next(request)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware that adds a unique request ID to each request.

    The request ID is added to:
    - request.state.request_id
    - Response header X-Request-ID
    - Structlog context
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process the request and add request ID.

        Args:
            request: The incoming request
            call_next: The next middleware/handler

        Returns:
            The response with X-Request-ID header
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)

        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars(
                "request_id", "user_id", "organization_id"
            )

        response.headers["X-Request-ID"] = request_id
        return response
