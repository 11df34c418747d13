"""Session management routes.

Users list and end their own sessions. When the session making the
request is among those ended, the auth cookies are cleared as well.
"""

import secrets
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Header, Query, Response

from tbsa.config import settings
from tbsa.core.auth.cookies import clear_auth_cookies
from tbsa.core.auth.dependencies import CurrentAuth
from tbsa.core.errors import ForbiddenError, UnauthorizedError
from tbsa.core.responses import ApiResponse, ok
from tbsa.modules.sessions.schemas import (
    CleanupResponse,
    InvalidationResponse,
    SessionResponse,
)
from tbsa.modules.sessions.services import InvalidationResult, SessionSvc


router = APIRouter(prefix="/auth", tags=["sessions"])


def _invalidation_response(
    result: InvalidationResult,
    response: Response,
) -> InvalidationResponse:
    if result.current_session_invalidated:
        clear_auth_cookies(response)
    return InvalidationResponse(
        invalidated_count=result.count,
        current_session_invalidated=result.current_session_invalidated,
    )


@router.get(
    "/sessions",
    response_model=ApiResponse[list[SessionResponse]],
    summary="List active sessions",
)
async def list_sessions(
    auth: CurrentAuth,
    service: SessionSvc,
) -> ApiResponse[list[SessionResponse]]:
    sessions = await service.list_sessions(auth.user_id)
    return ok(
        [
            SessionResponse.model_validate(s).model_copy(
                update={"is_current": s.id == auth.session_id}
            )
            for s in sessions
        ]
    )


@router.delete(
    "/sessions",
    response_model=ApiResponse[InvalidationResponse],
    summary="End all sessions",
    description="Ends every session of the current user, optionally keeping the current one.",
)
async def invalidate_all_sessions(
    auth: CurrentAuth,
    service: SessionSvc,
    response: Response,
    keep_current: Annotated[bool, Query()] = False,
) -> ApiResponse[InvalidationResponse]:
    result = await service.invalidate_all_sessions(
        auth.user_id,
        current_session_id=auth.session_id,
        keep_current=keep_current,
    )
    return ok(
        _invalidation_response(result, response),
        message=f"{result.count} session(s) ended",
    )


@router.delete(
    "/sessions/{session_id}",
    response_model=ApiResponse[InvalidationResponse],
    summary="End one session",
)
async def invalidate_session(
    session_id: UUID,
    auth: CurrentAuth,
    service: SessionSvc,
    response: Response,
) -> ApiResponse[InvalidationResponse]:
    result = await service.invalidate_session(
        auth.user_id,
        session_id,
        current_session_id=auth.session_id,
    )
    return ok(_invalidation_response(result, response), message="Session ended")


@router.post(
    "/cleanup-sessions",
    response_model=ApiResponse[CleanupResponse],
    summary="Delete dead sessions",
    description=(
        "Deletes expired and invalidated sessions. Requires the X-API-Key header; "
        "disabled when no cleanup key is configured."
    ),
)
async def cleanup_sessions(
    service: SessionSvc,
    x_api_key: Annotated[str | None, Header()] = None,
) -> ApiResponse[CleanupResponse]:
    if not settings.cleanup_api_key:
        raise ForbiddenError(
            "Session cleanup endpoint is disabled",
            error_code="CLEANUP_DISABLED",
        )
    if not x_api_key or not secrets.compare_digest(x_api_key, settings.cleanup_api_key):
        raise UnauthorizedError(
            "Invalid API key",
            error_code="INVALID_API_KEY",
        )

    deleted = await service.cleanup_expired_sessions()
    return ok(CleanupResponse(deleted=deleted))
