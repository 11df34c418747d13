"""Authentication API routes.

Provides endpoints for:
- Owner and organization registration
- Login/logout
- Token refresh
- The current user's identity and permission snapshot

Tokens are delivered as HTTP-only cookies, never in the response body.
"""

from fastapi import APIRouter, Request, Response, status

from tbsa.config import settings
from tbsa.core.auth.backend import create_fingerprint, decode_token
from tbsa.core.auth.cookies import clear_auth_cookies, set_auth_cookies
from tbsa.core.auth.dependencies import CurrentAuth
from tbsa.core.auth.service import AuthSvc
from tbsa.core.logging import get_client_ip
from tbsa.core.responses import ApiResponse, ok
from tbsa.modules.sessions.services import ClientInfo
from tbsa.modules.users.schemas import (
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    OrganizationRegisterRequest,
    RefreshTokenRequest,
    RegisterRequest,
    UserResponse,
)


router = APIRouter(prefix="/auth", tags=["auth"])


def get_client_info(request: Request) -> ClientInfo:
    """Build the client description used to fingerprint a session."""
    user_agent = request.headers.get("User-Agent")
    ip_address = get_client_ip(request)
    return ClientInfo(
        user_agent=user_agent,
        ip_address=ip_address,
        fingerprint=create_fingerprint(
            user_agent,
            ip_address,
            request.headers.get("Accept-Language"),
            request.headers.get("Accept-Encoding"),
        ),
    )


@router.post(
    "/register",
    response_model=ApiResponse[LoginResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register an owner account",
    description=(
        "Creates an owner account and signs it in. "
        "Owners claim apartments with invite codes."
    ),
)
async def register(
    data: RegisterRequest,
    service: AuthSvc,
    request: Request,
    response: Response,
) -> ApiResponse[LoginResponse]:
    """Register an apartment owner."""
    user, tokens = await service.register_owner(
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
        client=get_client_info(request),
    )
    set_auth_cookies(response, tokens)

    return ok(
        LoginResponse(
            user=UserResponse.model_validate(user),
            session_id=tokens.session_id,
            expires_in=tokens.expires_in,
        ),
        message="Account created",
    )


@router.post(
    "/register/organization",
    response_model=ApiResponse[LoginResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register an organization",
    description=(
        "Creates an organization and its first administrator, "
        "and signs the administrator in."
    ),
)
async def register_organization(
    data: OrganizationRegisterRequest,
    service: AuthSvc,
    request: Request,
    response: Response,
) -> ApiResponse[LoginResponse]:
    """Register an organization with its administrator."""
    user, tokens = await service.register_organization(
        organization_name=data.organization_name,
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
        company_name=data.company_name,
        plan_name=data.subscription_plan,
        client=get_client_info(request),
    )
    set_auth_cookies(response, tokens)

    return ok(
        LoginResponse(
            user=UserResponse.model_validate(user),
            session_id=tokens.session_id,
            expires_in=tokens.expires_in,
        ),
        message="Organization created",
    )


@router.post(
    "/login",
    response_model=ApiResponse[LoginResponse],
    summary="Login with email and password",
    description="Opens a session and sets the auth and refresh cookies.",
)
async def login(
    data: LoginRequest,
    service: AuthSvc,
    request: Request,
    response: Response,
) -> ApiResponse[LoginResponse]:
    """Login with email and password."""
    user, tokens = await service.login(
        email=data.email,
        password=data.password,
        client=get_client_info(request),
    )
    set_auth_cookies(response, tokens)

    return ok(
        LoginResponse(
            user=UserResponse.model_validate(user),
            session_id=tokens.session_id,
            expires_in=tokens.expires_in,
        )
    )


@router.post(
    "/refresh",
    response_model=ApiResponse[LoginResponse],
    summary="Refresh access token",
    description=(
        "Uses the refresh cookie (or a refresh token in the body) to issue a new "
        "access token. The refresh token is rotated."
    ),
)
async def refresh_token(
    service: AuthSvc,
    request: Request,
    response: Response,
    data: RefreshTokenRequest | None = None,
) -> ApiResponse[LoginResponse]:
    """Refresh the access token."""
    token = request.cookies.get(settings.refresh_cookie_name)
    if not token and data is not None:
        token = data.refresh_token

    user, tokens = await service.refresh(token, client=get_client_info(request))
    set_auth_cookies(response, tokens)

    return ok(
        LoginResponse(
            user=UserResponse.model_validate(user),
            session_id=tokens.session_id,
            expires_in=tokens.expires_in,
        )
    )


@router.post(
    "/logout",
    response_model=ApiResponse[None],
    summary="Logout",
    description="Ends the current session. The auth cookies are always cleared.",
)
async def logout(
    service: AuthSvc,
    request: Request,
    response: Response,
) -> ApiResponse[None]:
    """Logout from the current session."""
    refresh = request.cookies.get(settings.refresh_cookie_name)
    access = request.cookies.get(settings.auth_cookie_name)
    token_data = decode_token(access) if access else None

    await service.logout(
        refresh_token=refresh,
        user_id=token_data.user_id if token_data else None,
        session_id=token_data.session_id if token_data else None,
    )
    clear_auth_cookies(response)

    return ok(None, message="Logged out")


@router.get(
    "/me",
    response_model=ApiResponse[CurrentUserResponse],
    summary="Get current user",
    description="Returns the authenticated user with the role and permissions of the session.",
)
async def get_me(auth: CurrentAuth) -> ApiResponse[CurrentUserResponse]:
    """Get the current user and permission snapshot."""
    return ok(
        CurrentUserResponse(
            user=UserResponse.model_validate(auth.user),
            role=auth.role,
            permissions=auth.permissions,
            session_id=auth.session_id,
        )
    )
