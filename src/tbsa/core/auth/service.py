"""Authentication service for registration, login, refresh and logout."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy import select

from tbsa.api.dependencies import DBSession
from tbsa.core.auth.backend import hash_password, hash_token, verify_password
from tbsa.core.auth.schemas import TokenPair
from tbsa.core.constants import ADMINISTRATOR_ROLE, OWNER_ROLE
from tbsa.core.errors import ConflictError, InternalError, NotFoundError, UnauthorizedError
from tbsa.core.permissions.models import Role
from tbsa.core.utils.text import generate_slug, unique_suffix
from tbsa.modules.organizations.models import Organization
from tbsa.modules.sessions.services import ClientInfo, SessionService
from tbsa.modules.subscriptions.models import SubscriptionPlan
from tbsa.modules.users.models import User
from tbsa.modules.users.repos import UserRepository


logger = structlog.get_logger()

# Same message for unknown email and wrong password to prevent enumeration
INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    """Service for authentication operations.

    Handles owner and organization registration, login, token refresh,
    and logout. Session bookkeeping is delegated to SessionService.
    """

    def __init__(self, db: DBSession) -> None:
        self.db = db
        self.user_repo = UserRepository(db)
        self.sessions = SessionService(db)

    async def register_owner(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        client: ClientInfo,
        phone: str | None = None,
    ) -> tuple[User, TokenPair]:
        """Register an apartment owner and open a session.

        The owner joins an organization later by redeeming an invite code.

        Returns:
            Tuple of (user, token_pair)

        Raises:
            ConflictError: If the email is already registered
        """
        await self._ensure_email_available(email)
        role = await self._get_role(OWNER_ROLE)

        user = await self.user_repo.create(
            User(
                email=email,
                password_hash=hash_password(password),
                first_name=first_name,
                last_name=last_name,
                phone=phone,
                role_id=role.id,
            )
        )
        await self.user_repo.get_or_create_owner_profile(user)

        logger.info("user_registered", user_id=str(user.id), role=OWNER_ROLE)
        tokens = await self.sessions.create_session(user, client)
        return user, tokens

    async def register_organization(
        self,
        organization_name: str,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        client: ClientInfo,
        phone: str | None = None,
        company_name: str | None = None,
        plan_name: str | None = None,
    ) -> tuple[User, TokenPair]:
        """Register an organization together with its first administrator.

        Returns:
            Tuple of (administrator user, token_pair)

        Raises:
            ConflictError: If the email is already registered
            NotFoundError: If the requested subscription plan does not exist
        """
        await self._ensure_email_available(email)
        role = await self._get_role(ADMINISTRATOR_ROLE)

        plan: SubscriptionPlan | None = None
        if plan_name:
            result = await self.db.execute(
                select(SubscriptionPlan).where(
                    SubscriptionPlan.name == plan_name,
                    SubscriptionPlan.is_active.is_(True),
                )
            )
            plan = result.scalar_one_or_none()
            if plan is None:
                raise NotFoundError(
                    "Subscription plan not found",
                    error_code="PLAN_NOT_FOUND",
                    resource="subscription_plan",
                    resource_id=plan_name,
                )

        organization = Organization(
            name=organization_name,
            slug=await self._available_slug(organization_name),
            subscription_plan=plan,
        )
        self.db.add(organization)
        await self.db.flush()

        user = await self.user_repo.create(
            User(
                email=email,
                password_hash=hash_password(password),
                first_name=first_name,
                last_name=last_name,
                phone=phone,
                role_id=role.id,
                organization_id=organization.id,
            )
        )
        await self.user_repo.create_administrator_profile(user, company_name)

        logger.info(
            "organization_registered",
            organization_id=str(organization.id),
            user_id=str(user.id),
            plan=plan.name if plan else None,
        )
        tokens = await self.sessions.create_session(user, client)
        return user, tokens

    async def login(
        self,
        email: str,
        password: str,
        client: ClientInfo,
    ) -> tuple[User, TokenPair]:
        """Authenticate a user with email and password.

        Returns:
            Tuple of (user, token_pair)

        Raises:
            UnauthorizedError: If credentials are invalid or the account is
                deactivated
        """
        user = await self.user_repo.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.info("login_failed", email=email)
            raise UnauthorizedError(
                INVALID_CREDENTIALS,
                error_code="INVALID_CREDENTIALS",
            )

        if not user.is_active:
            raise UnauthorizedError(
                "Account is deactivated",
                error_code="ACCOUNT_INACTIVE",
            )

        tokens = await self.sessions.create_session(user, client)
        return user, tokens

    async def refresh(
        self,
        refresh_token: str | None,
        client: ClientInfo,
    ) -> tuple[User, TokenPair]:
        """Rotate the refresh token and issue a fresh access token.

        Raises:
            UnauthorizedError: If no refresh token was presented or it is
                not valid
        """
        if not refresh_token:
            raise UnauthorizedError(
                "Missing refresh token",
                error_code="MISSING_REFRESH_TOKEN",
            )
        return await self.sessions.refresh_session(refresh_token, client)

    async def logout(
        self,
        refresh_token: str | None = None,
        user_id: UUID | None = None,
        session_id: UUID | None = None,
    ) -> None:
        """End the session identified by a refresh token or an access token.

        Unknown or already ended sessions are ignored.
        """
        if refresh_token:
            login_session = await self.sessions.repo.get_by_token_hash(
                hash_token(refresh_token)
            )
        elif session_id:
            login_session = await self.sessions.repo.get_by_id(session_id)
        else:
            return

        if login_session is None:
            return
        if user_id is not None and login_session.user_id != user_id:
            return

        await self.sessions.repo.invalidate(login_session)
        logger.info(
            "user_logged_out",
            user_id=str(login_session.user_id),
            session_id=str(login_session.id),
        )

    async def _ensure_email_available(self, email: str) -> None:
        existing = await self.user_repo.get_by_email(email)
        if existing:
            raise ConflictError(
                "Registration failed. If this email is already registered, "
                "please use the login page.",
                error_code="REGISTRATION_FAILED",
            )

    async def _get_role(self, name: str) -> Role:
        role = await self.user_repo.get_role_by_name(name)
        if role is None:
            logger.error("role_not_configured", role=name)
            raise InternalError(
                "Roles are not configured",
                error_code="ROLE_NOT_CONFIGURED",
            )
        return role

    async def _available_slug(self, name: str) -> str:
        slug = generate_slug(name) or "organization"
        result = await self.db.execute(
            select(Organization.id).where(Organization.slug == slug)
        )
        if result.scalar_one_or_none() is None:
            return slug
        return unique_suffix(slug)


# Type alias for dependency injection
AuthSvc = Annotated[AuthService, Depends(AuthService)]
