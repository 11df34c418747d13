"""User repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select

from tbsa.api.dependencies import DBSession
from tbsa.core.permissions.models import Role
from tbsa.modules.users.models import AdministratorProfile, OwnerProfile, User


class UserRepository:
    """Repository for User database operations.

    Handles all database interactions for the User model and its
    administrator/owner profiles.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, user: User) -> User:
        """Create a new user.

        Args:
            user: User instance to create

        Returns:
            The created user with ID populated
        """
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def get_by_id(self, user_id: UUID) -> User | None:
        """Get a user by ID.

        Args:
            user_id: The user's UUID

        Returns:
            User if found, None otherwise
        """
        stmt = select(User).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email address (case-insensitive).

        Args:
            email: The user's email

        Returns:
            User if found, None otherwise
        """
        stmt = select(User).where(func.lower(User.email) == email.lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_users(
        self,
        organization_id: UUID | None = None,
        role_name: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[User], int]:
        """List users with optional organization and role filters.

        Args:
            organization_id: Restrict to one organization
            role_name: Restrict to users holding this role
            page: Page number (1-indexed)
            page_size: Number of items per page

        Returns:
            Tuple of (users list, total count)
        """
        stmt = select(User)
        if organization_id:
            stmt = stmt.where(User.organization_id == organization_id)
        if role_name:
            stmt = stmt.join(Role, Role.id == User.role_id).where(Role.name == role_name)

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = (await self.session.execute(count_stmt)).scalar_one()

        offset = (page - 1) * page_size
        stmt = stmt.order_by(User.created_at.desc()).offset(offset).limit(page_size)
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def get_role_by_name(self, name: str) -> Role | None:
        """Get a role by its unique name."""
        result = await self.session.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()

    async def get_or_create_owner_profile(self, user: User) -> OwnerProfile:
        """Return the user's owner profile, creating it when missing.

        Args:
            user: The user

        Returns:
            The owner profile
        """
        stmt = select(OwnerProfile).where(OwnerProfile.user_id == user.id)
        profile = (await self.session.execute(stmt)).scalar_one_or_none()
        if profile is None:
            profile = OwnerProfile(user=user)
            self.session.add(profile)
            await self.session.flush()
        return profile

    async def create_administrator_profile(
        self, user: User, company_name: str | None = None
    ) -> AdministratorProfile:
        """Attach an administrator profile to a user."""
        profile = AdministratorProfile(user=user, company_name=company_name)
        self.session.add(profile)
        await self.session.flush()
        return profile

    async def update(self, user: User) -> User:
        """Flush pending changes of a user.

        Args:
            user: User instance with updated fields

        Returns:
            The updated user
        """
        await self.session.flush()
        return user


# Type alias for dependency injection
UserRepo = Annotated[UserRepository, Depends(UserRepository)]
