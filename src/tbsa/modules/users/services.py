"""User service for profile operations."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from tbsa.core.errors import NotFoundError
from tbsa.modules.users.models import User
from tbsa.modules.users.repos import UserRepo
from tbsa.modules.users.schemas import UserUpdate


logger = structlog.get_logger()


class UserService:
    """Service for reading and updating user accounts."""

    def __init__(self, repo: UserRepo) -> None:
        self.repo = repo

    async def get_user(self, user_id: UUID) -> User:
        """Get a user by ID.

        Raises:
            NotFoundError: If user not found
        """
        user = await self.repo.get_by_id(user_id)
        if not user:
            raise NotFoundError(
                "User not found",
                error_code="USER_NOT_FOUND",
                resource="user",
                resource_id=str(user_id),
            )
        return user

    async def update_profile(self, user: User, data: UserUpdate) -> User:
        """Apply a partial profile update.

        Args:
            user: The user to update
            data: Fields to change; unset fields are left alone

        Returns:
            The updated user
        """
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(user, field, value)

        if changes:
            await self.repo.update(user)
            logger.info("profile_updated", user_id=str(user.id), fields=sorted(changes))
        return user


# Type alias for dependency injection
UserSvc = Annotated[UserService, Depends(UserService)]
