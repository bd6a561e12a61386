"""
User directory - public lookup, listing and owner-scoped updates.
"""

import logging
import math
from dataclasses import dataclass

from .exceptions import ForbiddenFailure, NotFoundFailure, ValidationFailure
from .ports import User, UserRepository
from .validation import USERNAME_RULES, collect_errors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserPage:
    """One page of the user listing."""

    content: list[User]
    page: int
    size: int
    total_pages: int


@dataclass
class UserService:
    """Domain service for reading and updating ACTIVE users."""

    repository: UserRepository

    def get_user(self, user_id: int) -> User:
        """
        Look up an ACTIVE user by id.

        Raises:
            NotFoundFailure: If no ACTIVE user has this id
        """
        user = self.repository.find_by_id(user_id)
        if user is None or user.inactive:
            raise NotFoundFailure()
        return user

    def list_users(self, page: int, size: int, exclude_id: int | None = None) -> UserPage:
        """
        Return one page of ACTIVE users ordered by id.

        Args:
            page: Zero-based page index
            size: Page size
            exclude_id: Caller's own id, left out of the listing
        """
        users, total = self.repository.list_active(
            offset=page * size, limit=size, exclude_id=exclude_id
        )
        return UserPage(
            content=users,
            page=page,
            size=size,
            total_pages=math.ceil(total / size),
        )

    def update_user(self, actor_id: int, user_id: int, username: str | None = None) -> None:
        """
        Apply a partial update to the caller's own record.

        Args:
            actor_id: Authenticated user id
            user_id: Addressed user id
            username: New username, or None to leave it unchanged

        Raises:
            ForbiddenFailure: If the caller does not own the record
            ValidationFailure: If the new username breaks a username rule
        """
        if actor_id != user_id:
            raise ForbiddenFailure()

        if username is None:
            return

        errors = collect_errors([("username", username, USERNAME_RULES)])
        if errors:
            raise ValidationFailure(errors)

        if not self.repository.update_username(user_id, username):
            raise ForbiddenFailure()
        logger.info("User %s updated username", user_id)
