"""
Business logic for users.

``UserService`` is the only place where user rules live: the minimum
age at registration and email uniqueness.  The uniqueness check here
is advisory; two concurrent registrations with the same address can
both pass it, and the unique constraint on ``users.email`` rejects the
second insert.  The repository reports that case with the same
``DuplicateEmailError`` so callers see a single error either way.
"""

import logging
from typing import List, Optional, Tuple

from user_api.app.core.errors import DuplicateEmailError, NotFoundError, ValidationError
from user_api.app.repositories.user_repository import UserRepository
from user_api.app.schemas.user import UserCreate, UserRead, UserUpdate

logger = logging.getLogger(__name__)

MINIMUM_AGE = 18


class UserService:
    """Service for managing users on top of a ``UserRepository``."""

    def __init__(self, repository: UserRepository) -> None:
        self._repository = repository

    def create_user(self, data: UserCreate) -> UserRead:
        """Register a new user.

        Raises ``DuplicateEmailError`` if the email is taken and
        ``ValidationError`` if the user is younger than ``MINIMUM_AGE``.
        """
        if self._find_by_email(data.email) is not None:
            raise DuplicateEmailError()
        if data.age < MINIMUM_AGE:
            raise ValidationError(f"age must be at least {MINIMUM_AGE}")
        user = self._repository.create(data)
        logger.info("Created user %s", user.id)
        return user

    def get_user(self, user_id: int) -> UserRead:
        return self._repository.get_by_id(user_id)

    def list_users(self, page: int, page_size: int) -> Tuple[List[UserRead], int]:
        """Return one page of users and the total number of users.

        ``page`` is 1-based.  Bounds are not checked here; the API layer
        clamps both values before calling.
        """
        offset = (page - 1) * page_size
        users = self._repository.get_all(page_size, offset)
        total = self._repository.count()
        return users, total

    def update_user(self, user_id: int, data: UserUpdate) -> UserRead:
        """Apply a partial update to an existing user.

        Raises ``NotFoundError`` if the user does not exist and
        ``DuplicateEmailError`` if the new email belongs to someone
        else.  Keeping one's own email is not a conflict.
        """
        self._repository.get_by_id(user_id)
        if data.email is not None:
            owner = self._find_by_email(data.email)
            if owner is not None and owner.id != user_id:
                raise DuplicateEmailError()
        user = self._repository.update(user_id, data)
        logger.info("Updated user %s (%s)", user_id, ", ".join(sorted(data.changes())) or "no fields")
        return user

    def delete_user(self, user_id: int) -> None:
        self._repository.get_by_id(user_id)
        self._repository.delete(user_id)
        logger.info("Deleted user %s", user_id)

    def _find_by_email(self, email: str) -> Optional[UserRead]:
        try:
            return self._repository.get_by_email(email)
        except NotFoundError:
            return None
