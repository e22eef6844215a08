"""
Persistence for users.

``UserRepository`` turns typed CRUD calls into parameterized SQL
against the ``users`` table.  It contains no business rules: it maps
"no rows" to ``NotFoundError``, a violation of the email constraint to
``DuplicateEmailError`` and every other database failure to
``StorageError``.

Each method borrows one connection from the engine's pool and returns
it when the ``with`` block exits, on success and on error alike.
"""

import logging
from typing import List

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from user_api.app.core.db import EMAIL_UNIQUE_CONSTRAINT, users
from user_api.app.core.errors import DuplicateEmailError, NotFoundError, StorageError
from user_api.app.schemas.user import UserCreate, UserRead, UserUpdate

logger = logging.getLogger(__name__)


def _is_duplicate_email(exc: IntegrityError) -> bool:
    # PostgreSQL names the constraint, SQLite names the column
    message = str(exc.orig)
    return EMAIL_UNIQUE_CONSTRAINT in message or "UNIQUE constraint failed: users.email" in message


class UserRepository:
    """CRUD access to the ``users`` table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def create(self, data: UserCreate) -> UserRead:
        """Insert a user and return the stored record.

        ``id``, ``created_at`` and ``updated_at`` are assigned by the
        database and read back with ``RETURNING``.
        """
        stmt = (
            insert(users)
            .values(name=data.name, email=data.email, age=data.age)
            .returning(*users.c)
        )
        try:
            with self._engine.begin() as conn:
                row = conn.execute(stmt).mappings().one()
        except IntegrityError as exc:
            if _is_duplicate_email(exc):
                raise DuplicateEmailError() from exc
            logger.error("Insert into users failed: %s", exc)
            raise StorageError("failed to create user") from exc
        except SQLAlchemyError as exc:
            logger.error("Insert into users failed: %s", exc)
            raise StorageError("failed to create user") from exc
        return UserRead.model_validate(dict(row))

    def get_by_id(self, user_id: int) -> UserRead:
        return self._fetch_one(select(users).where(users.c.id == user_id), "failed to get user by id")

    def get_by_email(self, email: str) -> UserRead:
        return self._fetch_one(select(users).where(users.c.email == email), "failed to get user by email")

    def get_all(self, limit: int, offset: int) -> List[UserRead]:
        """Return up to ``limit`` users starting at ``offset``, oldest id first."""
        stmt = select(users).order_by(users.c.id).limit(limit).offset(offset)
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as exc:
            logger.error("Listing users failed: %s", exc)
            raise StorageError("failed to list users") from exc
        return [UserRead.model_validate(dict(row)) for row in rows]

    def update(self, user_id: int, data: UserUpdate) -> UserRead:
        """Apply a merge-patch and return the updated record.

        Only the fields present in ``data`` are written; ``updated_at``
        is always refreshed, even for an empty patch.
        """
        values = data.changes()
        values["updated_at"] = func.now()
        stmt = (
            update(users)
            .where(users.c.id == user_id)
            .values(**values)
            .returning(*users.c)
        )
        try:
            with self._engine.begin() as conn:
                row = conn.execute(stmt).mappings().first()
        except IntegrityError as exc:
            if _is_duplicate_email(exc):
                raise DuplicateEmailError() from exc
            logger.error("Update of user %s failed: %s", user_id, exc)
            raise StorageError("failed to update user") from exc
        except SQLAlchemyError as exc:
            logger.error("Update of user %s failed: %s", user_id, exc)
            raise StorageError("failed to update user") from exc
        if row is None:
            raise NotFoundError()
        return UserRead.model_validate(dict(row))

    def delete(self, user_id: int) -> None:
        stmt = delete(users).where(users.c.id == user_id)
        try:
            with self._engine.begin() as conn:
                result = conn.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error("Delete of user %s failed: %s", user_id, exc)
            raise StorageError("failed to delete user") from exc
        if result.rowcount == 0:
            raise NotFoundError()

    def count(self) -> int:
        stmt = select(func.count()).select_from(users)
        try:
            with self._engine.connect() as conn:
                return conn.execute(stmt).scalar_one()
        except SQLAlchemyError as exc:
            logger.error("Counting users failed: %s", exc)
            raise StorageError("failed to count users") from exc

    def _fetch_one(self, stmt, failure_message: str) -> UserRead:
        try:
            with self._engine.connect() as conn:
                row = conn.execute(stmt).mappings().first()
        except SQLAlchemyError as exc:
            logger.error("%s: %s", failure_message, exc)
            raise StorageError(failure_message) from exc
        if row is None:
            raise NotFoundError()
        return UserRead.model_validate(dict(row))
