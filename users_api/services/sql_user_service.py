"""
Users API: Relational User Service
===================================

What:  UserService backed by async SQLAlchemy (PostgreSQL in production,
       SQLite in tests).
How:   One instance per request, bound to that request's AsyncSession
       (see get_sql_user_service). Missing users raise NotFoundError;
       duplicate usernames/emails raise ValidationFailedError; driver errors
       are wrapped in DatabaseError. The session dependency rolls back on any
       raised error.
Who:   Backs the /users routes.

Error Handling Strategy:
    UsersApiError subclasses propagate as-is. SQLAlchemy errors are logged
    with full context and re-raised as DatabaseError with a generic message.
    IntegrityError (a unique constraint lost a race against the duplicate
    check) becomes ConflictError.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, List, Optional, Sequence

from fastapi import Depends
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from users_api.database import get_db_session
from users_api.exceptions import (
    ConflictError,
    DatabaseError,
    FieldViolation,
    NotFoundError,
    UsersApiError,
    ValidationFailedError,
)
from users_api.models.user import User
from users_api.results import Result, Success
from users_api.schemas.user import (
    CreateUserRequest,
    DeletedCount,
    UpdateUserRequest,
    UserResponse,
)
from users_api.services.user_base import (
    NO_USERS_FOUND,
    USER_CREATED,
    USER_REMOVED,
    USER_RETRIEVED,
    USER_UPDATED,
    USERS_RETRIEVED,
    UserService,
    users_removed_message,
)

logger = logging.getLogger(__name__)


class SqlUserService(UserService):
    """Relational store bound to one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _translate_errors(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except UsersApiError:
            raise
        except IntegrityError as e:
            logger.warning("Integrity error during %s: %s", operation, str(e.orig))
            raise ConflictError(
                message="A user with this username or email already exists",
                context={"operation": operation},
            )
        except SQLAlchemyError as e:
            logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not complete the request. Please try again.",
                context={"operation": operation, "error_type": type(e).__name__},
            )

    async def _get_or_raise(self, user_id: uuid.UUID) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="User", resource_id=user_id)
        return user

    async def _duplicate_violations(
        self,
        username: Optional[str],
        email: Optional[str],
        exclude_id: Optional[uuid.UUID] = None,
    ) -> List[FieldViolation]:
        """
        Unique-field check run before writes.

        Returns one violation per field whose value is already taken, in
        field order (username, email).
        """
        conditions = []
        if username:
            conditions.append(User.username == username)
        if email:
            conditions.append(User.email == email)
        if not conditions:
            return []

        query = select(User.username, User.email).where(or_(*conditions))
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        rows = (await self.db.execute(query)).all()

        violations = []
        if username and any(row.username == username for row in rows):
            violations.append(
                FieldViolation("username", {"isUnique": "username already exists"})
            )
        if email and any(row.email == email for row in rows):
            violations.append(
                FieldViolation("email", {"isUnique": "email already exists"})
            )
        return violations

    async def create(self, payload: CreateUserRequest) -> Result:
        async with self._translate_errors("create"):
            violations = await self._duplicate_violations(payload.username, payload.email)
            if violations:
                raise ValidationFailedError(violations)

            user = User(**payload.model_dump())
            self.db.add(user)
            await self.db.flush()
            logger.info("Created user %s", user.id)
            return Success(data=UserResponse.model_validate(user), message=USER_CREATED)

    async def find_all(self) -> Result:
        async with self._translate_errors("find_all"):
            result = await self.db.execute(select(User).order_by(User.created_at))
            users = [UserResponse.model_validate(u) for u in result.scalars().all()]
            return Success(data=users, message=USERS_RETRIEVED if users else NO_USERS_FOUND)

    async def find_one(self, user_id: uuid.UUID) -> Result:
        async with self._translate_errors("find_one"):
            user = await self._get_or_raise(user_id)
            return Success(data=UserResponse.model_validate(user), message=USER_RETRIEVED)

    async def update(self, user_id: uuid.UUID, payload: UpdateUserRequest) -> Result:
        async with self._translate_errors("update"):
            user = await self._get_or_raise(user_id)
            changes = payload.model_dump(exclude_unset=True, exclude_none=True)

            violations = await self._duplicate_violations(
                changes.get("username"), changes.get("email"), exclude_id=user.id
            )
            if violations:
                raise ValidationFailedError(violations)

            for field_name, value in changes.items():
                setattr(user, field_name, value)
            user.updated_at = datetime.now(timezone.utc)
            await self.db.flush()
            return Success(data=UserResponse.model_validate(user), message=USER_UPDATED)

    async def remove(self, user_id: uuid.UUID) -> Result:
        async with self._translate_errors("remove"):
            user = await self._get_or_raise(user_id)
            snapshot = UserResponse.model_validate(user)
            await self.db.delete(user)
            await self.db.flush()
            logger.info("Removed user %s", user_id)
            return Success(data=snapshot, message=USER_REMOVED)

    async def remove_many(self, user_ids: Sequence[uuid.UUID]) -> Result:
        async with self._translate_errors("remove_many"):
            result = await self.db.execute(delete(User).where(User.id.in_(list(user_ids))))
            count = result.rowcount or 0
            if count == 0:
                raise NotFoundError(resource="Users")
            return Success(data=DeletedCount(count=count), message=users_removed_message(count))


def get_sql_user_service(db: AsyncSession = Depends(get_db_session)) -> SqlUserService:
    """FastAPI dependency: a SqlUserService bound to the request's session."""
    return SqlUserService(db)
