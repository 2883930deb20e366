"""
Users API: In-Memory User Service
==================================

What:  UserService backed by a Python list, with auto-incrementing integer ids.
How:   Lookups that miss return SoftFailure(404, "User with ID <id> not found")
       instead of raising. The OutcomeNormalizer renders that exactly like a
       raised NotFoundError.
Who:   Backs the /memory/users routes.

Data lives for the lifetime of the process. All mutations run without an
await between read and write, so concurrent requests on the event loop
cannot interleave inside one.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from users_api.results import Result, SoftFailure, Success
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
    USERS_NOT_FOUND,
    USERS_RETRIEVED,
    UserService,
    user_not_found_message,
    users_removed_message,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _StoredUser:
    id: int
    first_name: str
    last_name: str
    username: str
    email: str
    password: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    def public(self) -> UserResponse:
        return UserResponse.model_validate(self)


class MemoryUserService(UserService):
    """In-process store. One instance is shared by every request."""

    def __init__(self) -> None:
        self._users: List[_StoredUser] = []
        self._next_id = 1

    def _index_of(self, user_id: int) -> Optional[int]:
        for index, user in enumerate(self._users):
            if user.id == user_id:
                return index
        return None

    @staticmethod
    def _not_found(user_id: int) -> SoftFailure:
        return SoftFailure(status_code=404, message=user_not_found_message(user_id))

    async def create(self, payload: CreateUserRequest) -> Result:
        user = _StoredUser(
            id=self._next_id,
            created_at=datetime.now(timezone.utc),
            **payload.model_dump(),
        )
        self._next_id += 1
        self._users.append(user)
        logger.info("Created in-memory user %d", user.id)
        return Success(data=user.public(), message=USER_CREATED)

    async def find_all(self) -> Result:
        users = [user.public() for user in self._users]
        return Success(data=users, message=USERS_RETRIEVED if users else NO_USERS_FOUND)

    async def find_one(self, user_id: int) -> Result:
        index = self._index_of(user_id)
        if index is None:
            return self._not_found(user_id)
        return Success(data=self._users[index].public(), message=USER_RETRIEVED)

    async def update(self, user_id: int, payload: UpdateUserRequest) -> Result:
        index = self._index_of(user_id)
        if index is None:
            return self._not_found(user_id)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        updated = replace(self._users[index], updated_at=datetime.now(timezone.utc), **changes)
        self._users[index] = updated
        return Success(data=updated.public(), message=USER_UPDATED)

    async def remove(self, user_id: int) -> Result:
        index = self._index_of(user_id)
        if index is None:
            return self._not_found(user_id)
        removed = self._users.pop(index)
        logger.info("Removed in-memory user %d", user_id)
        return Success(data=removed.public(), message=USER_REMOVED)

    async def remove_many(self, user_ids: Sequence[int]) -> Result:
        wanted = set(user_ids)
        kept = [user for user in self._users if user.id not in wanted]
        count = len(self._users) - len(kept)
        if count == 0:
            return SoftFailure(status_code=404, message=USERS_NOT_FOUND)
        self._users = kept
        return Success(data=DeletedCount(count=count), message=users_removed_message(count))


# ── Singleton Instance ────────────────────────────────────────────────────
memory_user_service = MemoryUserService()
