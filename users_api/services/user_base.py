"""
Users API: Abstract User Service Interface
===========================================

What:  Abstract base class defining the CRUD contract every storage variant
       implements.
How:   Concrete services inherit from UserService and return `Result` values
       (Success / SoftFailure) or raise UsersApiError subclasses.
Who:   Called by the route handlers in users_api.routes.

Variants:
    - MemoryUserService: process-local list, integer ids, reports "not found"
      by value (SoftFailure)
    - SqlUserService: async SQLAlchemy, UUID ids, reports "not found" by
      raising NotFoundError

Both styles render to the same envelope, so routes do not care which one
they are talking to.
"""

from abc import ABC, abstractmethod
from typing import Any, Sequence

from users_api.results import Result
from users_api.schemas.user import CreateUserRequest, UpdateUserRequest

USER_CREATED = "User created successfully"
USERS_RETRIEVED = "Users retrieved successfully"
NO_USERS_FOUND = "No users found"
USERS_NOT_FOUND = "Users not found"
USER_RETRIEVED = "User retrieved successfully"
USER_UPDATED = "User updated successfully"
USER_REMOVED = "User removed successfully"


def user_not_found_message(user_id: Any) -> str:
    return f"User with ID {user_id} not found"


def users_removed_message(count: int) -> str:
    return f"{count} users removed successfully"


class UserService(ABC):
    """
    CRUD contract for the users resource.

    Every method returns a Result. Success payloads are UserResponse models
    (or a list of them, or a DeletedCount); the password never leaves the
    service.
    """

    @abstractmethod
    async def create(self, payload: CreateUserRequest) -> Result:
        """Store a new user. Success message: "User created successfully"."""
        ...

    @abstractmethod
    async def find_all(self) -> Result:
        """All users; message switches to "No users found" when empty."""
        ...

    @abstractmethod
    async def find_one(self, user_id: Any) -> Result:
        """One user, or "User with ID <id> not found"."""
        ...

    @abstractmethod
    async def update(self, user_id: Any, payload: UpdateUserRequest) -> Result:
        """Apply the fields present in `payload`."""
        ...

    @abstractmethod
    async def remove(self, user_id: Any) -> Result:
        """Delete one user; the payload is the removed user."""
        ...

    @abstractmethod
    async def remove_many(self, user_ids: Sequence[Any]) -> Result:
        """Delete every listed user that exists; the payload is the count."""
        ...
