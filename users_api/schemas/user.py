"""
Users API: User Request/Response Schemas
=========================================

What:  Pydantic models for the users resource wire format.
How:   Field names are snake_case in Python and camelCase on the wire
       (alias_generator=to_camel). FastAPI validates request bodies against
       these models; failures become RequestValidationError, which the
       FaultClassifier folds into {field: [messages]}.
Who:   Route handlers (request bodies) and services (response payloads).

Rules:
    firstName, lastName, username: 3-20 characters
    email:                         valid email address
    password:                      6-20 characters, write-only
"""

import uuid
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model: camelCase aliases on the wire, snake_case attributes in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CreateUserRequest(CamelModel):
    """Body of POST /create-user. Every field is required."""

    first_name: str = Field(min_length=3, max_length=20, examples=["John"])
    last_name: str = Field(min_length=3, max_length=20, examples=["Doe"])
    username: str = Field(min_length=3, max_length=20, examples=["john_doe"])
    email: EmailStr = Field(examples=["john.doe@example.com"])
    password: str = Field(min_length=6, max_length=20, examples=["strongpassword123"])


class UpdateUserRequest(CamelModel):
    """Body of PATCH /{id}. Only the fields present are changed."""

    username: Optional[str] = Field(default=None, min_length=3, max_length=20)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6, max_length=20)


class DeleteUsersRequest(CamelModel):
    """Body of DELETE /delete-multiple for the relational store."""

    ids: List[uuid.UUID] = Field(min_length=1)


class MemoryDeleteUsersRequest(CamelModel):
    """Body of DELETE /delete-multiple for the in-memory store."""

    ids: List[int] = Field(min_length=1)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserResponse(CamelModel):
    """
    Public representation of a user.

    `id` is a UUID in the relational store and an integer in the in-memory
    store. The password is never included.
    """

    id: Union[uuid.UUID, int]
    first_name: str
    last_name: str
    username: str
    email: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class DeletedCount(CamelModel):
    """Payload of DELETE /delete-multiple."""

    count: int
