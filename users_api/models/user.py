"""
Users API: User SQLAlchemy Model
=================================

What:  ORM model representing the `users` table.
How:   Inherits from DeclarativeBase; Alembic reads this for migrations.
Who:   Used by SqlUserService for CRUD operations.

Table Design:
    - UUID primary key (sqlalchemy.Uuid: native on PostgreSQL, CHAR(32) on SQLite)
    - username and email are unique; duplicates surface as validation faults
    - password is stored as received; it is never serialized back to clients
    - created_at / updated_at are UTC with timezone
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from users_api.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A registered user.

    Query Patterns:
        - Get single user: WHERE id = :uuid (primary key)
        - Duplicate check: WHERE username = :u OR email = :e (unique indexes)
        - List users: ORDER BY created_at
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    first_name: Mapped[str] = mapped_column(String(20), nullable=False)
    last_name: Mapped[str] = mapped_column(String(20), nullable=False)
    username: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    # NULL until the first update
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
