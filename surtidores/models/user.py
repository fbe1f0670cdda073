"""
SQLModel-based User models with inheritance for security

This module defines the Users database model using SQLModel, which combines
SQLAlchemy and Pydantic functionality. The inheritance structure is:

UserBase (shared public fields)
    ├─> Users (database table, adds internal/sensitive fields)
    └─> UserSummary (API schema, defined in surtidores/schemas)

Accounts themselves are managed by the external auth provider; this table
mirrors the session payload (id, email, name, role) so that ownership and
notification lookups can be resolved locally.
"""

from datetime import datetime

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from surtidores.config import UserRole
from surtidores.utils import utc_now


class UserBase(SQLModel):
    """
    Base model with shared public fields for Users.

    These fields are safe to expose via the API.
    """

    name: str = Field(default="Usuario", max_length=100)
    image: str | None = Field(default=None, max_length=255)


class Users(UserBase, table=True):
    """
    Database table for users.

    Internal/sensitive fields (should NOT be exposed via public API):
    - email: Privacy-sensitive
    - role, active: Access control
    """

    __tablename__ = "users"

    __table_args__ = (Index("idx_users_email", "email", unique=True),)

    # Primary key
    user_id: int | None = Field(default=None, primary_key=True)

    # Contact info (privacy-sensitive)
    email: str = Field(max_length=255)

    # Access control
    role: UserRole = Field(default=UserRole.user)
    active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utc_now)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin
