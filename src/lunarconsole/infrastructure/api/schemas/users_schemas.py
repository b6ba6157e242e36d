"""Pydantic schemas for user management.

Strength and format rules for user forms are enforced by the
UserValidator service before a request is built; these schemas only shape
the request bodies and parse the responses.
"""

from typing import Literal

from pydantic import BaseModel, Field

from lunarconsole.domain.entities.user import User
from lunarconsole.infrastructure.api.schemas.common_schemas import PaginationMeta


class UserCreateRequest(BaseModel):
    """Request schema for creating a new user."""

    email: str = Field(..., min_length=1, max_length=255, description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")
    username: str | None = Field(None, min_length=3, max_length=30, description="Display name")
    role: Literal["user", "admin"] = Field("user", description="Role assigned to the user")


class UserUpdateRequest(BaseModel):
    """Request schema for updating a user.

    All fields are optional. Only provided fields will be updated.
    """

    email: str | None = Field(None, max_length=255, description="User's email address")
    password: str | None = Field(None, description="New password")
    username: str | None = Field(None, max_length=30, description="Display name")
    role: Literal["user", "admin"] | None = Field(None, description="Role assigned to the user")
    is_active: bool | None = Field(None, description="Whether the user can log in")
    is_verified: bool | None = Field(None, description="Whether the email is verified")


class UserResponse(BaseModel):
    """Response schema for a single user."""

    id: int | str
    email: str = Field(..., min_length=1)
    username: str | None = None
    role: Literal["admin", "user", "guest"] = "user"
    is_verified: bool = False
    is_active: bool = True
    last_login_at: str | None = None
    locked_until: str | None = None
    created_at: str = ""
    updated_at: str | None = None

    def to_entity(self) -> User:
        return User(
            id=self.id,
            email=self.email,
            username=self.username,
            role=self.role,
            is_verified=self.is_verified,
            is_active=self.is_active,
            locked_until=self.locked_until,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class UserListResponse(BaseModel):
    """Response schema for a page of users."""

    users: list[UserResponse] = Field(default_factory=list)
    pagination: PaginationMeta = Field(default_factory=PaginationMeta)
