"""Pydantic schemas for permission roles."""

from pydantic import BaseModel, Field

from lunarconsole.domain.entities.role import Role


class RoleCreateRequest(BaseModel):
    """Request schema for creating a role."""

    name: str = Field(..., min_length=1, max_length=50, description="Role name")
    description: str | None = Field(None, max_length=255, description="Role description")
    priority: int = Field(0, ge=0, le=100, description="Evaluation priority")


class RoleUpdateRequest(BaseModel):
    """Request schema for updating a role.

    All fields are optional. Only provided fields will be updated.
    """

    name: str | None = Field(None, min_length=1, max_length=50, description="New role name")
    description: str | None = Field(None, max_length=255, description="Role description")
    priority: int | None = Field(None, ge=0, le=100, description="Evaluation priority")


class RoleResponse(BaseModel):
    """Response schema for a single role."""

    id: int | str
    name: str = Field(..., min_length=1)
    description: str | None = None
    priority: int = 0
    created_at: str = ""
    updated_at: str = ""

    def to_entity(self) -> Role:
        return Role(
            id=self.id,
            name=self.name,
            description=self.description,
            priority=self.priority,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
