"""Pydantic schemas for record responses and requests."""

from typing import Any

from pydantic import BaseModel, Field

from lunarconsole.domain.entities.record import Record
from lunarconsole.infrastructure.api.schemas.common_schemas import PaginationMeta


class RecordRequest(BaseModel):
    """Request body for creating or updating a record."""

    data: dict[str, Any] = Field(..., description="Record data keyed by field name")


class RecordResponse(BaseModel):
    """Response schema for a single record."""

    id: int | str
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""
    collection_name: str | None = None

    def to_entity(self) -> Record:
        return Record(
            id=self.id,
            data=self.data,
            created_at=self.created_at,
            updated_at=self.updated_at,
            collection_name=self.collection_name,
        )


class RecordListResponse(BaseModel):
    """Response schema for a page of records across all collections."""

    records: list[RecordResponse] = Field(default_factory=list)
    pagination: PaginationMeta = Field(default_factory=PaginationMeta)
