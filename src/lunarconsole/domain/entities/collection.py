"""Collection entity for runtime-defined record schemas.

Collections are named record types. Their schema is supplied by the server
and compiled on the client into a record validator.
"""

from dataclasses import dataclass, field
from typing import Any

from lunarconsole.domain.entities.field_definition import CollectionSchema


@dataclass(frozen=True)
class Collection:
    """Collection entity as cached by the console.

    Attributes:
        id: Server-assigned identifier. Negative while an optimistic create
            is still in flight.
        name: Collection name (used in API routes and cache keys).
        schema: Field definitions for records in the collection.
        is_system: Whether the collection is managed by the server itself.
        description: Optional human-readable description.
        created_at: ISO 8601 timestamp when the collection was created.
        updated_at: ISO 8601 timestamp when the collection was last updated.
    """

    id: int | str
    name: str
    schema: CollectionSchema = field(default_factory=CollectionSchema)
    is_system: bool = False
    description: str | None = None
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        """Validate collection data after initialization."""
        if not self.name:
            raise ValueError("Collection name is required")


@dataclass(frozen=True)
class CollectionStat:
    """Running record count for one collection."""

    name: str
    record_count: int = 0

    @property
    def id(self) -> str:
        return self.name


def collection_payload(name: str, schema: CollectionSchema, description: str | None = None) -> dict[str, Any]:
    """Build the request body for creating or updating a collection."""
    payload: dict[str, Any] = {"name": name, "schema": schema.to_dict()}
    if description is not None:
        payload["description"] = description
    return payload
