"""Pydantic schemas for collection responses and requests."""

from typing import Any

from pydantic import AliasChoices, BaseModel, Field

from lunarconsole.domain.entities.collection import Collection, CollectionStat
from lunarconsole.domain.entities.field_definition import CollectionSchema


class FieldValidationSchema(BaseModel):
    """Optional constraints attached to a schema field."""

    min_length: int | None = None
    max_length: int | None = None
    min_value: float | None = None
    max_value: float | None = None
    pattern: str | None = None
    enum_values: list[str] | None = None


class FieldDefinitionSchema(BaseModel):
    """A single field of a collection schema as sent over the wire."""

    name: str = Field(..., description="Field name")
    field_type: str = Field(
        ..., validation_alias=AliasChoices("field_type", "type"), description="Field type"
    )
    required: bool = Field(False, description="Whether the field is required")
    default_value: Any = Field(None, description="Default value for optional fields")
    validation: FieldValidationSchema | None = None


class CollectionSchemaModel(BaseModel):
    """Ordered field list of a collection."""

    fields: list[FieldDefinitionSchema] = Field(default_factory=list)

    def to_entity(self) -> CollectionSchema:
        return CollectionSchema.from_dict(self.model_dump(exclude_none=True))


class CollectionResponse(BaseModel):
    """Response schema for a single collection."""

    id: int | str
    name: str = Field(..., min_length=1)
    display_name: str | None = None
    description: str | None = None
    schema_: CollectionSchemaModel = Field(default_factory=CollectionSchemaModel, alias="schema")
    is_system: bool = False
    created_at: str = ""
    updated_at: str = ""

    model_config = {"populate_by_name": True}

    def to_entity(self) -> Collection:
        return Collection(
            id=self.id,
            name=self.name,
            schema=self.schema_.to_entity(),
            is_system=self.is_system,
            description=self.description,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class CollectionStatsResponse(BaseModel):
    """Response schema for collection statistics.

    Only the per-collection record counts are used by the console; the
    remaining aggregates are kept for display.
    """

    total_collections: int = 0
    total_records: int = 0
    records_per_collection: dict[str, int] = Field(default_factory=dict)
    average_records_per_collection: float = 0.0
    largest_collection: str | None = None
    smallest_collection: str | None = None

    def to_entities(self) -> list[CollectionStat]:
        return [
            CollectionStat(name=name, record_count=count)
            for name, count in sorted(self.records_per_collection.items())
        ]
