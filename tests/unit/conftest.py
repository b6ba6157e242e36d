"""Pytest configuration for unit tests."""

import pytest

from lunarconsole.domain.entities import (
    Collection,
    CollectionSchema,
    FieldDefinition,
    FieldType,
    FieldValidation,
)
from lunarconsole.domain.services import EntityCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> EntityCache:
    return EntityCache(ttl_seconds=300, clock=clock)


@pytest.fixture
def price_schema() -> CollectionSchema:
    """Schema with the implicit id field and one required number."""
    return CollectionSchema.from_dict(
        {
            "fields": [
                {"name": "id", "field_type": "number", "required": True},
                {"name": "price", "field_type": "number", "required": True},
            ]
        }
    )


@pytest.fixture
def posts_schema() -> CollectionSchema:
    return CollectionSchema(
        fields=(
            FieldDefinition(
                name="title",
                field_type=FieldType.TEXT,
                required=True,
                validation=FieldValidation(min_length=3, max_length=100),
            ),
            FieldDefinition(name="views", field_type=FieldType.NUMBER),
            FieldDefinition(name="published", field_type=FieldType.BOOLEAN),
            FieldDefinition(name="metadata_json", field_type=FieldType.JSON),
            FieldDefinition(name="attachments", field_type=FieldType.FILE),
            FieldDefinition(name="author", field_type=FieldType.RELATION),
        )
    )


@pytest.fixture
def posts(posts_schema: CollectionSchema) -> Collection:
    return Collection(id=1, name="posts", schema=posts_schema)


@pytest.fixture
def products(price_schema: CollectionSchema) -> Collection:
    return Collection(id=2, name="products", schema=price_schema)
