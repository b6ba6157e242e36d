"""Unit tests for field definitions, schemas and small value entities."""

import pytest

from lunarconsole.domain.entities import (
    ID_FIELD_NAME,
    Collection,
    CollectionSchema,
    FieldDefinition,
    FieldType,
    FieldValidation,
    Pagination,
    Record,
    User,
)


class TestFieldType:
    def test_parse_known_type_is_case_insensitive(self):
        assert FieldType.parse("Number") is FieldType.NUMBER

    def test_parse_unknown_type_keeps_raw_string(self):
        assert FieldType.parse("geo_point") == "geo_point"


class TestFieldDefinition:
    def test_from_dict_accepts_type_alias(self):
        field = FieldDefinition.from_dict({"name": "title", "type": "text", "required": True})
        assert field.field_type is FieldType.TEXT
        assert field.required is True
        assert field.validation is None

    def test_from_dict_reads_validation(self):
        field = FieldDefinition.from_dict(
            {
                "name": "status",
                "field_type": "text",
                "validation": {"enum_values": ["draft", "published"], "max_length": 20},
            }
        )
        assert field.validation == FieldValidation(max_length=20, enum_values=("draft", "published"))

    def test_to_dict_omits_empty_options(self):
        field = FieldDefinition(name="views", field_type=FieldType.NUMBER)
        assert field.to_dict() == {"name": "views", "field_type": "number", "required": False}


class TestCollectionSchema:
    def test_id_field_added_when_missing(self):
        schema = CollectionSchema.from_dict([{"name": "title", "field_type": "text"}])

        assert schema.fields[0].name == ID_FIELD_NAME
        assert [f.name for f in schema.user_fields] == ["title"]

    def test_id_field_not_duplicated(self):
        schema = CollectionSchema.from_dict(
            {"fields": [{"name": "id", "field_type": "number"}, {"name": "title", "field_type": "text"}]}
        )
        assert [f.name for f in schema.fields].count(ID_FIELD_NAME) == 1

    def test_to_dict_excludes_id(self):
        schema = CollectionSchema.from_dict([{"name": "title", "field_type": "text"}])
        assert schema.to_dict() == {"fields": [{"name": "title", "field_type": "text", "required": False}]}

    def test_get_field(self):
        schema = CollectionSchema.from_dict([{"name": "title", "field_type": "text"}])
        assert schema.get_field("title").field_type is FieldType.TEXT
        assert schema.get_field("missing") is None


class TestEntities:
    def test_collection_requires_name(self):
        with pytest.raises(ValueError):
            Collection(id=1, name="")

    def test_user_requires_email(self):
        with pytest.raises(ValueError):
            User(id=1, email="")

    def test_user_merged_ignores_unknown_keys_and_id(self):
        user = User(id=1, email="a@example.com")
        merged = user.merged({"id": 99, "username": "alice", "password": "Secret1!"})

        assert merged.id == 1
        assert merged.username == "alice"

    def test_record_with_data_copies(self):
        data = {"title": "Hello"}
        record = Record(id=1, data={}).with_data(data, updated_at="2024-01-01T00:00:00Z")
        data["title"] = "Changed"

        assert record.data == {"title": "Hello"}
        assert record.updated_at == "2024-01-01T00:00:00Z"


class TestPagination:
    def test_total_pages_rounds_up(self):
        assert Pagination(page_size=20, total_count=41).total_pages == 3

    def test_unpaged_has_no_pages(self):
        assert Pagination(page_size=0, total_count=5).total_pages == 0

    def test_from_offset(self):
        pagination = Pagination.from_offset(offset=40, limit=20, total_count=100)
        assert pagination.current_page == 3
        assert pagination.offset == 40
