"""Unit tests for the record validator."""

import pytest

from lunarconsole.core.exceptions import SchemaValidationError
from lunarconsole.domain.entities import (
    CollectionSchema,
    Err,
    FieldDefinition,
    FieldErrorCode,
    FieldType,
    Ok,
)
from lunarconsole.domain.services import RecordValidator, normalize_form, validate_record


class TestRecordValidator:
    """Test suite for RecordValidator."""

    def test_price_string_is_coerced(self, price_schema):
        result = validate_record(price_schema, normalize_form(price_schema, {"price": "12.5"}))
        assert result == Ok({"price": 12.5})

    def test_empty_required_price_is_missing(self, price_schema):
        result = validate_record(price_schema, normalize_form(price_schema, {"price": ""}))

        assert isinstance(result, Err)
        assert result.error["price"].code == FieldErrorCode.REQUIRED_FIELD_MISSING

    def test_absent_required_field_is_missing(self, price_schema):
        result = validate_record(price_schema, {})
        assert result.error["price"].code == FieldErrorCode.REQUIRED_FIELD_MISSING

    def test_collects_all_errors(self, posts_schema):
        result = RecordValidator(posts_schema).validate({"title": "", "views": "many", "published": "yes"})

        assert isinstance(result, Err)
        assert set(result.error) == {"title", "views", "published"}

    def test_optional_fields_filled_with_empty_values(self, posts_schema):
        result = RecordValidator(posts_schema).validate({"title": "Hello"})

        assert result == Ok(
            {
                "title": "Hello",
                "views": None,
                "published": False,
                "metadata_json": "",
                "attachments": [],
                "author": "",
            }
        )

    def test_unknown_field_reported(self, price_schema):
        result = validate_record(price_schema, {"price": 1, "colour": "red"})
        assert result.error["colour"].code == FieldErrorCode.UNKNOWN_FIELD

    def test_system_keys_ignored(self, price_schema):
        result = validate_record(
            price_schema, {"id": 5, "price": 3, "created_at": "2024-01-01T00:00:00Z"}
        )
        assert result == Ok({"price": 3})

    def test_partial_only_checks_present_fields(self, posts_schema):
        validator = RecordValidator(posts_schema)

        assert validator.validate({"views": "3"}, partial=True) == Ok({"views": 3})
        assert validator.validate({"title": "ab"}, partial=True).error["title"].code == FieldErrorCode.INVALID_TEXT

    def test_duplicate_field_names_rejected_at_compile(self):
        schema = CollectionSchema(
            fields=(
                FieldDefinition(name="Title", field_type=FieldType.TEXT),
                FieldDefinition(name="title", field_type=FieldType.TEXT),
            )
        )

        with pytest.raises(SchemaValidationError) as exc_info:
            RecordValidator(schema)
        assert exc_info.value.errors[0].code == "DuplicateFieldName"

    def test_validator_is_callable(self, price_schema):
        validator = RecordValidator(price_schema)
        assert validator({"price": 2}) == Ok({"price": 2})
        assert validator.field_names == ["price"]
