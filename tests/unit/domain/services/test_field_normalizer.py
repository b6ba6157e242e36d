"""Unit tests for form/wire value normalization."""

import json

import pytest

from lunarconsole.domain.entities import FieldDefinition, FieldType
from lunarconsole.domain.services import FileUpload, form_default, normalize_form, to_form, to_form_data, to_wire


class TestToWire:
    def test_number_parsed(self):
        assert to_wire(FieldType.NUMBER, "12.5", required=True) == 12.5
        assert to_wire(FieldType.NUMBER, "3", required=True) == 3

    def test_number_empty_optional_becomes_none(self):
        assert to_wire(FieldType.NUMBER, "", required=False) is None

    def test_number_empty_required_kept_for_validator(self):
        assert to_wire(FieldType.NUMBER, "", required=True) == ""

    def test_number_unparseable_passes_through(self):
        assert to_wire(FieldType.NUMBER, "abc", required=False) == "abc"

    def test_boolean(self):
        assert to_wire(FieldType.BOOLEAN, True, required=False) is True
        assert to_wire(FieldType.BOOLEAN, "", required=False) is False

    @pytest.mark.parametrize("value", ["", None])
    def test_boolean_empty_required_kept_for_validator(self, value):
        assert to_wire(FieldType.BOOLEAN, value, required=True) is value

    def test_json_string_parsed(self):
        assert to_wire(FieldType.JSON, '{"a": [1, 2]}', required=False) == {"a": [1, 2]}

    def test_json_invalid_passes_through(self):
        assert to_wire(FieldType.JSON, "{oops", required=False) == "{oops"

    def test_file_handles_resolved_to_references(self):
        value = [
            FileUpload(id="1", name="a.png", reference="uploads/a.png"),
            FileUpload(id="2", name="pending.png"),
            "uploads/b.png",
        ]
        assert to_wire(FieldType.FILE, value, required=False) == ["uploads/a.png", "uploads/b.png"]

    def test_file_empty(self):
        assert to_wire(FieldType.FILE, [], required=False) is None
        assert to_wire(FieldType.FILE, [], required=True) == []

    def test_text_unchanged(self):
        assert to_wire(FieldType.TEXT, "hello", required=False) == "hello"


class TestToForm:
    def test_number_to_string(self):
        assert to_form(FieldType.NUMBER, 12.5) == "12.5"
        assert to_form(FieldType.NUMBER, None) == ""

    def test_json_pretty_printed(self):
        assert to_form(FieldType.JSON, {"a": 1}) == json.dumps({"a": 1}, indent=2)
        assert to_form(FieldType.JSON, None) == ""

    def test_file_references_to_previews(self):
        previews = to_form(FieldType.FILE, ["uploads/2024/a.png"])
        assert previews == [FileUpload(id="uploads/2024/a.png", name="a.png", reference="uploads/2024/a.png")]
        assert to_form(FieldType.FILE, None) == []

    def test_none_text_becomes_empty(self):
        assert to_form(FieldType.TEXT, None) == ""


class TestRoundTrip:
    @pytest.mark.parametrize(
        "field_type, form_value",
        [
            (FieldType.TEXT, "hello"),
            (FieldType.NUMBER, "12.5"),
            (FieldType.NUMBER, "42"),
            (FieldType.BOOLEAN, True),
            (FieldType.JSON, json.dumps({"a": [1, 2]}, indent=2)),
            (FieldType.DATE, "2024-01-15"),
            (FieldType.FILE, [FileUpload.from_reference("uploads/a.png")]),
        ],
    )
    def test_form_wire_form_is_identity(self, field_type, form_value):
        assert to_form(field_type, to_wire(field_type, form_value, required=True)) == form_value


class TestFormHelpers:
    def test_form_default(self):
        assert form_default(FieldDefinition(name="a", field_type=FieldType.BOOLEAN)) is False
        assert form_default(FieldDefinition(name="a", field_type=FieldType.FILE)) == []
        assert form_default(FieldDefinition(name="a", field_type=FieldType.TEXT, default_value="x")) == "x"
        assert form_default(FieldDefinition(name="a", field_type=FieldType.NUMBER)) == ""

    def test_normalize_form_passes_unknown_keys(self, price_schema):
        assert normalize_form(price_schema, {"price": "4", "extra": "x"}) == {"price": 4, "extra": "x"}

    def test_to_form_data_blank_and_filled(self, posts_schema):
        blank = to_form_data(posts_schema)
        assert blank["title"] == ""
        assert blank["published"] is False

        filled = to_form_data(posts_schema, {"title": "Hi", "views": 3, "metadata_json": {"k": 1}})
        assert filled["views"] == "3"
        assert filled["metadata_json"] == json.dumps({"k": 1}, indent=2)
        assert filled["attachments"] == []
