"""Unit tests for role form validation."""

import pytest

from lunarconsole.domain.entities import Err, FieldErrorCode, Ok, Role
from lunarconsole.domain.services import RoleValidator

VALID_ROLE = {"name": "editor", "description": "Can edit posts", "priority": 10}


@pytest.fixture
def validator():
    return RoleValidator()


class TestRoleValidator:
    """Test suite for RoleValidator."""

    def test_valid_role(self, validator):
        assert validator.validate(VALID_ROLE) == Ok(VALID_ROLE)

    def test_description_is_optional(self, validator):
        assert isinstance(validator.validate({"name": "viewer", "priority": 0}), Ok)
        assert isinstance(validator.validate({"name": "viewer", "priority": 0, "description": None}), Ok)

    @pytest.mark.parametrize(
        "name,code,message",
        [
            ("", FieldErrorCode.REQUIRED_FIELD_MISSING, "Role name is required"),
            (None, FieldErrorCode.REQUIRED_FIELD_MISSING, "Role name is required"),
            ("a" * 51, FieldErrorCode.INVALID_TEXT, "Role name must be less than 50 characters"),
            ("read-only", FieldErrorCode.INVALID_TEXT, "Role name can only contain letters, numbers, and underscores"),
        ],
    )
    def test_name_rules(self, validator, name, code, message):
        result = validator.validate({**VALID_ROLE, "name": name})

        assert isinstance(result, Err)
        assert result.error["name"].code == code
        assert result.error["name"].message == message

    @pytest.mark.parametrize(
        "priority,code",
        [
            (None, FieldErrorCode.REQUIRED_FIELD_MISSING),
            ("high", FieldErrorCode.INVALID_NUMBER),
            (True, FieldErrorCode.INVALID_NUMBER),
            (-1, FieldErrorCode.OUT_OF_RANGE),
            (101, FieldErrorCode.OUT_OF_RANGE),
        ],
    )
    def test_priority_rules(self, validator, priority, code):
        result = validator.validate({**VALID_ROLE, "priority": priority})

        assert result.error["priority"].code == code

    def test_priority_bounds_are_inclusive(self, validator):
        assert isinstance(validator.validate({**VALID_ROLE, "priority": 0}), Ok)
        assert isinstance(validator.validate({**VALID_ROLE, "priority": 100}), Ok)

    def test_long_description(self, validator):
        result = validator.validate({**VALID_ROLE, "description": "x" * 256})

        assert result.error["description"].message == "Role description must be less than 255 characters"

    def test_create_requires_name_and_priority(self, validator):
        result = validator.validate({})

        assert set(result.error) == {"name", "priority"}

    def test_partial_checks_only_given_fields(self, validator):
        assert validator.validate({"priority": 50}, partial=True) == Ok({"priority": 50})
        assert set(validator.validate({"name": "bad name"}, partial=True).error) == {"name"}


class TestRole:
    def test_name_is_required(self):
        with pytest.raises(ValueError, match="Role name is required"):
            Role(id=1, name="")
