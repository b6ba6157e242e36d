"""Unit tests for setting value validation."""

import pytest

from lunarconsole.domain.entities import Err, FieldErrorCode, Ok
from lunarconsole.domain.services import is_valid_setting_key, validate_setting_value


class TestSettingKey:
    @pytest.mark.parametrize("key", ["max_connections", "jwt-ttl", "A1"])
    def test_valid_keys(self, key):
        assert is_valid_setting_key(key)

    @pytest.mark.parametrize("key", ["", "has space", "dot.key", "k" * 101])
    def test_invalid_keys(self, key):
        assert not is_valid_setting_key(key)


class TestSettingValue:
    """Test suite for validate_setting_value."""

    @pytest.mark.parametrize(
        "data_type,value",
        [
            ("string", "anything"),
            ("integer", "42"),
            ("integer", "-7"),
            ("float", "3.14"),
            ("boolean", "true"),
            ("boolean", "OFF"),
            ("json", '{"a": [1, 2]}'),
            ("json", ""),
            ("INTEGER", "10"),
            ("custom", "whatever"),
        ],
    )
    def test_accepts(self, data_type, value):
        assert validate_setting_value(data_type, value) == Ok(value)

    @pytest.mark.parametrize(
        "data_type,value,message",
        [
            ("integer", "4.2", "Invalid integer value"),
            ("integer", "abc", "Invalid integer value"),
            ("float", "nan", "Invalid float value"),
            ("float", "pi", "Invalid float value"),
            ("boolean", "maybe", "Invalid boolean value. Expected: true, false, 1, 0, yes, no, on, off"),
            ("json", "{broken", "Invalid JSON value"),
            ("string", "x" * 10001, "Setting value is too long (maximum 10000 characters)"),
        ],
    )
    def test_rejects(self, data_type, value, message):
        result = validate_setting_value(data_type, value)

        assert isinstance(result, Err)
        error = result.error["setting_value"]
        assert error.message == message
        assert error.code == FieldErrorCode.INVALID_TEXT

    def test_non_string_value(self):
        result = validate_setting_value("integer", 5)
        assert result.error["setting_value"].message == "Setting value must be a string"
