"""Setting value validation.

Settings travel as strings and are checked against their declared data
type before an update is sent.
"""

import json
import math
import re

from lunarconsole.domain.entities.validation import Err, FieldError, FieldErrorCode, Ok, Result

SETTING_CATEGORIES = ("database", "auth", "api")
SETTING_DATA_TYPES = ("string", "integer", "boolean", "json", "float")
SETTING_KEY_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
BOOLEAN_LITERALS = frozenset({"true", "false", "1", "0", "yes", "no", "on", "off"})
MAX_SETTING_KEY_LENGTH = 100
MAX_STRING_SETTING_LENGTH = 10000


def _is_integer(value: str) -> bool:
    try:
        return str(int(value, 10)) == value
    except ValueError:
        return False


def _is_float(value: str) -> bool:
    try:
        return not math.isnan(float(value))
    except ValueError:
        return False


def _is_json(value: str) -> bool:
    if not value:
        return True
    try:
        json.loads(value)
    except json.JSONDecodeError:
        return False
    return True


def is_valid_setting_key(key: str) -> bool:
    return bool(key) and len(key) <= MAX_SETTING_KEY_LENGTH and bool(SETTING_KEY_PATTERN.match(key))


def validate_setting_value(data_type: str, value: str) -> Result:
    """Check a setting value against its declared data type.

    Unknown data types accept any string.

    Returns:
        ``Ok(value)`` or ``Err({"setting_value": FieldError})``.
    """
    if not isinstance(value, str):
        message = "Setting value must be a string"
    else:
        match data_type.lower():
            case "string":
                ok = len(value) <= MAX_STRING_SETTING_LENGTH
                message = None if ok else "Setting value is too long (maximum 10000 characters)"
            case "integer":
                message = None if _is_integer(value) else "Invalid integer value"
            case "float":
                message = None if _is_float(value) else "Invalid float value"
            case "boolean":
                ok = value.lower() in BOOLEAN_LITERALS
                message = None if ok else "Invalid boolean value. Expected: true, false, 1, 0, yes, no, on, off"
            case "json":
                message = None if _is_json(value) else "Invalid JSON value"
            case _:
                message = None

    if message is None:
        return Ok(value)
    return Err({"setting_value": FieldError(field="setting_value", message=message, code=FieldErrorCode.INVALID_TEXT)})
