"""Field validator compiler.

Turns a runtime field definition into a validator callable. A validator takes
the raw value submitted for a field and returns ``Ok(typed_value)`` or
``Err(FieldError)``. Required-ness is checked before any type constraint.

Supports field types: text, number, boolean, date, email, url, json, file,
relation, richtext. Unknown types accept any value unchanged.
"""

import copy
import json
import math
import re
from collections.abc import Callable
from datetime import date, datetime
from typing import Any

from lunarconsole.domain.entities.field_definition import FieldDefinition, FieldType
from lunarconsole.domain.entities.validation import Err, FieldError, FieldErrorCode, Ok, Result

FieldValidator = Callable[[Any], Result]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

URL_PATTERN = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)

INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")

MAX_FILE_REFERENCE_LENGTH = 500
MAX_RELATION_ID_LENGTH = 50


def is_absent(value: Any, field_type: FieldType | str | None = None) -> bool:
    """Return True when a value counts as "not provided".

    ``None`` and ``""`` are equally absent for every type. An empty list is
    also absent for file fields, whose form value is a list of uploads.
    """
    if value is None or (isinstance(value, str) and value == ""):
        return True
    return field_type == FieldType.FILE and isinstance(value, (list, tuple)) and len(value) == 0


def empty_value(field_type: FieldType | str) -> Any:
    """Return the type-appropriate empty value for an optional field."""
    match field_type:
        case FieldType.BOOLEAN:
            return False
        case FieldType.NUMBER:
            return None
        case FieldType.FILE:
            return []
        case _:
            return ""


def _error(field: FieldDefinition, code: FieldErrorCode, message: str) -> Err[FieldError]:
    return Err(FieldError(field=field.name, message=message, code=code))


class FieldValidatorCompiler:
    """Compiles field definitions into validators.

    Each ``validate_*`` classmethod checks an already-present value for one
    field type. ``compile`` wraps the right one with the required/optional
    policy.
    """

    @classmethod
    def validate_text(cls, value: Any, field: FieldDefinition, pattern: re.Pattern[str] | None) -> Result:
        if not isinstance(value, str):
            return _error(
                field,
                FieldErrorCode.INVALID_TEXT,
                f"Field '{field.name}' must be text, got {type(value).__name__}",
            )

        rules = field.validation
        if rules is None:
            return Ok(value)

        if rules.min_length is not None and len(value) < rules.min_length:
            return _error(
                field,
                FieldErrorCode.INVALID_TEXT,
                f"Field '{field.name}' is too short (minimum {rules.min_length} characters)",
            )
        if rules.max_length is not None and len(value) > rules.max_length:
            return _error(
                field,
                FieldErrorCode.INVALID_TEXT,
                f"Field '{field.name}' is too long (maximum {rules.max_length} characters)",
            )
        if rules.pattern:
            if pattern is None:
                return _error(
                    field,
                    FieldErrorCode.INVALID_TEXT,
                    f"Invalid regex pattern for field '{field.name}': {rules.pattern}",
                )
            if not pattern.search(value):
                return _error(
                    field,
                    FieldErrorCode.INVALID_TEXT,
                    f"Field '{field.name}' does not match required pattern: {rules.pattern}",
                )
        if rules.enum_values and value not in rules.enum_values:
            return _error(
                field,
                FieldErrorCode.INVALID_TEXT,
                f"Field '{field.name}' must be one of: {', '.join(rules.enum_values)}",
            )
        return Ok(value)

    @classmethod
    def parse_number(cls, value: Any) -> int | float | None:
        """Coerce a value to a number, or return None if it is not one."""
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            number: int | float = value
        elif isinstance(value, str):
            text = value.strip()
            if not text:
                return None
            try:
                number = int(text) if INTEGER_PATTERN.match(text) else float(text)
            except ValueError:
                return None
        else:
            return None

        if isinstance(number, float) and not math.isfinite(number):
            return None
        return number

    @classmethod
    def validate_number(cls, value: Any, field: FieldDefinition) -> Result:
        number = cls.parse_number(value)
        if number is None:
            return _error(
                field,
                FieldErrorCode.INVALID_NUMBER,
                f"Field '{field.name}' must be a number",
            )

        rules = field.validation
        if rules is None:
            return Ok(number)

        if rules.min_value is not None and number < rules.min_value:
            return _error(
                field,
                FieldErrorCode.OUT_OF_RANGE,
                f"Field '{field.name}' must be at least {rules.min_value}",
            )
        if rules.max_value is not None and number > rules.max_value:
            return _error(
                field,
                FieldErrorCode.OUT_OF_RANGE,
                f"Field '{field.name}' must be at most {rules.max_value}",
            )
        if rules.enum_values:
            allowed = [n for n in (cls.parse_number(v) for v in rules.enum_values) if n is not None]
            if allowed and number not in allowed:
                return _error(
                    field,
                    FieldErrorCode.OUT_OF_RANGE,
                    f"Field '{field.name}' must be one of: {', '.join(str(n) for n in allowed)}",
                )
        return Ok(number)

    @classmethod
    def validate_boolean(cls, value: Any, field: FieldDefinition) -> Result:
        if not isinstance(value, bool):
            return _error(
                field,
                FieldErrorCode.INVALID_BOOLEAN,
                f"Field '{field.name}' must be a boolean",
            )
        return Ok(value)

    @classmethod
    def validate_date(cls, value: Any, field: FieldDefinition) -> Result:
        """Validate a date field value.

        Accepts ``date``/``datetime`` objects and ISO 8601 strings, either a
        plain date (2024-01-01) or a full timestamp (2024-01-01T12:00:00Z).
        """
        if isinstance(value, (date, datetime)):
            return Ok(value.isoformat())

        if isinstance(value, str):
            try:
                if len(value) == 10:
                    date.fromisoformat(value)
                else:
                    datetime.fromisoformat(value.replace("Z", "+00:00"))
                return Ok(value)
            except ValueError:
                pass

        return _error(
            field,
            FieldErrorCode.INVALID_DATE,
            f"Field '{field.name}' must be a valid date",
        )

    @classmethod
    def validate_email(cls, value: Any, field: FieldDefinition) -> Result:
        if not isinstance(value, str) or not EMAIL_PATTERN.match(value):
            return _error(
                field,
                FieldErrorCode.INVALID_EMAIL,
                f"Field '{field.name}' must be a valid email address",
            )
        return Ok(value)

    @classmethod
    def validate_url(cls, value: Any, field: FieldDefinition) -> Result:
        if not isinstance(value, str) or not URL_PATTERN.match(value):
            return _error(
                field,
                FieldErrorCode.INVALID_URL,
                f"Field '{field.name}' must be a valid URL (starting with http:// or https://)",
            )
        return Ok(value)

    @classmethod
    def validate_json(cls, value: Any, field: FieldDefinition) -> Result:
        """Validate a JSON or rich-text field value.

        Accepts already-structured values (dict or list) or a string that
        parses as JSON; the parsed value is returned.
        """
        if isinstance(value, (dict, list)):
            return Ok(value)

        if isinstance(value, str):
            try:
                return Ok(json.loads(value))
            except json.JSONDecodeError:
                pass

        return _error(
            field,
            FieldErrorCode.INVALID_JSON,
            f"Field '{field.name}' must be valid JSON",
        )

    @classmethod
    def validate_file(cls, value: Any, field: FieldDefinition) -> Result:
        """Validate a file field value.

        File values are stored references: a single path string or a list of
        them. Upload handles must be resolved to references before this runs.
        """
        references = value if isinstance(value, (list, tuple)) else [value]
        for reference in references:
            if not isinstance(reference, str) or not 0 < len(reference) <= MAX_FILE_REFERENCE_LENGTH:
                return _error(
                    field,
                    FieldErrorCode.INVALID_FILE_REFERENCE,
                    f"Field '{field.name}' must be a valid file path "
                    f"(max {MAX_FILE_REFERENCE_LENGTH} characters)",
                )
        return Ok(list(value) if isinstance(value, (list, tuple)) else value)

    @classmethod
    def validate_relation(cls, value: Any, field: FieldDefinition) -> Result:
        if isinstance(value, int) and not isinstance(value, bool):
            return Ok(value)
        if isinstance(value, str) and 0 < len(value) <= MAX_RELATION_ID_LENGTH:
            return Ok(value)
        return _error(
            field,
            FieldErrorCode.INVALID_RELATION_ID,
            f"Field '{field.name}' must be a valid relation ID "
            f"(string up to {MAX_RELATION_ID_LENGTH} characters or integer)",
        )

    @classmethod
    def type_validator(cls, field: FieldDefinition) -> FieldValidator:
        """Return the type-specific check for a field, ignoring required-ness."""
        match field.field_type:
            case FieldType.TEXT:
                pattern = _compile_pattern(field)
                return lambda value: cls.validate_text(value, field, pattern)
            case FieldType.NUMBER:
                return lambda value: cls.validate_number(value, field)
            case FieldType.BOOLEAN:
                return lambda value: cls.validate_boolean(value, field)
            case FieldType.DATE:
                return lambda value: cls.validate_date(value, field)
            case FieldType.EMAIL:
                return lambda value: cls.validate_email(value, field)
            case FieldType.URL:
                return lambda value: cls.validate_url(value, field)
            case FieldType.JSON | FieldType.RICHTEXT:
                return lambda value: cls.validate_json(value, field)
            case FieldType.FILE:
                return lambda value: cls.validate_file(value, field)
            case FieldType.RELATION:
                return lambda value: cls.validate_relation(value, field)
            case _:
                # Field types this client does not know yet degrade to accept-anything
                return Ok

    @classmethod
    def compile(cls, field: FieldDefinition) -> FieldValidator:
        """Compile a field definition into a validator.

        Args:
            field: The field definition to compile.

        Returns:
            A callable mapping a raw value to ``Ok(typed_value)`` or
            ``Err(FieldError)``.
        """
        check = cls.type_validator(field)
        field_type = field.field_type

        if field.required:

            def validate_required(value: Any) -> Result:
                if is_absent(value, field_type):
                    return _error(
                        field,
                        FieldErrorCode.REQUIRED_FIELD_MISSING,
                        f"Field '{field.name}' is required",
                    )
                return check(value)

            return validate_required

        fallback = field.default_value if field.default_value is not None else empty_value(field_type)

        def validate_optional(value: Any) -> Result:
            if is_absent(value, field_type):
                return Ok(copy.deepcopy(fallback))
            return check(value)

        return validate_optional


def _compile_pattern(field: FieldDefinition) -> re.Pattern[str] | None:
    if field.validation is None or not field.validation.pattern:
        return None
    try:
        return re.compile(field.validation.pattern)
    except re.error:
        return None


def compile_field(field: FieldDefinition) -> FieldValidator:
    """Compile a field definition into a validator."""
    return FieldValidatorCompiler.compile(field)
