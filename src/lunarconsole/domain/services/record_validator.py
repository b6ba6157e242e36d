"""Record validation service for validating record data against collection schemas.

A collection schema is compiled once into a ``RecordValidator``. The
validator runs every field validator independently and reports all invalid
fields in one pass; on success it returns the normalized record data.
"""

from typing import Any

from lunarconsole.core.exceptions import SchemaValidationError
from lunarconsole.domain.entities.field_definition import CollectionSchema
from lunarconsole.domain.entities.validation import Err, FieldError, FieldErrorCode, Ok, Result
from lunarconsole.domain.services.collection_validator import CollectionValidator
from lunarconsole.domain.services.field_validator import FieldValidator, compile_field

# Server-managed keys that may appear in edit forms and are never validated
SYSTEM_KEYS = frozenset({"id", "created_at", "updated_at"})


class RecordValidator:
    """Validator for record data against one collection schema.

    Raises:
        SchemaValidationError: At construction time if two fields share a
            name case-insensitively.
    """

    def __init__(self, schema: CollectionSchema) -> None:
        duplicates = CollectionValidator.find_duplicate_names(schema.fields)
        if duplicates:
            raise SchemaValidationError(duplicates)

        self.schema = schema
        self._validators: dict[str, FieldValidator] = {
            field.name: compile_field(field) for field in schema.user_fields
        }

    @property
    def field_names(self) -> list[str]:
        return list(self._validators)

    def validate(self, data: dict[str, Any], partial: bool = False) -> Result:
        """Validate record data.

        Args:
            data: Raw or wire-normalized record data keyed by field name.
            partial: If True, only fields present in ``data`` are checked and
                no defaults are applied (for updates sending a subset).

        Returns:
            ``Ok(normalized_data)`` or ``Err({field_name: FieldError})``.
        """
        errors: dict[str, FieldError] = {}
        processed: dict[str, Any] = {}

        for key in data:
            if key not in self._validators and key not in SYSTEM_KEYS:
                errors[key] = FieldError(
                    field=key,
                    message=f"Unknown field '{key}' not defined in collection schema",
                    code=FieldErrorCode.UNKNOWN_FIELD,
                )

        for name, validator in self._validators.items():
            if partial and name not in data:
                continue
            result = validator(data.get(name))
            if isinstance(result, Err):
                errors[name] = result.error
            else:
                processed[name] = result.value

        if errors:
            return Err(errors)
        return Ok(processed)

    __call__ = validate


def compile_record_validator(schema: CollectionSchema) -> RecordValidator:
    """Compile a collection schema into a record validator."""
    return RecordValidator(schema)


def validate_record(schema: CollectionSchema, data: dict[str, Any], partial: bool = False) -> Result:
    """Compile ``schema`` and validate ``data`` against it in one step."""
    return RecordValidator(schema).validate(data, partial=partial)
