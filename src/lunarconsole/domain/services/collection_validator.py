"""Collection validation service for schema and field validation.

Provides validation for collection names, schema definitions, and field
configurations. Schema-level errors block collection creation and editing
before any request reaches the backend.
"""

import re
from dataclasses import dataclass
from typing import Any

from lunarconsole.domain.entities.field_definition import (
    ID_FIELD_NAME,
    CollectionSchema,
    FieldDefinition,
    FieldType,
)

# Collection names owned by the backend itself
RESERVED_COLLECTION_NAMES = frozenset({
    "users",
    "admin",
    "system",
    "config",
    "settings",
    "auth",
    "permissions",
    "roles",
    "sessions",
    "tokens",
    "logs",
    "metrics",
    "health",
    "backup",
    "restore",
    "migration",
    "schema",
    "metadata",
    "cache",
    "queue",
})

# Field names managed by the backend on every record
RESERVED_FIELD_NAMES = frozenset({
    "id",
    "created_at",
    "updated_at",
    "deleted_at",
    "version",
    "metadata",
    "owner_id",
    "created_by",
    "updated_by",
})

# Pattern for valid collection and field names
NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")

DUPLICATE_FIELD_NAME = "DuplicateFieldName"
RESERVED_NAME = "ReservedName"


@dataclass(frozen=True)
class CollectionValidationError:
    """A single collection validation error."""

    field: str
    message: str
    code: str


class CollectionValidator:
    """Validator for collection create and edit requests.

    Validates collection names, schema definitions, and individual field
    configurations.
    """

    MAX_NAME_LENGTH = 50
    MAX_FIELD_NAME_LENGTH = 50

    @classmethod
    def validate_name(cls, name: str) -> list[CollectionValidationError]:
        """Validate a collection name.

        Args:
            name: The collection name to validate.

        Returns:
            List of validation errors (empty if valid).
        """
        errors = []

        if not name:
            errors.append(
                CollectionValidationError(
                    field="name",
                    message="Collection name is required",
                    code="name_required",
                )
            )
            return errors

        if len(name) > cls.MAX_NAME_LENGTH:
            errors.append(
                CollectionValidationError(
                    field="name",
                    message=f"Collection name must be {cls.MAX_NAME_LENGTH} characters or less",
                    code="name_too_long",
                )
            )

        if not NAME_PATTERN.match(name):
            errors.append(
                CollectionValidationError(
                    field="name",
                    message="Collection name must start with a letter and contain only letters, numbers, and underscores",
                    code="name_invalid_format",
                )
            )

        if name.lower() in RESERVED_COLLECTION_NAMES:
            errors.append(
                CollectionValidationError(
                    field="name",
                    message=f"Collection name '{name}' is reserved and cannot be used",
                    code=RESERVED_NAME,
                )
            )

        return errors

    @classmethod
    def validate_field_name(cls, name: str, field_index: int) -> list[CollectionValidationError]:
        """Validate a field name.

        Args:
            name: The field name to validate.
            field_index: Index of the field in the schema (for error messages).

        Returns:
            List of validation errors (empty if valid).
        """
        errors = []
        field_path = f"schema[{field_index}].name"

        if not name:
            errors.append(
                CollectionValidationError(
                    field=field_path,
                    message="Field name is required",
                    code="field_name_required",
                )
            )
            return errors

        if len(name) > cls.MAX_FIELD_NAME_LENGTH:
            errors.append(
                CollectionValidationError(
                    field=field_path,
                    message=f"Field name must be {cls.MAX_FIELD_NAME_LENGTH} characters or less",
                    code="field_name_too_long",
                )
            )

        if not NAME_PATTERN.match(name):
            errors.append(
                CollectionValidationError(
                    field=field_path,
                    message="Field name must start with a letter and contain only letters, numbers, and underscores",
                    code="field_name_invalid_format",
                )
            )

        if name.lower() in RESERVED_FIELD_NAMES:
            errors.append(
                CollectionValidationError(
                    field=field_path,
                    message=f"Field name '{name}' is reserved and cannot be used",
                    code=RESERVED_NAME,
                )
            )

        return errors

    @classmethod
    def validate_field_type(
        cls, field_type: FieldType | str, field_index: int
    ) -> list[CollectionValidationError]:
        """Validate a field type.

        Unknown types are accepted when reading schemas from the server, but
        the console only lets operators define the types it knows.
        """
        if isinstance(field_type, FieldType):
            return []

        valid_types = [t.value for t in FieldType]
        return [
            CollectionValidationError(
                field=f"schema[{field_index}].field_type",
                message=f"Invalid field type '{field_type}'. Valid types: {', '.join(valid_types)}",
                code="field_type_invalid",
            )
        ]

    @classmethod
    def validate_constraints(
        cls, field: FieldDefinition, field_index: int
    ) -> list[CollectionValidationError]:
        """Validate that a field's constraints are self-consistent."""
        rules = field.validation
        if rules is None:
            return []

        errors = []
        field_path = f"schema[{field_index}].validation"

        if (
            rules.min_length is not None
            and rules.max_length is not None
            and rules.min_length > rules.max_length
        ):
            errors.append(
                CollectionValidationError(
                    field=field_path,
                    message=f"Field '{field.name}' has min_length greater than max_length",
                    code="constraint_range_invalid",
                )
            )

        if (
            rules.min_value is not None
            and rules.max_value is not None
            and rules.min_value > rules.max_value
        ):
            errors.append(
                CollectionValidationError(
                    field=field_path,
                    message=f"Field '{field.name}' has min_value greater than max_value",
                    code="constraint_range_invalid",
                )
            )

        if rules.pattern:
            try:
                re.compile(rules.pattern)
            except re.error:
                errors.append(
                    CollectionValidationError(
                        field=field_path,
                        message=f"Field '{field.name}' has an invalid regex pattern: {rules.pattern}",
                        code="constraint_pattern_invalid",
                    )
                )

        return errors

    @classmethod
    def find_duplicate_names(cls, fields: list[FieldDefinition] | tuple[FieldDefinition, ...]) -> list[CollectionValidationError]:
        """Report every field whose name repeats an earlier one, ignoring case."""
        errors = []
        seen_names: set[str] = set()
        for i, field in enumerate(fields):
            name = field.name.lower()
            if name and name in seen_names:
                errors.append(
                    CollectionValidationError(
                        field=f"schema[{i}].name",
                        message=f"Duplicate field name '{field.name}'",
                        code=DUPLICATE_FIELD_NAME,
                    )
                )
            seen_names.add(name)
        return errors

    @classmethod
    def validate_schema(cls, schema: CollectionSchema) -> list[CollectionValidationError]:
        """Validate a collection schema.

        The implicit ``id`` field is not validated as a user field.

        Args:
            schema: The schema to validate.

        Returns:
            List of validation errors (empty if valid).
        """
        fields = schema.user_fields
        if not fields:
            return [
                CollectionValidationError(
                    field="schema",
                    message="At least one field is required",
                    code="schema_empty",
                )
            ]

        errors = []
        for i, field in enumerate(fields):
            errors.extend(cls.validate_field_name(field.name, i))
            errors.extend(cls.validate_field_type(field.field_type, i))
            errors.extend(cls.validate_constraints(field, i))

        errors.extend(cls.find_duplicate_names(fields))
        return errors

    @classmethod
    def validate(cls, name: str, schema: CollectionSchema) -> list[CollectionValidationError]:
        """Validate a complete collection definition.

        Args:
            name: The collection name.
            schema: The collection schema.

        Returns:
            List of validation errors (empty if valid).
        """
        errors = []
        errors.extend(cls.validate_name(name))
        errors.extend(cls.validate_schema(schema))
        return errors

    @classmethod
    def validate_payload(cls, payload: dict[str, Any]) -> list[CollectionValidationError]:
        """Validate a raw collection payload as submitted by the collection form."""
        raw_fields = payload.get("schema", {})
        raw_list = raw_fields.get("fields", []) if isinstance(raw_fields, dict) else raw_fields
        user_fields = [f for f in raw_list if f.get("name") != ID_FIELD_NAME]
        schema = CollectionSchema.from_dict(user_fields)
        return cls.validate(payload.get("name", ""), schema)
