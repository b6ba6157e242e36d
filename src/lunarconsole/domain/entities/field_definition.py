"""Field definitions and collection schemas.

A collection schema is an ordered list of field definitions supplied by the
server at runtime. Every schema carries exactly one implicit ``id`` field,
which is never user-editable and is skipped by record validation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

ID_FIELD_NAME = "id"


class FieldType(str, Enum):
    """Supported field types for collection schemas."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    EMAIL = "email"
    URL = "url"
    JSON = "json"
    FILE = "file"
    RELATION = "relation"
    RICHTEXT = "richtext"

    @classmethod
    def parse(cls, value: "str | FieldType") -> "FieldType | str":
        """Return the enum member for a known type, or the raw lowercase string.

        Unknown types are kept as strings so that schemas from newer servers
        still load; they validate with the accept-anything validator.
        """
        if isinstance(value, FieldType):
            return value
        try:
            return cls(value.lower())
        except ValueError:
            return value.lower()


@dataclass(frozen=True)
class FieldValidation:
    """Optional per-field constraints."""

    min_length: int | None = None
    max_length: int | None = None
    min_value: float | None = None
    max_value: float | None = None
    pattern: str | None = None
    enum_values: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "FieldValidation | None":
        if not data:
            return None
        return cls(
            min_length=data.get("min_length"),
            max_length=data.get("max_length"),
            min_value=data.get("min_value"),
            max_value=data.get("max_value"),
            pattern=data.get("pattern") or None,
            enum_values=tuple(str(v) for v in data.get("enum_values") or ()),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for name in ("min_length", "max_length", "min_value", "max_value", "pattern"):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        if self.enum_values:
            data["enum_values"] = list(self.enum_values)
        return data


@dataclass(frozen=True)
class FieldDefinition:
    """Definition of a single field in a collection schema.

    Attributes:
        name: Field identifier, unique (case-insensitively) within a schema.
        field_type: One of the FieldType members, or a raw string for types
            this client does not know about.
        required: Whether an empty value is rejected.
        default_value: Value used when an optional field is left empty.
        validation: Optional constraints applied after type coercion.
    """

    name: str
    field_type: FieldType | str
    required: bool = False
    default_value: Any = None
    validation: FieldValidation | None = None

    @property
    def is_id(self) -> bool:
        return self.name == ID_FIELD_NAME

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FieldDefinition":
        return cls(
            name=data.get("name", ""),
            field_type=FieldType.parse(data.get("field_type") or data.get("type") or ""),
            required=bool(data.get("required", False)),
            default_value=data.get("default_value"),
            validation=FieldValidation.from_dict(data.get("validation")),
        )

    def to_dict(self) -> dict[str, Any]:
        field_type = self.field_type.value if isinstance(self.field_type, FieldType) else self.field_type
        data: dict[str, Any] = {
            "name": self.name,
            "field_type": field_type,
            "required": self.required,
        }
        if self.default_value is not None:
            data["default_value"] = self.default_value
        if self.validation is not None:
            data["validation"] = self.validation.to_dict()
        return data


ID_FIELD = FieldDefinition(name=ID_FIELD_NAME, field_type=FieldType.NUMBER, required=True)


@dataclass(frozen=True)
class CollectionSchema:
    """Ordered list of field definitions for a collection.

    The implicit ``id`` field is inserted at position 0 when the server
    payload omits it, so every schema holds exactly one.
    """

    fields: tuple[FieldDefinition, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        fields = tuple(self.fields)
        if not any(f.is_id for f in fields):
            fields = (ID_FIELD, *fields)
        object.__setattr__(self, "fields", fields)

    @property
    def user_fields(self) -> tuple[FieldDefinition, ...]:
        """Fields the operator can edit (everything except ``id``)."""
        return tuple(f for f in self.fields if not f.is_id)

    def get_field(self, name: str) -> FieldDefinition | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | list[dict[str, Any]]) -> "CollectionSchema":
        raw_fields = data.get("fields", []) if isinstance(data, dict) else data
        return cls(fields=tuple(FieldDefinition.from_dict(f) for f in raw_fields))

    def to_dict(self) -> dict[str, Any]:
        return {"fields": [f.to_dict() for f in self.user_fields]}
