"""Domain entities for the LunarBase console.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from lunarconsole.domain.entities.collection import Collection, CollectionStat
from lunarconsole.domain.entities.field_definition import (
    ID_FIELD_NAME,
    CollectionSchema,
    FieldDefinition,
    FieldType,
    FieldValidation,
)
from lunarconsole.domain.entities.pagination import Pagination
from lunarconsole.domain.entities.record import Record
from lunarconsole.domain.entities.role import Role
from lunarconsole.domain.entities.setting import Setting
from lunarconsole.domain.entities.user import User
from lunarconsole.domain.entities.validation import (
    Err,
    FieldError,
    FieldErrorCode,
    Ok,
    Result,
)

__all__ = [
    "Collection",
    "CollectionSchema",
    "CollectionStat",
    "Err",
    "FieldDefinition",
    "FieldError",
    "FieldErrorCode",
    "FieldType",
    "FieldValidation",
    "ID_FIELD_NAME",
    "Ok",
    "Pagination",
    "Record",
    "Result",
    "Role",
    "Setting",
    "User",
]
