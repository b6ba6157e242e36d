"""Validation result types shared by the field and record validators.

Validators never raise for invalid input. They return ``Ok`` carrying the
normalized value or ``Err`` carrying a structured error, so callers can
collect every failure in a single pass.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")


class FieldErrorCode(str, Enum):
    """Machine-readable codes for field-level validation failures."""

    REQUIRED_FIELD_MISSING = "RequiredFieldMissing"
    INVALID_TEXT = "InvalidText"
    INVALID_NUMBER = "InvalidNumber"
    OUT_OF_RANGE = "OutOfRange"
    INVALID_BOOLEAN = "InvalidBoolean"
    INVALID_DATE = "InvalidDate"
    INVALID_EMAIL = "InvalidEmail"
    INVALID_URL = "InvalidUrl"
    INVALID_JSON = "InvalidJson"
    INVALID_FILE_REFERENCE = "InvalidFileReference"
    INVALID_RELATION_ID = "InvalidRelationId"
    UNKNOWN_FIELD = "UnknownField"
    INVALID_USERNAME = "InvalidUsername"
    INVALID_PASSWORD = "InvalidPassword"
    INVALID_ROLE = "InvalidRole"


@dataclass(frozen=True)
class FieldError:
    """A single field validation error."""

    field: str
    message: str
    code: FieldErrorCode

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code.value}


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful validation carrying the normalized value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed validation carrying the error payload."""

    error: E

    @property
    def is_ok(self) -> bool:
        return False


Result = Ok[Any] | Err[Any]
