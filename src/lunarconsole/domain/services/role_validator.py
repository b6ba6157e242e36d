"""Role form validation service."""

import re
from typing import Any

from lunarconsole.domain.entities.validation import Err, FieldError, FieldErrorCode, Ok, Result

ROLE_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")


class RoleValidator:
    """Validator for role create and update payloads.

    Each invalid field reports its first failing rule. Update payloads are
    partial: only the fields present are checked.
    """

    MAX_NAME_LENGTH = 50
    MAX_DESCRIPTION_LENGTH = 255
    MIN_PRIORITY = 0
    MAX_PRIORITY = 100

    def _check_name(self, name: Any) -> FieldError | None:
        if not isinstance(name, str) or not name:
            return FieldError("name", "Role name is required", FieldErrorCode.REQUIRED_FIELD_MISSING)
        if len(name) > self.MAX_NAME_LENGTH:
            return FieldError(
                "name", f"Role name must be less than {self.MAX_NAME_LENGTH} characters", FieldErrorCode.INVALID_TEXT
            )
        if not ROLE_NAME_PATTERN.match(name):
            return FieldError(
                "name",
                "Role name can only contain letters, numbers, and underscores",
                FieldErrorCode.INVALID_TEXT,
            )
        return None

    def _check_description(self, description: Any) -> FieldError | None:
        if not isinstance(description, str):
            return FieldError("description", "Role description must be a string", FieldErrorCode.INVALID_TEXT)
        if len(description) > self.MAX_DESCRIPTION_LENGTH:
            return FieldError(
                "description",
                f"Role description must be less than {self.MAX_DESCRIPTION_LENGTH} characters",
                FieldErrorCode.INVALID_TEXT,
            )
        return None

    def _check_priority(self, priority: Any) -> FieldError | None:
        if priority is None:
            return FieldError("priority", "Role priority is required", FieldErrorCode.REQUIRED_FIELD_MISSING)
        if isinstance(priority, bool) or not isinstance(priority, (int, float)):
            return FieldError("priority", "Role priority must be a number", FieldErrorCode.INVALID_NUMBER)
        if priority < self.MIN_PRIORITY:
            return FieldError(
                "priority", f"Role priority must be at least {self.MIN_PRIORITY}", FieldErrorCode.OUT_OF_RANGE
            )
        if priority > self.MAX_PRIORITY:
            return FieldError(
                "priority", f"Role priority must be at most {self.MAX_PRIORITY}", FieldErrorCode.OUT_OF_RANGE
            )
        return None

    def validate(self, payload: dict[str, Any], partial: bool = False) -> Result:
        """Validate a role payload.

        Args:
            payload: Form data with name, description and priority.
            partial: If True, validate an update where every field is optional.

        Returns:
            ``Ok(payload)`` or ``Err({field_name: FieldError})``.
        """
        errors: dict[str, FieldError] = {}

        if "name" in payload or not partial:
            error = self._check_name(payload.get("name"))
            if error is not None:
                errors["name"] = error
        if payload.get("description") is not None:
            error = self._check_description(payload["description"])
            if error is not None:
                errors["description"] = error
        if "priority" in payload or not partial:
            error = self._check_priority(payload.get("priority"))
            if error is not None:
                errors["priority"] = error

        if errors:
            return Err(errors)
        return Ok(dict(payload))
