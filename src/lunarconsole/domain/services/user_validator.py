"""User form validation service.

Validates user create and update payloads before they reach the backend:
- Email format and length
- Password strength (length, upper, lower, digit, special character)
- Username length and character set
- Role
"""

import re
from typing import Any

from lunarconsole.domain.entities.validation import Err, FieldError, FieldErrorCode, Ok, Result
from lunarconsole.domain.services.field_validator import EMAIL_PATTERN

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
ASSIGNABLE_ROLES = ("user", "admin")


class PasswordPolicy:
    """Password strength policy.

    Default policy:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one character that is not a letter or digit
    """

    def __init__(
        self,
        min_length: int = 8,
        require_uppercase: bool = True,
        require_lowercase: bool = True,
        require_digit: bool = True,
        require_special: bool = True,
    ) -> None:
        self.min_length = min_length
        self.require_uppercase = require_uppercase
        self.require_lowercase = require_lowercase
        self.require_digit = require_digit
        self.require_special = require_special

    def violations(self, password: str) -> list[str]:
        """Return a message for every rule the password breaks, in rule order."""
        messages = []
        if len(password) < self.min_length:
            messages.append(f"Password must be at least {self.min_length} characters long")
        if self.require_uppercase and not re.search(r"[A-Z]", password):
            messages.append("Password must contain at least one uppercase letter")
        if self.require_lowercase and not re.search(r"[a-z]", password):
            messages.append("Password must contain at least one lowercase letter")
        if self.require_digit and not re.search(r"[0-9]", password):
            messages.append("Password must contain at least one number")
        if self.require_special and not re.search(r"[^A-Za-z0-9]", password):
            messages.append("Password must contain at least one special character")
        return messages


class UserValidator:
    """Validator for user create and update payloads.

    Each invalid field reports its first failing rule. Update payloads are
    partial: only present, non-empty fields are checked.
    """

    MAX_EMAIL_LENGTH = 255
    MIN_USERNAME_LENGTH = 3
    MAX_USERNAME_LENGTH = 30

    def __init__(self, password_policy: PasswordPolicy | None = None) -> None:
        self.password_policy = password_policy or PasswordPolicy()

    def _check_email(self, email: Any) -> str | None:
        if not isinstance(email, str) or not email.strip():
            return "Email is required"
        if not EMAIL_PATTERN.match(email):
            return "Please enter a valid email address"
        if len(email) > self.MAX_EMAIL_LENGTH:
            return f"Email must be less than {self.MAX_EMAIL_LENGTH} characters"
        return None

    def _check_password(self, password: Any) -> str | None:
        if not isinstance(password, str) or not password:
            return "Password is required"
        violations = self.password_policy.violations(password)
        return violations[0] if violations else None

    def _check_username(self, username: Any) -> str | None:
        if not isinstance(username, str):
            return "Username must be a string"
        if not self.MIN_USERNAME_LENGTH <= len(username) <= self.MAX_USERNAME_LENGTH:
            return (
                f"Username must be between {self.MIN_USERNAME_LENGTH}-"
                f"{self.MAX_USERNAME_LENGTH} characters long"
            )
        if not USERNAME_PATTERN.match(username):
            return "Username can only contain letters, numbers, and underscores"
        return None

    @staticmethod
    def _check_role(role: Any) -> str | None:
        if role not in ASSIGNABLE_ROLES:
            return "Role must be either user or admin"
        return None

    def validate(self, payload: dict[str, Any], partial: bool = False) -> Result:
        """Validate a user payload.

        Args:
            payload: Form data with email, password, username and role.
            partial: If True, validate an update: every field is optional
                and empty strings are dropped from the payload.

        Returns:
            ``Ok(cleaned_payload)`` or ``Err({field_name: FieldError})``.
        """
        checks = (
            ("email", self._check_email, FieldErrorCode.INVALID_EMAIL),
            ("password", self._check_password, FieldErrorCode.INVALID_PASSWORD),
            ("username", self._check_username, FieldErrorCode.INVALID_USERNAME),
            ("role", self._check_role, FieldErrorCode.INVALID_ROLE),
        )

        cleaned = {k: v for k, v in payload.items() if not (partial and v in ("", None))}
        if not partial and not cleaned.get("username"):
            cleaned.pop("username", None)

        errors: dict[str, FieldError] = {}
        for name, check, code in checks:
            if name not in cleaned:
                if partial or name == "username":
                    continue
                code = FieldErrorCode.REQUIRED_FIELD_MISSING
                message = check(None) or f"{name.capitalize()} is required"
            else:
                message = check(cleaned[name])
            if message is not None:
                errors[name] = FieldError(field=name, message=message, code=code)

        if errors:
            return Err(errors)
        return Ok(cleaned)

    def is_valid(self, payload: dict[str, Any], partial: bool = False) -> bool:
        """Check if a user payload is valid."""
        return isinstance(self.validate(payload, partial=partial), Ok)


# Default validator instance
default_user_validator = UserValidator()
