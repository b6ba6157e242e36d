"""User entity for console user management."""

from dataclasses import dataclass, replace
from typing import Any, Literal

UserRole = Literal["admin", "user", "guest"]


@dataclass(frozen=True)
class User:
    """User as listed by the console.

    Attributes:
        id: Server-assigned identifier.
        email: User's email address.
        username: Optional display name.
        role: One of admin, user, guest.
        is_verified: Whether the email address is verified.
        is_active: Whether the user can log in.
        locked_until: ISO 8601 timestamp until which the account is locked.
        created_at: ISO 8601 creation timestamp.
        updated_at: ISO 8601 last-update timestamp.
    """

    id: int | str
    email: str
    username: str | None = None
    role: UserRole = "user"
    is_verified: bool = False
    is_active: bool = True
    locked_until: str | None = None
    created_at: str = ""
    updated_at: str | None = None

    def __post_init__(self) -> None:
        """Validate user data after initialization."""
        if not self.email:
            raise ValueError("Email is required")

    def merged(self, changes: dict[str, Any]) -> "User":
        """Return a copy with known attributes overwritten from ``changes``."""
        known = {k: v for k, v in changes.items() if k in _USER_FIELDS and k != "id"}
        return replace(self, **known)


_USER_FIELDS = frozenset(User.__dataclass_fields__)
