"""Role entity for permission management."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Role:
    """A named permission role.

    Attributes:
        id: Server-assigned identifier (negative for optimistic placeholders).
        name: Role name, used in API routes.
        description: Optional human-readable description.
        priority: Evaluation priority between 0 and 100.
        created_at: ISO 8601 creation timestamp.
        updated_at: ISO 8601 last-update timestamp.
    """

    id: int | str
    name: str
    description: str | None = None
    priority: int = 0
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        """Validate role data after initialization."""
        if not self.name:
            raise ValueError("Role name is required")
