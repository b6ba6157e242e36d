"""Record entity for collection data."""

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class Record:
    """A record conforming to its collection's schema.

    Records transition as a whole: the cache only ever replaces a record,
    never edits its ``data`` in place.

    Attributes:
        id: Server-assigned identifier (negative for optimistic placeholders).
        data: Mapping of field name to typed value.
        created_at: ISO 8601 timestamp assigned by the server.
        updated_at: ISO 8601 timestamp assigned by the server.
        collection_name: Owning collection, set on records listed across
            all collections.
    """

    id: int | str
    data: dict[str, Any] = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""
    collection_name: str | None = None

    def with_data(self, data: dict[str, Any], updated_at: str) -> "Record":
        """Return a copy with the data replaced."""
        return replace(self, data=dict(data), updated_at=updated_at)
