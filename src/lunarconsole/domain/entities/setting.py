"""System setting entity."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Setting:
    """A single server setting within a category.

    Attributes:
        category: Settings category (e.g. database, auth, api).
        setting_key: Key unique within the category.
        setting_value: Current value as stored by the server.
        data_type: Server-declared type of the value.
        description: Optional help text.
        updated_at: ISO 8601 last-update timestamp.
    """

    category: str
    setting_key: str
    setting_value: Any = None
    data_type: str = "string"
    description: str | None = None
    updated_at: str = ""

    @property
    def id(self) -> str:
        return self.setting_key
