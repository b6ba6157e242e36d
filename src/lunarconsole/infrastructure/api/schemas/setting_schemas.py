"""Pydantic schemas for system settings."""

from typing import Any

from pydantic import BaseModel, Field

from lunarconsole.domain.entities.setting import Setting


class SettingUpdateRequest(BaseModel):
    """Request schema for updating a single setting."""

    setting_value: str = Field(..., description="New value, serialized as a string")
    description: str | None = Field(None, description="Optional help text")


class SettingResponse(BaseModel):
    """Response schema for a single setting."""

    category: str
    setting_key: str = Field(..., min_length=1)
    setting_value: Any = None
    data_type: str = "string"
    description: str | None = None
    is_sensitive: bool = False
    requires_restart: bool = False
    updated_at: str = ""

    def to_entity(self) -> Setting:
        return Setting(
            category=self.category,
            setting_key=self.setting_key,
            setting_value=self.setting_value,
            data_type=self.data_type,
            description=self.description,
            updated_at=self.updated_at,
        )
