"""API Schemas for request/response validation."""

from lunarconsole.infrastructure.api.schemas.collection_schemas import (
    CollectionResponse,
    CollectionSchemaModel,
    CollectionStatsResponse,
    FieldDefinitionSchema,
    FieldValidationSchema,
)
from lunarconsole.infrastructure.api.schemas.common_schemas import (
    ApiEnvelope,
    ApiErrorDetail,
    PaginationMeta,
)
from lunarconsole.infrastructure.api.schemas.record_schemas import (
    RecordListResponse,
    RecordRequest,
    RecordResponse,
)
from lunarconsole.infrastructure.api.schemas.role_schemas import (
    RoleCreateRequest,
    RoleResponse,
    RoleUpdateRequest,
)
from lunarconsole.infrastructure.api.schemas.setting_schemas import SettingResponse, SettingUpdateRequest
from lunarconsole.infrastructure.api.schemas.users_schemas import (
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)

__all__ = [
    "ApiEnvelope",
    "ApiErrorDetail",
    "CollectionResponse",
    "CollectionSchemaModel",
    "CollectionStatsResponse",
    "FieldDefinitionSchema",
    "FieldValidationSchema",
    "PaginationMeta",
    "RecordListResponse",
    "RecordRequest",
    "RecordResponse",
    "RoleCreateRequest",
    "RoleResponse",
    "RoleUpdateRequest",
    "SettingResponse",
    "SettingUpdateRequest",
    "UserCreateRequest",
    "UserListResponse",
    "UserResponse",
    "UserUpdateRequest",
]
