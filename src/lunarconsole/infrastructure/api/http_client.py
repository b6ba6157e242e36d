"""HTTP client for the LunarBase backend API.

Wraps ``httpx.AsyncClient`` and maps the backend's response envelope to
domain entities. Transport errors and timeouts surface as
``NetworkFailure``; error statuses surface as ``ServerRejected`` carrying the
most specific message the backend supplied.
"""

import json
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from lunarconsole.core.config import Settings, get_settings
from lunarconsole.core.exceptions import NetworkFailure, ServerRejected
from lunarconsole.core.logging import get_logger
from lunarconsole.domain.entities.collection import Collection, CollectionStat, collection_payload
from lunarconsole.domain.entities.field_definition import CollectionSchema
from lunarconsole.domain.entities.pagination import Pagination
from lunarconsole.domain.entities.record import Record
from lunarconsole.domain.entities.role import Role
from lunarconsole.domain.entities.setting import Setting
from lunarconsole.domain.entities.user import User
from lunarconsole.infrastructure.api.base import BackendApi, ListQuery, Page
from lunarconsole.infrastructure.api.schemas import (
    ApiEnvelope,
    CollectionResponse,
    CollectionStatsResponse,
    PaginationMeta,
    RecordListResponse,
    RecordRequest,
    RecordResponse,
    RoleCreateRequest,
    RoleResponse,
    RoleUpdateRequest,
    SettingResponse,
    SettingUpdateRequest,
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def extract_error_message(body: Any, status_code: int, reason: str = "") -> str:
    """Pick the best error message from an error response body.

    Checks ``error`` (string, then ``error.message``, then ``error.code``),
    then ``message``, then falls back to the HTTP status line.
    """
    if isinstance(body, dict):
        try:
            envelope = ApiEnvelope.model_validate(body)
        except ValidationError:
            envelope = None
        if envelope is not None:
            message = envelope.error_message()
            if message:
                return message
    return f"HTTP {status_code}: {reason}".rstrip(": ")


class HttpBackendApi(BackendApi):
    """BackendApi implementation over HTTP.

    Usage:
        async with HttpBackendApi() as api:
            collections = await api.list_collections()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Console settings. Defaults to the cached settings.
            transport: Optional httpx transport (used by tests).
        """
        self.settings = settings or get_settings()
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.settings.api_token:
            headers["Authorization"] = f"Bearer {self.settings.api_token}"
        self._client = httpx.AsyncClient(
            base_url=self.settings.api_base_url,
            headers=headers,
            timeout=self.settings.request_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "HttpBackendApi":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the ``data`` member of the envelope.

        Returns:
            The payload, or None for empty responses.

        Raises:
            NetworkFailure: If the request could not complete.
            ServerRejected: If the backend answered with an error.
        """
        try:
            response = await self._client.request(method, path, params=params, json=body)
        except httpx.TimeoutException as e:
            logger.warning("Backend request timed out", method=method, path=path)
            raise NetworkFailure(f"Request to {path} timed out") from e
        except httpx.HTTPError as e:
            logger.warning("Backend request failed", method=method, path=path, error=str(e))
            raise NetworkFailure(f"Could not reach the backend: {e}") from e

        parsed = self._parse_body(response)

        if response.is_error:
            message = extract_error_message(parsed, response.status_code, response.reason_phrase)
            validation_errors = parsed.get("validation_errors") if isinstance(parsed, dict) else None
            logger.warning(
                "Backend rejected request",
                method=method,
                path=path,
                status_code=response.status_code,
                error=message,
            )
            raise ServerRejected(message, response.status_code, validation_errors)

        if not isinstance(parsed, dict) or not {"success", "data"} & parsed.keys():
            return parsed

        envelope = ApiEnvelope.model_validate(parsed)
        if not envelope.success:
            message = envelope.error_message() or "Request failed"
            raise ServerRejected(message, response.status_code, envelope.validation_errors)
        return envelope.data

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type or not response.content:
            return None
        try:
            return response.json()
        except json.JSONDecodeError:
            return None

    @staticmethod
    def _parse(model: type[ModelT], data: Any, path: str) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error("Unexpected response shape", path=path, model=model.__name__, error=str(e))
            raise ServerRejected(f"Unexpected response from {path}", 502) from e

    # Collections

    async def list_collections(self) -> list[Collection]:
        data = await self._request("GET", "/collections")
        return [self._parse(CollectionResponse, item, "/collections").to_entity() for item in data or []]

    async def get_collection(self, name: str) -> Collection:
        path = f"/collections/{name}"
        data = await self._request("GET", path)
        return self._parse(CollectionResponse, data, path).to_entity()

    async def create_collection(
        self, name: str, schema: CollectionSchema, description: str | None = None
    ) -> Collection:
        data = await self._request("POST", "/collections", body=collection_payload(name, schema, description))
        return self._parse(CollectionResponse, data, "/collections").to_entity()

    async def update_collection(
        self, name: str, schema: CollectionSchema, description: str | None = None
    ) -> Collection:
        path = f"/collections/{name}"
        data = await self._request("PUT", path, body=collection_payload(name, schema, description))
        return self._parse(CollectionResponse, data, path).to_entity()

    async def delete_collection(self, name: str) -> None:
        await self._request("DELETE", f"/collections/{name}")

    async def get_collection_stats(self) -> list[CollectionStat]:
        data = await self._request("GET", "/collections/stats")
        return self._parse(CollectionStatsResponse, data or {}, "/collections/stats").to_entities()

    # Records

    async def list_records(self, collection: str, query: ListQuery) -> Page[Record]:
        """List one page of records.

        The records endpoint returns a bare list, so the total count is taken
        from the collection stats. A paged response body is used as is.
        """
        path = f"/collections/{collection}/records"
        data = await self._request("GET", path, params=query.to_params())

        if isinstance(data, dict) and "records" in data:
            records = [self._parse(RecordResponse, item, path).to_entity() for item in data["records"]]
            meta = self._parse(PaginationMeta, data.get("pagination") or {}, path)
            return Page(items=records, pagination=meta.to_entity())

        records = [self._parse(RecordResponse, item, path).to_entity() for item in data or []]
        stats = await self.get_collection_stats()
        total_count = next((s.record_count for s in stats if s.name == collection), 0)
        pagination = Pagination.from_offset(query.offset, query.limit, total_count)
        return Page(items=records, pagination=pagination)

    async def list_all_records(self, query: ListQuery) -> Page[Record]:
        data = await self._request("GET", "/records", params=query.to_params())
        page = self._parse(RecordListResponse, data or {}, "/records")
        return Page(items=[r.to_entity() for r in page.records], pagination=page.pagination.to_entity())

    async def create_record(self, collection: str, data: dict[str, Any]) -> Record:
        path = f"/collections/{collection}/records"
        body = RecordRequest(data=data).model_dump()
        response = await self._request("POST", path, body=body)
        return self._parse(RecordResponse, response, path).to_entity()

    async def update_record(self, collection: str, record_id: int | str, data: dict[str, Any]) -> Record:
        path = f"/collections/{collection}/records/{record_id}"
        body = RecordRequest(data=data).model_dump()
        response = await self._request("PUT", path, body=body)
        return self._parse(RecordResponse, response, path).to_entity()

    async def delete_record(self, collection: str, record_id: int | str) -> None:
        await self._request("DELETE", f"/collections/{collection}/records/{record_id}")

    # Users

    async def list_users(self, query: ListQuery) -> Page[User]:
        data = await self._request("GET", "/users", params=query.to_params(search_param="filter"))
        page = self._parse(UserListResponse, data or {}, "/users")
        return Page(items=[u.to_entity() for u in page.users], pagination=page.pagination.to_entity())

    async def create_user(self, data: dict[str, Any]) -> User:
        body = UserCreateRequest.model_validate(data).model_dump(exclude_none=True)
        response = await self._request("POST", "/users", body=body)
        return self._parse(UserResponse, response, "/users").to_entity()

    async def update_user(self, user_id: int | str, data: dict[str, Any]) -> User:
        path = f"/users/{user_id}"
        body = UserUpdateRequest.model_validate(data).model_dump(exclude_none=True)
        response = await self._request("PUT", path, body=body)
        return self._parse(UserResponse, response, path).to_entity()

    async def delete_user(self, user_id: int | str) -> None:
        await self._request("DELETE", f"/users/{user_id}")

    async def unlock_user(self, user_id: int | str) -> User:
        path = f"/users/{user_id}/unlock"
        response = await self._request("POST", path)
        return self._parse(UserResponse, response, path).to_entity()

    # Roles

    async def list_roles(self) -> list[Role]:
        data = await self._request("GET", "/permissions/roles")
        return [self._parse(RoleResponse, item, "/permissions/roles").to_entity() for item in data or []]

    async def create_role(self, data: dict[str, Any]) -> Role:
        body = RoleCreateRequest.model_validate(data).model_dump(exclude_none=True)
        response = await self._request("POST", "/permissions/roles", body=body)
        return self._parse(RoleResponse, response, "/permissions/roles").to_entity()

    async def update_role(self, role_name: str, data: dict[str, Any]) -> Role:
        path = f"/permissions/roles/{role_name}"
        body = RoleUpdateRequest.model_validate(data).model_dump(exclude_none=True)
        response = await self._request("PUT", path, body=body)
        return self._parse(RoleResponse, response, path).to_entity()

    async def delete_role(self, role_name: str) -> None:
        await self._request("DELETE", f"/permissions/roles/{role_name}")

    # Settings

    async def get_settings_by_category(self, category: str) -> list[Setting]:
        path = f"/admin/settings/{category}"
        data = await self._request("GET", path)
        return [self._parse(SettingResponse, item, path).to_entity() for item in data or []]

    async def update_setting(
        self, category: str, setting_key: str, value: str, description: str | None = None
    ) -> Setting:
        path = f"/admin/settings/{category}/{setting_key}"
        body = SettingUpdateRequest(setting_value=value, description=description).model_dump(exclude_none=True)
        response = await self._request("PUT", path, body=body)
        return self._parse(SettingResponse, response, path).to_entity()
