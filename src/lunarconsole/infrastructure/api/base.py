"""Base abstractions for backend API clients."""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from lunarconsole.domain.entities.collection import Collection, CollectionStat
from lunarconsole.domain.entities.field_definition import CollectionSchema
from lunarconsole.domain.entities.pagination import Pagination
from lunarconsole.domain.entities.record import Record
from lunarconsole.domain.entities.role import Role
from lunarconsole.domain.entities.setting import Setting
from lunarconsole.domain.entities.user import User

T = TypeVar("T")


@dataclass(slots=True)
class ListQuery:
    """Page, search and filter options for a list request."""

    page: int = 1
    page_size: int = 20
    search: str = ""
    filters: dict[str, Any] = field(default_factory=dict)
    sort: str | None = None

    @property
    def limit(self) -> int:
        return self.page_size

    @property
    def offset(self) -> int:
        return (max(self.page, 1) - 1) * self.page_size

    def to_params(self, search_param: str = "search") -> dict[str, str]:
        """Build query-string parameters.

        Args:
            search_param: Name of the parameter carrying the search term.
                The users endpoint takes it as ``filter``.
        """
        params: dict[str, str] = {"limit": str(self.limit)}
        if self.offset:
            params["offset"] = str(self.offset)
        if self.sort:
            params["sort"] = self.sort
        if self.search:
            params[search_param] = self.search
        if self.filters and search_param != "filter":
            params["filter"] = json.dumps(self.filters, sort_keys=True, default=str)
        return params


@dataclass(slots=True)
class Page(Generic[T]):
    """Transport object returned by list operations."""

    items: list[T]
    pagination: Pagination


class BackendApi(ABC):
    """Abstract base class for the LunarBase backend API.

    Every method raises ``NetworkFailure`` when the backend cannot be
    reached and ``ServerRejected`` when it answers with an error status.
    """

    @abstractmethod
    async def list_collections(self) -> list[Collection]:
        """List all collections."""
        ...

    @abstractmethod
    async def get_collection(self, name: str) -> Collection:
        """Get a single collection by name."""
        ...

    @abstractmethod
    async def create_collection(
        self, name: str, schema: CollectionSchema, description: str | None = None
    ) -> Collection:
        """Create a collection."""
        ...

    @abstractmethod
    async def update_collection(
        self, name: str, schema: CollectionSchema, description: str | None = None
    ) -> Collection:
        """Replace a collection's schema and description."""
        ...

    @abstractmethod
    async def delete_collection(self, name: str) -> None:
        """Delete a collection and all its records."""
        ...

    @abstractmethod
    async def get_collection_stats(self) -> list[CollectionStat]:
        """Get the record count of every collection."""
        ...

    @abstractmethod
    async def list_records(self, collection: str, query: ListQuery) -> Page[Record]:
        """List one page of records in a collection."""
        ...

    @abstractmethod
    async def list_all_records(self, query: ListQuery) -> Page[Record]:
        """List one page of records across every collection.

        Each record carries the name of the collection it belongs to.
        """
        ...

    @abstractmethod
    async def create_record(self, collection: str, data: dict[str, Any]) -> Record:
        """Create a record."""
        ...

    @abstractmethod
    async def update_record(self, collection: str, record_id: int | str, data: dict[str, Any]) -> Record:
        """Update a record's data."""
        ...

    @abstractmethod
    async def delete_record(self, collection: str, record_id: int | str) -> None:
        """Delete a record."""
        ...

    @abstractmethod
    async def list_users(self, query: ListQuery) -> Page[User]:
        """List one page of users."""
        ...

    @abstractmethod
    async def create_user(self, data: dict[str, Any]) -> User:
        """Create a user."""
        ...

    @abstractmethod
    async def update_user(self, user_id: int | str, data: dict[str, Any]) -> User:
        """Update a user."""
        ...

    @abstractmethod
    async def delete_user(self, user_id: int | str) -> None:
        """Delete a user."""
        ...

    @abstractmethod
    async def unlock_user(self, user_id: int | str) -> User:
        """Clear a user's login lockout."""
        ...

    @abstractmethod
    async def get_settings_by_category(self, category: str) -> list[Setting]:
        """List the settings of one category."""
        ...

    @abstractmethod
    async def update_setting(
        self, category: str, setting_key: str, value: str, description: str | None = None
    ) -> Setting:
        """Update a single setting."""
        ...

    @abstractmethod
    async def list_roles(self) -> list[Role]:
        """List all permission roles."""
        ...

    @abstractmethod
    async def create_role(self, data: dict[str, Any]) -> Role:
        """Create a role."""
        ...

    @abstractmethod
    async def update_role(self, role_name: str, data: dict[str, Any]) -> Role:
        """Update a role, addressed by its current name."""
        ...

    @abstractmethod
    async def delete_role(self, role_name: str) -> None:
        """Delete a role."""
        ...
