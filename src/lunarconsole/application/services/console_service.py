"""Console service: the facade the admin UI talks to.

Wires the validators, the entity cache, the optimistic mutation executor and
a BackendApi together. Reads go through the cache and refetch when an entry
is missing or stale. Writes are built into mutation plans and submitted to
the executor, which applies them optimistically and rolls back on failure.
"""

from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime, timezone
from operator import attrgetter
from typing import Any

from lunarconsole.core.config import Settings, get_settings
from lunarconsole.core.logging import get_logger
from lunarconsole.domain.entities.collection import Collection, CollectionStat
from lunarconsole.domain.entities.field_definition import CollectionSchema
from lunarconsole.domain.entities.record import Record
from lunarconsole.domain.entities.role import Role
from lunarconsole.domain.entities.setting import Setting
from lunarconsole.domain.entities.user import User
from lunarconsole.domain.entities.validation import Err, Ok, Result
from lunarconsole.domain.services.collection_validator import (
    CollectionValidationError,
    CollectionValidator,
)
from lunarconsole.domain.services.entity_cache import (
    CacheEntry,
    CacheKey,
    EntityCache,
    Resource,
    Subscriber,
    adjust_record_count,
    remove_item,
)
from lunarconsole.domain.services.field_normalizer import normalize_form
from lunarconsole.domain.services.mutation_executor import (
    MutationKind,
    MutationPlan,
    MutationResult,
    MutationTarget,
    OptimisticMutationExecutor,
)
from lunarconsole.domain.services.record_validator import RecordValidator
from lunarconsole.domain.services.role_validator import RoleValidator
from lunarconsole.domain.services.setting_validator import validate_setting_value
from lunarconsole.domain.services.user_validator import UserValidator
from lunarconsole.infrastructure.api.base import BackendApi, ListQuery

logger = get_logger(__name__)

STATS_LOCK = (Resource.STATS.value, "")
ALL_RECORDS_LOCK = (Resource.ALL_RECORDS.value, "")

ROLE_FIELDS = frozenset({"name", "description", "priority"})

name_of = attrgetter("name")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _collection_errors(errors: list[CollectionValidationError]) -> Result:
    """Key collection errors by path, keeping the first error per path."""
    by_field: dict[str, CollectionValidationError] = {}
    for error in errors:
        by_field.setdefault(error.field, error)
    return Err(by_field)


class ConsoleService:
    """UI-facing operations of the LunarBase console."""

    def __init__(
        self,
        api: BackendApi,
        cache: EntityCache | None = None,
        executor: OptimisticMutationExecutor | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            api: Backend API client.
            cache: Entity cache. Created from settings when omitted.
            executor: Mutation executor over ``cache``. Created when omitted.
            settings: Console settings. Defaults to the cached settings.
        """
        self.settings = settings or get_settings()
        self.api = api
        self.cache = cache or EntityCache(ttl_seconds=self.settings.cache_ttl_seconds)
        self.executor = executor or OptimisticMutationExecutor(
            self.cache, timeout_seconds=self.settings.request_timeout_seconds
        )
        self.user_validator = UserValidator()
        self.role_validator = RoleValidator()

    # Validation

    def validate_record(
        self,
        schema: CollectionSchema,
        form_data: dict[str, Any],
        partial: bool = False,
    ) -> Result:
        """Normalize form values and validate them against ``schema``.

        Returns:
            ``Ok(record_data)`` or ``Err({field_name: FieldError})``.

        Raises:
            SchemaValidationError: If ``schema`` itself is invalid.
        """
        return RecordValidator(schema).validate(normalize_form(schema, form_data), partial=partial)

    def subscribe(
        self,
        callback: Subscriber,
        resource: Resource | None = None,
        scope: str | None = None,
    ) -> Callable[[], None]:
        """Register a callback for cache changes. Returns an unsubscribe function."""
        return self.cache.subscribe(callback, resource=resource, scope=scope)

    # Reads

    async def _read_through(self, key: CacheKey, fetch, force: bool) -> CacheEntry[Any]:
        cached = self.cache.get(key)
        if isinstance(cached, CacheEntry) and not force:
            return cached
        items, pagination = await fetch()
        logger.debug("Cache refreshed", resource=key.resource.value, scope=key.scope, page=key.page)
        return self.cache.store(key, items, pagination)

    async def get_collections(self, force: bool = False) -> CacheEntry[Collection]:
        """Get all collections, fetching when not cached or stale."""

        async def fetch():
            return await self.api.list_collections(), None

        return await self._read_through(CacheKey.collections(), fetch, force)

    async def get_collection_stats(self, force: bool = False) -> CacheEntry[CollectionStat]:
        """Get the per-collection record counts."""

        async def fetch():
            return await self.api.get_collection_stats(), None

        return await self._read_through(CacheKey.stats(), fetch, force)

    async def get_records(
        self,
        collection: str,
        page: int = 1,
        page_size: int | None = None,
        search: str = "",
        filters: dict[str, Any] | None = None,
        force: bool = False,
    ) -> CacheEntry[Record]:
        """Get one page of a collection's records."""
        page_size = page_size or self.settings.default_page_size
        key = CacheKey.records(collection, page=page, page_size=page_size, search=search, filters=filters)
        query = ListQuery(page=page, page_size=page_size, search=search, filters=dict(filters or {}))

        async def fetch():
            result = await self.api.list_records(collection, query)
            return result.items, result.pagination

        return await self._read_through(key, fetch, force)

    async def get_all_records(
        self,
        page: int = 1,
        page_size: int | None = None,
        search: str = "",
        filters: dict[str, Any] | None = None,
        force: bool = False,
    ) -> CacheEntry[Record]:
        """Get one page of records across every collection.

        Any record create, update or delete drops the cached pages of this
        view; they are refetched on the next read.
        """
        page_size = page_size or self.settings.default_page_size
        key = CacheKey.all_records(page=page, page_size=page_size, search=search, filters=filters)
        query = ListQuery(page=page, page_size=page_size, search=search, filters=dict(filters or {}))

        async def fetch():
            result = await self.api.list_all_records(query)
            return result.items, result.pagination

        return await self._read_through(key, fetch, force)

    async def get_roles(self, force: bool = False) -> CacheEntry[Role]:
        """Get all permission roles."""

        async def fetch():
            return await self.api.list_roles(), None

        return await self._read_through(CacheKey.roles(), fetch, force)

    async def get_users(
        self,
        page: int = 1,
        page_size: int = 10,
        search: str = "",
        force: bool = False,
    ) -> CacheEntry[User]:
        """Get one page of users."""
        key = CacheKey.users(page=page, page_size=page_size, search=search)
        query = ListQuery(page=page, page_size=page_size, search=search)

        async def fetch():
            result = await self.api.list_users(query)
            return result.items, result.pagination

        return await self._read_through(key, fetch, force)

    async def get_settings(self, category: str, force: bool = False) -> CacheEntry[Setting]:
        """Get the settings of one category."""

        async def fetch():
            return await self.api.get_settings_by_category(category), None

        return await self._read_through(CacheKey.settings(category), fetch, force)

    def _find_cached(self, resource: Resource, scope: str, item_id: Any, id_of=attrgetter("id")) -> Any:
        for key in self.cache.keys_for(resource, scope):
            entry = self.cache.peek(key)
            index = entry.index_of(item_id, id_of) if entry is not None else None
            if index is not None:
                return entry.items[index]
        return None

    async def _setting_data_type(self, category: str, setting_key: str) -> str:
        cached = self.cache.get(CacheKey.settings(category))
        if isinstance(cached, CacheEntry):
            entry = cached
        else:
            entry = await self.get_settings(category, force=True)
        index = entry.index_of(setting_key)
        return entry.items[index].data_type if index is not None else "string"

    def _keys(self, *groups: Iterable[CacheKey]) -> list[CacheKey]:
        keys: list[CacheKey] = []
        for group in groups:
            keys.extend(group)
        return keys

    # Mutations

    async def submit_mutation(
        self,
        kind: MutationKind,
        collection: Collection,
        payload: dict[str, Any] | None = None,
        record_id: int | str | None = None,
    ) -> MutationResult:
        """Submit a record mutation of the given kind.

        Args:
            kind: Create, update or delete.
            collection: Collection the record belongs to.
            payload: Raw form values for creates and updates.
            record_id: Target record for updates and deletes.
        """
        match kind:
            case MutationKind.CREATE:
                return await self.create_record(collection, payload or {})
            case MutationKind.UPDATE:
                return await self.update_record(collection, record_id, payload or {})
            case MutationKind.DELETE:
                return await self.delete_record(collection.name, record_id)

    async def create_record(self, collection: Collection, form_data: dict[str, Any]) -> MutationResult:
        """Create a record, showing it in the first page until the server confirms."""
        name = collection.name
        temp_id = self.executor.next_temp_id()
        now = _now()

        def apply(cache: EntityCache, data: dict[str, Any]) -> None:
            placeholder = Record(id=temp_id, data=data, created_at=now, updated_at=now)
            cache.apply_create(Resource.RECORDS, name, placeholder, count_collection=name)
            cache.invalidate_scope(Resource.ALL_RECORDS)

        def commit(cache: EntityCache, record: Record) -> None:
            cache.replace_everywhere(Resource.RECORDS, name, temp_id, record)

        return await self.executor.submit(
            MutationPlan(
                kind=MutationKind.CREATE,
                target=MutationTarget(Resource.RECORDS, name),
                payload=form_data,
                validate=lambda data: self.validate_record(collection.schema, data),
                apply=apply,
                remote=lambda data: self.api.create_record(name, data),
                commit=commit,
                touched_keys=lambda cache: self._keys(
                    cache.keys_for(Resource.RECORDS, name),
                    cache.keys_for(Resource.ALL_RECORDS),
                    [CacheKey.stats()],
                ),
                lock_keys=(STATS_LOCK, ALL_RECORDS_LOCK),
            )
        )

    async def update_record(
        self,
        collection: Collection,
        record_id: int | str,
        form_data: dict[str, Any],
        partial: bool = False,
    ) -> MutationResult:
        """Update a record in place in every cached page holding it."""
        name = collection.name

        def apply(cache: EntityCache, data: dict[str, Any]) -> None:
            existing = self._find_cached(Resource.RECORDS, name, record_id)
            updated = None
            if existing is not None:
                updated = existing.with_data({**existing.data, **data}, updated_at=_now())
            cache.apply_update(Resource.RECORDS, name, record_id, updated)
            cache.invalidate_scope(Resource.ALL_RECORDS)

        def commit(cache: EntityCache, record: Record) -> None:
            cache.replace_everywhere(Resource.RECORDS, name, record_id, record)

        return await self.executor.submit(
            MutationPlan(
                kind=MutationKind.UPDATE,
                target=MutationTarget(Resource.RECORDS, name, record_id),
                payload=form_data,
                validate=lambda data: self.validate_record(collection.schema, data, partial=partial),
                apply=apply,
                remote=lambda data: self.api.update_record(name, record_id, data),
                commit=commit,
                touched_keys=lambda cache: self._keys(
                    cache.keys_for(Resource.RECORDS, name), cache.keys_for(Resource.ALL_RECORDS)
                ),
                lock_keys=(ALL_RECORDS_LOCK,),
            )
        )

    async def delete_record(self, collection: str, record_id: int | str) -> MutationResult:
        """Delete a record and decrement its collection's count."""

        def apply(cache: EntityCache, _: Any) -> None:
            cache.apply_delete(Resource.RECORDS, collection, record_id, count_collection=collection)
            cache.invalidate_scope(Resource.ALL_RECORDS)

        return await self.executor.submit(
            MutationPlan(
                kind=MutationKind.DELETE,
                target=MutationTarget(Resource.RECORDS, collection, record_id),
                payload=None,
                apply=apply,
                remote=lambda _: self.api.delete_record(collection, record_id),
                commit=lambda cache, _: None,
                touched_keys=lambda cache: self._keys(
                    cache.keys_for(Resource.RECORDS, collection),
                    cache.keys_for(Resource.ALL_RECORDS),
                    [CacheKey.stats()],
                ),
                lock_keys=(STATS_LOCK, ALL_RECORDS_LOCK),
            )
        )

    async def create_collection(
        self,
        name: str,
        schema: CollectionSchema,
        description: str | None = None,
    ) -> MutationResult:
        """Create a collection. Invalid names and schemas never reach the backend."""
        temp_id = self.executor.next_temp_id()
        now = _now()

        def validate(payload: dict[str, Any]) -> Result:
            errors = CollectionValidator.validate(name, schema)
            return _collection_errors(errors) if errors else Ok(payload)

        def apply(cache: EntityCache, _: Any) -> None:
            placeholder = Collection(
                id=temp_id, name=name, schema=schema, description=description, created_at=now, updated_at=now
            )
            cache.apply_create(Resource.COLLECTIONS, "", placeholder, position=None)
            cache.update(CacheKey.stats(), lambda entry: adjust_record_count(entry, name, 0))

        def commit(cache: EntityCache, created: Collection) -> None:
            cache.replace_everywhere(Resource.COLLECTIONS, "", temp_id, created)

        return await self.executor.submit(
            MutationPlan(
                kind=MutationKind.CREATE,
                target=MutationTarget(Resource.COLLECTIONS),
                payload={"name": name, "schema": schema, "description": description},
                validate=validate,
                apply=apply,
                remote=lambda _: self.api.create_collection(name, schema, description),
                commit=commit,
                touched_keys=lambda cache: self._keys(cache.keys_for(Resource.COLLECTIONS), [CacheKey.stats()]),
                lock_keys=(STATS_LOCK,),
            )
        )

    async def update_collection(
        self,
        name: str,
        schema: CollectionSchema,
        description: str | None = None,
    ) -> MutationResult:
        """Replace a collection's schema. Cached records of the collection are dropped on success."""

        def validate(payload: dict[str, Any]) -> Result:
            errors = CollectionValidator.validate_schema(schema)
            return _collection_errors(errors) if errors else Ok(payload)

        def apply(cache: EntityCache, _: Any) -> None:
            existing = self._find_cached(Resource.COLLECTIONS, "", name, id_of=name_of)
            updated = None
            if existing is not None:
                updated = replace(
                    existing,
                    schema=schema,
                    description=description if description is not None else existing.description,
                    updated_at=_now(),
                )
            cache.apply_update(Resource.COLLECTIONS, "", name, updated, id_of=name_of)

        def commit(cache: EntityCache, updated: Collection) -> None:
            cache.replace_everywhere(Resource.COLLECTIONS, "", name, updated, id_of=name_of)
            cache.invalidate_scope(Resource.RECORDS, name)
            cache.invalidate_scope(Resource.ALL_RECORDS)

        return await self.executor.submit(
            MutationPlan(
                kind=MutationKind.UPDATE,
                target=MutationTarget(Resource.COLLECTIONS, "", name),
                payload={"name": name, "schema": schema, "description": description},
                validate=validate,
                apply=apply,
                remote=lambda _: self.api.update_collection(name, schema, description),
                commit=commit,
                touched_keys=lambda cache: cache.keys_for(Resource.COLLECTIONS),
                lock_keys=((Resource.RECORDS.value, name), ALL_RECORDS_LOCK),
            )
        )

    async def delete_collection(self, name: str) -> MutationResult:
        """Delete a collection along with its cached records and count."""

        def apply(cache: EntityCache, _: Any) -> None:
            cache.apply_delete(Resource.COLLECTIONS, "", name, id_of=name_of)
            cache.invalidate_scope(Resource.RECORDS, name)
            cache.invalidate_scope(Resource.ALL_RECORDS)
            cache.update(CacheKey.stats(), lambda entry: remove_item(entry, name))

        return await self.executor.submit(
            MutationPlan(
                kind=MutationKind.DELETE,
                target=MutationTarget(Resource.COLLECTIONS, "", name),
                payload=None,
                apply=apply,
                remote=lambda _: self.api.delete_collection(name),
                commit=lambda cache, _: None,
                touched_keys=lambda cache: self._keys(
                    cache.keys_for(Resource.COLLECTIONS),
                    cache.keys_for(Resource.RECORDS, name),
                    cache.keys_for(Resource.ALL_RECORDS),
                    [CacheKey.stats()],
                ),
                lock_keys=((Resource.RECORDS.value, name), STATS_LOCK, ALL_RECORDS_LOCK),
            )
        )

    async def create_user(self, form_data: dict[str, Any]) -> MutationResult:
        """Create a user after checking email, password, username and role."""
        temp_id = self.executor.next_temp_id()
        now = _now()

        def apply(cache: EntityCache, data: dict[str, Any]) -> None:
            placeholder = User(
                id=temp_id,
                email=data["email"],
                username=data.get("username"),
                role=data.get("role", "user"),
                created_at=now,
                updated_at=now,
            )
            cache.apply_create(Resource.USERS, "", placeholder)

        def commit(cache: EntityCache, user: User) -> None:
            cache.replace_everywhere(Resource.USERS, "", temp_id, user)

        return await self.executor.submit(
            MutationPlan(
                kind=MutationKind.CREATE,
                target=MutationTarget(Resource.USERS),
                payload=form_data,
                validate=lambda data: self.user_validator.validate(data),
                apply=apply,
                remote=lambda data: self.api.create_user(data),
                commit=commit,
                touched_keys=lambda cache: cache.keys_for(Resource.USERS),
            )
        )

    async def update_user(self, user_id: int | str, changes: dict[str, Any]) -> MutationResult:
        """Update a user. Empty form values are left unchanged."""

        def apply(cache: EntityCache, data: dict[str, Any]) -> None:
            existing = self._find_cached(Resource.USERS, "", user_id)
            updated = existing.merged({**data, "updated_at": _now()}) if existing is not None else None
            cache.apply_update(Resource.USERS, "", user_id, updated)

        def commit(cache: EntityCache, user: User) -> None:
            cache.replace_everywhere(Resource.USERS, "", user_id, user)

        return await self.executor.submit(
            MutationPlan(
                kind=MutationKind.UPDATE,
                target=MutationTarget(Resource.USERS, "", user_id),
                payload=changes,
                validate=lambda data: self.user_validator.validate(data, partial=True),
                apply=apply,
                remote=lambda data: self.api.update_user(user_id, data),
                commit=commit,
                touched_keys=lambda cache: cache.keys_for(Resource.USERS),
            )
        )

    async def delete_user(self, user_id: int | str) -> MutationResult:
        """Delete a user."""
        return await self.executor.submit(
            MutationPlan(
                kind=MutationKind.DELETE,
                target=MutationTarget(Resource.USERS, "", user_id),
                payload=None,
                apply=lambda cache, _: cache.apply_delete(Resource.USERS, "", user_id),
                remote=lambda _: self.api.delete_user(user_id),
                commit=lambda cache, _: None,
                touched_keys=lambda cache: cache.keys_for(Resource.USERS),
            )
        )

    async def unlock_user(self, user_id: int | str) -> MutationResult:
        """Clear a user's lockout."""

        def apply(cache: EntityCache, _: Any) -> None:
            existing = self._find_cached(Resource.USERS, "", user_id)
            if existing is not None:
                cache.apply_update(Resource.USERS, "", user_id, replace(existing, locked_until=None))

        def commit(cache: EntityCache, user: User) -> None:
            cache.replace_everywhere(Resource.USERS, "", user_id, user)

        return await self.executor.submit(
            MutationPlan(
                kind=MutationKind.UPDATE,
                target=MutationTarget(Resource.USERS, "", user_id),
                payload=None,
                apply=apply,
                remote=lambda _: self.api.unlock_user(user_id),
                commit=commit,
                touched_keys=lambda cache: cache.keys_for(Resource.USERS),
            )
        )

    async def update_setting(
        self,
        category: str,
        setting_key: str,
        value: str,
        data_type: str | None = None,
        description: str | None = None,
    ) -> MutationResult:
        """Update a setting after checking the value against its data type.

        The data type is taken from the cached setting when not given. A
        missing or stale category is refetched first, so a server-side type
        change is never validated against an outdated type.
        """
        if data_type is None:
            data_type = await self._setting_data_type(category, setting_key)

        def apply(cache: EntityCache, new_value: str) -> None:
            existing = self._find_cached(Resource.SETTINGS, category, setting_key)
            if existing is None:
                return
            updated = replace(
                existing,
                setting_value=new_value,
                description=description if description is not None else existing.description,
                updated_at=_now(),
            )
            cache.apply_update(Resource.SETTINGS, category, setting_key, updated)

        def commit(cache: EntityCache, setting: Setting) -> None:
            cache.replace_everywhere(Resource.SETTINGS, category, setting_key, setting)

        return await self.executor.submit(
            MutationPlan(
                kind=MutationKind.UPDATE,
                target=MutationTarget(Resource.SETTINGS, category, setting_key),
                payload=value,
                validate=lambda v: validate_setting_value(data_type, v),
                apply=apply,
                remote=lambda v: self.api.update_setting(category, setting_key, v, description),
                commit=commit,
                touched_keys=lambda cache: cache.keys_for(Resource.SETTINGS, category),
            )
        )


    async def create_role(self, form_data: dict[str, Any]) -> MutationResult:
        """Create a permission role, appending it to the cached list."""
        temp_id = self.executor.next_temp_id()
        now = _now()

        def apply(cache: EntityCache, data: dict[str, Any]) -> None:
            placeholder = Role(
                id=temp_id,
                name=data["name"],
                description=data.get("description"),
                priority=data.get("priority", 0),
                created_at=now,
                updated_at=now,
            )
            cache.apply_create(Resource.ROLES, "", placeholder, position=None)

        def commit(cache: EntityCache, role: Role) -> None:
            cache.replace_everywhere(Resource.ROLES, "", temp_id, role)

        return await self.executor.submit(
            MutationPlan(
                kind=MutationKind.CREATE,
                target=MutationTarget(Resource.ROLES),
                payload=form_data,
                validate=lambda data: self.role_validator.validate(data),
                apply=apply,
                remote=lambda data: self.api.create_role(data),
                commit=commit,
                touched_keys=lambda cache: cache.keys_for(Resource.ROLES),
            )
        )

    async def update_role(self, role_name: str, changes: dict[str, Any]) -> MutationResult:
        """Update a role addressed by its current name. Only given fields change."""

        def apply(cache: EntityCache, data: dict[str, Any]) -> None:
            existing = self._find_cached(Resource.ROLES, "", role_name, id_of=name_of)
            updated = None
            if existing is not None:
                fields = {k: v for k, v in data.items() if k in ROLE_FIELDS}
                updated = replace(existing, **fields, updated_at=_now())
            cache.apply_update(Resource.ROLES, "", role_name, updated, id_of=name_of)

        def commit(cache: EntityCache, role: Role) -> None:
            cache.replace_everywhere(Resource.ROLES, "", role.id, role)

        return await self.executor.submit(
            MutationPlan(
                kind=MutationKind.UPDATE,
                target=MutationTarget(Resource.ROLES, "", role_name),
                payload=changes,
                validate=lambda data: self.role_validator.validate(data, partial=True),
                apply=apply,
                remote=lambda data: self.api.update_role(role_name, data),
                commit=commit,
                touched_keys=lambda cache: cache.keys_for(Resource.ROLES),
            )
        )

    async def delete_role(self, role_name: str) -> MutationResult:
        """Delete a role."""
        return await self.executor.submit(
            MutationPlan(
                kind=MutationKind.DELETE,
                target=MutationTarget(Resource.ROLES, "", role_name),
                payload=None,
                apply=lambda cache, _: cache.apply_delete(Resource.ROLES, "", role_name, id_of=name_of),
                remote=lambda _: self.api.delete_role(role_name),
                commit=lambda cache, _: None,
                touched_keys=lambda cache: cache.keys_for(Resource.ROLES),
            )
        )
