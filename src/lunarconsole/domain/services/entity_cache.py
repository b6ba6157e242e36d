"""Entity cache with TTL support.

Provides an in-memory store of fetched list pages (collections, records per
collection, records across all collections, users, roles, settings, record
counts) keyed by the logical list they belong to. The cache performs no
network I/O: a read of an expired entry reports it as stale and the caller
refetches.

Entries are immutable. Every change replaces the entry for a key, so a
snapshot is a mapping of keys to entry references and restoring it is a
structural replace.
"""

import json
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from enum import Enum
from operator import attrgetter
from types import MappingProxyType
from typing import Any, Generic, Mapping, TypeVar

from lunarconsole.core.logging import get_logger
from lunarconsole.domain.entities.collection import CollectionStat
from lunarconsole.domain.entities.pagination import Pagination

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 300.0


class Resource(str, Enum):
    """Logical lists held by the cache."""

    COLLECTIONS = "collections"
    RECORDS = "records"
    ALL_RECORDS = "all_records"
    USERS = "users"
    SETTINGS = "settings"
    STATS = "stats"
    ROLES = "roles"


@dataclass(frozen=True, order=True)
class CacheKey:
    """Identifies one cached list page.

    Records are partitioned per collection name, page, page size, search
    term and filter set. Flat resources use an empty scope.
    """

    resource: Resource
    scope: str = ""
    page: int = 1
    page_size: int = 0
    search: str = ""
    filters: tuple[tuple[str, str], ...] = ()

    @staticmethod
    def freeze_filters(filters: Mapping[str, Any] | None) -> tuple[tuple[str, str], ...]:
        if not filters:
            return ()
        return tuple(sorted((k, json.dumps(v, sort_keys=True, default=str)) for k, v in filters.items()))

    @classmethod
    def collections(cls) -> "CacheKey":
        return cls(Resource.COLLECTIONS)

    @classmethod
    def stats(cls) -> "CacheKey":
        return cls(Resource.STATS)

    @classmethod
    def settings(cls, category: str) -> "CacheKey":
        return cls(Resource.SETTINGS, scope=category)

    @classmethod
    def records(
        cls,
        collection: str,
        page: int = 1,
        page_size: int = 20,
        search: str = "",
        filters: Mapping[str, Any] | None = None,
    ) -> "CacheKey":
        return cls(
            Resource.RECORDS,
            scope=collection,
            page=page,
            page_size=page_size,
            search=search,
            filters=cls.freeze_filters(filters),
        )

    @classmethod
    def all_records(
        cls,
        page: int = 1,
        page_size: int = 20,
        search: str = "",
        filters: Mapping[str, Any] | None = None,
    ) -> "CacheKey":
        return cls(
            Resource.ALL_RECORDS,
            page=page,
            page_size=page_size,
            search=search,
            filters=cls.freeze_filters(filters),
        )

    @classmethod
    def roles(cls) -> "CacheKey":
        return cls(Resource.ROLES)

    @classmethod
    def users(cls, page: int = 1, page_size: int = 10, search: str = "") -> "CacheKey":
        return cls(Resource.USERS, page=page, page_size=page_size, search=search)

    @property
    def is_filtered(self) -> bool:
        """Whether membership in this view depends on a search or filter."""
        return bool(self.search or self.filters)

    def filter_dict(self) -> dict[str, Any]:
        return {k: json.loads(v) for k, v in self.filters}


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached list page.

    Attributes:
        items: The page items, in display order.
        pagination: Page position and total count.
        fetched_at: Clock reading when the page was fetched.
        ttl: Seconds after ``fetched_at`` at which the entry becomes stale.
        search_term: Search term the page was fetched with.
        filters: Filter set the page was fetched with.
    """

    items: tuple[T, ...]
    pagination: Pagination
    fetched_at: float
    ttl: float = DEFAULT_TTL_SECONDS
    search_term: str = ""
    filters: tuple[tuple[str, str], ...] = ()

    def is_stale(self, now: float) -> bool:
        return now - self.fetched_at >= self.ttl

    def index_of(self, item_id: Any, id_of: Callable[[Any], Any] = attrgetter("id")) -> int | None:
        for i, item in enumerate(self.items):
            if id_of(item) == item_id:
                return i
        return None


@dataclass(frozen=True)
class Stale(Generic[T]):
    """Read result for an expired entry.

    The old entry may still be displayed but must be refetched before it is
    trusted for a write decision.
    """

    entry: CacheEntry[T]


CacheSnapshot = Mapping[CacheKey, CacheEntry[Any] | None]
Subscriber = Callable[[CacheKey, CacheEntry[Any] | None], None]


def insert_item(entry: CacheEntry[T], item: T, position: int | None = 0) -> CacheEntry[T]:
    """Return a copy of ``entry`` with ``item`` inserted and the total bumped.

    ``position=None`` appends. A paged entry is trimmed to its page size so
    it never grows past one page; a page size of 0 means unpaged.
    """
    items = list(entry.items)
    if position is None:
        items.append(item)
    else:
        items.insert(position, item)
    page_size = entry.pagination.page_size
    if page_size > 0:
        items = items[:page_size]
    pagination = replace(entry.pagination, total_count=entry.pagination.total_count + 1)
    return replace(entry, items=tuple(items), pagination=pagination)


def replace_item(
    entry: CacheEntry[T],
    item_id: Any,
    item: T,
    id_of: Callable[[Any], Any] = attrgetter("id"),
) -> CacheEntry[T]:
    """Return a copy of ``entry`` with the item ``item_id`` replaced, or ``entry`` unchanged."""
    index = entry.index_of(item_id, id_of)
    if index is None:
        return entry
    items = list(entry.items)
    items[index] = item
    return replace(entry, items=tuple(items))


def remove_item(
    entry: CacheEntry[T],
    item_id: Any,
    id_of: Callable[[Any], Any] = attrgetter("id"),
) -> CacheEntry[T]:
    """Return a copy of ``entry`` without the item ``item_id`` and the total decremented."""
    index = entry.index_of(item_id, id_of)
    if index is None:
        return entry
    items = entry.items[:index] + entry.items[index + 1 :]
    pagination = replace(entry.pagination, total_count=max(0, entry.pagination.total_count - 1))
    return replace(entry, items=items, pagination=pagination)


def adjust_record_count(entry: CacheEntry[CollectionStat], collection: str, delta: int) -> CacheEntry[CollectionStat]:
    """Return a copy of the stats entry with ``collection``'s count moved by ``delta``."""
    index = entry.index_of(collection)
    if index is None:
        stat = CollectionStat(name=collection, record_count=max(0, delta))
        return replace(entry, items=entry.items + (stat,))
    current = entry.items[index]
    items = list(entry.items)
    items[index] = CollectionStat(name=collection, record_count=max(0, current.record_count + delta))
    return replace(entry, items=tuple(items))


class EntityCache:
    """TTL-based cache of list pages.

    All reads and writes happen on the event loop turn that dispatched them,
    so no lock is held here; the mutation executor serialises writers per
    scope.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl_seconds: Time-to-live for new entries in seconds (default: 5 minutes).
            clock: Monotonic time source, injectable for tests.
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry[Any]] = {}
        self._subscribers: dict[int, tuple[Resource | None, str | None, Subscriber]] = {}
        self._next_subscription = 0

    def now(self) -> float:
        return self._clock()

    def get(self, key: CacheKey) -> CacheEntry[Any] | Stale[Any] | None:
        """Read an entry.

        Returns:
            The entry if fresh, ``Stale(entry)`` if expired, None if absent.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_stale(self.now()):
            return Stale(entry)
        return entry

    def peek(self, key: CacheKey) -> CacheEntry[Any] | None:
        """Return the stored entry regardless of freshness."""
        return self._entries.get(key)

    def make_entry(
        self,
        key: CacheKey,
        items: Iterable[T],
        pagination: Pagination | None = None,
    ) -> CacheEntry[T]:
        """Build a fresh entry for ``key`` stamped with the current time."""
        items = tuple(items)
        return CacheEntry(
            items=items,
            pagination=pagination or Pagination(current_page=1, page_size=0, total_count=len(items)),
            fetched_at=self.now(),
            ttl=self.ttl_seconds,
            search_term=key.search,
            filters=key.filters,
        )

    def set(self, key: CacheKey, entry: CacheEntry[Any]) -> None:
        """Store ``entry`` under ``key`` and notify subscribers."""
        self._entries[key] = entry
        self._notify(key, entry)

    def store(self, key: CacheKey, items: Iterable[T], pagination: Pagination | None = None) -> CacheEntry[T]:
        """Build a fresh entry from fetched items and store it."""
        entry = self.make_entry(key, items, pagination)
        self.set(key, entry)
        return entry

    def invalidate(self, key: CacheKey) -> None:
        """Drop the entry for ``key``. Invalidating an absent key is a no-op."""
        if self._entries.pop(key, None) is not None:
            self._notify(key, None)

    def invalidate_scope(self, resource: Resource, scope: str | None = None) -> int:
        """Drop every entry of ``resource`` (optionally limited to one scope).

        Returns:
            Number of entries removed.
        """
        keys = self.keys_for(resource, scope)
        for key in keys:
            self.invalidate(key)
        return len(keys)

    def invalidate_all(self) -> None:
        """Clear the entire cache."""
        keys = list(self._entries)
        self._entries.clear()
        for key in keys:
            self._notify(key, None)

    def keys_for(self, resource: Resource, scope: str | None = None) -> list[CacheKey]:
        """Return the cached keys of ``resource``, optionally within one scope."""
        return [
            key
            for key in self._entries
            if key.resource == resource and (scope is None or key.scope == scope)
        ]

    def snapshot(self, keys: Iterable[CacheKey]) -> CacheSnapshot:
        """Capture the current entry (or absence) of every key in ``keys``."""
        return MappingProxyType({key: self._entries.get(key) for key in keys})

    def restore(self, snapshot: CacheSnapshot) -> None:
        """Put every key of ``snapshot`` back to its captured state."""
        for key, entry in snapshot.items():
            if entry is None:
                self.invalidate(key)
            elif self._entries.get(key) is not entry:
                self.set(key, entry)

    def update(self, key: CacheKey, patch: Callable[[CacheEntry[Any]], CacheEntry[Any]]) -> None:
        """Replace the entry for ``key`` with ``patch(entry)`` if one is stored."""
        entry = self._entries.get(key)
        if entry is None:
            return
        patched = patch(entry)
        if patched is not entry:
            self.set(key, patched)

    def cleanup_expired(self) -> int:
        """Remove all stale entries.

        Returns:
            Number of entries removed.
        """
        now = self.now()
        expired = [key for key, entry in self._entries.items() if entry.is_stale(now)]
        for key in expired:
            self.invalidate(key)
        return len(expired)

    def size(self) -> int:
        """Get current number of cached entries."""
        return len(self._entries)

    def subscribe(
        self,
        callback: Subscriber,
        resource: Resource | None = None,
        scope: str | None = None,
    ) -> Callable[[], None]:
        """Register ``callback`` for changes to keys matching resource/scope.

        Returns:
            A function that removes the subscription.
        """
        subscription_id = self._next_subscription
        self._next_subscription += 1
        self._subscribers[subscription_id] = (resource, scope, callback)

        def unsubscribe() -> None:
            self._subscribers.pop(subscription_id, None)

        return unsubscribe

    def _notify(self, key: CacheKey, entry: CacheEntry[Any] | None) -> None:
        for resource, scope, callback in list(self._subscribers.values()):
            if resource is not None and key.resource != resource:
                continue
            if scope is not None and key.scope != scope:
                continue
            try:
                callback(key, entry)
            except Exception as e:
                # A failing subscriber must not break the cache write that triggered it
                logger.error(
                    "Cache subscriber failed",
                    resource=key.resource.value,
                    scope=key.scope,
                    error=str(e),
                    exc_info=True,
                )

    # Mutation policies: patch what can be determined locally, invalidate the rest.

    def apply_create(
        self,
        resource: Resource,
        scope: str,
        item: Any,
        count_collection: str | None = None,
        position: int | None = 0,
    ) -> None:
        """Reflect a created item in every cached page of ``resource``/``scope``.

        The item is inserted at the top of unfiltered first pages. Other
        pages shift by one and filtered views may or may not include the
        item, so they are invalidated.
        """
        for key in self.keys_for(resource, scope):
            if key.page == 1 and not key.is_filtered:
                self.update(key, lambda entry: insert_item(entry, item, position))
            else:
                self.invalidate(key)
        if count_collection is not None:
            self.update(CacheKey.stats(), lambda entry: adjust_record_count(entry, count_collection, 1))

    def apply_update(
        self,
        resource: Resource,
        scope: str,
        item_id: Any,
        item: Any,
        id_of: Callable[[Any], Any] = attrgetter("id"),
    ) -> None:
        """Reflect an updated item in every cached page of ``resource``/``scope``.

        Pages holding the item get it replaced in place. Filtered views that
        do not hold it might match it now, so they are invalidated.
        """
        for key in self.keys_for(resource, scope):
            entry = self._entries[key]
            if entry.index_of(item_id, id_of) is not None:
                self.set(key, replace_item(entry, item_id, item, id_of))
            elif key.is_filtered:
                self.invalidate(key)

    def apply_delete(
        self,
        resource: Resource,
        scope: str,
        item_id: Any,
        count_collection: str | None = None,
        id_of: Callable[[Any], Any] = attrgetter("id"),
    ) -> None:
        """Reflect a deleted item in every cached page of ``resource``/``scope``.

        The page holding the item loses it; every other page of the scope
        may shift, so it is invalidated.
        """
        for key in self.keys_for(resource, scope):
            entry = self._entries[key]
            if entry.index_of(item_id, id_of) is not None:
                self.set(key, remove_item(entry, item_id, id_of))
            else:
                self.invalidate(key)
        if count_collection is not None:
            self.update(CacheKey.stats(), lambda entry: adjust_record_count(entry, count_collection, -1))

    def replace_everywhere(
        self,
        resource: Resource,
        scope: str,
        item_id: Any,
        item: Any,
        id_of: Callable[[Any], Any] = attrgetter("id"),
    ) -> None:
        """Swap an item for its canonical version wherever it is cached."""
        for key in self.keys_for(resource, scope):
            self.update(key, lambda entry: replace_item(entry, item_id, item, id_of))
