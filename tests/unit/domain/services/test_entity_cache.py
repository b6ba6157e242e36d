"""Unit tests for the entity cache."""

from lunarconsole.domain.entities import CollectionStat, Pagination, Record
from lunarconsole.domain.services import CacheKey, Resource, Stale
from lunarconsole.domain.services.entity_cache import adjust_record_count, insert_item, remove_item


def record(record_id, **data):
    return Record(id=record_id, data=data)


def records_page(cache, collection="posts", items=(), total=None, **key_kwargs):
    key = CacheKey.records(collection, **key_kwargs)
    items = tuple(items)
    pagination = Pagination(
        current_page=key.page,
        page_size=key.page_size,
        total_count=len(items) if total is None else total,
    )
    cache.store(key, items, pagination)
    return key


class TestEntityCache:
    """Test suite for EntityCache."""

    def test_cache_initialization(self, cache):
        assert cache.ttl_seconds == 300
        assert cache.size() == 0

    def test_store_and_get(self, cache):
        key = records_page(cache, items=[record(1)])

        entry = cache.get(key)
        assert entry.items == (record(1),)
        assert entry.pagination.total_count == 1

    def test_cache_miss(self, cache):
        assert cache.get(CacheKey.collections()) is None

    def test_stale_after_ttl(self, cache, clock):
        key = records_page(cache, items=[record(1)])

        clock.advance(299)
        assert not isinstance(cache.get(key), Stale)

        clock.advance(1)
        stale = cache.get(key)
        assert isinstance(stale, Stale)
        assert stale.entry.items == (record(1),)

    def test_invalidate_is_idempotent(self, cache):
        key = records_page(cache, items=[record(1)])

        cache.invalidate(key)
        cache.invalidate(key)

        assert cache.get(key) is None
        assert cache.size() == 0

    def test_invalidate_scope(self, cache):
        records_page(cache, "posts", page=1)
        records_page(cache, "posts", page=2)
        other = records_page(cache, "tags", page=1)

        assert cache.invalidate_scope(Resource.RECORDS, "posts") == 2
        assert cache.keys_for(Resource.RECORDS) == [other]

    def test_cleanup_expired(self, cache, clock):
        records_page(cache, "posts")
        clock.advance(200)
        fresh = records_page(cache, "tags")
        clock.advance(150)

        assert cache.cleanup_expired() == 1
        assert cache.keys_for(Resource.RECORDS) == [fresh]

    def test_snapshot_restore_roundtrip(self, cache):
        page = records_page(cache, items=[record(1), record(2)])
        missing = CacheKey.records("posts", page=2)
        snapshot = cache.snapshot([page, missing, CacheKey.stats()])
        before = cache.peek(page)

        cache.apply_create(Resource.RECORDS, "posts", record(-1))
        cache.store(missing, [record(3)])
        cache.restore(snapshot)

        assert cache.peek(page) == before
        assert cache.peek(missing) is None
        assert cache.peek(CacheKey.stats()) is None

    def test_filters_are_order_independent(self):
        a = CacheKey.records("posts", filters={"a": 1, "b": "x"})
        b = CacheKey.records("posts", filters={"b": "x", "a": 1})
        assert a == b
        assert a.is_filtered
        assert a.filter_dict() == {"a": 1, "b": "x"}

    def test_all_records_view_is_separate_from_collection_pages(self, cache):
        records_page(cache, "posts")
        view = CacheKey.all_records(page=2, search="hello")
        cache.store(view, [record(1)])

        assert view.scope == ""
        assert view.is_filtered
        assert cache.invalidate_scope(Resource.ALL_RECORDS) == 1
        assert len(cache.keys_for(Resource.RECORDS)) == 1


class TestMutationPolicies:
    def test_create_inserts_into_unfiltered_first_page(self, cache):
        first = records_page(cache, items=[record(1), record(2)], total=2)
        second = records_page(cache, page=2)
        searched = records_page(cache, search="hello")

        cache.apply_create(Resource.RECORDS, "posts", record(-1))

        assert [r.id for r in cache.peek(first).items] == [-1, 1, 2]
        assert cache.peek(first).pagination.total_count == 3
        assert cache.peek(second) is None
        assert cache.peek(searched) is None

    def test_create_trims_to_page_size(self, cache):
        first = records_page(cache, items=[record(1), record(2)], page_size=2, total=5)

        cache.apply_create(Resource.RECORDS, "posts", record(-1))

        assert [r.id for r in cache.peek(first).items] == [-1, 1]

    def test_create_bumps_record_count(self, cache):
        cache.store(CacheKey.stats(), [CollectionStat("posts", 4)])

        cache.apply_create(Resource.RECORDS, "posts", record(-1), count_collection="posts")

        assert cache.peek(CacheKey.stats()).items == (CollectionStat("posts", 5),)

    def test_update_replaces_in_place(self, cache):
        first = records_page(cache, items=[record(1, title="a"), record(2)])
        filtered_without = records_page(cache, filters={"status": "draft"})

        cache.apply_update(Resource.RECORDS, "posts", 1, record(1, title="b"))

        assert cache.peek(first).items[0] == record(1, title="b")
        assert cache.peek(filtered_without) is None

    def test_delete_removes_and_invalidates_other_pages(self, cache):
        first = records_page(cache, items=[record(1), record(2)], total=10)
        second = records_page(cache, page=2, items=[record(3)], total=10)
        cache.store(CacheKey.stats(), [CollectionStat("posts", 10)])

        cache.apply_delete(Resource.RECORDS, "posts", 1, count_collection="posts")

        assert [r.id for r in cache.peek(first).items] == [2]
        assert cache.peek(first).pagination.total_count == 9
        assert cache.peek(second) is None
        assert cache.peek(CacheKey.stats()).items == (CollectionStat("posts", 9),)

    def test_replace_everywhere_swaps_placeholder(self, cache):
        first = records_page(cache, items=[record(-1, title="x"), record(1)])

        cache.replace_everywhere(Resource.RECORDS, "posts", -1, record(42, title="x"))

        assert [r.id for r in cache.peek(first).items] == [42, 1]


class TestPatchHelpers:
    def test_insert_append(self, cache):
        entry = cache.make_entry(CacheKey.collections(), [record(1)])
        assert [r.id for r in insert_item(entry, record(2), position=None).items] == [1, 2]

    def test_remove_missing_item_is_noop(self, cache):
        entry = cache.make_entry(CacheKey.collections(), [record(1)])
        assert remove_item(entry, 99) is entry

    def test_record_count_never_negative(self, cache):
        entry = cache.make_entry(CacheKey.stats(), [CollectionStat("posts", 0)])
        assert adjust_record_count(entry, "posts", -1).items == (CollectionStat("posts", 0),)

    def test_record_count_adds_missing_collection(self, cache):
        entry = cache.make_entry(CacheKey.stats(), [])
        assert adjust_record_count(entry, "tags", 0).items == (CollectionStat("tags", 0),)


class TestSubscriptions:
    def test_subscriber_notified_for_matching_scope(self, cache):
        seen = []
        cache.subscribe(lambda key, entry: seen.append((key.scope, entry is None)), Resource.RECORDS, "posts")

        key = records_page(cache, "posts")
        records_page(cache, "tags")
        cache.invalidate(key)

        assert seen == [("posts", False), ("posts", True)]

    def test_unsubscribe(self, cache):
        seen = []
        unsubscribe = cache.subscribe(lambda key, entry: seen.append(key))
        unsubscribe()

        records_page(cache)
        assert seen == []

    def test_failing_subscriber_does_not_break_write(self, cache):
        def broken(key, entry):
            raise RuntimeError("boom")

        seen = []
        cache.subscribe(broken)
        cache.subscribe(lambda key, entry: seen.append(key))

        key = records_page(cache)

        assert cache.peek(key) is not None
        assert seen == [key]
