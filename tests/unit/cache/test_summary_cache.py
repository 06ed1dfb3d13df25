"""Unit tests for the two-tier SummaryCacheStore.

Tests cover:
- Raw get/set/delete and local tier behavior (LRU bound, expiry, invalidation)
- Typed summary and children-count operations
- Bulk hydration and batch deletes
- Fail-open behavior when the remote store is unreachable
"""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from repolens.cache.cache_keys import ModelChildrenCountKey, ModelSummaryKey
from repolens.cache.store_memory import InMemoryKeyValueStore
from repolens.cache.summary_cache import SummaryCacheStore
from repolens.enums.enum_node_kind import EnumNodeKind
from repolens.enums.enum_summary_provider import EnumSummaryProvider
from repolens.exceptions import StoreUnavailableError
from repolens.models.model_summary_record import ModelSummaryRecord


def make_record(text: str = "Summary.") -> ModelSummaryRecord:
    return ModelSummaryRecord(
        text=text,
        generated_at=datetime(2025, 1, 1, tzinfo=UTC),
        provider=EnumSummaryProvider.GROQ,
    )


def file_key(path: str) -> ModelSummaryKey:
    return ModelSummaryKey.build("octo", "demo", path, EnumNodeKind.FILE)


def dir_key(path: str) -> ModelSummaryKey:
    return ModelSummaryKey.build("octo", "demo", path, EnumNodeKind.DIRECTORY)


def make_failing_store() -> AsyncMock:
    store = AsyncMock()
    error = StoreUnavailableError("connection refused")
    store.get = AsyncMock(side_effect=error)
    store.set = AsyncMock(side_effect=error)
    store.delete = AsyncMock(side_effect=error)
    store.keys = AsyncMock(side_effect=error)
    return store


class RecordingStore(InMemoryKeyValueStore):
    """In-memory store that records the calls it receives."""

    def __init__(self) -> None:
        super().__init__()
        self.gets: list[str] = []
        self.sets: list[tuple[str, str, int | None]] = []

    async def get(self, key: str) -> str | None:
        self.gets.append(key)
        return await super().get(key)

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        self.sets.append((key, value, ttl_seconds))
        await super().set(key, value, ttl_seconds)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


# =========================================================================
# Raw operations
# =========================================================================


@pytest.mark.unit
class TestRawOperations:
    async def test_get_missing_key_returns_none(self, cache: SummaryCacheStore) -> None:
        assert await cache.get("summary:octo/demo:nope:file") is None

    async def test_set_writes_through_with_ttl(self) -> None:
        store = RecordingStore()
        cache = SummaryCacheStore(store, ttl_seconds=60)
        assert await cache.set("k", "v") is True
        assert store.sets == [("k", "v", 60)]

    async def test_local_tier_serves_repeated_reads(self) -> None:
        store = RecordingStore()
        await store.set("k", "v")
        cache = SummaryCacheStore(store)
        assert await cache.get("k") == "v"
        assert await cache.get("k") == "v"
        assert store.gets == ["k"]
        assert cache.stats.local_hits == 1

    async def test_local_tier_is_bounded(self, memory_store: InMemoryKeyValueStore) -> None:
        cache = SummaryCacheStore(memory_store, local_max_entries=2)
        for key in ("a", "b", "c"):
            await cache.set(key, key)
        assert cache.invalidate_local() == 2

    async def test_local_entries_expire(self) -> None:
        clock = FakeClock()
        store = RecordingStore()
        cache = SummaryCacheStore(store, local_ttl_seconds=5, clock=clock)
        await cache.set("k", "v")
        clock.now = 6.0
        assert await cache.get("k") == "v"
        assert store.gets == ["k"]

    async def test_delete_is_idempotent(self, cache: SummaryCacheStore) -> None:
        await cache.set("k", "v")
        assert await cache.delete("k") is True
        assert await cache.delete("k") is True
        assert await cache.get("k") is None

    async def test_list_by_prefix_with_no_matches(self, cache: SummaryCacheStore) -> None:
        assert await cache.list_by_prefix("summary:octo/demo:*") == []

    async def test_batch_get(self, cache: SummaryCacheStore) -> None:
        await cache.set("a", "1")
        assert await cache.batch_get(["a", "b"]) == {"a": "1", "b": None}

    async def test_batch_delete_reports_each_key(self, cache: SummaryCacheStore) -> None:
        await cache.set("a", "1")
        result = await cache.batch_delete(["a", "b", "a"])
        assert result.success
        assert sorted(result.deleted) == ["a", "b"]


# =========================================================================
# Typed operations
# =========================================================================


@pytest.mark.unit
class TestTypedOperations:
    async def test_put_then_get_summary(self, cache: SummaryCacheStore) -> None:
        key = file_key("src/main.py")
        assert await cache.put_summary(key, make_record("Entry point."))
        cached = await cache.get_summary(key)
        assert cached is not None
        assert cached.text == "Entry point."
        assert cached.from_cache is True
        assert cache.stats.hits == 1

    async def test_miss_is_counted(self, cache: SummaryCacheStore) -> None:
        assert await cache.get_summary(file_key("missing.py")) is None
        assert cache.stats.misses == 1
        assert cache.stats.hit_rate == 0.0

    async def test_undecodable_payload_is_a_miss(self, cache: SummaryCacheStore) -> None:
        key = file_key("bad.py")
        await cache.set(key.encode(), "{not json")
        assert await cache.get_summary(key) is None

    async def test_children_count_round_trip(self, cache: SummaryCacheStore) -> None:
        key = ModelChildrenCountKey.build("octo", "demo", "src")
        assert await cache.get_children_count(key) is None
        await cache.put_children_count(key, 3)
        assert await cache.get_children_count(key) == 3

    async def test_delete_missing_summary_does_not_raise(self, cache: SummaryCacheStore) -> None:
        assert await cache.delete_summary("octo", "demo", "never/cached.py", "file") is True

    async def test_delete_directory_removes_children_count(
        self, cache: SummaryCacheStore, memory_store: InMemoryKeyValueStore
    ) -> None:
        await cache.put_summary(dir_key("src"), make_record())
        await cache.put_children_count(ModelChildrenCountKey.build("octo", "demo", "src"), 2)
        assert await cache.delete_summary("octo", "demo", "src", EnumNodeKind.DIRECTORY)
        assert await memory_store.keys("*") == []

    async def test_delete_with_invalid_path_fails(self, cache: SummaryCacheStore) -> None:
        assert await cache.delete_summary("octo", "demo", "a:b.py", EnumNodeKind.FILE) is False

    async def test_batch_delete_summaries(
        self, cache: SummaryCacheStore, memory_store: InMemoryKeyValueStore
    ) -> None:
        await cache.put_summary(file_key("a.py"), make_record())
        await cache.put_summary(file_key("b.py"), make_record())
        ok = await cache.batch_delete_summaries(
            "octo", "demo", [("a.py", EnumNodeKind.FILE), ("b.py", EnumNodeKind.FILE)]
        )
        assert ok
        assert await memory_store.keys("summary:*") == []


# =========================================================================
# Bulk hydration
# =========================================================================


@pytest.mark.unit
class TestBulkHydration:
    async def test_load_all_cached_summaries(self, cache: SummaryCacheStore) -> None:
        await cache.put_summary(file_key("main.py"), make_record("Main."))
        await cache.put_summary(dir_key("src"), make_record("Sources."))
        await cache.put_summary(
            ModelSummaryKey.build("octo", "other", "x.py", EnumNodeKind.FILE), make_record()
        )

        summaries = await cache.load_all_cached_summaries("octo", "demo")

        assert set(summaries) == {"octo/demo:main.py", "octo/demo:src"}
        assert summaries["octo/demo:main.py"].text == "Main."
        assert all(record.from_cache for record in summaries.values())

    async def test_load_skips_undecodable_entries(
        self, cache: SummaryCacheStore, memory_store: InMemoryKeyValueStore
    ) -> None:
        await memory_store.set("summary:octo/demo:bad.py:file", "garbage")
        await cache.put_summary(file_key("good.py"), make_record())
        summaries = await cache.load_all_cached_summaries("octo", "demo")
        assert list(summaries) == ["octo/demo:good.py"]

    async def test_load_all_children_counts(self, cache: SummaryCacheStore) -> None:
        await cache.put_children_count(ModelChildrenCountKey.build("octo", "demo", "src"), 4)
        await cache.put_children_count(ModelChildrenCountKey.build("octo", "demo", "lib"), 1)
        assert await cache.load_all_children_counts("octo", "demo") == {
            "octo/demo:src": 4,
            "octo/demo:lib": 1,
        }

    async def test_count_cached_summaries(self, cache: SummaryCacheStore) -> None:
        await cache.put_summary(file_key("a.py"), make_record())
        await cache.put_summary(file_key("b.py"), make_record())
        await cache.put_summary(dir_key("src"), make_record())
        counts = await cache.count_cached_summaries("octo", "demo")
        assert (counts.total, counts.files, counts.directories) == (3, 2, 1)

    async def test_invalidate_local_for_one_repository(self, cache: SummaryCacheStore) -> None:
        await cache.put_summary(file_key("a.py"), make_record())
        await cache.put_summary(
            ModelSummaryKey.build("octo", "other", "a.py", EnumNodeKind.FILE), make_record()
        )
        assert cache.invalidate_local("octo", "demo") == 1


# =========================================================================
# Fail-open
# =========================================================================


@pytest.mark.unit
class TestStoreUnavailable:
    async def test_raw_get_raises(self) -> None:
        cache = SummaryCacheStore(make_failing_store())
        with pytest.raises(StoreUnavailableError):
            await cache.get("k")

    async def test_typed_get_is_a_miss(self) -> None:
        cache = SummaryCacheStore(make_failing_store())
        assert await cache.get_summary(file_key("a.py")) is None
        assert cache.stats.read_failures == 1

    async def test_set_returns_false(self) -> None:
        cache = SummaryCacheStore(make_failing_store())
        assert await cache.put_summary(file_key("a.py"), make_record()) is False
        assert cache.stats.write_failures == 1

    async def test_delete_returns_false(self) -> None:
        cache = SummaryCacheStore(make_failing_store())
        result = await cache.batch_delete(["a", "b"])
        assert not result.success
        assert sorted(result.failed) == ["a", "b"]

    async def test_bulk_loads_fail_open(self) -> None:
        cache = SummaryCacheStore(make_failing_store())
        assert await cache.load_all_cached_summaries("octo", "demo") == {}
        assert await cache.load_all_children_counts("octo", "demo") == {}
        counts = await cache.count_cached_summaries("octo", "demo")
        assert counts.total == 0
