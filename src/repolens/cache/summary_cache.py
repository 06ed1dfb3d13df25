# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Two-tier summary cache.

A bounded, in-process LRU tier sits in front of a remote key-value store.
One ``SummaryCacheStore`` is created per process (or session) and shared by
the generator, the reconciliation engine and the API.

Cache semantics:
    - Reads: local tier first, then the remote store (read-through). The raw
      ``get`` raises ``StoreUnavailableError`` on transport failure; the typed
      reads treat it as a miss.
    - Writes: write-through. Remote failures are logged and swallowed, the
      method returns False. A failed write never fails summarization.
    - Deletes: idempotent, remove from both tiers.
    - Bulk loads and batch deletes fan out concurrently.

Local tier invalidation:
    - Entries expire after ``local_ttl_seconds`` (bounded staleness against
      other writers) or the record TTL, whichever is shorter.
    - Deletes through this instance evict immediately.
    - ``invalidate_local()`` drops the whole tier or one repository's keys.
    - Least recently used entries are evicted beyond ``local_max_entries``.

Concurrent writers on the same keys race; the last writer wins.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Iterable

from repolens.cache.cache_keys import (
    ModelChildrenCountKey,
    ModelSummaryKey,
    children_count_key_prefix,
    summary_key_prefix,
)
from repolens.cache.model_cache_stats import ModelCacheStats, ModelCacheSummaryCounts
from repolens.cache.protocols import ProtocolKeyValueStore
from repolens.constants import LOCAL_CACHE_MAX_ENTRIES, SUMMARY_TTL_SECONDS
from repolens.enums.enum_node_kind import EnumNodeKind
from repolens.exceptions import InvalidCacheKeyError, StoreUnavailableError
from repolens.models.model_batch import ModelBatchDeleteResult
from repolens.models.model_summary_record import ModelSummaryRecord

logger = logging.getLogger(__name__)

_DEFAULT_LOCAL_TTL_SECONDS = 300


class SummaryCacheStore:
    """Typed summary cache over a ``ProtocolKeyValueStore``.

    Args:
        store: Remote key-value store.
        ttl_seconds: Default TTL for summary and children-count records.
        local_max_entries: Capacity of the in-process tier (0 disables it).
        local_ttl_seconds: Maximum age of an in-process entry.
        clock: Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        store: ProtocolKeyValueStore,
        *,
        ttl_seconds: int = SUMMARY_TTL_SECONDS,
        local_max_entries: int = LOCAL_CACHE_MAX_ENTRIES,
        local_ttl_seconds: int = _DEFAULT_LOCAL_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds
        self._local_max_entries = local_max_entries
        self._local_ttl_seconds = local_ttl_seconds
        self._clock = clock
        self._local: OrderedDict[str, tuple[str, float]] = OrderedDict()
        self.stats = ModelCacheStats()

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    @property
    def store(self) -> ProtocolKeyValueStore:
        return self._store

    # ------------------------------------------------------------------
    # Local tier
    # ------------------------------------------------------------------

    def _local_get(self, key: str) -> str | None:
        entry = self._local.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._local[key]
            return None
        self._local.move_to_end(key)
        return value

    def _local_set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        if self._local_max_entries <= 0:
            return
        ttl = min(ttl_seconds or self._local_ttl_seconds, self._local_ttl_seconds)
        self._local[key] = (value, self._clock() + ttl)
        self._local.move_to_end(key)
        while len(self._local) > self._local_max_entries:
            self._local.popitem(last=False)

    def invalidate_local(self, owner: str | None = None, repo: str | None = None) -> int:
        """Drop in-process entries: all of them, or those of one repository.

        Returns:
            Number of entries removed.
        """
        if owner is None or repo is None:
            removed = len(self._local)
            self._local.clear()
            return removed
        needle = f":{owner}/{repo}:"
        doomed = [key for key in self._local if needle in key]
        for key in doomed:
            del self._local[key]
        return len(doomed)

    # ------------------------------------------------------------------
    # Raw operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        """Return the raw value for ``key`` or None.

        Raises:
            StoreUnavailableError: The remote store could not be reached.
        """
        value = self._local_get(key)
        if value is not None:
            self.stats.local_hits += 1
            return value
        try:
            value = await self._store.get(key)
        except StoreUnavailableError:
            self.stats.read_failures += 1
            raise
        if value is not None:
            self._local_set(key, value)
        return value

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> bool:
        """Write through both tiers. Returns False if the remote write failed."""
        ttl = ttl_seconds if ttl_seconds is not None else self._ttl_seconds
        self._local_set(key, value, ttl)
        try:
            await self._store.set(key, value, ttl)
        except StoreUnavailableError as exc:
            self.stats.write_failures += 1
            logger.warning("Failed to store %s in cache: %s", key, exc)
            return False
        self.stats.writes += 1
        return True

    async def delete(self, key: str) -> bool:
        """Delete ``key`` from both tiers. Absent keys are not an error."""
        self._local.pop(key, None)
        try:
            await self._store.delete(key)
        except StoreUnavailableError as exc:
            logger.warning("Failed to delete %s from cache: %s", key, exc)
            return False
        self.stats.deletes += 1
        return True

    async def list_by_prefix(self, pattern: str) -> list[str]:
        """Return every key matching ``pattern``; ``[]`` when none match.

        Raises:
            StoreUnavailableError: The remote store could not be reached.
        """
        return await self._store.keys(pattern)

    async def batch_get(self, keys: Iterable[str]) -> dict[str, str | None]:
        """Fetch many keys concurrently. Failed reads resolve to None."""
        key_list = list(keys)

        async def _safe_get(key: str) -> str | None:
            try:
                return await self.get(key)
            except StoreUnavailableError as exc:
                logger.warning("Cache read failed for %s: %s", key, exc)
                return None

        values = await asyncio.gather(*(_safe_get(key) for key in key_list))
        return dict(zip(key_list, values, strict=True))

    async def batch_delete(self, keys: Iterable[str]) -> ModelBatchDeleteResult:
        """Delete many keys concurrently. Completed deletes are not rolled back."""
        key_list = list(dict.fromkeys(keys))
        outcomes = await asyncio.gather(*(self.delete(key) for key in key_list))
        deleted = tuple(key for key, ok in zip(key_list, outcomes, strict=True) if ok)
        failed = tuple(key for key, ok in zip(key_list, outcomes, strict=True) if not ok)
        if failed:
            logger.warning("Batch delete: %d of %d keys failed", len(failed), len(key_list))
        return ModelBatchDeleteResult(deleted=deleted, failed=failed)

    # ------------------------------------------------------------------
    # Typed operations
    # ------------------------------------------------------------------

    async def get_summary(self, key: ModelSummaryKey) -> ModelSummaryRecord | None:
        """Return the cached summary flagged ``from_cache=True``, or None.

        An unreachable store counts as a miss.
        """
        encoded = key.encode()
        try:
            raw = await self.get(encoded)
        except StoreUnavailableError as exc:
            self.stats.misses += 1
            logger.warning("Cache unavailable for %s, treating as miss: %s", encoded, exc)
            return None
        if raw is None:
            self.stats.misses += 1
            logger.debug("Cache miss for %s", encoded)
            return None
        try:
            record = ModelSummaryRecord.from_cache_payload(raw)
        except ValueError as exc:
            self.stats.misses += 1
            logger.warning("Discarding undecodable cache entry %s: %s", encoded, exc)
            return None
        self.stats.hits += 1
        logger.debug("Cache hit for %s", encoded)
        return record

    async def put_summary(
        self,
        key: ModelSummaryKey,
        record: ModelSummaryRecord,
        ttl_seconds: int | None = None,
    ) -> bool:
        return await self.set(key.encode(), record.to_cache_json(), ttl_seconds)

    async def get_children_count(self, key: ModelChildrenCountKey) -> int | None:
        """Return the stored children count, or None (also when the store is down)."""
        try:
            raw = await self.get(key.encode())
        except StoreUnavailableError as exc:
            logger.warning("Cache unavailable for %s: %s", key.encode(), exc)
            return None
        return _parse_count(key.encode(), raw)

    async def put_children_count(
        self,
        key: ModelChildrenCountKey,
        count: int,
        ttl_seconds: int | None = None,
    ) -> bool:
        return await self.set(key.encode(), str(count), ttl_seconds)

    async def delete_summary(
        self, owner: str, repo: str, path: str, kind: EnumNodeKind | str
    ) -> bool:
        """Delete one summary (and a directory's children count).

        Returns:
            True when every delete succeeded; deleting an absent entry succeeds.
        """
        keys = _keys_for_node(owner, repo, path, kind)
        if keys is None:
            return False
        result = await self.batch_delete(keys)
        return result.success

    async def batch_delete_summary_keys(
        self,
        owner: str,
        repo: str,
        items: Iterable[tuple[str, EnumNodeKind | str]],
    ) -> ModelBatchDeleteResult:
        """Delete the summaries of many nodes concurrently."""
        keys: list[str] = []
        rejected: list[str] = []
        for path, kind in items:
            node_keys = _keys_for_node(owner, repo, path, kind)
            if node_keys is None:
                rejected.append(path)
            else:
                keys.extend(node_keys)
        result = await self.batch_delete(keys)
        if rejected:
            return ModelBatchDeleteResult(
                deleted=result.deleted, failed=(*result.failed, *rejected)
            )
        return result

    async def batch_delete_summaries(
        self,
        owner: str,
        repo: str,
        items: Iterable[tuple[str, EnumNodeKind | str]],
    ) -> bool:
        result = await self.batch_delete_summary_keys(owner, repo, items)
        return result.success

    async def load_all_cached_summaries(
        self, owner: str, repo: str
    ) -> dict[str, ModelSummaryRecord]:
        """Bulk-hydrate every cached summary of one repository.

        Returns:
            Map of ``owner/repo:path`` to record (``from_cache=True``).
            Empty on any store failure.
        """
        try:
            keys = await self.list_by_prefix(summary_key_prefix(owner, repo))
        except (StoreUnavailableError, InvalidCacheKeyError) as exc:
            logger.warning("Failed to load cached summaries for %s/%s: %s", owner, repo, exc)
            return {}
        if not keys:
            return {}

        values = await self.batch_get(keys)
        summaries: dict[str, ModelSummaryRecord] = {}
        for raw_key, raw in values.items():
            if raw is None:
                continue
            try:
                key = ModelSummaryKey.decode(raw_key)
                summaries[key.display_key] = ModelSummaryRecord.from_cache_payload(raw)
            except ValueError as exc:
                logger.warning("Skipping cache entry %s: %s", raw_key, exc)
        logger.info("Loaded %d cached summaries for %s/%s", len(summaries), owner, repo)
        return summaries

    async def load_all_children_counts(self, owner: str, repo: str) -> dict[str, int]:
        """Bulk-hydrate every children-summarized count of one repository."""
        try:
            keys = await self.list_by_prefix(children_count_key_prefix(owner, repo))
        except (StoreUnavailableError, InvalidCacheKeyError) as exc:
            logger.warning("Failed to load children counts for %s/%s: %s", owner, repo, exc)
            return {}
        if not keys:
            return {}

        values = await self.batch_get(keys)
        counts: dict[str, int] = {}
        for raw_key, raw in values.items():
            try:
                count = _parse_count(raw_key, raw)
                if count is not None:
                    counts[ModelChildrenCountKey.decode(raw_key).display_key] = count
            except InvalidCacheKeyError as exc:
                logger.warning("Skipping cache entry %s: %s", raw_key, exc)
        return counts

    async def count_cached_summaries(self, owner: str, repo: str) -> ModelCacheSummaryCounts:
        """Count one repository's cached summaries by kind (from keys only)."""
        try:
            keys = await self.list_by_prefix(summary_key_prefix(owner, repo))
        except (StoreUnavailableError, InvalidCacheKeyError) as exc:
            logger.warning("Failed to count cached summaries for %s/%s: %s", owner, repo, exc)
            return ModelCacheSummaryCounts()

        files = directories = 0
        for raw_key in keys:
            try:
                kind = ModelSummaryKey.decode(raw_key).kind
            except InvalidCacheKeyError:
                continue
            if kind is EnumNodeKind.FILE:
                files += 1
            else:
                directories += 1
        return ModelCacheSummaryCounts(
            total=files + directories, files=files, directories=directories
        )

    async def close(self) -> None:
        self._local.clear()
        await self._store.close()


def _keys_for_node(
    owner: str, repo: str, path: str, kind: EnumNodeKind | str
) -> list[str] | None:
    try:
        summary_key = ModelSummaryKey.build(owner, repo, path, kind)
    except InvalidCacheKeyError as exc:
        logger.warning("Cannot delete summary for %r: %s", path, exc)
        return None
    keys = [summary_key.encode()]
    if summary_key.kind is EnumNodeKind.DIRECTORY:
        keys.append(summary_key.children_count_key().encode())
    return keys


def _parse_count(key: str, raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Discarding non-integer children count at %s: %r", key, raw)
        return None


__all__ = ["SummaryCacheStore"]
